from pydantic import BaseModel
from typing import Optional


class RegisterTokenRequest(BaseModel):
    token: str
    user_id: Optional[str] = None
    kd_dokter: Optional[str] = None
    device_type: Optional[str] = None
    user_agent: Optional[str] = None
    platform: Optional[str] = None


class RegisterTokenResponse(BaseModel):
    status: str = "success"
    message: str = "Token registered"
    created: bool


class DispatchReport(BaseModel):
    sent: int = 0
    failed: int = 0

    @property
    def processed(self) -> int:
        return self.sent + self.failed
