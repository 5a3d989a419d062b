from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    id_user: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginData(BaseModel):
    token: str
    id_user: str
    kd_dokter: str
    nm_dokter: str
    expires_at: int


class LoginResponse(BaseModel):
    status: str = "success"
    message: str = "Login successful"
    data: LoginData
