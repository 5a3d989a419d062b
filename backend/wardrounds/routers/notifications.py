from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from wardrounds.database import get_db
from wardrounds.config import Settings
from wardrounds.auth import DoctorPrincipal, get_app_settings, get_current_doctor
from wardrounds.exceptions import InvalidRegistration
from wardrounds.schemas.notification import RegisterTokenRequest, RegisterTokenResponse
from wardrounds.services.notification_service import PushTokenService

router = APIRouter()


@router.post("/register-token", response_model=RegisterTokenResponse)
async def register_token(
    body: RegisterTokenRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    current_doctor: DoctorPrincipal = Depends(get_current_doctor),
):
    try:
        created = await PushTokenService(db, settings).register(body, current_doctor)
    except InvalidRegistration as e:
        raise HTTPException(status_code=400, detail=str(e))
    return RegisterTokenResponse(created=created)
