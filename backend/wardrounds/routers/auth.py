from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from wardrounds.database import get_db
from wardrounds.config import Settings
from wardrounds.auth import DoctorPrincipal, get_app_settings, get_current_doctor
from wardrounds.exceptions import InvalidCredentials
from wardrounds.schemas.auth import LoginData, LoginRequest, LoginResponse
from wardrounds.services.auth_service import AuthService

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Exchange SIMRS credentials for a 30 minute session token."""
    service = AuthService.from_settings(db, settings)
    try:
        result = await service.login(body.id_user, body.password)
    except InvalidCredentials as e:
        raise HTTPException(status_code=401, detail=str(e))

    principal = result.principal
    return LoginResponse(
        data=LoginData(
            token=result.token,
            id_user=principal.id_user,
            kd_dokter=principal.kd_dokter,
            nm_dokter=principal.nm_dokter,
            expires_at=principal.expires_at,
        )
    )


@router.get("/validate")
async def validate(current_doctor: DoctorPrincipal = Depends(get_current_doctor)):
    return {
        "status": "success",
        "message": "Token is valid",
        "data": {
            "id_user": current_doctor.id_user,
            "kd_dokter": current_doctor.kd_dokter,
            "nm_dokter": current_doctor.nm_dokter,
            "expires_at": current_doctor.expires_at,
        },
    }
