"""
Auth module: JWT creation/validation and the get_current_doctor FastAPI dependency.

Tokens are HS256, signed with JWT_SECRET and valid for 30 minutes from issue.
There is no refresh: an expired token means logging in again. Every protected
route goes through get_current_doctor, which answers 401 for a missing header,
a non-Bearer scheme, or a token that fails validation.
"""

import time
from dataclasses import dataclass
from typing import Optional
from jose import jwt, JWTError
from fastapi import Depends, HTTPException, Request
from wardrounds.config import Settings
from wardrounds.exceptions import InvalidToken

ALGORITHM = "HS256"
TOKEN_EXPIRE_SECONDS = 30 * 60


@dataclass
class DoctorPrincipal:
    """Resolved identity attached to each authenticated request."""
    id_user: str
    kd_dokter: str
    nm_dokter: str
    issued_at: int = 0
    expires_at: int = 0


def create_token(principal: DoctorPrincipal, secret: str, now: Optional[float] = None) -> tuple[str, DoctorPrincipal]:
    """Sign a token for ``principal``.

    Returns the encoded token and a copy of the principal with
    ``issued_at``/``expires_at`` filled in.
    """
    issued_at = int(now if now is not None else time.time())
    payload = {
        "id_user": principal.id_user,
        "kd_dokter": principal.kd_dokter,
        "nm_dokter": principal.nm_dokter,
        "iat": issued_at,
        "exp": issued_at + TOKEN_EXPIRE_SECONDS,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM), DoctorPrincipal(
        id_user=principal.id_user,
        kd_dokter=principal.kd_dokter,
        nm_dokter=principal.nm_dokter,
        issued_at=issued_at,
        expires_at=issued_at + TOKEN_EXPIRE_SECONDS,
    )


def decode_token(token: str, secret: str, now: Optional[float] = None) -> DoctorPrincipal:
    """Verify signature and expiry. Raises InvalidToken on any failure."""
    try:
        # Expiry is checked below against ``now``
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM], options={"verify_exp": False})
    except JWTError as e:
        raise InvalidToken(str(e))

    current = now if now is not None else time.time()
    try:
        expires_at = int(payload["exp"])
        issued_at = int(payload["iat"])
        principal = DoctorPrincipal(
            id_user=str(payload["id_user"]),
            kd_dokter=str(payload["kd_dokter"]),
            nm_dokter=str(payload.get("nm_dokter") or ""),
            issued_at=issued_at,
            expires_at=expires_at,
        )
    except (KeyError, TypeError, ValueError):
        raise InvalidToken("malformed token payload")
    if current >= expires_at:
        raise InvalidToken("token expired")
    return principal


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_current_doctor(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> DoctorPrincipal:
    """FastAPI dependency. Extracts and validates the Bearer token."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Authorization header required")
    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise HTTPException(status_code=401, detail="Invalid authorization header format")
    try:
        return decode_token(parts[1], settings.jwt_secret)
    except InvalidToken:
        raise HTTPException(status_code=401, detail="Invalid token")
