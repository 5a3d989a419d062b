import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from wardrounds.auth import DoctorPrincipal, create_token
from wardrounds.config import Settings
from wardrounds.exceptions import InvalidCredentials
from wardrounds.models.doctor import Doctor
from wardrounds.models.user import User
from wardrounds.services.credential_cipher import mysql_aes_decrypt, mysql_aes_encrypt, secrets_match

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    token: str
    principal: DoctorPrincipal


class CredentialVerifier:
    """Matches an identifier/password pair against the encrypted ``user`` table."""

    def __init__(self, db: AsyncSession, id_key: str, password_key: str):
        self.db = db
        self.id_key = id_key
        self.password_key = password_key

    async def verify(self, id_user: str, password: str) -> Optional[DoctorPrincipal]:
        """Return the doctor behind the credentials, or None for any mismatch."""
        encrypted_id = mysql_aes_encrypt(id_user, self.id_key)
        user = await self.db.scalar(select(User).where(User.id_user == encrypted_id))
        if user is None:
            return None
        stored_password = mysql_aes_decrypt(user.password, self.password_key)
        if not secrets_match(password, stored_password):
            return None

        doctor = await self.db.scalar(select(Doctor).where(Doctor.kd_dokter == id_user))
        if doctor is None:
            return None
        return DoctorPrincipal(
            id_user=id_user,
            kd_dokter=doctor.kd_dokter,
            nm_dokter=doctor.nm_dokter or "",
        )


class AuthService:
    def __init__(self, verifier: CredentialVerifier, jwt_secret: str):
        self.verifier = verifier
        self.jwt_secret = jwt_secret

    @classmethod
    def from_settings(cls, db: AsyncSession, settings: Settings) -> "AuthService":
        verifier = CredentialVerifier(db, settings.credential_id_key, settings.credential_password_key)
        return cls(verifier, settings.jwt_secret)

    async def login(self, id_user: str, password: str, now: Optional[float] = None) -> LoginResult:
        logger.info("Login attempt for id_user=%s", id_user)
        principal = await self.verifier.verify(id_user, password)
        if principal is None:
            logger.info("Login failed for id_user=%s", id_user)
            raise InvalidCredentials()

        token, principal = create_token(principal, self.jwt_secret, now=now)
        logger.info("Login successful for id_user=%s dokter=%s", id_user, principal.kd_dokter)
        return LoginResult(token=token, principal=principal)
