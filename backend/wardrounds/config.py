from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus


class Settings(BaseSettings):
    """Application settings."""

    # Database (SIMRS schema, MySQL)
    db_host: str = Field(default="localhost", env="DB_HOST")
    db_port: int = Field(default=3306, env="DB_PORT")
    db_user: str = Field(default="root", env="DB_USER")
    db_password: str = Field(default="", env="DB_PASSWORD")
    db_name: str = Field(default="sik", env="DB_NAME")
    # Full SQLAlchemy URL; takes precedence over the DB_* parts when set
    database_url: Optional[str] = Field(default=None, env="DATABASE_URL")

    # Server
    server_port: int = Field(default=8080, env="SERVER_PORT")
    environment: str = Field(default="development", env="ENVIRONMENT")
    timezone: str = Field(default="Asia/Jakarta", env="TIMEZONE")

    # JWT
    jwt_secret: str = Field(default="your-super-secret-jwt-key", env="JWT_SECRET")

    # Keys used by the SIMRS to AES_ENCRYPT the user table
    credential_id_key: str = Field(default="nur", env="CREDENTIAL_ID_KEY")
    credential_password_key: str = Field(default="windi", env="CREDENTIAL_PASSWORD_KEY")

    # OneSignal
    onesignal_app_id: str = Field(default="", env="ONESIGNAL_APP_ID")
    onesignal_api_key: str = Field(default="", env="ONESIGNAL_API_KEY")
    onesignal_api_url: str = Field(
        default="https://onesignal.com/api/v1/notifications",
        env="ONESIGNAL_API_URL",
    )
    frontend_url: str = Field(default="http://localhost:3000", env="FRONTEND_URL")

    # Notification worker
    notification_worker_enabled: bool = Field(default=True, env="NOTIFICATION_WORKER_ENABLED")
    notification_poll_interval: float = Field(default=5.0, env="NOTIFICATION_POLL_INTERVAL")
    notification_batch_size: int = Field(default=10, env="NOTIFICATION_BATCH_SIZE")
    notification_timeout: float = Field(default=10.0, env="NOTIFICATION_TIMEOUT")

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def onesignal_configured(self) -> bool:
        return bool(self.onesignal_app_id and self.onesignal_api_key)

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.db_user}:{quote_plus(self.db_password)}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}?charset=utf8mb4"
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
