"""Central application settings, loaded from environment variables and .env."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./keybuilder.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # JWT
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480
    STATE_TOKEN_EXPIRE_MINUTES: int = 10

    # Media
    MEDIA_PATH: str = "media"
    MAX_FILE_SIZE: int = 20 * 1024 * 1024  # 20 MB
    ALLOWED_IMAGE_EXTENSIONS: List[str] = ["jpg", "jpeg", "png"]
    ALLOWED_IMAGE_TYPES: List[str] = ["image/jpeg", "image/png"]
    THUMBNAIL_WIDTH: int = 128
    THUMBNAIL_HEIGHT: int = 128
    THUMBNAIL_QUALITY: int = 90
    THUMBNAIL_SUFFIX: str = "thumbnail"

    # OpenID Connect
    OIDC_ISSUER: str = "auth.dataporten.no"
    OIDC_DISCOVERY_ENDPOINT: str = "https://auth.dataporten.no/.well-known/openid-configuration"
    OIDC_CLIENT_ID: str = ""
    OIDC_CLIENT_SECRET: str = ""
    OIDC_REDIRECT_URI: str = "http://localhost:8000/api/auth/oidc/callback"
    OIDC_LOGOUT_URI: str = "http://localhost:8000/api/auth/logout/callback"
    OIDC_SCOPE: str = "openid profile email groups"
    IDP_GROUPS_API: str = "https://groups-api.dataporten.no/groups"
    IDP_ORGANIZATION_GROUP_TYPE: str = "fc:org"
    DEFAULT_ROLE_ID: int = 1
    EXTERNAL_ROLE_ID: int = 3
    BUILDER_URL_BASE: str = "http://localhost:3000"

    # External taxonomy lookups
    ADB_API_URL: str = "https://artsdatabanken.no/Api"
    HTTP_TIMEOUT: float = 10.0

    @property
    def oidc_issuer_url(self) -> str:
        return f"https://{self.OIDC_ISSUER}"

    class Config:
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
