"""Application settings loaded from environment variables.

``load_dotenv()`` runs in ``api.main`` before anything calls ``get_settings()``.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings. Each field reads the upper-cased variable name."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    # Security (generate a key with: openssl rand -hex 32)
    jwt_secret_key: str = Field(min_length=1)
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 90
    jwt_cookie_expires_days: int = 90
    bcrypt_rounds: int = 12
    password_reset_expires_minutes: int = 10

    environment: str = "production"

    # MongoDB
    mongo_url: str | None = None
    mongodb_database: str = "natours"

    # Mail
    email_host: str | None = None
    email_port: int = 587
    email_username: str | None = None
    email_password: str | None = None
    email_from: str = "Natours <hello@natours.io>"

    # Comma-separated origins, or "*"
    cors_origins: str = "*"

    @field_validator("environment", mode="after")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return v.strip().lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, loaded once. Usable as a FastAPI dependency.

    Raises:
        pydantic.ValidationError: JWT_SECRET_KEY is missing or a value is malformed
    """
    return Settings()
