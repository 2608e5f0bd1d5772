from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite+aiosqlite:///./scolarite.db", alias="DATABASE_URL")

    jwt_secret_key: str = Field("change-me-in-production", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(480, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Fallback when neither the class nor the student carries a school year
    active_school_year: Optional[str] = Field(None, alias="ACTIVE_SCHOOL_YEAR")

    default_admin_email: str = Field("directeur@ecole.local", alias="DEFAULT_ADMIN_EMAIL")
    default_admin_password: str = Field("director2024", alias="DEFAULT_ADMIN_PASSWORD")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    receipt_prefix: str = Field("REC", alias="RECEIPT_PREFIX")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
