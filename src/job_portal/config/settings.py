"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveFloat = Annotated[float, Field(gt=0.0)]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    secret_key: NonEmptyStr = Field(validation_alias="SECRET_KEY")
    cloudinary_cloud_name: NonEmptyStr = Field(validation_alias="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: NonEmptyStr = Field(validation_alias="CLOUDINARY_API_KEY")
    cloudinary_api_secret: NonEmptyStr = Field(validation_alias="CLOUDINARY_API_SECRET")
    cloudinary_timeout_seconds: PositiveFloat = Field(
        default=30.0,
        validation_alias="CLOUDINARY_TIMEOUT_SECONDS",
    )
    account_roles: NonEmptyStr = Field(
        default="applicant,recruiter",
        validation_alias="ACCOUNT_ROLES",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
