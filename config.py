"""
Runtime configuration

Values come from the environment, then a local .env file, then the defaults
below. They are resolved once per process; route handlers receive them
through the `get_settings` dependency.
"""

import logging
from functools import lru_cache
from typing import Any, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "carpool-dev-secret"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field("mongodb://localhost:27017", description="MongoDB connection string")
    database_name: str = Field("carpool", description="MongoDB database name")
    jwt_secret: str = Field(DEV_JWT_SECRET, description="Secret used to sign auth tokens")
    jwt_expires_seconds: int = Field(360000, ge=1, description="Token lifetime in seconds")
    cors_origins: str = "*"  # comma separated
    log_level: str = "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def join_cors_origins(cls, v: Any) -> str:
        if isinstance(v, list):
            return ",".join(v)
        return str(v) if v else ""

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: Any) -> str:
        return str(v).upper()

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    if settings.jwt_secret == DEV_JWT_SECRET:
        logger.warning("JWT_SECRET not set, using the development secret")
    return settings
