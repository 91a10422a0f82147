"""Application settings, read from the environment and ``.env``."""

from __future__ import annotations

from functools import cached_property
from typing import Annotated, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the folio API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # CORS: the API is read-only, so only GET is ever allowed cross-origin
    allowed_origins: Annotated[list[str], NoDecode] = []

    # Tracing (OTLP/HTTP)
    enable_tracing: bool = False
    otlp_endpoint: str | None = None
    otlp_headers: str | None = None
    service_name: str = "folio"

    # /metrics basic auth; open when no password is set
    metrics_username: str = "prometheus"
    metrics_password: str | None = None

    database_url: str = Field(
        default="sqlite:///./data/folio.db",
        validation_alias=AliasChoices("DATABASE_URL", "FOLIO_DATABASE_URL"),
    )
    db_echo: bool = Field(
        default=False,
        validation_alias=AliasChoices("DB_ECHO", "SQL_ECHO"),
    )
    # Alembic owns the schema in production; create_all is for local runs
    auto_create_tables: bool = True

    search_candidate_limit: int = Field(default=500, ge=1)
    search_default_page_size: int = Field(default=10, ge=1)
    search_max_page_size: int = Field(default=50, ge=1)

    rate_limit_enabled: bool = True

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def split_origins(cls, value: str | list[str] | None) -> list[str]:
        """Accept ``ALLOWED_ORIGINS=https://a.example,https://b.example``."""
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [origin.strip().rstrip("/") for origin in value if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @cached_property
    def resolved_database_url(self) -> str:
        """SQLAlchemy URL; Heroku-style ``postgres://`` becomes ``postgresql://``."""
        url = self.database_url
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://") :]
        return url


settings = Settings()
