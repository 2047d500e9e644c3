"""Configuration management for the Coddy public backend.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once at
application startup and is frozen: the signing secret, token lifetime and
hashing cost cannot change while the process is running.
"""

import json
import re
from datetime import timedelta
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd])\s*$", re.IGNORECASE)
_DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables (prefixed with ``CODDY_``)
    and .env files. All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CODDY_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Application Settings
    app_name: str = "coddy-nonlogin-backend"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 5001
    workers: int = 1

    # Database Settings
    database_url: str | None = Field(
        default="sqlite+aiosqlite:///./coddy_data/coddy.db",
        description="Async SQLAlchemy URL of the user store. Empty disables the store.",
    )
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Token Settings
    jwt_secret: str = Field(
        default=DEFAULT_JWT_SECRET,
        description="Secret key for JWT token signing",
    )
    jwt_algorithm: Literal["HS256"] = "HS256"
    jwt_expires_in: timedelta = Field(
        default=timedelta(days=7),
        description="Token lifetime, e.g. '7d', '12h', '30m' or a number of seconds",
    )

    # Login / Password Hashing Settings
    login_failure_delay_ms: int = Field(default=1000, ge=0)
    password_hash_time_cost: int = Field(default=3, ge=1)
    password_hash_memory_cost: int = Field(default=65536, ge=8)  # KiB
    password_hash_parallelism: int = Field(default=4, ge=1)

    # HTTP Settings
    frontend_url: str = "http://localhost:3000"
    nonlogin_frontend_url: str = "http://localhost:3001"
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://localhost:3001"]
    )
    max_body_bytes: int = 10 * 1024  # 10kb
    security_headers_enabled: bool = True
    hsts_max_age: int = 31536000
    csp_policy: str = "default-src 'self'; frame-ancestors 'none'"

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from a JSON list or a comma-separated string."""
        if isinstance(v, str) and v.strip().startswith("["):
            return json.loads(v)
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("database_url", mode="before")
    @classmethod
    def blank_database_url(cls, v: str | None) -> str | None:
        """Treat an empty database URL as "not configured"."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("jwt_expires_in", mode="before")
    @classmethod
    def parse_jwt_expires_in(cls, v: object) -> object:
        """Accept shorthand durations such as '7d' or '15m'."""
        if isinstance(v, str):
            match = _DURATION_PATTERN.match(v)
            if match:
                amount, unit = match.groups()
                return timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})
            if v.strip().isdigit():
                return timedelta(seconds=int(v))
        return v

    @field_validator("jwt_expires_in")
    @classmethod
    def validate_jwt_expires_in(cls, v: timedelta) -> timedelta:
        if v.total_seconds() <= 0:
            raise ValueError("Token lifetime must be positive")
        return v

    @model_validator(mode="after")
    def validate_production(self) -> "Settings":
        """Refuse insecure or incomplete production configuration."""
        if not self.is_production:
            return self
        if not self.database_url:
            raise ValueError("Missing database configuration in environment variables")
        if self.jwt_secret == DEFAULT_JWT_SECRET:
            raise ValueError("CODDY_JWT_SECRET must be set in production")
        return self

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """Validate that SQLite is not used with multiple workers."""
        if self.workers > 1 and self.database_url and self.database_url.startswith("sqlite"):
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Requested {self.workers} workers, but SQLite requires workers=1."
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def database_configured(self) -> bool:
        """Whether a user store is available."""
        return bool(self.database_url)

    @property
    def allowed_origins(self) -> list[str]:
        """Frontend URLs plus configured CORS origins, without duplicates."""
        origins = [self.frontend_url, self.nonlogin_frontend_url, *self.cors_origins]
        return list(dict.fromkeys(origins))


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once at startup and reused for every request.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
