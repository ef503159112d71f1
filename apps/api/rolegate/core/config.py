"""
Application configuration using Pydantic Settings.
"""

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    url: str = Field(
        default="sqlite+aiosqlite:///:memory:",
        description="SQLAlchemy async connection URL",
    )
    echo: bool = Field(default=False, description="Echo SQL queries")


class AuthSettings(BaseSettings):
    """Authorization configuration."""

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    # Shown to callers on denial unless an inverted rule gives a reason.
    # Read once at startup and handed to every compiled ability.
    default_message: str = Field(default="Not authorized", min_length=1)

    # Request → role resolution
    role_param: str = Field(
        default="role",
        description="Query parameter carrying the caller's role",
    )
    fallback_role: str = Field(
        default="guest",
        description="Role used when the requested role is missing or unknown",
    )

    denied_status_code: int = Field(default=403, ge=400, le=599)

    seed_defaults: bool = Field(
        default=True,
        description="Create the default admin/guest roles and demo user on startup if no roles exist",
    )


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Rolegate API")
    app_version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or text")

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "testing"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in {"json", "text"}:
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Shorthand
settings = get_settings()
