"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with SHOPRELAY_ prefix.
The variable names of the original socket deployment (SOCKET_PORT,
FRONTEND_URL, BACKEND_URL, SOCKET_URL) are accepted as aliases so an
existing .env keeps working.
"""

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All relay configuration. Set via SHOPRELAY_* env vars."""

    # Server
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = Field(
        3001, validation_alias=AliasChoices("SHOPRELAY_PORT", "SOCKET_PORT")
    )

    # Browser origin allowed to connect (CORS for both HTTP and Socket.IO)
    frontend_url: str = Field(
        "http://localhost:5173",
        validation_alias=AliasChoices("SHOPRELAY_FRONTEND_URL", "FRONTEND_URL"),
    )

    # Storefront backend — source of truth for token verification
    backend_url: str = Field(
        "http://localhost:8000",
        validation_alias=AliasChoices("SHOPRELAY_BACKEND_URL", "BACKEND_URL"),
    )
    auth_timeout_seconds: float = 5.0

    # Where backend processes reach the relay (used by the notifier + CLI)
    relay_url: str = Field(
        "http://localhost:3001",
        validation_alias=AliasChoices("SHOPRELAY_RELAY_URL", "SOCKET_URL"),
    )
    notify_timeout_seconds: float = 2.0

    # Engine.IO heartbeat
    ping_interval: int = 25
    ping_timeout: int = 20

    model_config = {"env_prefix": "SHOPRELAY_", "populate_by_name": True}

    @field_validator("frontend_url", "backend_url", "relay_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Refuse a wildcard browser origin outside development."""
        if self.environment != "development" and self.frontend_url == "*":
            raise ValueError(
                "SHOPRELAY_FRONTEND_URL must name the storefront origin in "
                "non-development environments (wildcard '*' is not allowed)."
            )
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [self.frontend_url]


# Singleton — import this everywhere
settings = Settings()
