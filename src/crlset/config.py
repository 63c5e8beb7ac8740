"""
Configuration: typed, validated settings loaded from environment/.env.

Uses pydantic-settings so every knob can be overridden without touching the
command line:

    CRLSET_LOG_LEVEL=DEBUG
    CRLSET_HTTP_TIMEOUT_SECONDS=30
    CRLSET_UPDATE__URL=https://update.example.test/service/update2/crx

LogSettings is all the offline commands need; AppSettings adds the network
side and is only loaded by `fetch`, so a bad network setting never breaks
`dump`.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from crlset.adapters.omaha import CRLSET_APP_ID, UPDATE_SERVICE_URL

# .env next to the project root, independent of the working directory.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class UpdateSettings(BaseModel):
    """Where to ask for the current CRLSet."""

    url: str = Field(default=UPDATE_SERVICE_URL, description="Omaha update2 endpoint")
    app_id: str = Field(default=CRLSET_APP_ID, description="CRLSet component app id")


class LogSettings(BaseSettings):
    """
    Logging settings, read by every command.

    Load order (highest priority first): environment variables, .env file,
    defaults. Every variable is prefixed with CRLSET_.
    """

    model_config = SettingsConfigDict(
        env_prefix="CRLSET_",
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")


class AppSettings(LogSettings):
    """Root settings for the commands that talk to the update service."""

    update: UpdateSettings = Field(default_factory=UpdateSettings)
    http_timeout_seconds: int = Field(default=60, ge=1)
