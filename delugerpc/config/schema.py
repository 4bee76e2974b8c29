"""Configuration schema using Pydantic.

Connection settings for one daemon, persisted to ~/.delugerpc/config.json and
overridable through ``DELUGE_*`` environment variables.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class ClientSettings(BaseSettings):
    """Settings for a Deluge daemon connection."""
    hostname: str = "127.0.0.1"
    port: int = Field(default=58846, ge=1, le=65535)
    login: str = ""
    password: str = Field(default="", repr=False)
    timeout_seconds: float = Field(default=30.0, gt=0)  # Sliding read/write deadline per call

    # TLS. Verification stays on unless explicitly disabled.
    verify_certificate: bool = True
    ca_file: str | None = None  # e.g. the daemon's ssl/daemon.cert
    check_hostname: bool = False

    # Logging
    log_level: LogLevel = "INFO"
    log_file: str | None = None  # Optional rotating file sink

    model_config = SettingsConfigDict(
        env_prefix="DELUGE_",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @property
    def address(self) -> str:
        return f"{self.hostname}:{self.port}"

    @property
    def ca_path(self) -> Path | None:
        return Path(self.ca_file).expanduser() if self.ca_file else None
