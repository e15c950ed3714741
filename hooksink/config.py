from __future__ import annotations

import re
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

OutputType = Literal["stdout", "file"]
Formatter = Literal["plain", "json"]

# Optional sign and ASCII digits only: no spaces, underscores or decimal points.
_INT_RE = re.compile(r"[+-]?[0-9]+")


class Settings(BaseSettings):
    # No prefix: the variable names are part of the deployment contract (SHARED_SECRET, PORT, ...).
    # VAR= (empty) behaves like unset, so defaults apply.
    model_config = SettingsConfigDict(extra="ignore", env_ignore_empty=True, frozen=True)

    # Service
    service_name: str = "hooksink"
    log_level: str = "INFO"

    # HTTP
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)

    # Auth
    shared_secret: SecretStr = SecretStr("")

    # Output
    output_type: OutputType = "stdout"
    formatter: Formatter = "plain"

    # File sink (used when output_type == "file")
    file_location: str = "/tmp/adaptive.log"
    max_size: int = Field(default=10, gt=0)  # megabytes before rotating
    max_backup: int = Field(default=3, ge=0)  # rotated files kept, 0 keeps all
    max_age: int = Field(default=28, ge=0)  # days a rotated file is kept, 0 disables

    @field_validator("port", "max_size", "max_backup", "max_age", mode="before")
    @classmethod
    def _plain_integer(cls, v):
        if isinstance(v, str) and not _INT_RE.fullmatch(v):
            raise ValueError(f"not an integer: {v!r}")
        return v

    @field_validator("output_type", mode="before")
    @classmethod
    def _normalize_output_type(cls, v):
        v = str(v or "").strip().lower()
        return v if v in ("stdout", "file") else "stdout"

    @field_validator("formatter", mode="before")
    @classmethod
    def _normalize_formatter(cls, v):
        v = str(v or "").strip().lower()
        return v if v in ("plain", "json") else "plain"

    @field_validator("log_level", mode="before")
    @classmethod
    def _check_log_level(cls, v):
        v = str(v or "INFO").strip().upper()
        if v not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"unknown log level: {v}")
        return v

    def safe_summary(self) -> dict:
        """Configuration summary without secrets."""
        return {
            "service": {"name": self.service_name, "log_level": self.log_level},
            "http": {"host": self.host, "port": self.port},
            "auth": {"shared_secret_set": bool(self.shared_secret.get_secret_value())},
            "output": {
                "type": self.output_type,
                "formatter": self.formatter,
                "file": {
                    "location": self.file_location,
                    "max_size_mb": self.max_size,
                    "max_backup": self.max_backup,
                    "max_age_days": self.max_age,
                }
                if self.output_type == "file"
                else None,
            },
        }


def load_settings() -> Settings:
    return Settings()
