"""Pydantic configuration models for keepsync."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from shared_types import RenameStrategy

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ServerConfig(BaseModel):
    """Sync server connection."""

    url: str = "http://localhost:8080"
    email: Optional[str] = None
    token: Optional[str] = None
    timeout: float = 30.0

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Server url must be http(s): {v}")
        return v.rstrip("/")


class SyncConfig(BaseModel):
    """How notes are paged and how divergent copies are resolved."""

    vault_dir: Path = Path("~/keepsync/vault")
    page_size: int = Field(default=50, ge=1, le=500)
    strategy: RenameStrategy = RenameStrategy.MERGE
    download_attachments: bool = True

    @model_validator(mode="after")
    def expand_paths(self):
        self.vault_dir = self.vault_dir.expanduser()
        return self


class RetryConfig(BaseModel):
    max_attempts: int = Field(default=3, ge=1)
    min_wait: float = 2.0
    max_wait: float = 10.0


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_mode: bool = False
    log_file: Optional[Path] = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper

    @field_validator("log_file")
    @classmethod
    def expand_log_file(cls, v: Optional[Path]) -> Optional[Path]:
        return v.expanduser() if v else v


class KeepSyncConfig(BaseModel):
    """Main configuration model."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def expand_env_vars(self):
        """Expand ${VAR} in the token and apply KEEPSYNC_* overrides."""
        token = self.server.token
        if token and token.startswith("${") and token.endswith("}"):
            self.server.token = os.getenv(token[2:-1], "")
        self.server.token = os.getenv("KEEPSYNC_TOKEN", self.server.token)
        self.server.email = os.getenv("KEEPSYNC_EMAIL", self.server.email)
        url = os.getenv("KEEPSYNC_SERVER_URL")
        if url:
            self.server.url = url.rstrip("/")
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "KeepSyncConfig":
        return cls.model_validate(data)
