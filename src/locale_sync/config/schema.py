"""Configuration schema for locale-sync using nested Pydantic models."""

import logging
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StorageConfig(BaseModel):
    """Location and format of the resource files."""

    model_config = ConfigDict(extra="forbid")

    locales_root: Path = Field(
        default=Path("locales"),
        description="Root directory holding one directory per language",
    )
    default_namespace: str = Field(
        default="common",
        description="Namespace file created for a new language",
        min_length=1,
    )
    indent: Annotated[int, Field(ge=1, le=8)] = Field(
        default=2,
        description="Indentation of written resource files",
    )

    @field_validator("default_namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """Reject namespaces that are not plain file names."""
        if "/" in v or "\\" in v or v in (".", "..") or Path(v).name != v:
            raise ValueError("Namespace must be a plain file name")
        return v


class SyncConfig(BaseModel):
    """Debounce and retry behaviour of the sync components."""

    model_config = ConfigDict(extra="forbid")

    language: str = Field(
        default="en",
        description="Language used when the host does not provide one",
        min_length=1,
    )
    flush_quiet_period: Annotated[float, Field(gt=0, le=60)] = Field(
        default=1.0,
        description="Seconds without new missing keys before they are written",
    )
    reload_quiet_period: Annotated[float, Field(gt=0, le=60)] = Field(
        default=1.0,
        description="Seconds without file changes before resources are reloaded",
    )
    retry_busy_writes: bool = Field(
        default=True,
        description="Schedule another flush when a resource file is locked",
    )
    max_busy_retries: Annotated[int, Field(ge=0, le=100)] = Field(
        default=5,
        description="Automatic flushes in a row for a locked file before giving up",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    level: str = Field(default="INFO", description="Console log level")
    file: Path | None = Field(default=None, description="Optional rotating log file")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level


class LocaleSyncConfig(BaseModel):
    """Top-level locale-sync configuration."""

    model_config = ConfigDict(extra="forbid")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
