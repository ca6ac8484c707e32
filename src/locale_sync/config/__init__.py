"""Configuration loading and validation."""

from .manager import ConfigManager
from .schema import LocaleSyncConfig, LoggingConfig, StorageConfig, SyncConfig

__all__ = [
    "ConfigManager",
    "LocaleSyncConfig",
    "LoggingConfig",
    "StorageConfig",
    "SyncConfig",
]
