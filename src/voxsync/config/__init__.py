"""Configuration management for voxsync."""

from .settings import (
    LoggingConfig,
    NetworkConfig,
    ServerConfig,
    StorageConfig,
    SyncConfig,
    VoxSyncConfig,
    load_config,
)
from .validation import ConfigValidator, ValidationError, ValidationResult

__all__ = [
    "VoxSyncConfig",
    "ServerConfig",
    "SyncConfig",
    "StorageConfig",
    "NetworkConfig",
    "LoggingConfig",
    "load_config",
    "ConfigValidator",
    "ValidationError",
    "ValidationResult",
]
