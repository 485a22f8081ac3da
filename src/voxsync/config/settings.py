"""voxsync configuration management.

This module provides configuration management for the upload server, retry
policy, local recording storage, network detection and logging.
"""

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAYS = [5.0, 10.0, 30.0]
DEFAULT_EXTENSIONS = [".m4a", ".wav"]
DEFAULT_PREFERRED_INTERFACES = ["wl*", "wlan*", "en0"]


@dataclass
class ServerConfig:
    """Upload server settings."""

    base_url: str = "http://localhost:3000"
    endpoint: str = "/api/recordings"
    auth_token: str = ""
    upload_timeout: float = 30.0

    @property
    def upload_url(self) -> str:
        """Full URL uploads are posted to."""
        return self.base_url + self.endpoint

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "base_url": self.base_url,
            "endpoint": self.endpoint,
            "auth_token": self.auth_token,
            "upload_timeout": self.upload_timeout,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServerConfig":
        """Create from dictionary."""
        return cls(
            base_url=data.get("base_url", "http://localhost:3000"),
            endpoint=data.get("endpoint", "/api/recordings"),
            auth_token=data.get("auth_token") or "",
            upload_timeout=float(data.get("upload_timeout", 30.0)),
        )


@dataclass
class SyncConfig:
    """Retry policy and metadata persistence settings."""

    max_retries: int = 3
    retry_delays: List[float] = field(default_factory=lambda: list(DEFAULT_RETRY_DELAYS))
    auto_sync: bool = True
    metadata_file: str = "sync_metadata.yaml"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "max_retries": self.max_retries,
            "retry_delays": list(self.retry_delays),
            "auto_sync": self.auto_sync,
            "metadata_file": self.metadata_file,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SyncConfig":
        """Create from dictionary."""
        return cls(
            max_retries=int(data.get("max_retries", 3)),
            retry_delays=[float(d) for d in data.get("retry_delays", DEFAULT_RETRY_DELAYS)],
            auto_sync=data.get("auto_sync", True),
            metadata_file=data.get("metadata_file", "sync_metadata.yaml"),
        )


@dataclass
class StorageConfig:
    """Local recording storage settings."""

    recordings_dir: str = "~/.voxsync/recordings"
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))

    @property
    def recordings_path(self) -> Path:
        return Path(self.recordings_dir).expanduser()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "recordings_dir": self.recordings_dir,
            "extensions": list(self.extensions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageConfig":
        """Create from dictionary."""
        return cls(
            recordings_dir=data.get("recordings_dir", "~/.voxsync/recordings"),
            extensions=list(data.get("extensions", DEFAULT_EXTENSIONS)),
        )


@dataclass
class NetworkConfig:
    """Preferred network detection settings."""

    preferred_interfaces: List[str] = field(
        default_factory=lambda: list(DEFAULT_PREFERRED_INTERFACES)
    )
    poll_interval: float = 5.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "preferred_interfaces": list(self.preferred_interfaces),
            "poll_interval": self.poll_interval,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkConfig":
        """Create from dictionary."""
        return cls(
            preferred_interfaces=list(
                data.get("preferred_interfaces", DEFAULT_PREFERRED_INTERFACES)
            ),
            poll_interval=float(data.get("poll_interval", 5.0)),
        )


@dataclass
class LoggingConfig:
    """Logging configuration settings."""

    level: str = "INFO"
    file: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"level": self.level, "file": self.file}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(level=data.get("level", "INFO"), file=data.get("file"))


@dataclass
class VoxSyncConfig:
    """Main voxsync configuration class.

    Groups every section and provides methods for loading, saving and
    accessing configuration data.
    """

    server: ServerConfig = field(default_factory=ServerConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @staticmethod
    def search_paths() -> List[Path]:
        """Locations searched when no explicit config path is given."""
        return [
            Path.cwd() / "voxsync.yaml",
            Path.home() / ".voxsync" / "config.yaml",
        ]

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "VoxSyncConfig":
        """Load configuration from file.

        Args:
            config_path: Path to a YAML config file. If None, searches standard locations.

        Returns:
            VoxSyncConfig instance; defaults when no readable file is found
        """
        if config_path is None:
            for path in cls.search_paths():
                if path.exists():
                    config_path = path
                    break

        if config_path is None or not Path(config_path).exists():
            logger.debug("No voxsync config found, using defaults")
            return cls()

        try:
            with open(config_path) as f:
                config_data = yaml.safe_load(f)

            if config_data is None:
                config_data = {}
            if not isinstance(config_data, dict):
                raise ValueError("top-level document must be a mapping")

            logger.debug(f"Loaded voxsync config from {config_path}")
            return cls.from_dict(config_data)

        except Exception as e:
            logger.warning(f"Failed to load voxsync config from {config_path}: {e}")
            return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoxSyncConfig":
        """Create VoxSyncConfig from dictionary.

        Args:
            data: Dictionary containing configuration data

        Returns:
            VoxSyncConfig instance
        """
        return cls(
            server=ServerConfig.from_dict(data.get("server") or {}),
            sync=SyncConfig.from_dict(data.get("sync") or {}),
            storage=StorageConfig.from_dict(data.get("storage") or {}),
            network=NetworkConfig.from_dict(data.get("network") or {}),
            logging=LoggingConfig.from_dict(data.get("logging") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "server": self.server.to_dict(),
            "sync": self.sync.to_dict(),
            "storage": self.storage.to_dict(),
            "network": self.network.to_dict(),
            "logging": self.logging.to_dict(),
        }

    def save(self, output_path: Union[str, Path]) -> None:
        """Save config to YAML file.

        Args:
            output_path: Path where to save the configuration
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, indent=2, sort_keys=False)

        logger.debug(f"Saved voxsync config to {output_path}")

    @property
    def metadata_path(self) -> Path:
        """Sync metadata file; relative names live beside the recordings."""
        path = Path(self.sync.metadata_file).expanduser()
        if path.is_absolute():
            return path
        return self.storage.recordings_path / path

    @staticmethod
    def create_default_config(output_path: Union[str, Path]) -> None:
        """Create a default configuration file with comments.

        Args:
            output_path: Path where to save the default configuration
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        config_content = """# voxsync configuration file

# Upload server
server:
  base_url: "http://localhost:3000"  # Scheme, host and port of the server
  endpoint: "/api/recordings"  # Path recordings are POSTed to
  auth_token: ""  # Bearer token; empty sends no Authorization header
  upload_timeout: 30  # Seconds before an upload attempt is abandoned

# Retry policy
sync:
  max_retries: 3  # Attempts per recording before it needs a manual retry
  retry_delays: [5, 10, 30]  # Backoff before the 2nd, 3rd, 4th... attempt (seconds)
  auto_sync: true  # Sync when the preferred network becomes available
  metadata_file: "sync_metadata.yaml"  # Relative paths live in recordings_dir

# Local recordings
storage:
  recordings_dir: "~/.voxsync/recordings"
  extensions: [".m4a", ".wav"]

# Preferred (unmetered) network detection
network:
  preferred_interfaces: ["wl*", "wlan*", "en0"]  # Glob patterns of interface names
  poll_interval: 5  # Seconds between interface checks

# Logging
logging:
  level: "INFO"  # DEBUG, INFO, WARNING, ERROR
  file: null  # Optional log file
"""

        with open(output_path, "w") as f:
            f.write(config_content)

        logger.info(f"Created default voxsync config at {output_path}")

    def __str__(self) -> str:
        return f"VoxSyncConfig(upload_url={self.server.upload_url}, recordings_dir={self.storage.recordings_dir})"


def load_config(config_path: Optional[Path] = None) -> VoxSyncConfig:
    """Load voxsync configuration from file.

    Args:
        config_path: Path to configuration file

    Returns:
        VoxSyncConfig instance
    """
    return VoxSyncConfig.load(config_path)
