"""Configuration validation utilities for voxsync.

Checks the upload endpoint, retry policy and storage settings before an
engine is built from them, with detailed error reporting.
"""

import logging
from typing import List, Optional
from urllib.parse import urlparse

from .settings import VoxSyncConfig

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ValidationError:
    """Represents a validation error with severity and context."""

    def __init__(
        self,
        message: str,
        severity: str = "error",
        field: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        self.message = message
        self.severity = severity  # "error", "warning", "info"
        self.field = field
        self.suggestion = suggestion

    def __str__(self) -> str:
        prefix = f"[{self.severity.upper()}]"
        if self.field:
            prefix += f" {self.field}:"

        result = f"{prefix} {self.message}"
        if self.suggestion:
            result += f" (Suggestion: {self.suggestion})"

        return result


class ValidationResult:
    """Container for validation results with errors and warnings."""

    def __init__(self):
        self.errors: List[ValidationError] = []
        self.warnings: List[ValidationError] = []
        self.info: List[ValidationError] = []

    def add_error(
        self, message: str, field: Optional[str] = None, suggestion: Optional[str] = None
    ):
        """Add an error to the validation result."""
        self.errors.append(ValidationError(message, "error", field, suggestion))

    def add_warning(
        self, message: str, field: Optional[str] = None, suggestion: Optional[str] = None
    ):
        """Add a warning to the validation result."""
        self.warnings.append(ValidationError(message, "warning", field, suggestion))

    def add_info(self, message: str, field: Optional[str] = None, suggestion: Optional[str] = None):
        """Add an info message to the validation result."""
        self.info.append(ValidationError(message, "info", field, suggestion))

    @property
    def is_valid(self) -> bool:
        """Check if validation passed (no errors)."""
        return len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def get_summary(self) -> str:
        """Get a summary of validation results."""
        if self.is_valid and not self.has_warnings:
            return "✓ Validation passed"
        elif self.is_valid:
            return f"✓ Validation passed with {len(self.warnings)} warnings"
        else:
            return f"✗ Validation failed with {len(self.errors)} errors and {len(self.warnings)} warnings"

    def get_all_messages(self) -> List[str]:
        """Get all validation messages as strings."""
        return [str(item) for item in self.errors + self.warnings + self.info]


class ConfigValidator:
    """Validator for voxsync configurations."""

    def __init__(self, config: VoxSyncConfig):
        self.config = config

    def validate(self) -> ValidationResult:
        """Perform validation of every configuration section."""
        result = ValidationResult()

        self._validate_server(result)
        self._validate_sync(result)
        self._validate_storage(result)
        self._validate_network(result)
        self._validate_logging(result)

        logger.debug(f"Config validation: {result.get_summary()}")
        return result

    def _validate_server(self, result: ValidationResult) -> None:
        server = self.config.server
        parsed = urlparse(server.base_url)

        if parsed.scheme not in ("http", "https"):
            result.add_error(
                f"Unsupported URL scheme '{parsed.scheme}'",
                field="server.base_url",
                suggestion="Use an http:// or https:// URL",
            )
        if not parsed.netloc:
            result.add_error("Base URL has no host", field="server.base_url")
        if parsed.scheme == "http" and parsed.hostname not in ("localhost", "127.0.0.1", None):
            result.add_warning(
                "Recordings will be uploaded without TLS", field="server.base_url"
            )

        if not server.endpoint.startswith("/"):
            result.add_error(
                "Endpoint must start with '/'",
                field="server.endpoint",
                suggestion=f"Use '/{server.endpoint}'",
            )

        if server.upload_timeout <= 0:
            result.add_error("Upload timeout must be positive", field="server.upload_timeout")

        if not server.auth_token:
            result.add_info(
                "No auth token configured, uploads are sent without Authorization header",
                field="server.auth_token",
            )

    def _validate_sync(self, result: ValidationResult) -> None:
        sync = self.config.sync

        if sync.max_retries < 1:
            result.add_error(
                "max_retries must be at least 1",
                field="sync.max_retries",
                suggestion="The default is 3",
            )

        if not sync.retry_delays:
            result.add_error("retry_delays must not be empty", field="sync.retry_delays")
        elif any(delay < 0 for delay in sync.retry_delays):
            result.add_error("retry_delays must be non-negative", field="sync.retry_delays")
        elif len(sync.retry_delays) < sync.max_retries - 1:
            result.add_info(
                "Later retries reuse the last backoff delay", field="sync.retry_delays"
            )

    def _validate_storage(self, result: ValidationResult) -> None:
        storage = self.config.storage

        if not storage.recordings_path.exists():
            result.add_warning(
                f"Recordings directory does not exist: {storage.recordings_path}",
                field="storage.recordings_dir",
                suggestion="It will be created on first use",
            )

        for ext in storage.extensions:
            if not ext.startswith("."):
                result.add_error(
                    f"Extension '{ext}' must start with '.'", field="storage.extensions"
                )

    def _validate_network(self, result: ValidationResult) -> None:
        network = self.config.network

        if not network.preferred_interfaces:
            result.add_warning(
                "No preferred interfaces configured, automatic sync will never start",
                field="network.preferred_interfaces",
            )
        if network.poll_interval <= 0:
            result.add_error("poll_interval must be positive", field="network.poll_interval")

    def _validate_logging(self, result: ValidationResult) -> None:
        level = str(self.config.logging.level).upper()

        if level not in LOG_LEVELS:
            result.add_error(
                f"Unknown log level '{self.config.logging.level}'",
                field="logging.level",
                suggestion=f"Use one of {', '.join(LOG_LEVELS)}",
            )
