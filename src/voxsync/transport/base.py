"""Upload transport interface and outcome types.

A transport performs exactly one bounded-time upload of one recording and
classifies the result. It never retries; retry policy belongs to the
scheduler and the engine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)


class VoxSyncError(Exception):
    """Base class for voxsync errors."""


class UploadError(VoxSyncError):
    """An upload could not be attempted at all."""


class InvalidEndpointError(UploadError):
    """The configured upload URL is unusable."""


class AudioFormat(Enum):
    """Audio container formats produced by the recorder."""

    WAV = "wav"
    M4A = "m4a"

    @property
    def file_extension(self) -> str:
        return self.value

    @property
    def mime_type(self) -> str:
        return f"audio/{self.value}"

    @classmethod
    def from_filename(cls, filename: str) -> "AudioFormat":
        """Detect format from a file name; anything not .wav is m4a."""
        if filename.endswith(".wav"):
            return cls.WAV
        return cls.M4A


@dataclass(frozen=True)
class Success:
    """Server acknowledged the upload (HTTP 200/201)."""

    status_code: int = 200

    def describe(self) -> str:
        return f"Uploaded ({self.status_code})"


@dataclass(frozen=True)
class ServerRejected:
    """Server answered with any other status code."""

    status_code: int
    body: str = ""

    def describe(self) -> str:
        return f"Server error: {self.status_code}"


@dataclass(frozen=True)
class TransportFailure:
    """The request did not complete (timeout, connection error, bad response)."""

    reason: str

    def describe(self) -> str:
        return f"Upload error: {self.reason}"


UploadOutcome = Union[Success, ServerRejected, TransportFailure]


class UploadTransport(ABC):
    """Abstract single-shot uploader."""

    @abstractmethod
    async def upload(
        self,
        artifact_id: str,
        payload: bytes,
        mime_type: str,
        format_extension: str,
        credential: Optional[str] = None,
    ) -> UploadOutcome:
        """Upload one recording.

        Args:
            artifact_id: Identifier of the recording, sent as file name
            payload: Raw audio bytes
            mime_type: Content type of the audio part
            format_extension: Audio format extension, for diagnostics
            credential: Optional bearer token

        Returns:
            Classified outcome

        Raises:
            UploadError: If the upload cannot be attempted (e.g. bad endpoint)
        """

    async def close(self) -> None:
        """Release any resources held by the transport."""
