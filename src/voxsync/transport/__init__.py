"""Upload transports for voxsync."""

from .base import (
    AudioFormat,
    InvalidEndpointError,
    ServerRejected,
    Success,
    TransportFailure,
    UploadError,
    UploadOutcome,
    UploadTransport,
    VoxSyncError,
)
from .http import HTTPUploadTransport

__all__ = [
    "UploadTransport",
    "UploadOutcome",
    "Success",
    "ServerRejected",
    "TransportFailure",
    "AudioFormat",
    "VoxSyncError",
    "UploadError",
    "InvalidEndpointError",
    "HTTPUploadTransport",
]
