"""Local recording storage for voxsync."""

from .recordings import RecordingStore

__all__ = ["RecordingStore"]
