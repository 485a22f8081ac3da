"""Local recording payload storage.

Recordings live as flat files in one directory and are addressed by their
file name, which doubles as the artifact identifier. Both the recorder and
the sync engine delete from here, so a file that is already gone is never an
error.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


class RecordingStore:
    """Directory of recorded audio files."""

    def __init__(self, recordings_dir: Path, extensions: Optional[Sequence[str]] = None):
        """Initialize the store.

        Args:
            recordings_dir: Directory holding the recordings
            extensions: File suffixes that count as recordings
        """
        self.recordings_dir = Path(recordings_dir).expanduser()
        self.extensions = tuple(extensions) if extensions is not None else (".m4a", ".wav")

    def path_for(self, artifact_id: str) -> Path:
        """Resolve an identifier to its file path.

        Raises:
            ValueError: If the identifier is not a plain file name
        """
        if not artifact_id or Path(artifact_id).name != artifact_id or artifact_id in (".", ".."):
            raise ValueError(f"Invalid recording identifier: {artifact_id!r}")
        return self.recordings_dir / artifact_id

    def exists(self, artifact_id: str) -> bool:
        return self.path_for(artifact_id).is_file()

    def list_artifacts(self) -> List[str]:
        """Recording identifiers on disk, oldest first."""
        if not self.recordings_dir.exists():
            return []

        files = [
            path
            for path in self.recordings_dir.iterdir()
            if path.is_file() and path.suffix in self.extensions
        ]
        files.sort(key=lambda p: (p.stat().st_mtime, p.name))
        return [path.name for path in files]

    def read_payload(self, artifact_id: str) -> bytes:
        """Read a recording.

        Raises:
            FileNotFoundError: If the recording is not on disk
        """
        return self.path_for(artifact_id).read_bytes()

    def write_payload(self, artifact_id: str, payload: bytes) -> Path:
        """Store a recording, creating the directory if needed."""
        path = self.path_for(artifact_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)
        return path

    def delete(self, artifact_id: str) -> bool:
        """Delete a recording.

        Returns:
            True if a file was removed, False if it was already absent

        Raises:
            OSError: If the file exists but could not be removed
        """
        try:
            self.path_for(artifact_id).unlink()
        except FileNotFoundError:
            logger.debug(f"Recording already absent: {artifact_id}")
            return False
        logger.info(f"Deleted local recording {artifact_id}")
        return True

    def total_size(self) -> int:
        """Bytes used by all recordings."""
        total = 0
        for artifact_id in self.list_artifacts():
            try:
                total += self.path_for(artifact_id).stat().st_size
            except OSError as e:
                logger.debug(f"Could not stat {artifact_id}: {e}")
        return total
