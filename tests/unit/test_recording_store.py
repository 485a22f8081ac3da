"""Unit tests for RecordingStore."""

import os

import pytest

from voxsync.storage.recordings import RecordingStore

pytestmark = pytest.mark.unit


class TestRecordingStore:
    """Test local payload storage."""

    def test_write_read_delete(self, recording_store):
        recording_store.write_payload("a.m4a", b"audio")

        assert recording_store.exists("a.m4a")
        assert recording_store.read_payload("a.m4a") == b"audio"
        assert recording_store.delete("a.m4a") is True
        assert recording_store.delete("a.m4a") is False
        assert not recording_store.exists("a.m4a")

    def test_read_missing_raises(self, recording_store):
        with pytest.raises(FileNotFoundError):
            recording_store.read_payload("missing.m4a")

    @pytest.mark.parametrize("bad_id", ["", "..", "../escape.m4a", "sub/dir.m4a"])
    def test_rejects_path_like_identifiers(self, recording_store, bad_id):
        with pytest.raises(ValueError):
            recording_store.path_for(bad_id)

    def test_list_artifacts_oldest_first(self, recording_store):
        for name, mtime in [("new.m4a", 3000), ("old.wav", 1000), ("mid.m4a", 2000)]:
            path = recording_store.write_payload(name, b"x")
            os.utime(path, (mtime, mtime))
        recording_store.write_payload("readme.txt", b"not audio")

        assert recording_store.list_artifacts() == ["old.wav", "mid.m4a", "new.m4a"]

    def test_missing_directory_lists_nothing(self, temp_dir):
        store = RecordingStore(temp_dir / "does-not-exist")

        assert store.list_artifacts() == []
        assert store.total_size() == 0

    def test_custom_extensions(self, recordings_dir):
        store = RecordingStore(recordings_dir, extensions=[".wav"])
        store.write_payload("a.m4a", b"x")
        store.write_payload("b.wav", b"x")

        assert store.list_artifacts() == ["b.wav"]

    def test_total_size(self, recording_store):
        recording_store.write_payload("a.m4a", b"12345")
        recording_store.write_payload("b.wav", b"123")

        assert recording_store.total_size() == 8
