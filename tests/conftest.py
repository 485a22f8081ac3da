"""
Pytest configuration and shared fixtures for the voxsync test suite.
"""

import asyncio
from datetime import datetime, timedelta
from pathlib import Path
import shutil
import tempfile

from click.testing import CliRunner
import pytest
import yaml

from voxsync.core.engine import SyncEngine
from voxsync.core.scheduler import RetryScheduler
from voxsync.core.store import SyncMetadataStore
from voxsync.network.signal import StaticNetworkSignal
from voxsync.storage.recordings import RecordingStore
from voxsync.transport.base import ServerRejected, Success, UploadTransport


class FakeTransport(UploadTransport):
    """Transport returning scripted outcomes and recording every call."""

    def __init__(self, outcomes=None, hold=None):
        self.outcomes = list(outcomes) if outcomes else []
        self.default = Success(201)
        self.hold = hold  # Optional asyncio.Event awaited inside upload
        self.calls = []
        self.active = 0
        self.max_active = 0
        self.closed = False

    async def upload(self, artifact_id, payload, mime_type, format_extension, credential=None):
        self.calls.append(
            {
                "artifact_id": artifact_id,
                "payload": payload,
                "mime_type": mime_type,
                "format_extension": format_extension,
                "credential": credential,
            }
        )
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.hold is not None:
                await self.hold.wait()
            else:
                await asyncio.sleep(0)
        finally:
            self.active -= 1

        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def close(self):
        self.closed = True

    @property
    def uploaded_ids(self):
        return [call["artifact_id"] for call in self.calls]


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)
        await asyncio.sleep(0)


class SteppingClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 11, 4, 12, 0, 0)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def cli_runner():
    """Provide a Click CLI runner for testing CLI commands."""
    from rich.console import Console

    class TestCliRunner(CliRunner):
        def invoke(self, cli, args=None, **kwargs):
            # Provide a console object in the context if not already provided
            if "obj" not in kwargs:
                kwargs["obj"] = {"console": Console(file=None, force_terminal=False, width=200)}
            return super().invoke(cli, args, **kwargs)

    return TestCliRunner()


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after the test."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def recordings_dir(temp_dir):
    path = temp_dir / "recordings"
    path.mkdir()
    return path


@pytest.fixture
def metadata_file(temp_dir):
    return temp_dir / "sync_metadata.yaml"


@pytest.fixture
def recording_store(recordings_dir):
    return RecordingStore(recordings_dir)


@pytest.fixture
def metadata_store(metadata_file):
    return SyncMetadataStore(metadata_file)


@pytest.fixture
def network():
    """Network signal that starts on the preferred network."""
    return StaticNetworkSignal(preferred=True)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def fake_sleep():
    return RecordingSleep()


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def rejecting_transport():
    """Transport that always answers 500."""
    transport = FakeTransport()
    transport.default = ServerRejected(500, "")
    return transport


@pytest.fixture
def make_engine(metadata_store, recording_store, network, transport, fake_sleep, clock):
    """Factory building a SyncEngine over the shared fixtures."""

    def _make(**overrides):
        kwargs = {
            "store": metadata_store,
            "transport": transport,
            "recordings": recording_store,
            "network": network,
            "scheduler": RetryScheduler(),
            "sleep": fake_sleep,
            "clock": clock,
        }
        kwargs.update(overrides)
        return SyncEngine(**kwargs)

    return _make


@pytest.fixture
def sample_config():
    """Provide a sample voxsync configuration for testing."""
    return {
        "server": {
            "base_url": "https://recordings.example.com",
            "endpoint": "/api/recordings",
            "auth_token": "secret-token",
            "upload_timeout": 15,
        },
        "sync": {"max_retries": 4, "retry_delays": [1, 2, 4], "auto_sync": False},
        "storage": {"recordings_dir": "/tmp/voxsync-recordings", "extensions": [".m4a"]},
        "network": {"preferred_interfaces": ["wlan0"], "poll_interval": 2},
        "logging": {"level": "DEBUG"},
    }


@pytest.fixture
def config_file(temp_dir, sample_config):
    """Create a temporary configuration file."""
    path = temp_dir / "voxsync.yaml"
    with open(path, "w") as f:
        yaml.dump(sample_config, f)
    return path
