"""Interface-based preferred network detection.

Watches the host's network interfaces with psutil and reports the device as
being on its preferred network whenever an interface whose name matches one
of the configured patterns (WiFi adapters by default) is up.
"""

import asyncio
import fnmatch
import logging
from typing import List, Optional, Sequence

import psutil

from .signal import NetworkSignal

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS = ("wl*", "wlan*", "en0")


class InterfaceNetworkMonitor(NetworkSignal):
    """Polls interface state and emits preferred-network transitions."""

    def __init__(self, patterns: Optional[Sequence[str]] = None, poll_interval: float = 5.0):
        """Initialize the monitor.

        Args:
            patterns: Glob patterns of interface names that count as preferred
            poll_interval: Seconds between interface checks
        """
        super().__init__()
        self.patterns: List[str] = list(patterns) if patterns is not None else list(DEFAULT_PATTERNS)
        self.poll_interval = poll_interval

        self._preferred = self._detect()
        self._poll_task: Optional[asyncio.Task] = None
        self._shutdown_event = asyncio.Event()

        logger.info(f"Network monitoring started - preferred network: {self._preferred}")

    @property
    def is_preferred_network(self) -> bool:
        return self._preferred

    def matching_interfaces(self) -> List[str]:
        """Names of preferred interfaces that are currently up."""
        try:
            stats = psutil.net_if_stats()
        except Exception as e:
            logger.warning(f"Could not read network interfaces: {e}")
            return []

        return [
            name
            for name, stat in stats.items()
            if stat.isup and any(fnmatch.fnmatch(name, pattern) for pattern in self.patterns)
        ]

    def _detect(self) -> bool:
        return bool(self.matching_interfaces())

    def refresh(self) -> bool:
        """Re-read interface state, emitting a transition if it changed."""
        preferred = self._detect()
        if preferred != self._preferred:
            self._preferred = preferred
            self._emit(preferred)
        return preferred

    async def start(self) -> None:
        """Start background polling."""
        if self._poll_task is not None and not self._poll_task.done():
            return
        self._shutdown_event.clear()
        self._poll_task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        """Stop background polling."""
        self._shutdown_event.set()
        if self._poll_task is not None:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            self._poll_task = None

    async def _poll_loop(self) -> None:
        while not self._shutdown_event.is_set():
            try:
                await asyncio.sleep(self.poll_interval)
                self.refresh()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in network poll loop: {e}")
