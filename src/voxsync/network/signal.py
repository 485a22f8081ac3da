"""Preferred-network signal consumed by the sync engine."""

from abc import ABC, abstractmethod
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

TransitionCallback = Callable[[bool], None]


class NetworkSignal(ABC):
    """Reports whether the device is on its preferred (unmetered) network.

    Subscribers are told about every change of the value; the value observed
    at subscription time is never delivered as a transition.
    """

    def __init__(self):
        self._callbacks: List[TransitionCallback] = []

    @property
    @abstractmethod
    def is_preferred_network(self) -> bool:
        """Current connectivity class."""

    def on_transition(self, callback: TransitionCallback) -> Callable[[], None]:
        """Register a callback for value changes.

        Returns:
            Function that removes the callback again
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def _emit(self, value: bool) -> None:
        logger.info(f"Network status changed - preferred network: {value}")
        for callback in list(self._callbacks):
            try:
                callback(value)
            except Exception as e:
                logger.error(f"Network transition callback failed: {e}")


class StaticNetworkSignal(NetworkSignal):
    """Signal whose value is set explicitly by the host application."""

    def __init__(self, preferred: bool = False):
        super().__init__()
        self._preferred = preferred

    @property
    def is_preferred_network(self) -> bool:
        return self._preferred

    def set_preferred(self, preferred: bool) -> None:
        """Update the value, notifying subscribers only on change."""
        if preferred == self._preferred:
            return
        self._preferred = preferred
        self._emit(preferred)
