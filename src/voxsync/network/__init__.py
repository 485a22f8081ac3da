"""Network connectivity signals for voxsync."""

from .monitor import InterfaceNetworkMonitor
from .signal import NetworkSignal, StaticNetworkSignal

__all__ = ["NetworkSignal", "StaticNetworkSignal", "InterfaceNetworkMonitor"]
