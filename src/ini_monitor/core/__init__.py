"""Core contracts shared by the parser, fingerprint engine and monitor."""

from ini_monitor.core.interfaces import ChangeCallback, IChangeMonitor, IConfigParser, IFingerprintEngine

__all__ = [
    "ChangeCallback",
    "IChangeMonitor",
    "IConfigParser",
    "IFingerprintEngine",
]
