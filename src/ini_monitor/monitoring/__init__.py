"""
Monitoring package for configuration change detection.

This package provides the polling change monitor, the per-file subscriber
registry, and optional filesystem-event nudges that make the monitor poll
early when a watched file is touched.
"""

from .change_monitor import ChangeMonitor, MonitorService, WatchedConfig, get_monitor, shutdown_monitor
from .fs_events import ConfigFileEventHandler
from .subscribers import SubscriberRegistry

__all__ = [
    "ChangeMonitor",
    "ConfigFileEventHandler",
    "MonitorService",
    "SubscriberRegistry",
    "WatchedConfig",
    "get_monitor",
    "shutdown_monitor",
]
