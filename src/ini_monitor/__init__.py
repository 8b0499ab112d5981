"""
INI configuration parsing with live change monitoring.

Parse ``[section]`` / ``key = value`` files into fingerprinted trees and get
notified when a watched file changes on disk::

    from ini_monitor import ChangeMonitor, load_config

    tree = load_config("service.ini")
    with ChangeMonitor() as monitor:
        monitor.subscribe(tree, lambda cfg, count: print(cfg.fingerprint, count))
"""

from ini_monitor.config import MonitorConfig, get_config
from ini_monitor.fingerprint import FingerprintEngine
from ini_monitor.models import (
    VOID_SECTION,
    VOID_TREE,
    VOID_VALUE,
    ConfigSection,
    ConfigTree,
    ConfigValue,
    ConfigurationError,
    MonitoringError,
    ShutdownError,
    TreeSnapshot,
    clean_token,
)
from ini_monitor.monitoring import ChangeMonitor, MonitorService, get_monitor, shutdown_monitor
from ini_monitor.parsers import IniParser, load_config

__version__ = "0.1.0"

__all__ = [
    "ChangeMonitor",
    "ConfigSection",
    "ConfigTree",
    "ConfigValue",
    "ConfigurationError",
    "FingerprintEngine",
    "IniParser",
    "MonitorConfig",
    "MonitorService",
    "MonitoringError",
    "ShutdownError",
    "TreeSnapshot",
    "VOID_SECTION",
    "VOID_TREE",
    "VOID_VALUE",
    "clean_token",
    "get_config",
    "get_monitor",
    "load_config",
    "shutdown_monitor",
]
