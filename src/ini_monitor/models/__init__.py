"""Data models and exceptions for the INI monitoring system."""

from ini_monitor.models.config_tree import (
    EMPTY_SNAPSHOT,
    VOID_SECTION,
    VOID_TREE,
    VOID_VALUE,
    ConfigSection,
    ConfigTree,
    ConfigValue,
    TreeSnapshot,
    clean_token,
    strip_eol_comment,
)
from ini_monitor.models.exceptions import (
    BaseError,
    ConfigurationError,
    MonitoringError,
    ShutdownError,
)

__all__ = [
    "ConfigValue",
    "ConfigSection",
    "ConfigTree",
    "TreeSnapshot",
    "EMPTY_SNAPSHOT",
    "VOID_VALUE",
    "VOID_SECTION",
    "VOID_TREE",
    "clean_token",
    "strip_eol_comment",
    "BaseError",
    "ConfigurationError",
    "MonitoringError",
    "ShutdownError",
]
