"""
Configuration management for the INI monitoring system.

Handles environment variables and ``.env`` loading, and provides validated
defaults for polling, shutdown, file decoding and logging.
"""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_POLL_INTERVAL_SECONDS = 10.0


class LogLevel(str, Enum):
    """Logging level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MonitorConfig(BaseSettings):
    """
    Central configuration class for the INI monitor.

    Every field can be overridden through an ``INI_MONITOR_``-prefixed
    environment variable, e.g. ``INI_MONITOR_POLL_INTERVAL_SECONDS=2``.
    """

    model_config = SettingsConfigDict(
        env_prefix="INI_MONITOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Polling Configuration ===
    poll_interval_seconds: float = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS, gt=0, description="Seconds between checks of watched files"
    )
    shutdown_timeout_seconds: float = Field(
        default=5.0, gt=0, le=300, description="How long shutdown waits for the poll loop to stop"
    )

    # === File Configuration ===
    file_encoding: str = Field(default="utf-8", description="Encoding used to read configuration files")
    supported_file_extensions: list[str] = Field(
        default=[".ini", ".cfg", ".conf"], description="Extensions recognized as configuration files"
    )

    # === Filesystem Event Configuration ===
    fs_events_enabled: bool = Field(
        default=False, description="Use filesystem events to trigger early polls in addition to the timer"
    )

    # === Logging Configuration ===
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_file: Path | None = Field(default=None, description="Log file path (stdout if None)")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log message format"
    )

    @field_validator('supported_file_extensions')
    @classmethod
    def validate_file_extensions(cls, v):
        """Ensure file extensions start with dot."""
        validated = []
        for ext in v:
            if not ext.startswith('.'):
                ext = f'.{ext}'
            validated.append(ext.lower())
        return validated

    def is_file_supported(self, file_path: str | Path) -> bool:
        """Check if a file has a recognized configuration extension."""
        return Path(file_path).suffix.lower() in self.supported_file_extensions

    def get_log_config(self) -> dict[str, Any]:
        """Get logging configuration dictionary."""
        config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"standard": {"format": self.log_format}},
            "handlers": {
                "default": {
                    "level": self.log_level.value,
                    "formatter": "standard",
                    "class": "logging.StreamHandler" if not self.log_file else "logging.FileHandler",
                }
            },
            "loggers": {"ini_monitor": {"handlers": ["default"], "level": self.log_level.value, "propagate": False}},
        }

        if self.log_file:
            config["handlers"]["default"]["filename"] = str(self.log_file)

        return config


# Global configuration instance
_config: MonitorConfig | None = None


def get_config() -> MonitorConfig:
    """
    Get the global configuration instance.

    Creates a new instance on first call and reuses it for subsequent calls.
    """
    global _config
    if _config is None:
        _config = MonitorConfig()
    return _config


def reload_config() -> MonitorConfig:
    """Force reload the configuration from environment/files."""
    global _config
    _config = MonitorConfig()
    return _config


def set_config(config: MonitorConfig) -> None:
    """
    Set a custom configuration instance.

    Primarily used for testing or advanced configuration scenarios.
    """
    global _config
    _config = config
