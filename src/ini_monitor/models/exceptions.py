"""
Custom exception classes for the INI monitoring system.

Parsing and change detection never raise during normal operation; these
exceptions cover the few hard failures: invalid settings, monitor lifecycle
misuse, and a poll loop that refuses to stop.
"""

from typing import Any


class BaseError(Exception):
    """
    Root of the ini_monitor exception hierarchy.

    ``error_code`` is a stable string such as ``SHUTDOWN_ERROR`` that log
    handlers and callers can switch on; ``context`` holds the offending path,
    setting or timeout.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        """
        Args:
            message: What went wrong, in words
            error_code: Stable code identifying the failure kind
            context: Details such as the watched path or the rejected setting
            cause: Exception this error wraps, if any
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, error_code={self.error_code!r}, context={self.context})"


class ConfigurationError(BaseError):
    """Raised for an invalid monitor setting, such as a non-positive poll interval."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        expected_type: str | None = None,
        actual_value: Any | None = None,
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key
        if expected_type:
            context["expected_type"] = expected_type
        if actual_value is not None:
            context["actual_value"] = str(actual_value)

        super().__init__(message, error_code="CONFIG_ERROR", context=context)


class MonitoringError(BaseError):
    """Raised when the change monitor is misused, e.g. restarted after shutdown."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        operation: str | None = None,
        underlying_error: Exception | None = None,
    ):
        context = {}
        if path:
            context["path"] = path
        if operation:
            context["operation"] = operation

        super().__init__(
            message,
            error_code="MONITORING_ERROR",
            context=context,
            cause=underlying_error,
        )


class ShutdownError(BaseError):
    """Raised when the monitor fails to stop within its timeout."""

    def __init__(
        self,
        message: str,
        component: str | None = None,
        timeout_seconds: float | None = None,
        underlying_error: Exception | None = None,
    ):
        context = {}
        if component:
            context["component"] = component
        if timeout_seconds is not None:
            context["timeout_seconds"] = timeout_seconds

        super().__init__(
            message,
            error_code="SHUTDOWN_ERROR",
            context=context,
            cause=underlying_error,
        )


def raise_config_error(
    message: str,
    config_key: str,
    expected_type: str | None = None,
    actual_value: Any | None = None,
) -> None:
    """Raise a configuration error with context."""
    raise ConfigurationError(
        message=message,
        config_key=config_key,
        expected_type=expected_type,
        actual_value=actual_value,
    )
