"""
Abstract interfaces for the INI monitoring system.

These interfaces define the contracts between the parser, the fingerprint
engine and the change monitor, enabling dependency injection for testing
and alternative implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

from ini_monitor.models import ConfigSection, ConfigTree, TreeSnapshot

ChangeCallback = Callable[[ConfigTree, int], None]


class IConfigParser(ABC):
    """Interface for turning configuration files into tree snapshots."""

    @abstractmethod
    def parse_file(self, file_path: str | Path) -> TreeSnapshot | None:
        """
        Parse a file into a fully fingerprinted snapshot.

        Args:
            file_path: Path to the configuration file

        Returns:
            The parsed snapshot, or None if the file could not be opened
            or stat'ed. Implementations must not raise for I/O failures.
        """
        pass

    @abstractmethod
    def parse_string(self, text: str, mod_time_ns: int | None = None) -> TreeSnapshot:
        """
        Parse configuration text that is already in memory.

        Args:
            text: Raw configuration text
            mod_time_ns: Modification time to record on the snapshot

        Returns:
            The parsed snapshot
        """
        pass


class IFingerprintEngine(ABC):
    """Interface for content fingerprints over parsed sections."""

    @abstractmethod
    def section_fingerprint(self, section: ConfigSection) -> str:
        """Compute the fingerprint of one section's keys and values."""
        pass

    @abstractmethod
    def tree_fingerprint(self, sections: Mapping[str, ConfigSection], section_names: Iterable[str]) -> str:
        """Combine already fingerprinted sections into a tree fingerprint."""
        pass


class IChangeMonitor(ABC):
    """Interface for polling watched trees and notifying subscribers."""

    @abstractmethod
    def subscribe(self, tree: ConfigTree, callback: ChangeCallback) -> int:
        """
        Register a callback for changes to a tree.

        The callback is invoked once with a change count of 0 before this
        method returns.

        Returns:
            Subscription id for use with unsubscribe()
        """
        pass

    @abstractmethod
    def unsubscribe(self, tree: ConfigTree, subscription_id: int) -> None:
        """Remove a callback; unknown ids are ignored."""
        pass

    @abstractmethod
    def clear_subscribers(self, tree: ConfigTree) -> None:
        """Remove every callback registered for a tree."""
        pass

    @abstractmethod
    def set_poll_interval_seconds(self, seconds: float) -> None:
        """Change the poll interval starting with the next sleep."""
        pass

    @abstractmethod
    def force_update(self) -> None:
        """Request an immediate poll cycle."""
        pass

    @abstractmethod
    def shutdown(self, timeout: float | None = None) -> None:
        """
        Stop the poll loop and wait for it to finish.

        Raises:
            ShutdownError: If the loop does not stop within the timeout
        """
        pass
