"""
Change monitor for watched configuration trees.

A single background thread polls every registered file, reparses files
whose modification time moved forward, and notifies the file's subscribers
with a per-file change counter.

Locking:
    One re-entrant lock guards the whole registry. Subscription changes and
    the entire poll cycle (stat, reparse and every callback) run under it,
    so callbacks execute with the lock held. Callbacks must therefore return
    quickly: a slow callback delays polling of every other file and blocks
    concurrent subscribe/unsubscribe calls. Because the lock is re-entrant,
    a callback may subscribe or unsubscribe on its own thread; such changes
    apply from the next change event onward.
"""

import itertools
import logging
import os
import threading
from typing import Any

from ini_monitor.config import MonitorConfig, get_config
from ini_monitor.core.interfaces import ChangeCallback, IChangeMonitor
from ini_monitor.models import ConfigTree
from ini_monitor.models.exceptions import MonitoringError, ShutdownError, raise_config_error
from ini_monitor.monitoring.fs_events import ConfigFileEventHandler
from ini_monitor.monitoring.subscribers import SubscriberRegistry

logger = logging.getLogger(__name__)


class WatchedConfig:
    """Registry entry for one watched file."""

    def __init__(self, tree: ConfigTree):
        self.path = tree.path
        self.tree = tree
        self.change_count = 0
        self.subscribers = SubscriberRegistry()

    def __str__(self) -> str:
        return f"WatchedConfig({self.path}, changes={self.change_count}, subscribers={len(self.subscribers)})"


class ChangeMonitor(IChangeMonitor):
    """
    Polls watched configuration files and fans out change notifications.

    The monitor is an explicit service object: create one, ``start()`` it,
    hand it to the components that need change notifications, and
    ``shutdown()`` it when the process exits. It can also be used as a
    context manager.
    """

    def __init__(self, config: MonitorConfig | None = None, fs_event_handler: ConfigFileEventHandler | None = None):
        """
        Initialize the change monitor.

        Args:
            config: Monitor configuration (global configuration if None)
            fs_event_handler: Optional filesystem event handler; created
                automatically when ``config.fs_events_enabled`` is set
        """
        self.config = config or get_config()

        self._lock = threading.RLock()
        self._entries: dict[str, WatchedConfig] = {}

        self._id_lock = threading.Lock()
        self._id_counter = itertools.count(1)

        self._poll_interval = self.config.poll_interval_seconds
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

        if fs_event_handler is None and self.config.fs_events_enabled:
            fs_event_handler = ConfigFileEventHandler(on_change=self.force_update)
        self.fs_event_handler = fs_event_handler

        self._stats = {"poll_cycles": 0, "changes_detected": 0, "stat_failures": 0, "read_failures": 0}

    # ── Lifecycle ──

    def start(self) -> "ChangeMonitor":
        """
        Start the background poll thread. Calling it again is a no-op.

        Raises:
            MonitoringError: If the monitor has already been shut down
        """
        if self._stop.is_set():
            raise MonitoringError("Monitor has been shut down and cannot be restarted", operation="start")

        if self._thread and self._thread.is_alive():
            return self

        self._thread = threading.Thread(target=self._poll_loop, daemon=True, name="ini-monitor-poll")
        self._thread.start()
        logger.info("Change monitor started (poll interval %.2fs)", self._poll_interval)
        return self

    def shutdown(self, timeout: float | None = None) -> None:
        """
        Stop the poll loop and wait until it has exited.

        Args:
            timeout: Seconds to wait (``config.shutdown_timeout_seconds`` if None)

        Raises:
            ShutdownError: If the poll loop is still running after the timeout
        """
        timeout = self.config.shutdown_timeout_seconds if timeout is None else timeout

        self._stop.set()
        self._wake.set()

        if self.fs_event_handler is not None:
            self.fs_event_handler.stop(timeout=timeout)

        thread = self._thread
        if thread is None:
            return

        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.critical("Change monitor did not stop within %.2fs", timeout)
            raise ShutdownError(
                f"Change monitor did not stop within {timeout} seconds",
                component="change_monitor",
                timeout_seconds=timeout,
            )

        self._thread = None
        logger.info("Change monitor stopped")

    def __enter__(self) -> "ChangeMonitor":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ── Registry ──

    def register(self, tree: ConfigTree) -> WatchedConfig:
        """
        Get the registry entry for a tree, creating it if absent.

        Entries are keyed by path; a second tree object for an already
        registered path shares the first tree's entry.
        """
        with self._lock:
            entry = self._entries.get(tree.path)
            if entry is None:
                entry = WatchedConfig(tree)
                self._entries[tree.path] = entry
                logger.debug("Registered %s for monitoring", tree.path)

                if self.fs_event_handler is not None and not self._stop.is_set():
                    self.fs_event_handler.watch_file(tree.path)

            return entry

    def subscribe(self, tree: ConfigTree, callback: ChangeCallback) -> int:
        subscription_id = self._next_id()

        with self._lock:
            entry = self.register(tree)
            entry.subscribers.add(subscription_id, callback)

            try:
                callback(entry.tree, 0)
            except Exception:
                logger.exception("Subscriber %d failed handling initial state of %s", subscription_id, entry.path)

        logger.debug("Subscriber %d added for %s", subscription_id, tree.path)
        return subscription_id

    def unsubscribe(self, tree: ConfigTree, subscription_id: int) -> None:
        with self._lock:
            entry = self.register(tree)
            if entry.subscribers.remove(subscription_id):
                logger.debug("Subscriber %d removed from %s", subscription_id, tree.path)

    def clear_subscribers(self, tree: ConfigTree) -> None:
        with self._lock:
            entry = self.register(tree)
            entry.subscribers.clear()
            logger.debug("Cleared subscribers for %s", tree.path)

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._id_counter)

    # ── Polling ──

    @property
    def poll_interval_seconds(self) -> float:
        return self._poll_interval

    def set_poll_interval_seconds(self, seconds: float) -> None:
        if seconds <= 0:
            raise_config_error(
                "Poll interval must be positive",
                config_key="poll_interval_seconds",
                expected_type="float > 0",
                actual_value=seconds,
            )
        self._poll_interval = float(seconds)
        logger.debug("Poll interval set to %.2fs", self._poll_interval)

    def force_update(self) -> None:
        self._wake.set()

    def _poll_loop(self) -> None:
        logger.debug("Poll loop running")
        try:
            while not self._stop.is_set():
                # cleared before the cycle so a force_update issued during it triggers another
                self._wake.clear()
                self._poll_cycle()

                # a shutdown that landed before the clear above lost its wake-up
                if self._stop.is_set():
                    break

                self._wake.wait(timeout=self._poll_interval)
        except Exception:
            logger.exception("Poll loop terminated unexpectedly")
            raise
        finally:
            logger.debug("Poll loop exited")

    def _poll_cycle(self) -> int:
        """
        Check every registered file once and notify subscribers of changes.

        Returns:
            Number of files whose change was detected and delivered
        """
        changed = 0
        with self._lock:
            self._stats["poll_cycles"] += 1

            for entry in list(self._entries.values()):
                if self._check_entry(entry):
                    changed += 1

        return changed

    def _check_entry(self, entry: WatchedConfig) -> bool:
        tree = entry.tree
        try:
            disk_mtime_ns = os.stat(tree.path).st_mtime_ns
        except OSError as e:
            self._stats["stat_failures"] += 1
            logger.debug("Skipping %s, stat failed: %s", tree.path, e)
            return False

        last_mtime_ns = tree.mod_time_ns
        if last_mtime_ns is not None and disk_mtime_ns <= last_mtime_ns:
            return False

        if not tree.reparse():
            self._stats["read_failures"] += 1
            logger.warning("Detected change to %s but could not read it; will retry", tree.path)
            return False

        entry.change_count += 1
        self._stats["changes_detected"] += 1
        logger.info(
            "Change %d detected for %s (fingerprint %s)", entry.change_count, tree.path, tree.fingerprint
        )

        entry.subscribers.notify(tree, entry.change_count)
        return True

    # ── Introspection ──

    def get_watched_paths(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def get_change_count(self, tree: ConfigTree) -> int:
        with self._lock:
            entry = self._entries.get(tree.path)
            return entry.change_count if entry else 0

    def get_monitoring_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "monitoring_active": self.is_running,
                "poll_interval_seconds": self._poll_interval,
                "watched_files": {
                    path: {"change_count": entry.change_count, "subscribers": len(entry.subscribers)}
                    for path, entry in self._entries.items()
                },
                "fs_events_enabled": self.fs_event_handler is not None,
                "processing_stats": self._stats.copy(),
            }


MonitorService = ChangeMonitor

_monitor: ChangeMonitor | None = None
_monitor_lock = threading.Lock()


def get_monitor() -> ChangeMonitor:
    """
    Get the process-wide default monitor, starting it on first use.

    Prefer creating and injecting a ChangeMonitor explicitly; this accessor
    exists for applications that want a single shared instance.
    """
    global _monitor
    with _monitor_lock:
        if _monitor is None:
            _monitor = ChangeMonitor().start()
        return _monitor


def shutdown_monitor(timeout: float | None = None) -> None:
    """
    Shut down the default monitor if it was started.

    Raises:
        ShutdownError: If the poll loop does not stop within the timeout
    """
    global _monitor
    with _monitor_lock:
        monitor, _monitor = _monitor, None
    if monitor is not None:
        monitor.shutdown(timeout=timeout)
