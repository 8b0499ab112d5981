"""
Filesystem event nudges for the change monitor.

Watches the directories that contain monitored files and asks the monitor
for an early poll whenever one of those files is touched. Change detection
itself still happens in the poll cycle, so events only shorten latency and
never cause notifications on their own.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class ConfigFileEventHandler(FileSystemEventHandler):
    """
    Watchdog handler that triggers a poll when a watched file changes.

    Editors often save by writing a temporary file and renaming it over the
    original, so moves are matched on both their source and destination.
    """

    def __init__(self, on_change: Callable[[], None]):
        """
        Initialize the handler.

        Args:
            on_change: Called whenever a watched file sees an event,
                typically ``ChangeMonitor.force_update``
        """
        super().__init__()
        self.on_change = on_change

        self._observer: Observer | None = None
        self._watched_files: set[str] = set()
        self._watched_dirs: set[str] = set()

    def watch_file(self, file_path: str | Path) -> None:
        """
        Start watching the directory that holds a file.

        Failures are logged and otherwise ignored; the file is still polled.
        """
        resolved = Path(file_path).resolve()
        self._watched_files.add(str(resolved))

        directory = str(resolved.parent)
        if directory in self._watched_dirs:
            return

        try:
            if self._observer is None:
                self._observer = Observer()

            self._observer.schedule(self, directory, recursive=False)
            self._watched_dirs.add(directory)

            if not self._observer.is_alive():
                self._observer.start()
                logger.info("Filesystem event observer started")

            logger.debug("Watching %s for events on %s", directory, resolved.name)

        except Exception as e:
            logger.warning("Could not watch %s for events, relying on polling: %s", directory, e)

    def stop(self, timeout: float = 5.0) -> None:
        if self._observer and self._observer.is_alive():
            self._observer.stop()
            self._observer.join(timeout=timeout)
            logger.info("Filesystem event observer stopped")

        self._observer = None
        self._watched_dirs.clear()
        self._watched_files.clear()

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._handle_event(event)

    def _handle_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return

        paths = [event.src_path, getattr(event, "dest_path", "")]
        if any(path and self._is_watched(path) for path in paths):
            logger.debug("Filesystem event %s on %s, requesting poll", event.event_type, event.src_path)
            self.on_change()

    def _is_watched(self, path: str | bytes) -> bool:
        if isinstance(path, bytes):
            path = path.decode(errors="replace")
        return str(Path(path).resolve()) in self._watched_files

    @property
    def is_watching(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def get_watched_files(self) -> list[str]:
        return sorted(self._watched_files)
