"""Per-file registry of change callbacks."""

import logging

from ini_monitor.core.interfaces import ChangeCallback
from ini_monitor.models import ConfigTree

logger = logging.getLogger(__name__)


class SubscriberRegistry:
    """
    Ordered mapping of subscription id to callback for one watched file.

    Not thread-safe on its own; the change monitor serializes all access
    behind its registry lock.
    """

    def __init__(self):
        self._callbacks: dict[int, ChangeCallback] = {}

    def add(self, subscription_id: int, callback: ChangeCallback) -> None:
        self._callbacks[subscription_id] = callback

    def remove(self, subscription_id: int) -> bool:
        """Remove a callback. Returns False if the id was not registered."""
        return self._callbacks.pop(subscription_id, None) is not None

    def clear(self) -> None:
        self._callbacks.clear()

    def snapshot(self) -> list[tuple[int, ChangeCallback]]:
        return list(self._callbacks.items())

    def notify(self, tree: ConfigTree, change_count: int) -> int:
        """
        Invoke every callback registered right now, in insertion order.

        A callback that raises is logged and skipped; the rest still run.
        Callbacks added or removed during delivery do not affect this round.

        Args:
            tree: The tree that changed
            change_count: Per-file change counter to pass along

        Returns:
            Number of callbacks that completed without raising
        """
        delivered = 0
        for subscription_id, callback in self.snapshot():
            try:
                callback(tree, change_count)
                delivered += 1
            except Exception:
                logger.exception(
                    "Subscriber %d failed handling change %d for %s", subscription_id, change_count, tree.path
                )
        return delivered

    def __len__(self) -> int:
        return len(self._callbacks)

    def __contains__(self, subscription_id: object) -> bool:
        return subscription_id in self._callbacks
