"""Read-through cache of work items fed by a store subscription."""

import logging

from proflow.items.schemas import WorkItemResponse
from proflow.store.base import ItemStore, Unsubscribe

logger = logging.getLogger(__name__)


class ItemCache:
    """Local view of the store, refreshed only by pushed snapshots.

    The cache is never written directly: a write becomes visible here only
    once the store echoes it back. On subscription failure the last known
    list is kept and ``loading`` is cleared so callers do not wait forever.

    Attributes:
        loading: True until the first snapshot or error arrives.
    """

    def __init__(self):
        self._items: list[WorkItemResponse] = []
        self._unsubscribe: Unsubscribe | None = None
        self.loading = True
        self.last_error: Exception | None = None

    @property
    def items(self) -> list[WorkItemResponse]:
        """Current items, newest first."""
        return list(self._items)

    def get(self, item_id: str) -> WorkItemResponse | None:
        """Look up a cached item by identifier."""
        return next((item for item in self._items if item.id == item_id), None)

    def attach(self, store: ItemStore) -> None:
        """Subscribe to a store, replacing any previous subscription."""
        self.detach()
        self.loading = True
        self._unsubscribe = store.subscribe(self._on_snapshot, self._on_error)

    def detach(self) -> None:
        """Drop the current subscription, if any."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_snapshot(self, items: list[WorkItemResponse]) -> None:
        self._items = items
        self.loading = False
        self.last_error = None

    def _on_error(self, error: Exception) -> None:
        logger.error(f"Error fetching data: {error}")
        self.last_error = error
        self.loading = False
