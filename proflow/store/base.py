"""Store interface for work item documents.

The store behaves as an eventually-consistent key -> document table with
push-based change notification. Writers never assemble the item list
themselves; they wait for the next snapshot pushed to subscribers.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable

from proflow.items.schemas import WorkItemDocument, WorkItemResponse

SnapshotListener = Callable[[list[WorkItemResponse]], None]
ErrorListener = Callable[[Exception], None]
Unsubscribe = Callable[[], None]

# Fields a partial update may touch; id and created_at are write-once.
UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "client",
        "task_name",
        "stage",
        "tags",
        "start_date",
        "duration",
        "priority",
        "progress",
    }
)


class ItemStore(ABC):
    """Base class for work item stores."""

    @abstractmethod
    def subscribe(
        self, listener: SnapshotListener, on_error: ErrorListener | None = None
    ) -> Unsubscribe:
        """Register for full snapshots, newest item first.

        The listener receives the current snapshot immediately and again after
        every change.

        Args:
            listener: Called with the full document set.
            on_error: Called when a snapshot cannot be produced.

        Returns:
            Unsubscribe: Callable removing the registration.
        """

    @abstractmethod
    def snapshot(self) -> list[WorkItemResponse]:
        """Return the current document set, newest first."""

    @abstractmethod
    async def create(self, document: WorkItemDocument) -> str:
        """Store a new document and return its assigned identifier."""

    async def create_many(self, documents: list[WorkItemDocument]) -> list[str | Exception]:
        """Store several documents, each on its own.

        A failed document does not undo the others. Stores that can should
        notify subscribers once for the whole batch.

        Returns:
            list[str | Exception]: Assigned id or the error, per document.
        """
        results = await asyncio.gather(
            *(self.create(document) for document in documents), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
        return list(results)

    @abstractmethod
    async def update(self, item_id: str, changes: dict) -> None:
        """Apply a partial update to a stored document."""

    @abstractmethod
    async def delete(self, item_id: str) -> None:
        """Remove a stored document."""
