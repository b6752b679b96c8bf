"""SQLAlchemy-backed work item store."""

import logging
import threading

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from proflow.db.database import SessionLocal, session_scope
from proflow.db.models import WorkItem
from proflow.errors import NotFoundError, StoreError
from proflow.items.schemas import WorkItemDocument, WorkItemResponse
from proflow.store.base import (
    UPDATABLE_FIELDS,
    ErrorListener,
    ItemStore,
    SnapshotListener,
    Unsubscribe,
)

logger = logging.getLogger(__name__)

Listener = tuple[SnapshotListener, ErrorListener | None]


class SqlItemStore(ItemStore):
    """Item store persisting documents in a relational database.

    Each operation runs in its own session on a worker thread, so writes
    suspend the caller without blocking the event loop. Database work is
    serialized by a lock. Subscribers are notified after every committed
    write, or once per batch for ``create_many``.

    Attributes:
        session_factory: Factory producing SQLAlchemy sessions.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        """Initialize the store.

        Args:
            session_factory: Session factory, defaults to the application one.
        """
        self.session_factory = session_factory
        self._listeners: dict[int, Listener] = {}
        self._next_token = 0
        self._db_lock = threading.Lock()

    def subscribe(
        self, listener: SnapshotListener, on_error: ErrorListener | None = None
    ) -> Unsubscribe:
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = (listener, on_error)

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        try:
            items = self.snapshot()
        except StoreError as e:
            self._deliver_error([(listener, on_error)], e)
        else:
            self._deliver([(listener, on_error)], items)
        return unsubscribe

    def snapshot(self) -> list[WorkItemResponse]:
        try:
            with session_scope(self.session_factory) as db:
                rows = db.query(WorkItem).order_by(WorkItem.created_at.desc()).all()
                return [WorkItemResponse.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            raise StoreError(f"Could not read work items: {e}") from e

    async def create(self, document: WorkItemDocument) -> str:
        item_id = await self._run(self._insert_document, document)
        await self._publish()
        return item_id

    async def create_many(self, documents: list[WorkItemDocument]) -> list[str | Exception]:
        """Insert documents one commit each, then notify subscribers once."""
        results = await self._run(self._insert_documents, documents)
        await self._publish()
        return results

    async def update(self, item_id: str, changes: dict) -> None:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise StoreError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        await self._run(self._update_row, item_id, changes)
        await self._publish()

    async def delete(self, item_id: str) -> None:
        await self._run(self._delete_row, item_id)
        await self._publish()

    async def _run(self, func, *args):
        """Run blocking database work on a worker thread, one call at a time."""

        def locked():
            with self._db_lock:
                return func(*args)

        return await run_in_threadpool(locked)

    def _insert_document(self, document: WorkItemDocument) -> str:
        try:
            with session_scope(self.session_factory) as db:
                row = WorkItem(**document.model_dump())
                db.add(row)
                db.commit()
                return row.id
        except SQLAlchemyError as e:
            logger.error(f"Error creating work item '{document.title}': {e}")
            raise StoreError(f"Could not save work item: {e}") from e

    def _insert_documents(self, documents: list[WorkItemDocument]) -> list[str | Exception]:
        results: list[str | Exception] = []
        for document in documents:
            try:
                results.append(self._insert_document(document))
            except StoreError as e:
                results.append(e)
        return results

    def _update_row(self, item_id: str, changes: dict) -> None:
        try:
            with session_scope(self.session_factory) as db:
                row = self._get_row(db, item_id)
                for field, value in changes.items():
                    setattr(row, field, value)
                db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error updating work item {item_id}: {e}")
            raise StoreError(f"Could not update work item: {e}") from e

    def _delete_row(self, item_id: str) -> None:
        try:
            with session_scope(self.session_factory) as db:
                db.delete(self._get_row(db, item_id))
                db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error deleting work item {item_id}: {e}")
            raise StoreError(f"Could not delete work item: {e}") from e

    @staticmethod
    def _get_row(db: Session, item_id: str) -> WorkItem:
        row = db.get(WorkItem, item_id)
        if row is None:
            raise NotFoundError(f"Work item {item_id} not found")
        return row

    async def _publish(self) -> None:
        """Push a fresh snapshot to every subscriber."""
        targets = list(self._listeners.values())
        if not targets:
            return

        try:
            items = await self._run(self.snapshot)
        except StoreError as e:
            self._deliver_error(targets, e)
            return
        self._deliver(targets, items)

    @staticmethod
    def _deliver(targets: list[Listener], items: list[WorkItemResponse]) -> None:
        for listener, _ in targets:
            listener(list(items))

    @staticmethod
    def _deliver_error(targets: list[Listener], error: StoreError) -> None:
        logger.error(f"Snapshot delivery failed: {error}")
        for _, on_error in targets:
            if on_error is not None:
                on_error(error)
