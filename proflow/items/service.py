"""Service for work item operations."""

import asyncio
import logging
import time

from proflow.errors import NotFoundError
from proflow.items.schemas import (
    BulkDeleteResult,
    WorkItemCreate,
    WorkItemDocument,
    WorkItemResponse,
    WorkItemUpdate,
)
from proflow.store.base import ItemStore
from proflow.store.cache import ItemCache
from proflow.tags.classifier import detect_tags
from proflow.timeline.dates import format_for_display

logger = logging.getLogger(__name__)


class ItemService:
    """Service for reading and writing work items.

    Reads come from the cache; writes go to the store and show up in the
    cache only after the store pushes its next snapshot.

    Attributes:
        store: Item store.
        cache: Subscription-fed item cache.
    """

    def __init__(self, store: ItemStore, cache: ItemCache):
        self.store = store
        self.cache = cache

    def list_items(self) -> list[WorkItemResponse]:
        """List known items, newest first."""
        return self.cache.items

    def get_item(self, item_id: str) -> WorkItemResponse:
        """Get a known item.

        Raises:
            NotFoundError: If the item is not in the cache.
        """
        item = self.cache.get(item_id)
        if item is None:
            raise NotFoundError(f"Work item {item_id} not found")
        return item

    async def create_item(self, data: WorkItemCreate) -> str:
        """Create an item with derived tags and a creation timestamp.

        Args:
            data: Editor input.

        Returns:
            str: Identifier assigned by the store.
        """
        document = WorkItemDocument(
            **data.model_dump(exclude={"start_date"}),
            start_date=data.start_date.isoformat(),
            tags=detect_tags(data.task_name),
            created_at=int(time.time() * 1000),
        )
        item_id = await self.store.create(document)
        logger.info(f"Created work item {item_id} for order '{data.title}'")
        return item_id

    async def update_item(self, item_id: str, data: WorkItemUpdate) -> None:
        """Apply a partial update; tags follow the task description.

        Args:
            item_id: Item identifier.
            data: Changed fields.
        """
        changes = data.model_dump(exclude_unset=True)
        if changes.get("start_date") is not None:
            changes["start_date"] = changes["start_date"].isoformat()
        if "task_name" in changes:
            changes["task_name"] = changes["task_name"] or ""
            changes["tags"] = [tag.model_dump() for tag in detect_tags(changes["task_name"])]
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return
        await self.store.update(item_id, changes)

    async def delete_item(self, item_id: str) -> None:
        """Delete an item."""
        await self.store.delete(item_id)
        logger.info(f"Deleted work item {item_id}")

    async def bulk_delete(self, item_ids: list[str]) -> BulkDeleteResult:
        """Delete a selection concurrently.

        Deletions are independent: some may succeed while others fail.

        Args:
            item_ids: Selected identifiers.

        Returns:
            BulkDeleteResult: Deleted count and identifiers that failed.
        """
        unique_ids = list(dict.fromkeys(item_ids))
        results = await asyncio.gather(
            *(self.store.delete(item_id) for item_id in unique_ids),
            return_exceptions=True,
        )
        failed = []
        for item_id, result in zip(unique_ids, results):
            if isinstance(result, Exception):
                logger.warning(f"Bulk delete of {item_id} failed: {result}")
                failed.append(item_id)
            elif isinstance(result, BaseException):
                raise result
        return BulkDeleteResult(deleted_count=len(unique_ids) - len(failed), failed_ids=failed)


def build_summary(item: WorkItemResponse) -> str:
    """Build the plain-text summary copied to the clipboard.

    Args:
        item: Work item.

    Returns:
        str: Multi-line summary.
    """
    return (
        f"📋 {item.title}\n"
        "-------------------\n"
        f"👤 Khách: {item.client}\n"
        f"🚧 Việc: {item.task_name}\n"
        f"📅 Bắt đầu: {format_for_display(item.start_date)}\n"
        f"⏳ Thời hạn: {item.duration} ngày\n"
        f"📊 Tiến độ: {item.progress}%"
    )
