"""Work item API routes."""

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse

from proflow.dependencies import Cache, CurrentUser, Store
from proflow.items.schemas import (
    BulkDeleteRequest,
    BulkDeleteResult,
    ItemCreated,
    WorkItemCreate,
    WorkItemResponse,
    WorkItemUpdate,
)
from proflow.items.service import ItemService, build_summary

router = APIRouter()


@router.get("", response_model=list[WorkItemResponse])
async def list_items(store: Store, cache: Cache) -> list[WorkItemResponse]:
    """List all work items, newest first."""
    return ItemService(store, cache).list_items()


@router.post("", response_model=ItemCreated, status_code=status.HTTP_201_CREATED)
async def create_item(
    data: WorkItemCreate,
    store: Store,
    cache: Cache,
    current_user: CurrentUser,
) -> ItemCreated:
    """Create a work item.

    Only the assigned id is returned; the item itself appears in listings
    once the store has pushed it.

    Args:
        data: Item fields.
        store: Item store.
        cache: Item cache.
        current_user: Signed-in identity.

    Returns:
        ItemCreated: Assigned identifier.
    """
    item_id = await ItemService(store, cache).create_item(data)
    return ItemCreated(id=item_id)


@router.post("/bulk-delete", response_model=BulkDeleteResult)
async def bulk_delete(
    data: BulkDeleteRequest,
    store: Store,
    cache: Cache,
    current_user: CurrentUser,
) -> BulkDeleteResult:
    """Delete a selection of work items."""
    return await ItemService(store, cache).bulk_delete(data.ids)


@router.get("/{item_id}", response_model=WorkItemResponse)
async def get_item(item_id: str, store: Store, cache: Cache) -> WorkItemResponse:
    """Get a work item by id."""
    return ItemService(store, cache).get_item(item_id)


@router.get("/{item_id}/summary", response_class=PlainTextResponse)
async def get_item_summary(item_id: str, store: Store, cache: Cache) -> str:
    """Get the copyable text summary of a work item."""
    return build_summary(ItemService(store, cache).get_item(item_id))


@router.patch("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_item(
    item_id: str,
    data: WorkItemUpdate,
    store: Store,
    cache: Cache,
    current_user: CurrentUser,
) -> None:
    """Update a work item."""
    await ItemService(store, cache).update_item(item_id, data)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: str,
    store: Store,
    cache: Cache,
    current_user: CurrentUser,
) -> None:
    """Delete a work item."""
    await ItemService(store, cache).delete_item(item_id)
