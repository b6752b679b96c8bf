"""Pydantic schemas for work items.

Field names are snake_case in Python and camelCase on the wire so that the
dashboard client can keep its document shape (``taskName``, ``startDate``...).
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from proflow.db.models import Stage
from proflow.tags.schemas import SmartTag

DEFAULT_CLIENT = "Unknown"
DEFAULT_PRIORITY = "Medium"


class CamelModel(BaseModel):
    """Base model serialising with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class WorkItemDocument(CamelModel):
    """A work item as persisted in the store, without its identifier."""

    title: str
    client: str = DEFAULT_CLIENT
    task_name: str = ""
    stage: Stage = Stage.DESIGN
    tags: list[SmartTag] = Field(default_factory=list)
    start_date: str
    duration: int = 5
    priority: str = DEFAULT_PRIORITY
    progress: int = 0
    created_at: int


class WorkItemResponse(WorkItemDocument):
    """A stored work item."""

    id: str


class WorkItemCreate(CamelModel):
    """Schema for creating a work item from the editor."""

    title: str = Field(..., min_length=1, max_length=255)
    client: str = Field(DEFAULT_CLIENT, max_length=255)
    task_name: str = ""
    stage: Stage = Stage.DESIGN
    start_date: date = Field(default_factory=date.today)
    duration: int = Field(5, ge=1)
    priority: str = Field(DEFAULT_PRIORITY, max_length=20)
    progress: int = Field(0, ge=0, le=100)


class WorkItemUpdate(CamelModel):
    """Schema for a partial work item update."""

    title: str | None = Field(None, min_length=1, max_length=255)
    client: str | None = Field(None, max_length=255)
    task_name: str | None = None
    stage: Stage | None = None
    start_date: date | None = None
    duration: int | None = Field(None, ge=1)
    priority: str | None = Field(None, max_length=20)
    progress: int | None = Field(None, ge=0, le=100)


class ItemCreated(CamelModel):
    """Identifier assigned by the store to a new item."""

    id: str


class BulkDeleteRequest(CamelModel):
    """Schema for deleting a selection of items."""

    ids: list[str] = Field(..., min_length=1)


class BulkDeleteResult(CamelModel):
    """Outcome of a bulk delete."""

    deleted_count: int
    failed_ids: list[str] = Field(default_factory=list)
