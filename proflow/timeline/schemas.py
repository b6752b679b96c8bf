"""Schemas for timeline aggregates."""

from enum import Enum

from pydantic import Field

from proflow.items.schemas import CamelModel, WorkItemResponse


class ItemStatus(str, Enum):
    """Schedule status of a work item relative to today."""

    COMPLETED = "completed"  # progress reached 100
    OVERDUE = "overdue"  # end date passed without completion
    ACTIVE = "active"  # today within [start, end]
    UPCOMING = "upcoming"  # starts in the future


class GroupedOrder(CamelModel):
    """Work items sharing one order title.

    Attributes:
        id: Group key (the shared title).
        title: Order title.
        client: Client of the first member.
        items: Member items in input order.
        min_start: Earliest member start date.
        max_end: Latest member end date.
        total_progress: Rounded mean of member progress.
    """

    id: str
    title: str
    client: str
    items: list[WorkItemResponse] = Field(default_factory=list)
    min_start: str
    max_end: str
    total_progress: int = 0


class StatData(CamelModel):
    """Headline counters for the dashboard."""

    total: int = 0
    overdue: int = 0
    active: int = 0
    completed: int = 0
