"""Schemas for dashboard views."""

from enum import Enum

from pydantic import Field

from proflow.db.models import Stage
from proflow.items.schemas import CamelModel, WorkItemResponse
from proflow.timeline.schemas import GroupedOrder, StatData


class ViewName(str, Enum):
    """Switchable dashboard views."""

    GANTT = "gantt"
    BOARD = "board"
    LIST = "list"


class SmartFilter(str, Enum):
    """Status-based quick filter."""

    ALL = "all"
    OVERDUE = "overdue"  # overdue only
    ACTIVE = "active"  # active or overdue


class BoardColumn(CamelModel):
    """One stage column of the board view."""

    stage: Stage
    label: str
    items: list[WorkItemResponse] = Field(default_factory=list)


class GanttGroup(GroupedOrder):
    """Grouped order with its expansion state."""

    expanded: bool = False


class DashboardResponse(CamelModel):
    """Stats plus the model of the requested view."""

    view: ViewName
    loading: bool = False
    stats: StatData
    view_start_date: str
    selected_items: list[str] = Field(default_factory=list)
    active_item_id: str | None = None
    items: list[WorkItemResponse] = Field(default_factory=list)
    groups: list[GanttGroup] = Field(default_factory=list)
    columns: list[BoardColumn] = Field(default_factory=list)
