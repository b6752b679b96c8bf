"""Filtering and view model assembly for the dashboard."""

from collections.abc import Iterable
from datetime import date

from proflow.dashboard.schemas import (
    BoardColumn,
    DashboardResponse,
    GanttGroup,
    SmartFilter,
    ViewName,
)
from proflow.dashboard.state import ALL_STAGES, DashboardState
from proflow.db.models import STAGE_LABELS, Stage
from proflow.items.schemas import WorkItemResponse
from proflow.timeline.dates import classify_status
from proflow.timeline.grouping import compute_stats, group_by_order
from proflow.timeline.schemas import ItemStatus


def _matches_search(item: WorkItemResponse, query: str) -> bool:
    query = query.lower()
    return (
        query in (item.title or "").lower()
        or query in (item.client or "").lower()
        or query in (item.task_name or "").lower()
    )


def _matches_smart_filter(
    item: WorkItemResponse, smart_filter: SmartFilter, today: date | None
) -> bool:
    if smart_filter == SmartFilter.ALL:
        return True
    status = classify_status(item, today)
    if smart_filter == SmartFilter.OVERDUE:
        return status == ItemStatus.OVERDUE
    return status in (ItemStatus.ACTIVE, ItemStatus.OVERDUE)


def filter_items(
    items: Iterable[WorkItemResponse],
    state: DashboardState,
    today: date | None = None,
) -> list[WorkItemResponse]:
    """Apply stage, search and smart filters.

    Args:
        items: All known items.
        state: Dashboard state holding the filters.
        today: Reference date for status filters.

    Returns:
        list[WorkItemResponse]: Matching items in input order.
    """
    return [
        item
        for item in items
        if (state.filter_stage == ALL_STAGES or item.stage.value == state.filter_stage)
        and _matches_search(item, state.search_query)
        and _matches_smart_filter(item, state.smart_filter, today)
    ]


def build_board(items: Iterable[WorkItemResponse]) -> list[BoardColumn]:
    """Lay items out in one column per stage, in stage order."""
    columns = {stage: BoardColumn(stage=stage, label=STAGE_LABELS[stage]) for stage in Stage}
    for item in items:
        columns[item.stage].items.append(item)
    return list(columns.values())


def build_dashboard(
    items: list[WorkItemResponse],
    state: DashboardState,
    today: date | None = None,
    loading: bool = False,
) -> DashboardResponse:
    """Assemble stats and the active view's model.

    Stats always cover every item; the view only shows filtered ones.

    Args:
        items: All known items.
        state: Dashboard state.
        today: Reference date.
        loading: Whether the first snapshot is still pending.

    Returns:
        DashboardResponse: Dashboard payload.
    """
    visible = filter_items(items, state, today)
    response = DashboardResponse(
        view=state.view,
        loading=loading,
        stats=compute_stats(items, today),
        view_start_date=state.view_start_date,
        selected_items=[item.id for item in items if item.id in state.selected_items],
        active_item_id=state.active_item_id,
    )

    if state.view == ViewName.GANTT:
        response.groups = [
            GanttGroup(**group.model_dump(), expanded=group.id in state.expanded_orders)
            for group in group_by_order(visible)
        ]
    elif state.view == ViewName.BOARD:
        response.columns = build_board(visible)
    else:
        response.items = visible
    return response
