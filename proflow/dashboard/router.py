"""Dashboard API routes."""

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from proflow.dashboard.schemas import DashboardResponse, SmartFilter, ViewName
from proflow.dashboard.state import ALL_STAGES, DashboardController
from proflow.dashboard.views import build_dashboard
from proflow.dependencies import Cache
from proflow.items.schemas import WorkItemResponse
from proflow.timeline.grouping import group_by_order

router = APIRouter()


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    cache: Cache,
    view: ViewName = ViewName.GANTT,
    stage: str = ALL_STAGES,
    smart: SmartFilter = SmartFilter.ALL,
    q: str = "",
    expanded: Annotated[list[str] | None, Query()] = None,
    start: str | None = None,
    selected: Annotated[list[str] | None, Query()] = None,
    focus: str | None = None,
) -> DashboardResponse:
    """Get stats and the requested view of the current items.

    Args:
        cache: Item cache.
        view: gantt, board or list.
        stage: Stage id filter, or "all".
        smart: Status quick filter.
        q: Search text.
        expanded: Order titles expanded in the timeline.
        start: First day shown on the timeline.
        selected: Item ids selected for bulk actions.
        focus: Item id or order title to highlight and scroll to. Focusing an
            order toggles its expansion, like clicking it.

    Returns:
        DashboardResponse: Dashboard payload.
    """
    items = cache.items
    controller = DashboardController()
    controller.set_view(view)
    try:
        controller.set_stage_filter(stage)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown stage '{stage}'",
        ) from e
    controller.set_smart_filter(smart)
    controller.set_search(q)
    for order_id in dict.fromkeys(expanded or []):
        controller.toggle_order(order_id)
    if start:
        try:
            controller.set_view_start(start)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid start date '{start}'",
            ) from e
    for item_id in dict.fromkeys(selected or []):
        controller.toggle_selection(item_id)
    if focus:
        _apply_focus(controller, items, focus)

    return build_dashboard(items, controller.state, loading=cache.loading)


def _apply_focus(
    controller: DashboardController, items: list[WorkItemResponse], target: str
) -> None:
    """Focus an item by id, or else an order by title.

    Raises:
        HTTPException: If neither an item nor an order matches.
    """
    item = next((i for i in items if i.id == target), None)
    if item is not None:
        controller.focus_item(item)
        return

    group = next((g for g in group_by_order(items) if g.id == target), None)
    if group is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Nothing to focus for '{target}'",
        )
    controller.focus_order(group)
