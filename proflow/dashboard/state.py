"""Explicit dashboard state and its transitions.

All UI selections (view, filters, selection, expanded orders, focus) live
in one ``DashboardState`` owned by a ``DashboardController``; nothing else
mutates them.
"""

from dataclasses import dataclass, field

from proflow.dashboard.schemas import SmartFilter, ViewName
from proflow.db.models import Stage
from proflow.items.schemas import WorkItemResponse
from proflow.timeline.dates import add_days, today_iso
from proflow.timeline.schemas import GroupedOrder

ALL_STAGES = "all"
FOCUS_LEAD_DAYS = 3
DEFAULT_LOOKBACK_DAYS = 7


def _default_view_start() -> str:
    return add_days(today_iso(), -DEFAULT_LOOKBACK_DAYS)


@dataclass
class DashboardState:
    """Everything the dashboard remembers between interactions.

    Attributes:
        view: Active view.
        filter_stage: Stage id or "all".
        smart_filter: Status quick filter.
        search_query: Free-text search over title, client and task.
        selected_items: Ids selected for bulk actions.
        expanded_orders: Order titles expanded in the timeline.
        active_item_id: Highlighted item or order.
        view_start_date: First day shown on the timeline (ISO).
    """

    view: ViewName = ViewName.GANTT
    filter_stage: str = ALL_STAGES
    smart_filter: SmartFilter = SmartFilter.ALL
    search_query: str = ""
    selected_items: set[str] = field(default_factory=set)
    expanded_orders: set[str] = field(default_factory=set)
    active_item_id: str | None = None
    view_start_date: str = field(default_factory=_default_view_start)


class DashboardController:
    """Owns a DashboardState and applies named transitions to it.

    The dashboard route replays query parameters through these transitions on
    each request. A client that keeps a controller between interactions also
    uses ``clear_selection`` after a bulk action.
    """

    def __init__(self, state: DashboardState | None = None):
        self.state = state or DashboardState()

    def set_view(self, view: ViewName | str) -> None:
        self.state.view = ViewName(view)

    def set_stage_filter(self, stage: Stage | str) -> None:
        """Filter by stage id, or "all" to clear."""
        value = stage.value if isinstance(stage, Stage) else stage
        if value != ALL_STAGES:
            Stage(value)
        self.state.filter_stage = value

    def set_smart_filter(self, smart_filter: SmartFilter | str) -> None:
        self.state.smart_filter = SmartFilter(smart_filter)

    def set_search(self, query: str) -> None:
        self.state.search_query = query or ""

    def set_view_start(self, value: str) -> None:
        """Scroll the timeline to an ISO date."""
        self.state.view_start_date = add_days(value, 0)

    def toggle_selection(self, item_id: str) -> None:
        if item_id in self.state.selected_items:
            self.state.selected_items.discard(item_id)
        else:
            self.state.selected_items.add(item_id)

    def clear_selection(self) -> None:
        self.state.selected_items = set()

    def toggle_order(self, order_id: str) -> None:
        if order_id in self.state.expanded_orders:
            self.state.expanded_orders.discard(order_id)
        else:
            self.state.expanded_orders.add(order_id)

    def focus_item(self, item: WorkItemResponse) -> None:
        """Highlight an item and scroll the timeline to just before it."""
        if item.id:
            self.state.active_item_id = item.id
        self.state.view_start_date = add_days(item.start_date, -FOCUS_LEAD_DAYS)

    def focus_order(self, group: GroupedOrder) -> None:
        """Toggle an order; when it opens, highlight it and scroll to it."""
        was_expanded = group.id in self.state.expanded_orders
        self.toggle_order(group.id)
        if not was_expanded:
            self.state.active_item_id = group.id
            self.state.view_start_date = add_days(group.min_start, -FOCUS_LEAD_DAYS)
