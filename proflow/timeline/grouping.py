"""Order grouping and dashboard statistics."""

import math
from collections.abc import Iterable
from datetime import date

from proflow.items.schemas import WorkItemResponse
from proflow.timeline.dates import classify_status, end_date
from proflow.timeline.schemas import GroupedOrder, ItemStatus, StatData


def group_by_order(items: Iterable[WorkItemResponse]) -> list[GroupedOrder]:
    """Group items sharing a title into orders.

    Groups keep the order in which their first member appears. Dates are ISO
    strings, so the earliest start and latest end compare lexically.

    Args:
        items: Work items, typically the filtered set being displayed.

    Returns:
        list[GroupedOrder]: One group per distinct title.
    """
    groups: dict[str, GroupedOrder] = {}

    for item in items:
        item_end = end_date(item)
        group = groups.get(item.title)
        if group is None:
            group = GroupedOrder(
                id=item.title,
                title=item.title,
                client=item.client,
                min_start=item.start_date,
                max_end=item_end,
            )
            groups[item.title] = group
        else:
            if item.start_date < group.min_start:
                group.min_start = item.start_date
            if item_end > group.max_end:
                group.max_end = item_end
        group.items.append(item)

    for group in groups.values():
        # Round half up
        mean = sum(i.progress for i in group.items) / len(group.items)
        group.total_progress = math.floor(mean + 0.5)

    return list(groups.values())


def compute_stats(items: Iterable[WorkItemResponse], today: date | None = None) -> StatData:
    """Count items per headline status.

    Args:
        items: All known work items (unfiltered).
        today: Reference date.

    Returns:
        StatData: Totals.
    """
    stats = StatData()
    for item in items:
        stats.total += 1
        status = classify_status(item, today)
        if status == ItemStatus.OVERDUE:
            stats.overdue += 1
        elif status == ItemStatus.ACTIVE:
            stats.active += 1
        if item.progress >= 100:
            stats.completed += 1
    return stats
