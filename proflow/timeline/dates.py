"""ISO date helpers for work item schedules."""

from datetime import date, datetime, timedelta

from proflow.timeline.schemas import ItemStatus


def _parse_date(value: str | date) -> date:
    """Parse an ISO date or datetime string into a calendar date.

    Raises:
        ValueError: If the value is not an ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def today_iso() -> str:
    """Return today's local date as an ISO string."""
    return date.today().isoformat()


def add_days(value: str | date, days: int) -> str:
    """Return the ISO date ``days`` calendar days after ``value``.

    Args:
        value: ISO date string or date.
        days: Number of days to add, may be negative.

    Returns:
        str: Resulting ISO date.

    Raises:
        ValueError: If ``value`` is not a valid date.
    """
    return (_parse_date(value) + timedelta(days=days)).isoformat()


def end_date(item) -> str:
    """Return the computed end date (start + duration) of an item."""
    return add_days(item.start_date, item.duration)


def format_for_display(value: str | None) -> str:
    """Format an ISO date as ``dd/mm`` for display.

    Unparseable input is returned unchanged.
    """
    if not value:
        return ""
    try:
        parsed = _parse_date(value)
    except ValueError:
        return value
    return parsed.strftime("%d/%m")


def classify_status(item, today: date | None = None) -> ItemStatus:
    """Classify an item as completed, overdue, active or upcoming.

    Completion takes priority over every date-based check. An item whose
    start date cannot be parsed is treated as upcoming.

    Args:
        item: Object with ``start_date``, ``duration`` and ``progress``.
        today: Reference date, defaults to the local current date.

    Returns:
        ItemStatus: Exactly one status.
    """
    if item.progress >= 100:
        return ItemStatus.COMPLETED

    today = today or date.today()
    try:
        start = _parse_date(item.start_date)
    except ValueError:
        return ItemStatus.UPCOMING
    end = start + timedelta(days=item.duration)

    if end < today:
        return ItemStatus.OVERDUE
    if start <= today <= end:
        return ItemStatus.ACTIVE
    return ItemStatus.UPCOMING
