"""CSV parsing and row normalization for spreadsheet import.

Everything here is pure: header detection, cell fallbacks, stage inference
and date/duration parsing. The rules are deliberately heuristic so that
loosely formatted team spreadsheets (Vietnamese or English headers) import
without a mapping step.
"""

import csv
import io
import re
import time
from collections.abc import Iterable, Sequence
from datetime import date
from typing import BinaryIO

import pandas as pd

from proflow.db.models import Stage
from proflow.imports.schemas import ColumnMap
from proflow.items.schemas import DEFAULT_CLIENT, DEFAULT_PRIORITY, WorkItemDocument
from proflow.tags.classifier import detect_tags

DEFAULT_DURATION = 5
DEFAULT_TASK_NAME = "Công việc mới"

# Header substrings per role (case-insensitive, first matching column wins)
COLUMN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "title": ("id", "mã", "tên", "loại hàng", "project"),
    "client": ("workstream", "khách", "client"),
    "stage": ("công việc", "task", "description", "mô tả", "status", "giai đoạn"),
    "priority": ("ưu tiên", "priority"),
    "duration": ("số ngày", "duration", "days"),
    "start": ("started", "bắt đầu", "date"),
}

# Column used when a role was not detected in the header
FALLBACK_COLUMNS: dict[str, int] = {
    "title": 0,
    "client": 1,
    "stage": 3,
}

# Ordered task-text rules, first match wins
STAGE_RULES: tuple[tuple[tuple[str, ...], Stage], ...] = (
    (("file", "lịch", "design", "thiết kế"), Stage.DESIGN),
    (("kỹ thuật", "eng"), Stage.ENGINEERING),
    (("sản xuất", "xưởng"), Stage.PRODUCTION),
    (("giao", "lắp"), Stage.PRODUCTION),
    (("đá", "kính", "cnc"), Stage.CNC),
    (("bảo hành", "warranty"), Stage.WARRANTY),
)

DAY_FIRST_DATE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})")
LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _clean_field(raw: str) -> str:
    """Strip one leading and one trailing quote, then whitespace."""
    if raw.startswith('"'):
        raw = raw[1:]
    if raw.endswith('"'):
        raw = raw[:-1]
    return raw.strip()


def parse_line(line: str) -> list[str]:
    """Split one CSV line on commas outside double quotes.

    Every ``"`` toggles the quoted state; escaped ``""`` pairs are not
    unescaped. This mirrors how the sheets have always been read, and the
    column heuristics depend on it.

    Args:
        line: Raw CSV line.

    Returns:
        list[str]: Cleaned field values.
    """
    fields = []
    start = 0
    in_quotes = False
    for i, char in enumerate(line):
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append(_clean_field(line[start:i]))
            start = i + 1
    fields.append(_clean_field(line[start:]))
    return fields


def split_lines(text: str) -> list[str]:
    """Split CSV text into non-blank lines.

    Args:
        text: Full CSV body.

    Returns:
        list[str]: Lines with trailing carriage returns removed.
    """
    return [line.rstrip("\r") for line in text.split("\n") if line.strip()]


def infer_columns(headers: Sequence[str]) -> ColumnMap:
    """Detect which column holds each role from the header row.

    Args:
        headers: Header cells.

    Returns:
        ColumnMap: Index per role, -1 when no header matched.
    """
    lowered = [h.lower() for h in headers]
    indices = {}
    for role, keywords in COLUMN_KEYWORDS.items():
        indices[role] = next(
            (i for i, header in enumerate(lowered) if any(k in header for k in keywords)),
            -1,
        )
    return ColumnMap(**indices)


def resolve_cell(cols: Sequence[str], column_map: ColumnMap, role: str) -> str:
    """Read the cell for a role, applying the positional fallback policy.

    Args:
        cols: Row cells.
        column_map: Detected columns.
        role: ColumnMap field name.

    Returns:
        str: Cell value, or empty string when the role has no usable column.
    """
    index = getattr(column_map, role)
    if index < 0:
        index = FALLBACK_COLUMNS.get(role, -1)
    if index < 0 or index >= len(cols):
        return ""
    return cols[index]


def resolve_stage(text: str | None) -> Stage:
    """Infer the workflow stage from task text.

    Args:
        text: Task description.

    Returns:
        Stage: First matching rule's stage, design if none match.
    """
    lower_text = (text or "").lower()
    for keywords, stage in STAGE_RULES:
        if any(keyword in lower_text for keyword in keywords):
            return stage
    return Stage.DESIGN


def parse_duration(value: str | None, default: int = DEFAULT_DURATION) -> int:
    """Parse a duration cell into a positive number of days.

    The leading integer is used ("7 ngày" -> 7) and its sign dropped.
    Zero, missing or non-numeric cells give ``default``.
    """
    match = LEADING_INT.match(value or "")
    if not match:
        return default
    return abs(int(match.group(1))) or default


def parse_start_date(value: str | None, today: date | None = None) -> str:
    """Parse a start date cell into an ISO date.

    ``D/M/YYYY`` and ``D-M-YYYY`` are read day first. Anything else goes
    through the generic pandas date parser. Unusable values, including
    relative words such as "today", give ``today``.

    Args:
        value: Raw cell.
        today: Fallback date.

    Returns:
        str: ISO date.
    """
    fallback = (today or date.today()).isoformat()
    if not value:
        return fallback

    match = DAY_FIRST_DATE.match(value)
    if match:
        day, month, year = (int(part) for part in match.groups())
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            pass

    # pandas resolves "today" and "now" against the clock; a date needs digits
    if not any(char.isdigit() for char in value):
        return fallback

    try:
        parsed = pd.to_datetime(value, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return fallback
    if pd.isna(parsed):
        return fallback
    return parsed.date().isoformat()


def is_duplicate(title: str, task_name: str, existing_items: Iterable) -> bool:
    """Check whether an item with the same title and task already exists."""
    return any(item.title == title and item.task_name == task_name for item in existing_items)


def normalize_row(
    cols: Sequence[str],
    column_map: ColumnMap,
    existing_items: Iterable,
    today: date | None = None,
    now_ms: int | None = None,
) -> WorkItemDocument | None:
    """Turn one CSV row into a work item candidate.

    Args:
        cols: Parsed row cells.
        column_map: Detected columns.
        existing_items: Items already in the store, for duplicate detection.
        today: Fallback start date.
        now_ms: Creation timestamp in epoch milliseconds.

    Returns:
        WorkItemDocument | None: Candidate, or None if the row is rejected
        (too short, no title, or already imported).
    """
    if len(cols) < 2:
        return None

    title = resolve_cell(cols, column_map, "title")
    if not title:
        return None

    client = resolve_cell(cols, column_map, "client") or DEFAULT_CLIENT
    task_text = resolve_cell(cols, column_map, "stage")

    if is_duplicate(title, task_text, existing_items):
        return None

    duration_cell = resolve_cell(cols, column_map, "duration")
    priority_cell = resolve_cell(cols, column_map, "priority")
    start_cell = resolve_cell(cols, column_map, "start")

    return WorkItemDocument(
        title=title,
        client=client,
        task_name=task_text or DEFAULT_TASK_NAME,
        stage=resolve_stage(task_text),
        tags=detect_tags(task_text),
        start_date=parse_start_date(start_cell, today),
        duration=parse_duration(duration_cell),
        priority=priority_cell or DEFAULT_PRIORITY,
        progress=0,
        created_at=now_ms if now_ms is not None else int(time.time() * 1000),
    )


def parse_excel_rows(file: BinaryIO) -> list[list[str]]:
    """Read the first sheet of an Excel workbook into rows of strings.

    Args:
        file: File-like object containing Excel data.

    Returns:
        list[list[str]]: Header row followed by data rows, blank rows dropped.
    """
    df = pd.read_excel(file, engine="openpyxl", header=None, dtype=str)

    rows = []
    for _, row in df.iterrows():
        cells = ["" if pd.isna(value) else str(value).strip() for value in row]
        if any(cells):
            rows.append(cells)
    return rows


def generate_csv_template() -> str:
    """Generate a CSV template whose headers the column detection recognizes.

    Returns:
        str: CSV template content.
    """
    headers = ["Mã dự án", "Khách hàng", "Ưu tiên", "Công việc", "Số ngày", "Bắt đầu"]
    example_rows = [
        ["DH-001", "Anh Minh", "High", "Thiết kế bản vẽ tủ bếp", "3", "05/03/2024"],
        ["DH-001", "Anh Minh", "Medium", "Cắt CNC ván MDF", "2", "08/03/2024"],
        ["DH-002", "Chị Lan", "Low", "Lắp đặt kính phòng tắm", "1", "12/03/2024"],
    ]

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(headers)
    for row in example_rows:
        writer.writerow(row)
    return output.getvalue()
