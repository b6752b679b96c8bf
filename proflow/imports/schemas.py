"""Pydantic schemas for spreadsheet import."""

from enum import Enum

from pydantic import BaseModel, Field


class ImportState(str, Enum):
    """Stages of one import run."""

    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    RECONCILING = "reconciling"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class ColumnMap(BaseModel):
    """Zero-based column index per semantic role, -1 when not detected.

    One column may satisfy several roles.
    """

    title: int = -1
    client: int = -1
    stage: int = -1
    priority: int = -1
    duration: int = -1
    start: int = -1


class ImportRequest(BaseModel):
    """Schema for importing from a shared spreadsheet link."""

    url: str = Field(..., min_length=1, max_length=2048)


class ImportReport(BaseModel):
    """Outcome of an import run.

    Attributes:
        state: Final state (done or failed).
        created_count: Items created in the store.
        skipped_count: Data rows rejected or already present.
        message: Human-readable status line.
        source_url: URL as entered by the user.
        export_url: CSV export URL actually fetched.
        columns: Detected column map, when the header was reached.
    """

    state: ImportState = ImportState.IDLE
    created_count: int = 0
    skipped_count: int = 0
    message: str = ""
    source_url: str | None = None
    export_url: str | None = None
    columns: ColumnMap | None = None


class SavedSource(BaseModel):
    """The remembered import link."""

    url: str | None = None
