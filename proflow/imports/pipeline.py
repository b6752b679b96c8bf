"""Spreadsheet import pipeline.

A run moves through fetching, parsing, reconciling and persisting, and ends
in ``done`` or ``failed``. Failures never escape ``run``: they are turned into
the report message so the caller only has to display it.

Example usage:
    pipeline = ImportPipeline(store, preferences=PreferenceService(db))
    report = await pipeline.run(url, existing_items=cache.items)
"""

import logging
import time
from collections.abc import Sequence
from datetime import date

from proflow.errors import FormatError, ProFlowError, StoreError
from proflow.imports.parsers import infer_columns, normalize_row, parse_line, split_lines
from proflow.imports.preferences import PreferenceService
from proflow.imports.schemas import ImportReport, ImportState
from proflow.imports.sheets import SheetFetcher, ensure_csv_body, to_csv_export_url
from proflow.items.schemas import WorkItemDocument, WorkItemResponse
from proflow.store.base import ItemStore

logger = logging.getLogger(__name__)

NO_NEW_DATA_MESSAGE = "No new data found or items already exist."


class ImportPipeline:
    """Fetch, parse, reconcile and persist spreadsheet rows as work items.

    Duplicate detection compares each row against the items known before
    the run started; two identical rows in the same sheet are both created.

    Attributes:
        store: Destination item store.
        fetcher: CSV fetcher.
        preferences: Where the last used link is remembered (optional).
        state: Current state of the latest run.
    """

    def __init__(
        self,
        store: ItemStore,
        fetcher: SheetFetcher | None = None,
        preferences: PreferenceService | None = None,
    ):
        self.store = store
        self.fetcher = fetcher or SheetFetcher()
        self.preferences = preferences
        self.state = ImportState.IDLE

    def _transition(self, state: ImportState) -> None:
        logger.debug(f"Import state {self.state.value} -> {state.value}")
        self.state = state

    async def run(
        self,
        url: str,
        existing_items: Sequence[WorkItemResponse],
        today: date | None = None,
    ) -> ImportReport:
        """Import a shared spreadsheet link.

        Args:
            url: Share link or CSV export link.
            existing_items: Snapshot of stored items for duplicate detection.
            today: Fallback start date for rows without one.

        Returns:
            ImportReport: Final state, counts and status message.
        """
        self.state = ImportState.IDLE
        report = ImportReport(source_url=url)
        try:
            if not url or not url.strip():
                raise FormatError("No import link provided.")
            url = url.strip()
            report.export_url = to_csv_export_url(url)
            if self.preferences is not None:
                self.preferences.save_source(url)

            self._transition(ImportState.FETCHING)
            text = await self.fetcher.fetch(report.export_url)
            ensure_csv_body(text)
            return await self._import_lines(split_lines(text), existing_items, report, today)
        except ProFlowError as e:
            return self._fail(report, e)

    async def run_text(
        self,
        text: str,
        existing_items: Sequence[WorkItemResponse],
        today: date | None = None,
    ) -> ImportReport:
        """Import CSV text already in hand (e.g. an uploaded file)."""
        self.state = ImportState.IDLE
        report = ImportReport()
        try:
            ensure_csv_body(text)
            return await self._import_lines(split_lines(text), existing_items, report, today)
        except ProFlowError as e:
            return self._fail(report, e)

    async def run_rows(
        self,
        rows: Sequence[Sequence[str]],
        existing_items: Sequence[WorkItemResponse],
        today: date | None = None,
    ) -> ImportReport:
        """Import rows that are already split into cells (e.g. Excel)."""
        self.state = ImportState.IDLE
        report = ImportReport()
        try:
            self._transition(ImportState.PARSING)
            if len(rows) < 2:
                raise FormatError("CSV file is empty or missing data.")
            return await self._import_rows(
                list(rows[0]), [list(r) for r in rows[1:]], existing_items, report, today
            )
        except ProFlowError as e:
            return self._fail(report, e)

    async def _import_lines(
        self,
        lines: list[str],
        existing_items: Sequence[WorkItemResponse],
        report: ImportReport,
        today: date | None,
    ) -> ImportReport:
        self._transition(ImportState.PARSING)
        if len(lines) < 2:
            raise FormatError("CSV file is empty or missing data.")
        return await self._import_rows(
            parse_line(lines[0]),
            [parse_line(line) for line in lines[1:]],
            existing_items,
            report,
            today,
        )

    async def _import_rows(
        self,
        headers: list[str],
        data_rows: list[list[str]],
        existing_items: Sequence[WorkItemResponse],
        report: ImportReport,
        today: date | None,
    ) -> ImportReport:
        column_map = infer_columns(headers)
        report.columns = column_map
        logger.info(f"Detected import columns: {column_map.model_dump()}")

        self._transition(ImportState.RECONCILING)
        snapshot = list(existing_items)
        now_ms = int(time.time() * 1000)
        candidates: list[WorkItemDocument] = []
        for cols in data_rows:
            candidate = normalize_row(cols, column_map, snapshot, today=today, now_ms=now_ms)
            if candidate is not None:
                candidates.append(candidate)
        report.skipped_count = len(data_rows) - len(candidates)

        if not candidates:
            self._transition(ImportState.DONE)
            report.state = self.state
            report.message = NO_NEW_DATA_MESSAGE
            logger.info("Import finished with no new rows")
            return report

        self._transition(ImportState.PERSISTING)
        results = await self.store.create_many(candidates)
        failures = [r for r in results if isinstance(r, Exception)]
        report.created_count = len(results) - len(failures)
        if failures:
            raise StoreError(
                f"{len(failures)} of {len(candidates)} items could not be saved "
                f"({report.created_count} saved): {failures[0]}"
            )

        self._transition(ImportState.DONE)
        report.state = self.state
        report.message = f"Success! Added {report.created_count} new items."
        logger.info(f"Imported {report.created_count} items, skipped {report.skipped_count}")
        return report

    def _fail(self, report: ImportReport, error: ProFlowError) -> ImportReport:
        self._transition(ImportState.FAILED)
        report.state = self.state
        report.message = f"Error: {error.message}"
        logger.warning(f"Import failed: {error.message}")
        return report
