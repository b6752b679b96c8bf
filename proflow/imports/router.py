"""Imports API routes."""

import logging
from typing import Annotated
from zipfile import BadZipFile

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from proflow.dependencies import Cache, CurrentUser, Store, get_db
from proflow.imports.parsers import generate_csv_template, parse_excel_rows
from proflow.imports.pipeline import ImportPipeline
from proflow.imports.preferences import PreferenceService
from proflow.imports.schemas import ImportReport, ImportRequest, SavedSource
from proflow.imports.sheets import SheetFetcher

logger = logging.getLogger(__name__)

router = APIRouter()


def get_fetcher() -> SheetFetcher:
    """Get the sheet fetcher."""
    return SheetFetcher()


@router.post("/sheet", response_model=ImportReport)
async def import_sheet(
    data: ImportRequest,
    store: Store,
    cache: Cache,
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
    fetcher: Annotated[SheetFetcher, Depends(get_fetcher)],
) -> ImportReport:
    """Import work items from a shared spreadsheet link.

    The link is remembered for the next session. Failures are reported in
    the returned status rather than as HTTP errors.

    Args:
        data: Link to import.
        store: Item store.
        cache: Item cache (duplicate detection snapshot).
        current_user: Signed-in identity.
        db: Database session.
        fetcher: Sheet fetcher.

    Returns:
        ImportReport: Outcome of the run.
    """
    logger.info(f"Sheet import requested by {current_user.user_id}")
    pipeline = ImportPipeline(store, fetcher=fetcher, preferences=PreferenceService(db))
    return await pipeline.run(data.url, existing_items=cache.items)


@router.post("/upload", response_model=ImportReport)
async def import_upload(
    store: Store,
    cache: Cache,
    current_user: CurrentUser,
    file: UploadFile = File(...),
) -> ImportReport:
    """Import work items from an uploaded CSV or Excel file.

    Args:
        store: Item store.
        cache: Item cache.
        current_user: Signed-in identity.
        file: CSV or Excel file.

    Returns:
        ImportReport: Outcome of the run.

    Raises:
        HTTPException: If file format is unsupported.
    """
    filename = (file.filename or "").lower()
    pipeline = ImportPipeline(store)
    logger.info(f"File import of '{file.filename}' requested by {current_user.user_id}")

    if filename.endswith(".csv"):
        content = (await file.read()).decode("utf-8-sig", errors="replace")
        return await pipeline.run_text(content, existing_items=cache.items)
    if filename.endswith(".xlsx"):
        try:
            rows = parse_excel_rows(file.file)
        except (ValueError, BadZipFile) as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Could not read Excel file: {e}",
            ) from e
        return await pipeline.run_rows(rows, existing_items=cache.items)

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Unsupported file format. Use CSV or Excel (.xlsx)",
    )


@router.get("/source", response_model=SavedSource)
async def get_saved_source(db: Annotated[Session, Depends(get_db)]) -> SavedSource:
    """Return the remembered import link."""
    return SavedSource(url=PreferenceService(db).get_saved_source())


@router.delete("/source", status_code=status.HTTP_204_NO_CONTENT)
async def clear_saved_source(
    current_user: CurrentUser,
    db: Annotated[Session, Depends(get_db)],
) -> None:
    """Forget the remembered import link (unlink the sheet)."""
    PreferenceService(db).clear_saved_source()


@router.get("/template")
async def download_template() -> Response:
    """Download a CSV template with recognized headers."""
    return Response(
        content=generate_csv_template(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=proflow_import_template.csv"},
    )
