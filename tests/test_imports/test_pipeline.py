"""Tests for the spreadsheet import pipeline."""

from datetime import date

import pytest

from proflow.db.models import Stage
from proflow.errors import NetworkError, StoreError
from proflow.imports.pipeline import NO_NEW_DATA_MESSAGE, ImportPipeline
from proflow.imports.preferences import PreferenceService
from proflow.imports.schemas import ImportState
from proflow.store.sql import SqlItemStore

TODAY = date(2024, 3, 1)
SHARE_URL = "https://docs.google.com/spreadsheets/d/abc123/edit#gid=0"
EXPORT_URL = "https://docs.google.com/spreadsheets/d/abc123/export?format=csv"


class FakeFetcher:
    """Fetcher returning a canned body or raising a canned error."""

    def __init__(self, body: str = "", error: Exception | None = None):
        self.body = body
        self.error = error
        self.requested: list[str] = []

    async def fetch(self, export_url: str) -> str:
        self.requested.append(export_url)
        if self.error is not None:
            raise self.error
        return self.body


class FlakyStore(SqlItemStore):
    """Store that refuses documents titled BAD."""

    def _insert_document(self, document):
        if document.title == "BAD":
            raise StoreError("disk full")
        return super()._insert_document(document)


class TestRunSheet:
    """Tests for importing a shared sheet link."""

    @pytest.mark.asyncio
    async def test_skips_existing_and_creates_new(self, store, make_item):
        """Test only rows not already stored are created."""
        existing = [make_item(title="A", task_name="Sơn")]
        fetcher = FakeFetcher("Mã dự án,Khách hàng,Công việc\nA,C1,Sơn\nB,C2,Lắp đặt\n")
        pipeline = ImportPipeline(store, fetcher=fetcher)

        report = await pipeline.run(SHARE_URL, existing_items=existing, today=TODAY)

        assert report.state == ImportState.DONE
        assert pipeline.state == ImportState.DONE
        assert report.created_count == 1
        assert report.skipped_count == 1
        assert report.message == "Success! Added 1 new items."

        items = store.snapshot()
        assert len(items) == 1
        assert items[0].title == "B"
        assert items[0].client == "C2"
        assert items[0].task_name == "Lắp đặt"
        assert items[0].stage == Stage.PRODUCTION
        assert items[0].start_date == "2024-03-01"
        assert items[0].duration == 5
        assert items[0].progress == 0

    @pytest.mark.asyncio
    async def test_share_link_rewritten(self, store):
        """Test the share link is fetched as its CSV export."""
        fetcher = FakeFetcher("Mã dự án,Khách hàng\nA,C1\n")
        report = await ImportPipeline(store, fetcher=fetcher).run(SHARE_URL, existing_items=[])

        assert fetcher.requested == [EXPORT_URL]
        assert report.source_url == SHARE_URL
        assert report.export_url == EXPORT_URL

    @pytest.mark.asyncio
    async def test_link_saved_as_preference(self, store, db):
        """Test the entered link is remembered."""
        fetcher = FakeFetcher("Mã dự án,Khách hàng\nA,C1\n")
        pipeline = ImportPipeline(store, fetcher=fetcher, preferences=PreferenceService(db))

        await pipeline.run(f"  {SHARE_URL} ", existing_items=[])

        assert PreferenceService(db).get_saved_source() == SHARE_URL

    @pytest.mark.asyncio
    async def test_link_saved_even_when_fetch_fails(self, store, db):
        """Test the link is remembered before fetching."""
        fetcher = FakeFetcher(error=NetworkError("Network response was not ok: 404"))
        pipeline = ImportPipeline(store, fetcher=fetcher, preferences=PreferenceService(db))

        await pipeline.run(SHARE_URL, existing_items=[])

        assert PreferenceService(db).get_saved_source() == SHARE_URL

    @pytest.mark.asyncio
    async def test_html_body_rejected(self, store):
        """Test an HTML page instead of CSV fails the run."""
        fetcher = FakeFetcher("<!DOCTYPE html><html><body>Sign in</body></html>")
        report = await ImportPipeline(store, fetcher=fetcher).run(SHARE_URL, existing_items=[])

        assert report.state == ImportState.FAILED
        assert report.message.startswith("Error: HTML content detected")
        assert report.created_count == 0
        assert store.snapshot() == []

    @pytest.mark.asyncio
    async def test_html_body_with_leading_whitespace(self, store):
        """Test leading whitespace does not hide an HTML body."""
        fetcher = FakeFetcher('\n  <html lang="en"></html>')
        report = await ImportPipeline(store, fetcher=fetcher).run(SHARE_URL, existing_items=[])

        assert report.state == ImportState.FAILED

    @pytest.mark.asyncio
    async def test_header_only_rejected(self, store):
        """Test a body without data rows fails."""
        fetcher = FakeFetcher("Mã dự án,Khách hàng\n\n   \n")
        report = await ImportPipeline(store, fetcher=fetcher).run(SHARE_URL, existing_items=[])

        assert report.state == ImportState.FAILED
        assert report.message == "Error: CSV file is empty or missing data."

    @pytest.mark.asyncio
    async def test_network_error(self, store):
        """Test fetch failures end the run as failed."""
        fetcher = FakeFetcher(error=NetworkError("Network response was not ok: 404"))
        report = await ImportPipeline(store, fetcher=fetcher).run(SHARE_URL, existing_items=[])

        assert report.state == ImportState.FAILED
        assert report.message == "Error: Network response was not ok: 404"

    @pytest.mark.asyncio
    async def test_empty_link(self, store):
        """Test an empty link fails without fetching."""
        fetcher = FakeFetcher("unused")
        report = await ImportPipeline(store, fetcher=fetcher).run("   ", existing_items=[])

        assert report.state == ImportState.FAILED
        assert report.message == "Error: No import link provided."
        assert fetcher.requested == []

    @pytest.mark.asyncio
    async def test_no_new_rows(self, store, make_item):
        """Test a sheet with only known rows ends done with nothing added."""
        existing = [make_item(title="A", task_name="Sơn")]
        fetcher = FakeFetcher("Mã dự án,Khách hàng,Công việc\nA,C1,Sơn\n,C2,Lắp\n")
        report = await ImportPipeline(store, fetcher=fetcher).run(SHARE_URL, existing_items=existing)

        assert report.state == ImportState.DONE
        assert report.message == NO_NEW_DATA_MESSAGE
        assert report.created_count == 0
        assert report.skipped_count == 2

    @pytest.mark.asyncio
    async def test_rows_within_batch_not_deduplicated(self, store):
        """Test identical rows in one sheet are all created."""
        fetcher = FakeFetcher("Mã dự án,Khách hàng,Công việc\nB,C2,Sơn\nB,C2,Sơn\n")
        report = await ImportPipeline(store, fetcher=fetcher).run(SHARE_URL, existing_items=[])

        assert report.created_count == 2
        assert len(store.snapshot()) == 2

    @pytest.mark.asyncio
    async def test_rows_share_creation_time(self, store):
        """Test one batch is stamped with a single creation time."""
        fetcher = FakeFetcher("Mã dự án,Khách hàng\nA,C1\nB,C2\n")
        await ImportPipeline(store, fetcher=fetcher).run(SHARE_URL, existing_items=[])

        assert len({item.created_at for item in store.snapshot()}) == 1

    @pytest.mark.asyncio
    async def test_detected_columns_reported(self, store):
        """Test the column map is part of the report."""
        fetcher = FakeFetcher("Mã dự án,Khách hàng,Giai đoạn,Số ngày\nA,C1,Sơn,3\n")
        report = await ImportPipeline(store, fetcher=fetcher).run(SHARE_URL, existing_items=[])

        assert report.columns.model_dump() == {
            "title": 0,
            "client": 1,
            "stage": 2,
            "priority": -1,
            "duration": 3,
            "start": -1,
        }

    @pytest.mark.asyncio
    async def test_state_during_persist(self, store):
        """Test writes happen in the persisting state."""
        observed = []

        class ObservingStore(SqlItemStore):
            async def create_many(self, documents):
                observed.append(pipeline.state)
                return await super().create_many(documents)

        fetcher = FakeFetcher("Mã dự án,Khách hàng\nA,C1\n")
        pipeline = ImportPipeline(ObservingStore(store.session_factory), fetcher=fetcher)
        await pipeline.run(SHARE_URL, existing_items=[])

        assert observed == [ImportState.PERSISTING]

    @pytest.mark.asyncio
    async def test_partial_write_failure(self, store):
        """Test failed writes are reported and saved rows are kept."""
        fetcher = FakeFetcher("Mã dự án,Khách hàng\nGOOD,C1\nBAD,C2\n")
        flaky = FlakyStore(store.session_factory)
        report = await ImportPipeline(flaky, fetcher=fetcher).run(SHARE_URL, existing_items=[])

        assert report.state == ImportState.FAILED
        assert report.created_count == 1
        assert "1 of 2 items could not be saved" in report.message
        assert [item.title for item in store.snapshot()] == ["GOOD"]

    @pytest.mark.asyncio
    async def test_one_snapshot_per_batch(self, store):
        """Test subscribers are notified once for a whole import."""
        pushes = []
        store.subscribe(lambda items: pushes.append(len(items)))
        rows = "\n".join(f"DH-{n},Client {n}" for n in range(20))
        fetcher = FakeFetcher(f"Mã dự án,Khách hàng\n{rows}\n")

        report = await ImportPipeline(store, fetcher=fetcher).run(SHARE_URL, existing_items=[])

        assert report.created_count == 20
        assert pushes == [0, 20]

    @pytest.mark.asyncio
    async def test_pipeline_reusable_after_failure(self, store):
        """Test a new run starts fresh after a failed one."""
        fetcher = FakeFetcher("<html></html>")
        pipeline = ImportPipeline(store, fetcher=fetcher)
        await pipeline.run(SHARE_URL, existing_items=[])
        assert pipeline.state == ImportState.FAILED

        fetcher.body = "Mã dự án,Khách hàng\nA,C1\n"
        report = await pipeline.run(SHARE_URL, existing_items=[])
        assert report.state == ImportState.DONE

    @pytest.mark.asyncio
    async def test_cache_sees_items_after_push(self, store, cache):
        """Test imported items reach the cache through the subscription."""
        fetcher = FakeFetcher("Mã dự án,Khách hàng\nA,C1\n")
        await ImportPipeline(store, fetcher=fetcher).run(SHARE_URL, existing_items=cache.items)

        assert [item.title for item in cache.items] == ["A"]


class TestRunTextAndRows:
    """Tests for importing uploaded content."""

    @pytest.mark.asyncio
    async def test_run_text(self, store):
        """Test CSV text in hand is imported."""
        text = "Mã dự án,Khách hàng,Số ngày,Bắt đầu\r\nDH-1,Anh Minh,-7,05/03/2024\r\n"
        report = await ImportPipeline(store).run_text(text, existing_items=[])

        assert report.created_count == 1
        item = store.snapshot()[0]
        assert item.duration == 7
        assert item.start_date == "2024-03-05"

    @pytest.mark.asyncio
    async def test_run_text_rejects_html(self, store):
        """Test uploaded HTML is rejected."""
        report = await ImportPipeline(store).run_text("<!DOCTYPE html>", existing_items=[])
        assert report.state == ImportState.FAILED

    @pytest.mark.asyncio
    async def test_run_rows(self, store):
        """Test pre-split rows are imported."""
        rows = [
            ["Mã dự án", "Khách hàng", "Công việc"],
            ["DH-1", "Anh Minh", "Cắt đá bàn bếp"],
        ]
        report = await ImportPipeline(store).run_rows(rows, existing_items=[], today=TODAY)

        assert report.created_count == 1
        item = store.snapshot()[0]
        assert item.stage == Stage.CNC
        assert [tag.label for tag in item.tags] == ["Đá"]

    @pytest.mark.asyncio
    async def test_run_rows_header_only(self, store):
        """Test a header-only sheet fails."""
        report = await ImportPipeline(store).run_rows([["Mã dự án"]], existing_items=[])
        assert report.message == "Error: CSV file is empty or missing data."
