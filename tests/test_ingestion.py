"""
IngestionService tests
"""

import threading
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from startup_tracker.database.connection import get_db
from startup_tracker.database.repositories import StartupRepository
from startup_tracker.scrapers.exceptions import NetworkError
from startup_tracker.scrapers.records import StartupCandidate
from startup_tracker.scrapers.scraper_service import AggregationResult
from startup_tracker.services.ingestion import IngestionService, IngestionSummary, to_row


def fake_scraper_service(*candidates, error=None):
    service = MagicMock()
    if error is not None:
        service.scrape_all = AsyncMock(side_effect=error)
    else:
        service.scrape_all = AsyncMock(return_value=AggregationResult(
            startups=list(candidates),
            stats={"portfolio": len(candidates), "directory": 0, "total": len(candidates), "errors": 0},
        ))
    return service


class TestIngestionService:

    @pytest.mark.asyncio
    async def test_refresh_stores_and_reports(self, session_factory):
        service = IngestionService(
            fake_scraper_service(
                StartupCandidate("Acme", "https://acme.io", source="portfolio"),
                StartupCandidate("Beta", source="directory"),
            ),
            session_factory,
        )

        summary = await service.refresh()

        assert summary.new_count == 2
        assert summary.total_count == 2
        assert summary.inserted == 2
        assert summary.message == "Scrape completed successfully"

    @pytest.mark.asyncio
    async def test_cross_source_duplicates_collapse_on_name(self, session_factory):
        service = IngestionService(
            fake_scraper_service(
                StartupCandidate("Acme", source="portfolio"),
                StartupCandidate("Acme", source="directory"),
            ),
            session_factory,
        )

        summary = await service.refresh()

        assert summary.new_count == 2
        assert summary.total_count == 1
        with get_db(session_factory) as session:
            assert StartupRepository(session).find_one_by(name="Acme").source == "portfolio"

    @pytest.mark.asyncio
    async def test_repeat_refresh_is_idempotent(self, session_factory):
        candidates = [StartupCandidate("Acme"), StartupCandidate("Beta")]

        first = await IngestionService(fake_scraper_service(*candidates), session_factory).refresh()
        second = await IngestionService(fake_scraper_service(*candidates), session_factory).refresh()

        assert first.total_count == second.total_count == 2
        assert second.inserted == 0

    @pytest.mark.asyncio
    async def test_store_runs_off_the_event_loop_thread(self, session_factory, monkeypatch):
        service = IngestionService(fake_scraper_service(StartupCandidate("Acme")), session_factory)
        store = service.store
        threads = []

        def recording_store(rows):
            threads.append(threading.get_ident())
            return store(rows)

        monkeypatch.setattr(service, "store", recording_store)

        summary = await service.refresh()

        assert summary.total_count == 1
        assert threads and threads[0] != threading.get_ident()

    @pytest.mark.asyncio
    async def test_nothing_scraped(self, session_factory):
        summary = await IngestionService(fake_scraper_service(), session_factory).refresh()

        assert summary.new_count == 0
        assert summary.total_count == 0
        assert summary.message == "No new startups found"

    @pytest.mark.asyncio
    async def test_scrape_failure_stores_nothing(self, session_factory):
        service = IngestionService(fake_scraper_service(error=NetworkError("down")), session_factory)

        with pytest.raises(NetworkError):
            await service.refresh()

        with get_db(session_factory) as session:
            assert StartupRepository(session).count() == 0


class TestRows:

    def test_to_row_fills_sentinels(self):
        now = datetime.now(timezone.utc)
        candidate = StartupCandidate(name="", website="", linkedin_url="")

        assert to_row(candidate, now) == {
            "name": "Unknown",
            "website": "not found",
            "linkedin_url": "not found",
            "source": None,
            "created_at": now,
        }

    def test_summary_payload(self):
        payload = IngestionSummary(new_count=3, total_count=10, inserted=1).to_dict()

        assert payload["success"] is True
        assert payload["newCount"] == 3
        assert payload["totalCount"] == 10
        assert payload["message"] == "Scrape completed successfully"
