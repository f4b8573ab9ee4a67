"""
Ingestion Service - one full refresh cycle.

Runs the scraper service, normalizes the merged candidates into rows, upserts
them by name and reports the stored total.
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.orm import sessionmaker

from ..database.connection import get_db
from ..database.repositories import StartupRepository
from ..scrapers.records import NOT_FOUND, StartupCandidate
from ..scrapers.scraper_service import ScraperService
from ..utils.logging import get_logger

logger = get_logger(__name__)

NO_NEW_MESSAGE = "No new startups found"
COMPLETED_MESSAGE = "Scrape completed successfully"


@dataclass
class IngestionSummary:
    """Outcome of a refresh."""
    new_count: int
    total_count: int
    inserted: int = 0
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return NO_NEW_MESSAGE if self.new_count == 0 else COMPLETED_MESSAGE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "newCount": self.new_count,
            "totalCount": self.total_count,
            "message": self.message,
            "inserted": self.inserted,
            "stats": self.stats,
        }


def to_row(candidate: StartupCandidate, created_at: datetime) -> Dict[str, Any]:
    """Normalize a candidate into a storage row, filling sentinels for missing fields."""
    return {
        "name": candidate.name or "Unknown",
        "website": candidate.website or NOT_FOUND,
        "linkedin_url": candidate.linkedin_url or NOT_FOUND,
        "source": candidate.source,
        "created_at": created_at,
    }


class IngestionService:
    """Orchestrates scrape, upsert and count."""

    def __init__(self, scraper_service: ScraperService, session_factory: sessionmaker):
        self.scraper_service = scraper_service
        self.session_factory = session_factory

    def store(self, rows: List[Dict[str, Any]]) -> Dict[str, int]:
        """Upsert rows and count the table in one transaction."""
        with get_db(self.session_factory) as session:
            repo = StartupRepository(session)
            inserted = repo.upsert_many(rows) if rows else 0
            total = repo.count()
        return {"inserted": inserted, "total": total}

    async def refresh(self) -> IngestionSummary:
        """
        Run one refresh cycle.

        Returns:
            Summary with the number of scraped candidates and the stored total

        Raises:
            Any scraping or storage error; nothing is committed in that case
        """
        started = time.monotonic()
        result = await self.scraper_service.scrape_all()
        logger.info("Scraped startups", count=len(result.startups))

        now = datetime.now(timezone.utc)
        rows = [to_row(candidate, now) for candidate in result.startups]
        # Sync SQLAlchemy I/O stays off the event loop
        loop = asyncio.get_running_loop()
        stored = await loop.run_in_executor(None, self.store, rows)

        summary = IngestionSummary(
            new_count=len(rows),
            total_count=stored["total"],
            inserted=stored["inserted"],
            stats=result.stats,
        )
        logger.info(
            "Refresh completed",
            new_count=summary.new_count,
            inserted=summary.inserted,
            total_count=summary.total_count,
            seconds=round(time.monotonic() - started, 2),
        )
        return summary
