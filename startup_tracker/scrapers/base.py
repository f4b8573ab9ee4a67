"""
Base scraper class for the Startup Tracker.

Provides common functionality for all source scrapers including the shared
HTTP client, LinkedIn lookup, candidate construction and run statistics.
"""

import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..utils.logging import get_logger
from .http_client import HTTPClientManager
from .linkedin import LinkedInResolver
from .records import NOT_FOUND, StartupCandidate


class BaseScraper(ABC):
    """Abstract base class for all source scrapers."""

    def __init__(self, source_name: str, http_client: HTTPClientManager, linkedin: LinkedInResolver):
        self.source_name = source_name
        self.http_client = http_client
        self.linkedin = linkedin
        self.logger = get_logger(f"{__name__}.{source_name}")
        self.stats = self._fresh_stats()

    @staticmethod
    def _fresh_stats() -> Dict[str, Any]:
        return {
            'pages_fetched': 0,
            'candidates_found': 0,
            'items_skipped': 0,
            'errors': 0,
            'start_time': None,
            'end_time': None,
        }

    @abstractmethod
    async def scrape(self) -> List[StartupCandidate]:
        """
        Main scraping method to be implemented by subclasses.

        Each call is an independent run with its own seen-names set.

        Returns:
            Validated, deduplicated candidates in discovery order
        """

    async def run(self) -> List[StartupCandidate]:
        """Run one scrape with timing and a summary log line."""
        self.stats = self._fresh_stats()
        self.stats['start_time'] = datetime.now()
        started = time.monotonic()
        try:
            candidates = await self.scrape()
        except Exception as e:
            self.stats['errors'] += 1
            self.logger.error("Scrape failed", source=self.source_name, error=str(e))
            raise
        finally:
            self.stats['end_time'] = datetime.now()

        self.stats['candidates_found'] = len(candidates)
        self.logger.info(
            "Scrape finished",
            source=self.source_name,
            candidates=len(candidates),
            errors=self.stats['errors'],
            seconds=round(time.monotonic() - started, 2),
        )
        return candidates

    async def build_candidate(self, name: str, website: Optional[str] = None) -> StartupCandidate:
        """Create a candidate, attaching the best-effort LinkedIn URL."""
        return StartupCandidate(
            name=name,
            website=website or NOT_FOUND,
            linkedin_url=await self.linkedin.resolve(name),
            source=self.source_name,
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get scraping statistics."""
        stats = self.stats.copy()

        if stats['start_time']:
            end = stats['end_time'] or datetime.now()
            stats['duration_seconds'] = (end - stats['start_time']).total_seconds()

        return stats

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(source='{self.source_name}')>"
