"""
Scraper Service - runs every source scraper and merges their results.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import Config
from ..utils.logging import get_logger
from .base import BaseScraper
from .directory import DirectoryScraper
from .http_client import HTTPClientManager
from .linkedin import LinkedInResolver
from .portfolio import PortfolioScraper
from .rate_limiter import RateLimiter
from .records import StartupCandidate

logger = get_logger(__name__)


def build_fetch_limiter(config: Config) -> RateLimiter:
    """The limiter for the fetch proxy; share one instance across every refresh."""
    return RateLimiter(config.scraping.requests_per_second, name="fetch-proxy")


@dataclass
class AggregationResult:
    """Merged output of one scrape run."""
    startups: List[StartupCandidate]
    stats: Dict[str, int] = field(default_factory=dict)
    execution_time: float = 0.0


class ScraperService:
    """
    Coordinates the source scrapers.

    Both scrapers fetch through the same proxy service, so they share one
    RateLimiter and one HTTP client. Pass the application's limiter in so
    overlapping runs also share the proxy's rate budget.
    """

    def __init__(
        self,
        config: Config,
        http_client: Optional[HTTPClientManager] = None,
        rate_limiter: Optional[RateLimiter] = None
    ):
        self.config = config
        self.rate_limiter = rate_limiter or build_fetch_limiter(config)
        self.http_client = http_client or HTTPClientManager(config.scraping, self.rate_limiter, config.proxy)
        self.linkedin = LinkedInResolver(config.linkedin, self.http_client)
        self.scrapers: Dict[str, BaseScraper] = {}

        self._initialize_scrapers()

    def _initialize_scrapers(self):
        sources = self.config.sources
        if sources.portfolio.enabled:
            self.scrapers['portfolio'] = PortfolioScraper(sources.portfolio, self.http_client, self.linkedin)
        if sources.directory.enabled:
            self.scrapers['directory'] = DirectoryScraper(
                sources.directory, self.http_client, self.linkedin, self.config.scraping
            )
        logger.info("Scraper service initialized", scrapers=list(self.scrapers))

    async def scrape_all(self) -> AggregationResult:
        """
        Run all scrapers concurrently and concatenate their results.

        If any scraper raises, the others are cancelled, their partial results
        are discarded and the error propagates.
        """
        start_time = time.monotonic()
        names = list(self.scrapers)

        await self.http_client.initialize()
        tasks = [asyncio.ensure_future(self.scrapers[name].run()) for name in names]
        try:
            results = await asyncio.gather(*tasks)
        except Exception as e:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.error("Aggregation failed", error=str(e))
            raise
        finally:
            await self.http_client.cleanup()

        startups: List[StartupCandidate] = []
        stats: Dict[str, int] = {}
        for name, found in zip(names, results):
            stats[name] = len(found)
            startups.extend(found)
        stats['total'] = len(startups)
        stats['errors'] = sum(scraper.stats['errors'] for scraper in self.scrapers.values())

        execution_time = time.monotonic() - start_time
        logger.info("Scraping statistics", execution_seconds=round(execution_time, 2), **stats)

        return AggregationResult(startups=startups, stats=stats, execution_time=execution_time)

    def get_scraping_status(self) -> Dict[str, Any]:
        """Get configured sources and the last run's statistics."""
        return {
            'available_sources': list(self.scrapers),
            'scrapers': {name: scraper.get_stats() for name, scraper in self.scrapers.items()},
            'http': self.http_client.get_stats(),
        }
