"""
Accelerator Directory API Scraper

Pages through a JSON company directory, one cohort ("batch") at a time.
The loop for a batch is fail-soft: it gives up on that batch after a run of
consecutive errors but never fails the whole scrape.
"""

import asyncio
from typing import Any, Dict, List

from ..config import DirectorySourceConfig, ScrapingConfig
from .base import BaseScraper
from .exceptions import ScrapingError
from .http_client import HTTPClientManager
from .linkedin import LinkedInResolver
from .records import SeenNames, StartupCandidate, validate_candidate

# Canonical pagination signal: a URL for the next page, or null on the last one.
NEXT_PAGE_FIELD = "nextPage"


class DirectoryScraper(BaseScraper):
    """Scraper for the paginated company directory API."""

    def __init__(
        self,
        config: DirectorySourceConfig,
        http_client: HTTPClientManager,
        linkedin: LinkedInResolver,
        scraping: ScrapingConfig
    ):
        super().__init__("directory", http_client, linkedin)
        self.config = config
        self.max_consecutive_errors = scraping.max_consecutive_errors
        self.page_retry_delay = scraping.page_retry_delay

    async def fetch_page(self, batch: str, page: int) -> Dict[str, Any]:
        """Fetch one page of a batch."""
        return await self.http_client.fetch_json(
            self.config.api_url,
            {"batch": batch, "page": page, "count": self.config.page_size},
        )

    async def scrape(self) -> List[StartupCandidate]:
        startups: List[StartupCandidate] = []
        seen = SeenNames()

        for batch in self.config.batches:
            try:
                await self._scrape_batch(batch, startups, seen)
            except Exception as e:
                self.stats['errors'] += 1
                self.logger.error("Batch abandoned", batch=batch, error=str(e))

        self.logger.info("Directory companies scraped", total=len(startups))
        return startups

    async def _scrape_batch(self, batch: str, startups: List[StartupCandidate], seen: SeenNames):
        page = 0
        has_more = True
        consecutive_errors = 0

        while has_more and consecutive_errors < self.max_consecutive_errors:
            self.logger.info("Fetching directory page", batch=batch, page=page)
            try:
                data = await self.fetch_page(batch, page)
            except ScrapingError as e:
                consecutive_errors += 1
                self.stats['errors'] += 1
                self.logger.warning(
                    "Error fetching page",
                    batch=batch,
                    page=page,
                    consecutive_errors=consecutive_errors,
                    error=str(e),
                )
                await asyncio.sleep(self.page_retry_delay)
                continue

            self.stats['pages_fetched'] += 1
            companies = data.get("companies") or []
            self.logger.info("Directory page fetched", batch=batch, page=page, companies=len(companies))

            if not companies:
                break

            for company in companies:
                name = (company.get("name") or "").strip() if isinstance(company, dict) else ""
                if not name or name in seen:
                    continue
                try:
                    candidate = await self.build_candidate(name, company.get("website"))
                except Exception as e:
                    consecutive_errors += 1
                    self.stats['errors'] += 1
                    self.logger.warning("Error processing company", company=name, error=str(e))
                    continue

                if validate_candidate(candidate):
                    startups.append(candidate)
                    seen.add(name)
                else:
                    self.stats['items_skipped'] += 1

            consecutive_errors = 0
            page += 1
            has_more = bool(data.get(NEXT_PAGE_FIELD))

        if consecutive_errors >= self.max_consecutive_errors:
            self.logger.error("Too many consecutive errors, abandoning batch", batch=batch, page=page)
