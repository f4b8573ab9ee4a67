"""
Venture Portfolio Page Scraper

Scrapes company names from a marketing portfolio page. The page markup is not
stable, so a list of CSS selectors is probed from most to least specific and
the first one that matches anything is used.
"""

import calendar
import re
from dataclasses import dataclass
from typing import List, Optional

from bs4 import Tag

from ..config import InvestmentWindow, PortfolioSourceConfig
from .base import BaseScraper
from .exceptions import ScrapingError
from .extractors import ContentExtractor
from .http_client import HTTPClientManager
from .linkedin import LinkedInResolver
from .records import SeenNames, StartupCandidate, validate_candidate


@dataclass
class InvestmentWindowFilter:
    """Accepts cards whose investment date falls in one calendar quarter."""
    year: int
    quarter: int

    @classmethod
    def from_config(cls, window: Optional[InvestmentWindow]) -> Optional["InvestmentWindowFilter"]:
        if window is None:
            return None
        return cls(year=window.year, quarter=window.quarter)

    @property
    def months(self) -> List[int]:
        first = (self.quarter - 1) * 3 + 1
        return [first, first + 1, first + 2]

    def accepts(self, filter_by: str, investment_date: str) -> bool:
        if str(self.year) not in filter_by:
            return False

        markers = [f"Q{self.quarter} {self.year}"]
        markers.extend(f"{calendar.month_name[m]} {self.year}" for m in self.months)
        if any(marker in investment_date for marker in markers):
            return True

        month_pattern = "|".join(f"{m:02d}" for m in self.months)
        return re.search(rf"{self.year}-({month_pattern})", investment_date) is not None


def is_exit(filter_by: str) -> bool:
    """Cards tagged as exits are divestments, not portfolio companies."""
    return "exit" in filter_by.lower()


class PortfolioScraper(BaseScraper):
    """
    Scraper for a venture firm's portfolio page.

    Each card yields a name through a fallback chain of extractors, is
    deduplicated case-insensitively, gets a LinkedIn URL attached and is kept
    only if it validates. Optional business filters (investment quarter,
    exits) run before deduplication.
    """

    def __init__(
        self,
        config: PortfolioSourceConfig,
        http_client: HTTPClientManager,
        linkedin: LinkedInResolver,
        extractor: Optional[ContentExtractor] = None
    ):
        super().__init__("portfolio", http_client, linkedin)
        self.config = config
        self.extractor = extractor or ContentExtractor()
        self.window = InvestmentWindowFilter.from_config(config.investment_window)

    async def fetch_page(self) -> str:
        """
        Fetch the first candidate URL that answers.

        Raises:
            ScrapingError: The last failure when every URL fails
        """
        last_error: Optional[ScrapingError] = None
        for url in self.config.urls:
            try:
                html = await self.http_client.fetch_text(url)
                self.stats['pages_fetched'] += 1
                self.logger.info("Fetched portfolio page", url=url, length=len(html))
                return html
            except ScrapingError as e:
                self.stats['errors'] += 1
                self.logger.warning("Portfolio URL failed, trying next", url=url, error=str(e))
                last_error = e

        if last_error is None:
            raise ScrapingError("No portfolio URLs configured")
        raise last_error

    def passes_filters(self, element: Tag, name: str) -> bool:
        """Apply the optional investment-window and exit filters."""
        filter_by = element.get("data-filter-by") or ""
        investment_date = element.get("data-investment-date") or ""

        if self.window is not None and not self.window.accepts(filter_by, investment_date):
            self.logger.debug("Skipping: outside investment window", company=name)
            return False

        if self.config.exclude_exits and is_exit(filter_by):
            self.logger.debug("Skipping: exit", company=name)
            return False

        return True

    async def scrape(self) -> List[StartupCandidate]:
        html = await self.fetch_page()
        soup = self.extractor.parse(html)

        selector, elements = self.extractor.select_first_matching(soup, self.config.selectors)
        if selector is None:
            self.logger.warning("No selector matched the portfolio page")
            return []
        self.logger.info("Selector matched", selector=selector, elements=len(elements))

        startups: List[StartupCandidate] = []
        seen = SeenNames()

        for element in elements:
            try:
                candidate = await self._process_element(element, seen)
            except Exception as e:
                self.stats['errors'] += 1
                self.logger.warning("Error processing portfolio item", error=str(e))
                continue

            if candidate is None:
                self.stats['items_skipped'] += 1
                continue

            startups.append(candidate)
            seen.add(candidate.name)

        return startups

    async def _process_element(self, element: Tag, seen: SeenNames) -> Optional[StartupCandidate]:
        name = self.extractor.extract_name(element)
        if not name:
            return None

        if not self.passes_filters(element, name):
            return None

        if name in seen:
            self.logger.debug("Skipping: already processed", company=name)
            return None

        candidate = await self.build_candidate(name, self.extractor.extract_website(element))
        if not validate_candidate(candidate):
            self.logger.debug("Validation failed", company=name)
            return None
        return candidate
