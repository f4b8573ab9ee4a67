"""
Scraping infrastructure for the Startup Tracker.

This package provides:
- A single-lane rate limiter shared by everything calling one service
- An HTTP client whose retry wrapper re-issues throttled (429) calls only
- Portfolio page and directory API scrapers
- The scraper service that runs both and merges their results
"""

from .base import BaseScraper
from .directory import DirectoryScraper
from .exceptions import (
    ErrorKind,
    HTTPStatusError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    ScrapingError,
)
from .extractors import ContentExtractor
from .http_client import HTTPClientManager
from .linkedin import LinkedInResolver
from .portfolio import PortfolioScraper
from .rate_limiter import RateLimiter
from .records import NOT_FOUND, StartupCandidate
from .scraper_service import AggregationResult, ScraperService

__all__ = [
    "BaseScraper",
    "DirectoryScraper",
    "ErrorKind",
    "HTTPStatusError",
    "MalformedResponseError",
    "NetworkError",
    "RateLimitError",
    "ScrapingError",
    "ContentExtractor",
    "HTTPClientManager",
    "LinkedInResolver",
    "PortfolioScraper",
    "RateLimiter",
    "NOT_FOUND",
    "StartupCandidate",
    "AggregationResult",
    "ScraperService",
]
