"""
Best-effort LinkedIn company page lookup.
"""

import re
from typing import Optional
from urllib.parse import quote

from bs4 import BeautifulSoup

from ..config import LinkedInConfig
from ..utils.logging import get_logger
from .records import NOT_FOUND

logger = get_logger(__name__)

_SLUG_INVALID = re.compile(r"[^a-z0-9]")


class LinkedInResolver:
    """Finds or constructs a LinkedIn company URL for a company name."""

    def __init__(self, config: Optional[LinkedInConfig] = None, http_client=None):
        self.config = config or LinkedInConfig()
        self.http_client = http_client

    def build_company_url(self, name: str) -> str:
        """Construct a company URL from the name; unverified."""
        slug = _SLUG_INVALID.sub("-", (name or "").strip().lower())
        if not slug.strip("-"):
            return NOT_FOUND
        return f"{self.config.base_url}{quote(slug)}"

    async def resolve(self, name: str) -> str:
        """
        Look up the company page, falling back to the constructed URL.

        Never raises; a failed lookup yields the constructed URL or NOT_FOUND.
        """
        constructed = self.build_company_url(name)
        if not self.config.search_enabled or self.http_client is None:
            return constructed

        try:
            html = await self.http_client.fetch_text(
                self.config.search_url,
                {"q": f"{name} LinkedIn company page"},
            )
            soup = BeautifulSoup(html, "lxml")
            link = soup.select_one('a[href*="linkedin.com/company/"]')
            if link and link.get("href"):
                return link["href"]
        except Exception as e:
            logger.warning("LinkedIn lookup failed", company=name, error=str(e))

        return constructed
