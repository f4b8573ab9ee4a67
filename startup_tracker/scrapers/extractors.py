"""
Content extraction utilities for the scraping infrastructure.

Field extraction is expressed as ordered lists of small extractor functions:
the first extractor producing a non-empty string wins.
"""

import re
from typing import Callable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from .exceptions import ParsingError

Extractor = Callable[[Tag], Optional[str]]

_NOISE_MARKER = re.compile(r"(IPO:|Acquired\s+By:)", re.IGNORECASE)
_HEADINGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


def attr(name: str) -> Extractor:
    """Extractor reading an attribute of the element itself."""
    def extract(element: Tag) -> Optional[str]:
        value = element.get(name)
        if isinstance(value, list):
            value = " ".join(value)
        return value
    return extract


def nested_text(selector: str) -> Extractor:
    """Extractor reading the text of the first descendant matching a CSS selector."""
    def extract(element: Tag) -> Optional[str]:
        node = element.select_one(selector)
        return node.get_text(" ", strip=True) if node else None
    return extract


def nested_attr(selector: str, name: str) -> Extractor:
    """Extractor reading an attribute of the first descendant matching a CSS selector."""
    def extract(element: Tag) -> Optional[str]:
        node = element.select_one(selector)
        return node.get(name) if node else None
    return extract


def first_heading(element: Tag) -> Optional[str]:
    """Text of the first heading element inside the element."""
    node = element.find(_HEADINGS)
    return node.get_text(" ", strip=True) if node else None


def first_http_link(element: Tag) -> Optional[str]:
    """The element's own href, or its first descendant link, when it is an http(s) URL."""
    candidates = [element] if element.name == "a" else []
    candidates.extend(element.find_all("a", href=True))
    for link in candidates:
        href = (link.get("href") or "").strip()
        if href.startswith(("http://", "https://")):
            return href
    return None


NAME_EXTRACTORS: List[Extractor] = [
    attr("data-name"),
    attr("data-secondary-name"),
    nested_text(".builder-title span"),
    nested_text(".builder-title"),
    first_heading,
    nested_text(".company-name"),
]

WEBSITE_EXTRACTORS: List[Extractor] = [
    first_http_link,
    attr("data-website"),
    nested_attr(".website-link", "href"),
]


def first_non_empty(element: Tag, extractors: Sequence[Extractor]) -> Optional[str]:
    """
    Evaluate extractors in order and return the first non-empty result.

    An extractor that raises counts as empty.
    """
    for extractor in extractors:
        try:
            value = extractor(element)
        except Exception:
            continue
        if value and value.strip():
            return value.strip()
    return None


def clean_text(text: str) -> str:
    """
    Clean and normalize text content.

    Args:
        text: Raw text content

    Returns:
        Cleaned text
    """
    if not text:
        return ""

    text = re.sub(r"\s+", " ", text)
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]", "", text)

    return text.strip()


def clean_company_name(text: Optional[str]) -> str:
    """
    Strip "IPO:" / "Acquired By:" noise from a portfolio card title.

    "IPO: Coinbase" becomes "Coinbase"; "Oculus Acquired By: Meta" becomes
    "Oculus". Text after "Acquired By:" names the acquirer, so a title with
    nothing before that marker yields an empty name.
    """
    text = clean_text(text or "")
    match = _NOISE_MARKER.search(text)
    if match:
        before = text[:match.start()].strip(" -|,")
        if before or match.group(1).lower().startswith("acquired"):
            text = before
        else:
            text = text[match.end():].strip(" -|,")
    return text.strip()


class ContentExtractor:
    """Utilities for HTML parsing and selector probing."""

    def __init__(self, parser: str = "lxml"):
        self.parser = parser

    def parse(self, html_content: str) -> BeautifulSoup:
        """Parse HTML into a BeautifulSoup document."""
        try:
            return BeautifulSoup(html_content, self.parser)
        except Exception as e:
            raise ParsingError(f"Failed to parse HTML: {e}", content=(html_content or "")[:200])

    def select_first_matching(
        self,
        soup: BeautifulSoup,
        selectors: Sequence[str]
    ) -> Tuple[Optional[str], List[Tag]]:
        """
        Probe selectors in order and stop at the first one with matches.

        Args:
            soup: Parsed document
            selectors: CSS selectors, most specific first

        Returns:
            The winning selector and its elements, or (None, []) when nothing matches
        """
        for selector in selectors:
            try:
                elements = soup.select(selector)
            except Exception as e:
                raise ParsingError(f"Invalid selector: {e}", selector=selector)
            if elements:
                return selector, elements
        return None, []

    def extract_name(self, element: Tag) -> str:
        """Company name from a portfolio card, cleaned of exit noise."""
        return clean_company_name(first_non_empty(element, NAME_EXTRACTORS))

    def extract_website(self, element: Tag) -> Optional[str]:
        """Company website from a portfolio card."""
        return first_non_empty(element, WEBSITE_EXTRACTORS)
