"""
Custom exceptions for the scraping infrastructure.

Every scraping error carries an ``ErrorKind`` so retry decisions can branch
on the kind of failure instead of inspecting status fields.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds for outbound calls."""
    THROTTLED = "throttled"
    NETWORK_FAILURE = "network_failure"
    MALFORMED_RESPONSE = "malformed_response"
    OTHER = "other"


class ScrapingError(Exception):
    """Base exception for all scraping-related errors."""

    kind = ErrorKind.OTHER

    def __init__(self, message: str, url: str = None, status_code: int = None):
        self.message = message
        self.url = url
        self.status_code = status_code
        super().__init__(self.message)

    @classmethod
    def from_status(cls, status_code: int, url: str = None, body: str = None) -> "ScrapingError":
        """Build the error variant matching an HTTP error status."""
        if status_code == 429:
            return RateLimitError(f"Too many requests: {url}", url=url)
        message = f"HTTP {status_code} for {url}"
        if body:
            message = f"{message}: {body[:200]}"
        return HTTPStatusError(message, url=url, status_code=status_code)


class RateLimitError(ScrapingError):
    """Raised when the upstream answers HTTP 429."""

    kind = ErrorKind.THROTTLED

    def __init__(self, message: str, url: str = None):
        super().__init__(message, url, 429)


class NetworkError(ScrapingError):
    """Raised on connection failures and timeouts."""

    kind = ErrorKind.NETWORK_FAILURE


class MalformedResponseError(ScrapingError):
    """Raised when a response body cannot be decoded into the expected shape."""

    kind = ErrorKind.MALFORMED_RESPONSE


class HTTPStatusError(ScrapingError):
    """Raised on a non-2xx response other than 429."""


class ValidationError(ScrapingError):
    """Raised when scraped data fails validation."""

    def __init__(self, message: str, field: str = None, value: str = None):
        self.field = field
        self.value = value
        super().__init__(message)


class SessionError(ScrapingError):
    """Raised when session management fails."""

    def __init__(self, message: str, session_type: str = None):
        self.session_type = session_type
        super().__init__(message)


class ParsingError(ScrapingError):
    """Raised when HTML parsing or data extraction fails."""

    def __init__(self, message: str, content: str = None, selector: str = None):
        self.content = content
        self.selector = selector
        super().__init__(message)
