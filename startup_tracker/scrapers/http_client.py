"""
HTTP client management for the scraping infrastructure.

Wraps a single aiohttp session. Every outbound call goes through the shared
RateLimiter, optionally through the fetch-and-render proxy service, and is
retried only when the upstream throttles us (HTTP 429).
"""

import asyncio
import json
import time
from typing import Any, Dict, Optional
from urllib.parse import urlencode, urlparse

import aiohttp

from ..config import ProxyConfig, ScrapingConfig
from ..utils.logging import get_logger, log_scraping_activity
from .exceptions import (
    ErrorKind,
    MalformedResponseError,
    NetworkError,
    ScrapingError,
    SessionError,
)
from .rate_limiter import RateLimiter

logger = get_logger(__name__)


def should_retry(error: Exception, retries_left: int) -> bool:
    """Retry only throttled calls, and only while budget remains."""
    if retries_left <= 0:
        return False
    return isinstance(error, ScrapingError) and error.kind is ErrorKind.THROTTLED


class HTTPClientManager:
    """Manages the HTTP session used by all scrapers."""

    def __init__(
        self,
        config: ScrapingConfig,
        rate_limiter: RateLimiter,
        proxy: Optional[ProxyConfig] = None
    ):
        self.config = config
        self.rate_limiter = rate_limiter
        self.proxy = proxy
        self.session: Optional[aiohttp.ClientSession] = None
        self.user_agents = [
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
            config.user_agent,
        ]
        self.current_user_agent_index = 0
        self.stats = {
            'requests_made': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'throttled_retries': 0,
        }

    async def initialize(self):
        """Initialize the aiohttp session."""
        if self.session is not None:
            return
        try:
            connector = aiohttp.TCPConnector(
                limit=self.config.max_connections,
                limit_per_host=self.config.max_connections_per_host,
                ttl_dns_cache=300,
            )

            timeout = aiohttp.ClientTimeout(
                total=self.config.timeout,
                connect=self.config.timeout // 2
            )

            self.session = aiohttp.ClientSession(
                connector=connector,
                timeout=timeout,
            )
        except Exception as e:
            raise SessionError(f"Failed to initialize HTTP client: {e}", "aiohttp")

    def get_user_agent(self) -> str:
        """Get the next user agent in rotation."""
        user_agent = self.user_agents[self.current_user_agent_index]
        self.current_user_agent_index = (self.current_user_agent_index + 1) % len(self.user_agents)
        return user_agent

    def _proxy_params(self, url: str, params: Optional[Dict[str, Any]]) -> Dict[str, str]:
        """Build proxy API query parameters for a target URL."""
        target = url
        if params:
            # The proxy takes the full target URL, so fold params into it
            separator = "&" if "?" in url else "?"
            target = f"{url}{separator}{urlencode(params)}"
        return {
            "api_key": self.proxy.api_key,
            "url": target,
            "render_js": str(self.proxy.render_js).lower(),
            "premium_proxy": str(self.proxy.premium_proxy).lower(),
            "block_ads": str(self.proxy.block_ads).lower(),
            "wait": str(self.proxy.wait_ms),
            "timeout": str(self.proxy.timeout_ms),
        }

    async def _send(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Perform one GET and classify any failure."""
        if self.session is None:
            raise SessionError("HTTP client not initialized", "aiohttp")

        if self.proxy is not None and self.proxy.enabled:
            request_url = self.proxy.api_url
            request_params = self._proxy_params(url, params)
        else:
            request_url = url
            request_params = {k: str(v) for k, v in (params or {}).items()}

        start_time = time.monotonic()
        status = None
        self.stats['requests_made'] += 1

        try:
            async with self.session.get(
                request_url,
                params=request_params,
                headers={'User-Agent': self.get_user_agent()},
            ) as response:
                status = response.status
                try:
                    body = await response.text()
                except UnicodeDecodeError as e:
                    raise MalformedResponseError(f"Undecodable body from {url}: {e}", url, status)
                if status >= 400:
                    raise ScrapingError.from_status(status, url, body)
        except ScrapingError as e:
            self._record(url, status, start_time, False, str(e))
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._record(url, status, start_time, False, str(e) or type(e).__name__)
            raise NetworkError(f"Request to {url} failed: {e or type(e).__name__}", url)

        self._record(url, status, start_time, True)
        return body

    def _record(self, url: str, status: Optional[int], start_time: float, success: bool, error: str = None):
        if success:
            self.stats['successful_requests'] += 1
        else:
            self.stats['failed_requests'] += 1
        log_scraping_activity(
            source=self.get_domain(url),
            url=url,
            status_code=status,
            response_time=(time.monotonic() - start_time) * 1000,
            success=success,
            error_message=error,
        )

    async def make_request(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        max_retries: Optional[int] = None
    ) -> str:
        """
        Fetch a URL through the rate limiter, retrying on HTTP 429 only.

        Args:
            url: Target URL
            params: Query parameters for the target URL
            max_retries: Retry budget for throttled calls (defaults to config)

        Returns:
            Response body as text

        Raises:
            ScrapingError: The last error, unchanged, once retries are exhausted
                or immediately for anything that is not throttling
        """
        retries_left = self.config.max_retries if max_retries is None else max_retries

        while True:
            try:
                return await self.rate_limiter.submit(lambda: self._send(url, params))
            except ScrapingError as e:
                if not should_retry(e, retries_left):
                    raise
                retries_left -= 1
                self.stats['throttled_retries'] += 1
                logger.warning(
                    "Throttled, backing off",
                    url=url,
                    retries_left=retries_left,
                    delay=self.config.retry_delay,
                )
                await asyncio.sleep(self.config.retry_delay)

    async def fetch_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """Fetch a page body as text."""
        return await self.make_request(url, params)

    async def fetch_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Fetch a JSON object."""
        body = await self.make_request(url, params)
        try:
            data = json.loads(body)
        except (TypeError, ValueError) as e:
            raise MalformedResponseError(f"Invalid JSON from {url}: {e}", url)
        if not isinstance(data, dict):
            raise MalformedResponseError(f"Expected a JSON object from {url}, got {type(data).__name__}", url)
        return data

    def get_domain(self, url: str) -> str:
        """Extract domain from URL."""
        return urlparse(url).netloc

    def get_stats(self) -> Dict[str, Any]:
        """Get request statistics."""
        return {**self.stats, "rate_limiter": self.rate_limiter.get_stats()}

    async def cleanup(self):
        """Close the HTTP session."""
        if self.session is not None:
            try:
                await self.session.close()
            except Exception as e:
                logger.warning("Error during HTTP client cleanup", error=str(e))
            finally:
                self.session = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()
