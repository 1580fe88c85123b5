"""Base class for crawl providers."""

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from llmdump.config import CrawlConfig
from llmdump.models import CrawlResult

logger = logging.getLogger(__name__)

_MAX_RETRY_DELAY = 60.0  # Never sleep longer than this on a single retry


class CrawlError(RuntimeError):
    """The crawl provider failed to return a result."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        retry_after: float | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after

    @property
    def retryable(self) -> bool:
        # Rate limits, server errors and connection failures (status 0)
        return self.status_code == 0 or self.status_code == 429 or self.status_code >= 500


class BaseCrawler(ABC):
    """Abstract base class for crawl providers."""

    def __init__(self, config: CrawlConfig):
        self.config = config

    @abstractmethod
    async def crawl(self, url: str, limit: int) -> CrawlResult:
        """Crawl ``url`` and return at most ``limit`` pages."""
        pass

    async def crawl_with_retry(self, url: str, limit: int | None = None) -> CrawlResult:
        """Crawl with exponential backoff on transient errors."""
        limit = limit or self.config.limit
        max_retries = self.config.max_retries
        for attempt in range(max_retries + 1):
            try:
                return await self.crawl(url, limit)
            except CrawlError as e:
                if not e.retryable or attempt >= max_retries:
                    raise
                delay = self.config.retry_base_delay * (2 ** attempt) + random.uniform(0, 0.5)
                if e.retry_after is not None:
                    delay = max(delay, e.retry_after)
                delay = min(delay, _MAX_RETRY_DELAY)
                logger.warning(
                    "Crawl attempt %d for %s failed (%s), retrying in %.1fs",
                    attempt + 1, url, e, delay,
                )
                await asyncio.sleep(delay)
        raise AssertionError("unreachable")

    @staticmethod
    def _parse_retry_after(header_value: str | None) -> float | None:
        """Parse a Retry-After header value into seconds.

        Supports both delta-seconds (e.g. "120") and HTTP-date formats.
        Returns None if the header is missing or unparseable.
        """
        if not header_value:
            return None
        try:
            return max(0.0, float(header_value))
        except ValueError:
            pass
        try:
            dt = parsedate_to_datetime(header_value)
        except (TypeError, ValueError):
            return None
        delta = (dt - datetime.now(timezone.utc)).total_seconds()
        return max(0.0, delta)

    @abstractmethod
    async def __aenter__(self):
        """Async context manager entry."""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        pass
