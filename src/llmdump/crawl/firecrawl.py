"""Crawl provider backed by the Firecrawl HTTP API."""

import asyncio
import logging

import httpx

from llmdump.config import CrawlConfig
from llmdump.crawl.base import BaseCrawler, CrawlError
from llmdump.models import CrawlPage, CrawlResult

logger = logging.getLogger(__name__)

_FAILED_STATUSES = {"failed", "cancelled"}


class FirecrawlCrawler(BaseCrawler):
    """Start a Firecrawl crawl job and poll it until completion."""

    def __init__(self, config: CrawlConfig, transport: httpx.AsyncBaseTransport | None = None):
        super().__init__(config)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        """Initialize HTTP client."""
        if not self.config.api_key:
            raise CrawlError("Firecrawl API key is required", status_code=401)
        self._client = httpx.AsyncClient(
            base_url=self.config.api_url.rstrip("/"),
            headers={"Authorization": f"Bearer {self.config.api_key}"},
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Clean up HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def crawl(self, url: str, limit: int) -> CrawlResult:
        if not self._client:
            raise RuntimeError("Crawler not initialized. Use 'async with' context manager.")

        logger.debug("Starting Firecrawl job for %s (limit %d)", url, limit)
        started = await self._request(
            "POST",
            "/v1/crawl",
            json={
                "url": url,
                "limit": limit,
                "scrapeOptions": {"formats": ["markdown"], "onlyMainContent": True},
            },
        )
        crawl_id = started.get("id")
        if not crawl_id:
            raise CrawlError(f"Firecrawl did not return a job id: {started.get('error', started)}")

        status = await self._wait_for_completion(crawl_id)

        pages = [CrawlPage.model_validate(item) for item in status.get("data") or []]
        next_url = status.get("next")
        while next_url:
            chunk = await self._request("GET", next_url)
            pages.extend(CrawlPage.model_validate(item) for item in chunk.get("data") or [])
            next_url = chunk.get("next")

        logger.debug("Firecrawl job %s returned %d pages", crawl_id, len(pages))
        return CrawlResult(data=pages, status=status.get("status", "completed"), id=crawl_id)

    async def _wait_for_completion(self, crawl_id: str) -> dict:
        while True:
            status = await self._request("GET", f"/v1/crawl/{crawl_id}")
            state = status.get("status")
            if state == "completed":
                return status
            if state in _FAILED_STATUSES:
                message = f"Firecrawl job {crawl_id} {state}"
                if status.get("error"):
                    message += f": {status['error']}"
                raise CrawlError(message)
            logger.debug(
                "Firecrawl job %s %s (%s/%s pages)",
                crawl_id, state, status.get("completed", 0), status.get("total", "?"),
            )
            await asyncio.sleep(self.config.poll_interval_seconds)

    async def _request(self, method: str, url: str, **kwargs) -> dict:
        assert self._client is not None
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise CrawlError(f"Firecrawl request failed: {e}") from e

        if response.status_code >= 400:
            retry_after = None
            if response.status_code == 429:
                retry_after = self._parse_retry_after(response.headers.get("retry-after"))
            raise CrawlError(
                f"Firecrawl returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                retry_after=retry_after,
            )

        payload = response.json()
        if payload.get("success") is False:
            raise CrawlError(f"Firecrawl error: {payload.get('error', 'unknown error')}")
        return payload
