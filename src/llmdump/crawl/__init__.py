"""Crawl providers that turn a URL into a crawl result."""

from llmdump.crawl.base import BaseCrawler, CrawlError
from llmdump.crawl.firecrawl import FirecrawlCrawler

__all__ = [
    "BaseCrawler",
    "CrawlError",
    "FirecrawlCrawler",
]
