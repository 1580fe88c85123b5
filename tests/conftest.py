"""Shared fixtures and fakes."""

import pytest

from llmdump.config import AppConfig, CrawlConfig, StorageConfig
from llmdump.crawl.base import BaseCrawler
from llmdump.models import Category, CategorySet, CrawlPage, CrawlResult, Identifier, PageMetadata
from llmdump.oracle.base import Oracle

PAGE_1 = "https://example.com/page1"
PAGE_2 = "https://example.com/page2"
PAGE_3 = "https://example.com/page3"
MISSING = "https://example.com/missing"


def make_page(url: str, title: str | None = "Page", markdown: str | None = "Content", description: str = ""):
    return CrawlPage(
        metadata=PageMetadata(url=url, title=title, description=description),
        markdown=markdown,
    )


class FakeOracle(Oracle):
    """Records calls and replies with canned values."""

    def __init__(self, categories: CategorySet | None = None, identifier: str = "example-docs", fail_clean: bool = False):
        self.categories = categories or CategorySet()
        self.identifier = identifier
        self.fail_clean = fail_clean
        self.classified: list[list[str]] = []
        self.cleaned: list[str] = []

    async def classify(self, sites):
        self.classified.append([s.url for s in sites])
        return self.categories

    async def generate_identifier(self, sites):
        return Identifier(identifier=self.identifier)

    async def clean(self, markdown):
        if self.fail_clean:
            raise RuntimeError("cleanup unavailable")
        self.cleaned.append(markdown)
        return f"CLEAN: {markdown}"


class FakeCrawler(BaseCrawler):
    def __init__(self, result: CrawlResult, config: CrawlConfig | None = None):
        super().__init__(config or CrawlConfig())
        self.result = result
        self.calls: list[tuple[str, int]] = []

    async def crawl(self, url, limit):
        self.calls.append((url, limit))
        return self.result

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


@pytest.fixture
def crawl_result() -> CrawlResult:
    return CrawlResult(
        data=[
            make_page(PAGE_1, "Page 1", "Content for page 1", "First page"),
            make_page(PAGE_2, "Page 2", "Content for page 2", "Second page"),
            make_page(PAGE_3, "Page 3", "Content for page 3", "Third page"),
        ],
        id="crawl-123",
    )


@pytest.fixture
def categories() -> CategorySet:
    return CategorySet(
        categories=[
            Category(category="Category 1", ref_urls=[PAGE_1, PAGE_2, MISSING]),
            Category(category="Category 2", ref_urls=[PAGE_3]),
        ]
    )


@pytest.fixture
def identifier() -> Identifier:
    return Identifier(identifier="example-docs")


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(storage=StorageConfig(data_dir=tmp_path / ".data"))
