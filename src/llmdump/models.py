"""Data model for crawl results, categories and session identifiers.

The JSON shapes mirror the artifacts stored per session:

- crawl result: ``{"data": [{"metadata": {...}, "markdown": ...}], "status", "id"}``
- categories: ``{"categories": [{"category": ..., "refUrls": [...]}]}``
- identifier: ``{"identifier": ...}``
"""

from pydantic import BaseModel, ConfigDict, Field


class CrawledDocument(BaseModel):
    """One crawled page, flattened for the oracles and the assembler."""

    url: str = ""
    title: str = ""
    description: str = ""
    content: str = ""


class PageMetadata(BaseModel):
    """Metadata reported by the crawl provider for a page."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    url: str | None = None
    source_url: str | None = Field(default=None, alias="sourceURL")
    title: str | None = None
    description: str | None = None


class CrawlPage(BaseModel):
    """A single entry of a crawl result."""

    model_config = ConfigDict(extra="allow")

    metadata: PageMetadata = Field(default_factory=PageMetadata)
    markdown: str | None = None

    @property
    def url(self) -> str | None:
        return self.metadata.url or self.metadata.source_url

    @property
    def title(self) -> str | None:
        return self.metadata.title

    def to_document(self) -> CrawledDocument:
        return CrawledDocument(
            url=self.url or "",
            title=self.metadata.title or "",
            description=self.metadata.description or "",
            content=self.markdown or "",
        )


class CrawlResult(BaseModel):
    """Everything the crawl provider returned for one source URL."""

    model_config = ConfigDict(extra="allow")

    data: list[CrawlPage] = Field(default_factory=list)
    status: str = "completed"
    id: str | None = None

    def find(self, url: str) -> CrawlPage | None:
        """Return the first page whose URL equals ``url`` exactly."""
        for page in self.data:
            if page.url == url:
                return page
        return None

    def urls(self) -> set[str]:
        return {page.url for page in self.data if page.url}

    def documents(self) -> list[CrawledDocument]:
        """Flatten every page into a :class:`CrawledDocument`, in crawl order."""
        return [page.to_document() for page in self.data]

    def subset(self, urls: list[str]) -> "CrawlResult":
        """Return a crawl result holding only the pages listed in ``urls``."""
        wanted = set(urls)
        return CrawlResult(
            data=[page for page in self.data if page.url in wanted],
            status=self.status,
            id=self.id,
        )


class Category(BaseModel):
    """A named bucket of document URLs."""

    model_config = ConfigDict(populate_by_name=True)

    category: str
    ref_urls: list[str] = Field(default_factory=list, alias="refUrls")


class CategorySet(BaseModel):
    """Ordered categories; order is display order only."""

    categories: list[Category] = Field(default_factory=list)

    def get(self, name: str) -> Category | None:
        """Return the first category named exactly ``name``."""
        for category in self.categories:
            if category.category == name:
                return category
        return None

    @property
    def document_count(self) -> int:
        return sum(len(c.ref_urls) for c in self.categories)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class Identifier(BaseModel):
    """Short slug naming a crawl session."""

    identifier: str
