"""Token and document totals shown before export decisions."""

import math

from pydantic import BaseModel, Field

from llmdump.models import CategorySet, CrawlResult
from llmdump.tokens import estimate_tokens_for_all_documents, estimate_tokens_for_category


class CategoryTotals(BaseModel):
    name: str
    documents: int
    tokens: float


class CategorySummary(BaseModel):
    """Aggregate view of a category set against its crawl result."""

    documents: int = 0
    tokens: float = 0.0
    categories: list[CategoryTotals] = Field(default_factory=list)

    @property
    def category_count(self) -> int:
        return len(self.categories)

    @property
    def average_tokens_per_category(self) -> int:
        """Expected size of one file when exporting one file per category."""
        if not self.categories:
            return 0
        return math.ceil(self.tokens / len(self.categories))


def summarize_categories(categories: CategorySet, crawl_result: CrawlResult) -> CategorySummary:
    return CategorySummary(
        documents=categories.document_count,
        tokens=estimate_tokens_for_all_documents(categories, crawl_result),
        categories=[
            CategoryTotals(
                name=c.category,
                documents=len(c.ref_urls),
                tokens=estimate_tokens_for_category(c, crawl_result),
            )
            for c in categories.categories
        ],
    )
