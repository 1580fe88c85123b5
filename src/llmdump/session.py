"""The in-memory session every category operation acts on."""

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from llmdump.categories import (
    CategorySummary,
    SplitResult,
    drop_empty_categories,
    merge_categories,
    prune_urls_from_category,
    sanitize_categories,
    split_category,
    summarize_categories,
)
from llmdump.models import CategorySet, CrawledDocument, CrawlResult, Identifier
from llmdump.oracle.base import Classifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """One crawl result with its categories and identifier.

    Operations return a new session; the caller decides when to persist it.
    """

    crawl_result: CrawlResult
    categories: CategorySet
    identifier: Identifier
    path: Path | None = None

    @classmethod
    def open(
        cls,
        crawl_result: CrawlResult,
        categories: CategorySet,
        identifier: Identifier,
        path: Path | None = None,
    ) -> "Session":
        """Build a session whose categories only reference crawled URLs.

        Categories sharing a name, ignoring case, are folded into the first
        one, so every category in a session can be addressed by its name.
        """
        sanitized = sanitize_categories(categories, crawl_result)
        folded, _, merged = merge_categories(CategorySet(), sanitized)
        if merged:
            logger.warning("Folded duplicate categories into: %s", ", ".join(dict.fromkeys(merged)))
        return cls(
            crawl_result=crawl_result,
            categories=folded,
            identifier=identifier,
            path=path,
        )

    @property
    def name(self) -> str:
        return self.path.name if self.path else self.identifier.identifier

    def documents(self) -> list[CrawledDocument]:
        return self.crawl_result.documents()

    def with_categories(self, categories: CategorySet) -> "Session":
        return replace(self, categories=categories)

    def prune(self, category_name: str, urls: list[str]) -> "Session":
        """Remove ``urls`` from a category, then drop categories left empty."""
        pruned = prune_urls_from_category(self.categories, category_name, urls)
        return self.with_categories(drop_empty_categories(pruned))

    async def split(self, category_name: str, classifier: Classifier) -> tuple["Session", SplitResult]:
        result = await split_category(self.categories, category_name, self.crawl_result, classifier)
        return self.with_categories(result.categories), result

    def summary(self) -> CategorySummary:
        return summarize_categories(self.categories, self.crawl_result)
