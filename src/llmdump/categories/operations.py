"""Operations over the category model.

Pure operations (sanitize, prune, drop-empty, merge) never raise and never
mutate their inputs. Operations that consult an oracle (categorize, split,
identifier generation) let oracle failures propagate to the caller.
"""

import logging

from pydantic import BaseModel, Field

from llmdump.models import Category, CategorySet, CrawledDocument, CrawlResult, Identifier
from llmdump.oracle.base import Classifier, IdentifierGenerator

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """An operation was called without the input it needs."""


class CategoryNotFoundError(KeyError):
    """No category carries the requested name."""


class SplitResult(BaseModel):
    """Outcome of splitting one category with the classifier."""

    categories: CategorySet
    proposed: CategorySet
    created: list[str] = Field(default_factory=list)
    merged: list[str] = Field(default_factory=list)


def sanitize_categories(categories: CategorySet, crawl_result: CrawlResult) -> CategorySet:
    """Drop references to URLs that are not part of ``crawl_result``.

    Emptied categories are kept; dropping them is :func:`drop_empty_categories`.
    """
    known = crawl_result.urls()
    sanitized = CategorySet(
        categories=[
            Category(category=c.category, ref_urls=[u for u in c.ref_urls if u in known])
            for c in categories.categories
        ]
    )
    dropped = categories.document_count - sanitized.document_count
    if dropped:
        logger.debug("Sanitize dropped %d dangling URL reference(s)", dropped)
    return sanitized


def prune_urls_from_category(
    categories: CategorySet, category_name: str, urls_to_remove: list[str]
) -> CategorySet:
    """Remove ``urls_to_remove`` from the category named exactly ``category_name``."""
    removing = set(urls_to_remove)
    return CategorySet(
        categories=[
            Category(
                category=c.category,
                ref_urls=[u for u in c.ref_urls if u not in removing]
                if c.category == category_name
                else list(c.ref_urls),
            )
            for c in categories.categories
        ]
    )


def drop_empty_categories(categories: CategorySet) -> CategorySet:
    return CategorySet(
        categories=[c.model_copy(deep=True) for c in categories.categories if c.ref_urls]
    )


def merge_categories(
    categories: CategorySet,
    incoming: CategorySet,
    exclude: str | None = None,
) -> tuple[CategorySet, list[str], list[str]]:
    """Fold ``incoming`` into ``categories`` by case-insensitive name.

    A name match unions the URL lists (existing order first, no duplicates)
    and keeps the existing spelling. Unmatched categories are appended and
    can absorb later incoming categories of the same name. The category named
    ``exclude`` never absorbs anything.

    Returns the merged set and the names that were created and merged.
    """
    result = [c.model_copy(deep=True) for c in categories.categories]
    created: list[str] = []
    merged: list[str] = []

    for new in incoming.categories:
        key = new.category.lower()
        target = next(
            (
                c for c in result
                if c.category.lower() == key and c.category != exclude
            ),
            None,
        )
        if target is None:
            result.append(
                Category(category=new.category, ref_urls=list(dict.fromkeys(new.ref_urls)))
            )
            created.append(new.category)
        else:
            target.ref_urls = list(dict.fromkeys([*target.ref_urls, *new.ref_urls]))
            merged.append(target.category)

    return CategorySet(categories=result), created, merged


async def categorize_sites(documents: list[CrawledDocument], classifier: Classifier) -> CategorySet:
    """Ask the classifier to group ``documents``.

    The reply is returned as-is; run it through :func:`sanitize_categories`
    before trusting it.
    """
    if not documents:
        raise InvalidInputError("No sites provided for categorization")
    return await classifier.classify(documents)


async def generate_identifier(
    documents: list[CrawledDocument], generator: IdentifierGenerator
) -> Identifier:
    if not documents:
        raise InvalidInputError("No documents provided for identifier generation")
    return await generator.generate_identifier(documents)


async def split_category(
    categories: CategorySet,
    category_name: str,
    crawl_result: CrawlResult,
    classifier: Classifier,
) -> SplitResult:
    """Re-classify the documents of one category and fold the result back in.

    The source category is removed whether or not the classifier covered all
    of its documents.
    """
    source = categories.get(category_name)
    if source is None:
        raise CategoryNotFoundError(category_name)

    sites = []
    for url in source.ref_urls:
        page = crawl_result.find(url)
        if page is None:
            sites.append(CrawledDocument(url=url, title=url))
            continue
        document = page.to_document()
        sites.append(
            CrawledDocument(
                url=document.url or url,
                title=document.title or url,
                description=document.description,
                content=document.content,
            )
        )

    proposed = await categorize_sites(sites, classifier)
    proposed = sanitize_categories(proposed, crawl_result.subset(source.ref_urls))

    merged_set, created, merged = merge_categories(categories, proposed, exclude=category_name)

    remaining = []
    removed = False
    for c in merged_set.categories:
        if not removed and c.category == category_name:
            removed = True
            continue
        remaining.append(c)

    logger.debug(
        "Split %r into %d categories (%d new, %d merged)",
        category_name, len(proposed.categories), len(created), len(merged),
    )
    return SplitResult(
        categories=CategorySet(categories=remaining),
        proposed=proposed,
        created=created,
        merged=merged,
    )
