"""Approximate token counts for sizing exports."""

import math

from llmdump.models import Category, CategorySet, CrawlResult

# Four characters per token, then 4/5 for the shrinkage expected from cleanup.
_CHARS_PER_TOKEN = 4
_CLEANUP_NUMERATOR = 4
_CLEANUP_DENOMINATOR = 5


def estimate_tokens(content: str) -> float:
    """Estimate the LLM token count of ``content``.

    >>> estimate_tokens("This is a test string")
    4.8
    """
    return math.ceil(len(content) / _CHARS_PER_TOKEN) * _CLEANUP_NUMERATOR / _CLEANUP_DENOMINATOR


def estimate_tokens_for_category(category: Category, crawl_result: CrawlResult) -> float:
    """Sum the estimates of every document in ``category``; unresolved URLs count as 0."""
    total = 0.0
    for url in category.ref_urls:
        page = crawl_result.find(url)
        total += estimate_tokens(page.markdown or "") if page else 0
    return total


def estimate_tokens_for_all_documents(categories: CategorySet, crawl_result: CrawlResult) -> float:
    return sum(
        (estimate_tokens_for_category(category, crawl_result) for category in categories.categories),
        0.0,
    )


def format_tokens(tokens: float) -> str:
    """Render an estimate for display with thousands separators and one decimal.

    >>> format_tokens(1000000.0)
    '1,000,000.0'
    """
    return f"{tokens:,.1f}"
