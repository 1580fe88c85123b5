"""Operations on categorized documents."""

from llmdump.categories.operations import (
    CategoryNotFoundError,
    InvalidInputError,
    SplitResult,
    categorize_sites,
    drop_empty_categories,
    generate_identifier,
    merge_categories,
    prune_urls_from_category,
    sanitize_categories,
    split_category,
)
from llmdump.categories.summary import CategorySummary, CategoryTotals, summarize_categories

__all__ = [
    "CategoryNotFoundError",
    "InvalidInputError",
    "SplitResult",
    "categorize_sites",
    "drop_empty_categories",
    "generate_identifier",
    "merge_categories",
    "prune_urls_from_category",
    "sanitize_categories",
    "split_category",
    "CategorySummary",
    "CategoryTotals",
    "summarize_categories",
]
