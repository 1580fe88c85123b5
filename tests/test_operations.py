"""Tests for category operations."""

import pytest

from llmdump.categories import (
    CategoryNotFoundError,
    InvalidInputError,
    categorize_sites,
    drop_empty_categories,
    generate_identifier,
    merge_categories,
    prune_urls_from_category,
    sanitize_categories,
    split_category,
    summarize_categories,
)
from llmdump.models import Category, CategorySet, CrawlResult

from conftest import MISSING, PAGE_1, PAGE_2, PAGE_3, FakeOracle, make_page


class TestSanitize:
    def test_drops_dangling_urls(self, categories, crawl_result):
        sanitized = sanitize_categories(categories, crawl_result)
        assert sanitized.get("Category 1").ref_urls == [PAGE_1, PAGE_2]
        assert sanitized.get("Category 2").ref_urls == [PAGE_3]

    def test_idempotent(self, categories, crawl_result):
        once = sanitize_categories(categories, crawl_result)
        assert sanitize_categories(once, crawl_result) == once

    def test_keeps_emptied_categories(self, crawl_result):
        categories = CategorySet(categories=[Category(category="Ghost", ref_urls=[MISSING])])
        sanitized = sanitize_categories(categories, crawl_result)
        assert [c.category for c in sanitized.categories] == ["Ghost"]
        assert sanitized.categories[0].ref_urls == []

    def test_does_not_mutate_input(self, categories, crawl_result):
        sanitize_categories(categories, crawl_result)
        assert MISSING in categories.get("Category 1").ref_urls

    def test_uses_source_url_fallback(self):
        crawl_result = CrawlResult.model_validate(
            {"data": [{"metadata": {"sourceURL": PAGE_1, "title": "One"}, "markdown": "x"}]}
        )
        categories = CategorySet(categories=[Category(category="A", ref_urls=[PAGE_1])])
        assert sanitize_categories(categories, crawl_result) == categories


class TestPrune:
    def test_removes_only_named_urls(self, categories):
        pruned = prune_urls_from_category(categories, "Category 1", [PAGE_2])
        assert pruned.get("Category 1").ref_urls == [PAGE_1, MISSING]
        assert pruned.get("Category 2") == categories.get("Category 2")

    def test_length_accounts_for_intersection(self, categories):
        pruned = prune_urls_from_category(categories, "Category 1", [PAGE_1, PAGE_3])
        assert len(pruned.get("Category 1").ref_urls) == 2

    def test_empty_removal_list(self, categories):
        assert prune_urls_from_category(categories, "Category 1", []) == categories

    def test_unknown_category(self, categories):
        assert prune_urls_from_category(categories, "Nope", [PAGE_1]) == categories

    def test_name_match_is_case_sensitive(self, categories):
        assert prune_urls_from_category(categories, "category 1", [PAGE_1]) == categories

    def test_keeps_emptied_category(self, categories):
        pruned = prune_urls_from_category(categories, "Category 2", [PAGE_3])
        assert pruned.get("Category 2").ref_urls == []

    def test_does_not_mutate_input(self, categories):
        prune_urls_from_category(categories, "Category 1", [PAGE_1])
        assert PAGE_1 in categories.get("Category 1").ref_urls


class TestDropEmpty:
    def test_drops_only_empty(self):
        categories = CategorySet(
            categories=[
                Category(category="A", ref_urls=[PAGE_1]),
                Category(category="B", ref_urls=[]),
            ]
        )
        assert [c.category for c in drop_empty_categories(categories).categories] == ["A"]


class TestMerge:
    def test_case_insensitive_merge_keeps_existing_name(self, categories):
        incoming = CategorySet(categories=[Category(category="category 2", ref_urls=[PAGE_1, PAGE_3])])
        merged_set, created, merged = merge_categories(categories, incoming)

        assert merged_set.get("Category 2").ref_urls == [PAGE_3, PAGE_1]
        assert merged_set.get("category 2") is None
        assert created == []
        assert merged == ["Category 2"]

    def test_appends_unmatched(self, categories):
        incoming = CategorySet(categories=[Category(category="New", ref_urls=[PAGE_1, PAGE_1])])
        merged_set, created, merged = merge_categories(categories, incoming)

        assert merged_set.categories[-1] == Category(category="New", ref_urls=[PAGE_1])
        assert created == ["New"]
        assert merged == []

    def test_appended_category_absorbs_later_duplicate(self):
        incoming = CategorySet(
            categories=[
                Category(category="Guides", ref_urls=[PAGE_1]),
                Category(category="GUIDES", ref_urls=[PAGE_2]),
            ]
        )
        merged_set, created, merged = merge_categories(CategorySet(), incoming)

        assert merged_set.categories == [Category(category="Guides", ref_urls=[PAGE_1, PAGE_2])]
        assert created == ["Guides"]
        assert merged == ["Guides"]

    def test_excluded_category_absorbs_nothing(self, categories):
        incoming = CategorySet(categories=[Category(category="CATEGORY 1", ref_urls=[PAGE_3])])
        merged_set, created, _ = merge_categories(categories, incoming, exclude="Category 1")

        assert merged_set.get("Category 1").ref_urls == [PAGE_1, PAGE_2, MISSING]
        assert created == ["CATEGORY 1"]


class TestOracleOperations:
    @pytest.mark.asyncio
    async def test_categorize_rejects_empty_input(self):
        with pytest.raises(InvalidInputError):
            await categorize_sites([], FakeOracle())

    @pytest.mark.asyncio
    async def test_identifier_rejects_empty_input(self):
        with pytest.raises(InvalidInputError):
            await generate_identifier([], FakeOracle())

    @pytest.mark.asyncio
    async def test_categorize_passes_reply_through(self, crawl_result):
        reply = CategorySet(categories=[Category(category="All", ref_urls=[PAGE_1, MISSING])])
        oracle = FakeOracle(categories=reply)

        assert await categorize_sites(crawl_result.documents(), oracle) == reply
        assert oracle.classified == [[PAGE_1, PAGE_2, PAGE_3]]

    @pytest.mark.asyncio
    async def test_identifier(self, crawl_result):
        identifier = await generate_identifier(crawl_result.documents(), FakeOracle(identifier="docs"))
        assert identifier.identifier == "docs"


class TestSplit:
    @pytest.mark.asyncio
    async def test_split_merges_and_removes_source(self, categories, crawl_result):
        oracle = FakeOracle(
            categories=CategorySet(
                categories=[
                    Category(category="category 2", ref_urls=[PAGE_1]),
                    Category(category="Fresh", ref_urls=[PAGE_2]),
                ]
            )
        )

        result = await split_category(categories, "Category 1", crawl_result, oracle)

        assert oracle.classified == [[PAGE_1, PAGE_2, MISSING]]
        assert result.categories.get("Category 1") is None
        assert result.categories.get("Category 2").ref_urls == [PAGE_3, PAGE_1]
        assert result.categories.get("Fresh").ref_urls == [PAGE_2]
        assert result.created == ["Fresh"]
        assert result.merged == ["Category 2"]

    @pytest.mark.asyncio
    async def test_split_filters_foreign_urls(self, categories, crawl_result):
        # PAGE_3 belongs to another category and must not be pulled in
        oracle = FakeOracle(
            categories=CategorySet(categories=[Category(category="Mixed", ref_urls=[PAGE_1, PAGE_3, MISSING])])
        )

        result = await split_category(categories, "Category 1", crawl_result, oracle)

        assert result.categories.get("Mixed").ref_urls == [PAGE_1]

    @pytest.mark.asyncio
    async def test_split_reusing_source_name(self, categories, crawl_result):
        oracle = FakeOracle(
            categories=CategorySet(
                categories=[
                    Category(category="Category 1", ref_urls=[PAGE_1]),
                    Category(category="Other", ref_urls=[PAGE_2]),
                ]
            )
        )

        result = await split_category(categories, "Category 1", crawl_result, oracle)

        assert [c.category for c in result.categories.categories] == ["Category 2", "Category 1", "Other"]
        assert result.categories.get("Category 1").ref_urls == [PAGE_1]

    @pytest.mark.asyncio
    async def test_split_unknown_category(self, categories, crawl_result):
        with pytest.raises(CategoryNotFoundError):
            await split_category(categories, "Nope", crawl_result, FakeOracle())

    @pytest.mark.asyncio
    async def test_split_empty_category(self, crawl_result):
        categories = CategorySet(categories=[Category(category="Empty", ref_urls=[])])
        with pytest.raises(InvalidInputError):
            await split_category(categories, "Empty", crawl_result, FakeOracle())

    @pytest.mark.asyncio
    async def test_classifier_failure_propagates(self, categories, crawl_result):
        class BrokenOracle(FakeOracle):
            async def classify(self, sites):
                raise RuntimeError("model offline")

        with pytest.raises(RuntimeError, match="model offline"):
            await split_category(categories, "Category 1", crawl_result, BrokenOracle())


class TestSummary:
    def test_totals(self, categories, crawl_result):
        summary = summarize_categories(sanitize_categories(categories, crawl_result), crawl_result)

        assert summary.documents == 3
        assert summary.category_count == 2
        assert summary.tokens == pytest.approx(12.0)
        assert [(c.name, c.documents) for c in summary.categories] == [("Category 1", 2), ("Category 2", 1)]
        assert summary.average_tokens_per_category == 6

    def test_average_rounds_up(self):
        crawl_result = CrawlResult(data=[make_page(PAGE_1, markdown="A")])
        categories = CategorySet(
            categories=[
                Category(category="A", ref_urls=[PAGE_1]),
                Category(category="B", ref_urls=[]),
            ]
        )
        assert summarize_categories(categories, crawl_result).average_tokens_per_category == 1

    def test_empty(self, crawl_result):
        assert summarize_categories(CategorySet(), crawl_result).average_tokens_per_category == 0
