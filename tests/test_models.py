"""Tests for the data model and path helpers."""

from llmdump.models import CategorySet, CrawlResult
from llmdump.utils import category_filename, safe_filename_stem

from conftest import PAGE_1, PAGE_2, PAGE_3


class TestCrawlResult:
    def test_parses_provider_payload(self):
        result = CrawlResult.model_validate(
            {
                "data": [
                    {
                        "metadata": {
                            "sourceURL": PAGE_1,
                            "title": "One",
                            "description": "First",
                            "statusCode": 200,
                        },
                        "markdown": "# One",
                    },
                    {"metadata": {"url": PAGE_2}},
                ],
                "status": "completed",
                "id": "abc",
                "creditsUsed": 2,
            }
        )

        assert result.data[0].url == PAGE_1
        assert result.data[0].metadata.model_extra == {"statusCode": 200}
        assert result.urls() == {PAGE_1, PAGE_2}

    def test_documents_default_to_empty_strings(self):
        result = CrawlResult.model_validate({"data": [{"metadata": {"url": PAGE_1}}]})
        document = result.documents()[0]
        assert (document.url, document.title, document.description, document.content) == (PAGE_1, "", "", "")

    def test_find_is_exact(self, crawl_result):
        assert crawl_result.find(PAGE_1).title == "Page 1"
        assert crawl_result.find(PAGE_1 + "/") is None

    def test_subset(self, crawl_result):
        subset = crawl_result.subset([PAGE_3, PAGE_1, "https://nowhere"])
        assert [page.url for page in subset.data] == [PAGE_1, PAGE_3]
        assert subset.id == crawl_result.id


class TestCategorySet:
    def test_reads_and_writes_ref_urls_alias(self):
        categories = CategorySet.model_validate_json(
            '{"categories": [{"category": "Guides", "refUrls": ["%s"]}]}' % PAGE_1
        )
        assert categories.get("Guides").ref_urls == [PAGE_1]
        assert '"refUrls"' in categories.to_json()

    def test_document_count(self, categories):
        assert categories.document_count == 4


class TestSafeFilenameStem:
    def test_plain_name_unchanged(self):
        assert safe_filename_stem("tanstack-router-docs") == "tanstack-router-docs"

    def test_replaces_separators_and_reserved(self):
        assert safe_filename_stem('a/b\\c:d*e?"f') == "a_b_c_d_e__f"

    def test_cannot_escape_directory(self):
        assert safe_filename_stem("..") == "untitled"
        assert "/" not in safe_filename_stem("../../etc/passwd")

    def test_truncates(self):
        assert len(safe_filename_stem("x" * 500)) == 100

    def test_category_filename(self):
        assert category_filename("docs", "API  Reference") == "docs_API_Reference.md"
