"""Output writers for categorized documents."""

from pathlib import Path

from llmdump.config import ExportMode
from llmdump.models import CategorySet, CrawlResult, Identifier
from llmdump.oracle.base import Cleaner
from llmdump.output.documents import (
    DocumentContent,
    cleanup_markdown_document,
    extract_headers,
    process_category_content,
    process_document,
)
from llmdump.output.multi_file import MultiFileOutput
from llmdump.output.single_file import SingleFileOutput


async def write_documents_to_file(
    categories: CategorySet,
    identifier: Identifier,
    crawl_result: CrawlResult,
    output_dir: Path,
    cleaner: Cleaner | None = None,
    mode: ExportMode = ExportMode.SINGLE,
) -> list[Path]:
    """Assemble ``categories`` into Markdown and return the paths written.

    ``cleaner=None`` writes raw document bodies. A cleaner failure aborts the
    whole call.
    """
    if mode == ExportMode.SINGLE:
        path = await SingleFileOutput(output_dir, cleaner).write(categories, identifier, crawl_result)
        return [path]
    return await MultiFileOutput(output_dir, cleaner).write(categories, identifier, crawl_result)


__all__ = [
    "DocumentContent",
    "MultiFileOutput",
    "SingleFileOutput",
    "cleanup_markdown_document",
    "extract_headers",
    "process_category_content",
    "process_document",
    "write_documents_to_file",
]
