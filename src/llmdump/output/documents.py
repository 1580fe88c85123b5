"""Resolve category URLs into document content ready for output."""

import logging

from pydantic import BaseModel

from llmdump.models import Category, CrawlResult
from llmdump.oracle.base import Cleaner

logger = logging.getLogger(__name__)


class DocumentContent(BaseModel):
    """A document as it appears in an exported file."""

    title: str
    url: str
    content: str


async def cleanup_markdown_document(markdown: str, cleaner: Cleaner | None) -> str:
    """Pass ``markdown`` through ``cleaner``; empty input never reaches it."""
    if not markdown:
        return ""
    if cleaner is None:
        return markdown
    return await cleaner.clean(markdown)


async def process_document(
    url: str,
    crawl_result: CrawlResult,
    cleaner: Cleaner | None = None,
) -> DocumentContent | None:
    """Look up ``url`` and clean its body.

    Returns None when the URL does not resolve or the page lacks a title,
    URL or Markdown body.
    """
    page = crawl_result.find(url)
    if page is None or not page.title or not page.url or not page.markdown:
        logger.debug("Skipping unresolvable or incomplete document %s", url)
        return None

    content = await cleanup_markdown_document(page.markdown, cleaner)
    return DocumentContent(title=page.title, url=page.url, content=content)


async def process_category_content(
    category: Category,
    crawl_result: CrawlResult,
    cleaner: Cleaner | None = None,
) -> list[DocumentContent]:
    """Process every document of ``category`` one after another, in URL order."""
    documents = []
    for url in category.ref_urls:
        document = await process_document(url, crawl_result, cleaner)
        if document:
            documents.append(document)
    return documents


def extract_headers(content: str) -> list[str]:
    """Return the heading lines of ``content``, each demoted by one level."""
    return [
        line.replace("#", "##", 1).strip()
        for line in content.split("\n")
        if line.startswith("#")
    ]
