"""Multi-file output writer."""

import logging
from pathlib import Path

import aiofiles

from llmdump.models import Category, CategorySet, CrawlResult, Identifier
from llmdump.oracle.base import Cleaner
from llmdump.output.documents import process_category_content
from llmdump.utils.paths import category_filename

logger = logging.getLogger(__name__)


class MultiFileOutput:
    """Write each non-empty category to its own Markdown file."""

    def __init__(self, output_dir: Path, cleaner: Cleaner | None = None):
        self.output_dir = Path(output_dir)
        self.cleaner = cleaner

    def get_filepath(
        self, identifier: Identifier, category: Category, used: set[str] | None = None
    ) -> Path:
        """Path for one category, suffixed with _2, _3... if the name is already in ``used``."""
        filename = category_filename(identifier.identifier, category.category)
        if used is None:
            return self.output_dir / filename

        stem = filename.removesuffix(".md")
        n = 2
        while filename.lower() in used:
            filename = f"{stem}_{n}.md"
            n += 1
        if n > 2:
            logger.warning(
                "Category %r collides with an earlier file name, writing %s", category.category, filename
            )
        used.add(filename.lower())
        return self.output_dir / filename

    async def write(
        self,
        categories: CategorySet,
        identifier: Identifier,
        crawl_result: CrawlResult,
    ) -> list[Path]:
        """Write one file per category; files already written stay if a later one fails."""
        written: list[Path] = []
        used: set[str] = set()

        for category in categories.categories:
            if not category.ref_urls:
                continue

            content = await self._render(category, crawl_result)

            self.output_dir.mkdir(parents=True, exist_ok=True)
            filepath = self.get_filepath(identifier, category, used)
            async with aiofiles.open(filepath, "w", encoding="utf-8") as f:
                await f.write(content)

            written.append(filepath)

        return written

    async def _render(self, category: Category, crawl_result: CrawlResult) -> str:
        parts = [f"# {category.category}", ""]

        documents = await process_category_content(category, crawl_result, self.cleaner)
        for doc in documents:
            parts.append(f"## {doc.title}")
            parts.append("")
            parts.append(f"[{doc.url}]({doc.url})")
            parts.append("")
            parts.append(doc.content)
            parts.append("")

        return "\n".join(parts) + "\n"
