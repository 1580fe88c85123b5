"""Single file output writer."""

from pathlib import Path

import aiofiles

from llmdump.models import CategorySet, CrawlResult, Identifier
from llmdump.oracle.base import Cleaner
from llmdump.output.documents import process_category_content
from llmdump.utils.paths import safe_filename_stem


class SingleFileOutput:
    """Write every category into one Markdown file named after the identifier."""

    def __init__(self, output_dir: Path, cleaner: Cleaner | None = None):
        self.output_dir = Path(output_dir)
        self.cleaner = cleaner

    def get_filepath(self, identifier: Identifier) -> Path:
        return self.output_dir / f"{safe_filename_stem(identifier.identifier)}.md"

    async def write(
        self,
        categories: CategorySet,
        identifier: Identifier,
        crawl_result: CrawlResult,
    ) -> Path:
        """Render all non-empty categories and write them in one go."""
        parts = [f"# {identifier.identifier}", ""]

        for category in categories.categories:
            if not category.ref_urls:
                continue

            parts.append(f"## {category.category}")
            parts.append("")

            documents = await process_category_content(category, crawl_result, self.cleaner)
            for doc in documents:
                parts.append(f"### {doc.title}")
                parts.append("")
                parts.append(f"[{doc.url}]({doc.url})")
                parts.append("")
                parts.append(doc.content)
                parts.append("")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.get_filepath(identifier)

        async with aiofiles.open(output_path, "w", encoding="utf-8") as f:
            await f.write("\n".join(parts) + "\n")

        return output_path
