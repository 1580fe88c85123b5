"""Filesystem storage for crawl sessions.

Layout under ``data_dir``::

    current                                  name of the current session
    history/{identifier}-{timestamp}/
        crawlResult.json
        original-categories.json             classifier output, never rewritten
        categories.json                      working copy, rewritten on every change
        identifier.json
        output/                              exported Markdown
"""

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import TypeVar

import aiofiles
from pydantic import BaseModel

from llmdump.config import StorageConfig
from llmdump.models import CategorySet, CrawlResult, Identifier
from llmdump.utils.paths import MAX_STEM_LENGTH, safe_filename_stem

logger = logging.getLogger(__name__)

CRAWL_RESULT_FILE = "crawlResult.json"
CATEGORIES_FILE = "categories.json"
ORIGINAL_CATEGORIES_FILE = "original-categories.json"
IDENTIFIER_FILE = "identifier.json"
OUTPUT_DIR = "output"

ModelT = TypeVar("ModelT", bound=BaseModel)


class SessionStore:
    """Load and save the JSON artifacts of crawl sessions."""

    def __init__(self, config: StorageConfig | None = None):
        self.config = config or StorageConfig()

    @property
    def history_dir(self) -> Path:
        return self.config.history_dir

    def ensure_directories(self) -> None:
        self.history_dir.mkdir(parents=True, exist_ok=True)

    def session_path(self, name: str) -> Path:
        """Directory of the session called ``name``; always directly under the history directory."""
        return self.history_dir / safe_filename_stem(name)

    def output_dir(self, session_path: Path) -> Path:
        return session_path / OUTPUT_DIR

    async def create_session(
        self,
        crawl_result: CrawlResult,
        categories: CategorySet,
        identifier: Identifier,
    ) -> Path:
        """Persist a new session, make it current and return its directory."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        stem = safe_filename_stem(identifier.identifier)[: MAX_STEM_LENGTH - len(timestamp) - 1]
        path = self.session_path(f"{stem}-{timestamp}")
        path.mkdir(parents=True, exist_ok=False)

        await self.save_crawl_result(crawl_result, path)
        await self.save_categories(categories, path, ORIGINAL_CATEGORIES_FILE)
        await self.save_categories(categories, path)
        await self.save_identifier(identifier, path)
        await self.set_current(path)

        logger.debug("Created session %s", path)
        return path

    async def save_crawl_result(self, crawl_result: CrawlResult, path: Path) -> None:
        await self._write_json(
            path / CRAWL_RESULT_FILE, crawl_result.model_dump_json(indent=2, by_alias=True)
        )

    async def load_crawl_result(self, path: Path) -> CrawlResult | None:
        return await self._read_model(path / CRAWL_RESULT_FILE, CrawlResult)

    async def save_categories(
        self, categories: CategorySet, path: Path, filename: str = CATEGORIES_FILE
    ) -> None:
        await self._write_json(path / filename, categories.to_json())

    async def load_categories(
        self, path: Path, filename: str = CATEGORIES_FILE
    ) -> CategorySet | None:
        return await self._read_model(path / filename, CategorySet)

    async def save_identifier(self, identifier: Identifier, path: Path) -> None:
        await self._write_json(path / IDENTIFIER_FILE, identifier.model_dump_json(indent=2))

    async def load_identifier(self, path: Path) -> Identifier | None:
        return await self._read_model(path / IDENTIFIER_FILE, Identifier)

    async def set_current(self, path: Path) -> None:
        self.config.data_dir.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.config.pointer_file, "w", encoding="utf-8") as f:
            await f.write(path.name)

    async def get_current_path(self) -> Path | None:
        """Return the directory of the current session, if it still exists."""
        pointer = self.config.pointer_file
        if not pointer.exists():
            return None
        async with aiofiles.open(pointer, encoding="utf-8") as f:
            name = (await f.read()).strip()
        if not name:
            return None
        path = self.session_path(name)
        return path if path.is_dir() else None

    def list_crawls(self) -> list[str]:
        """Names of all stored sessions, sorted."""
        if not self.history_dir.exists():
            return []
        return sorted(p.name for p in self.history_dir.iterdir() if p.is_dir())

    async def delete_crawl(self, name: str) -> None:
        """Remove a stored session; clears the current pointer if it pointed there."""
        path = self.session_path(name)
        current = await self.get_current_path()
        shutil.rmtree(path)
        if current is not None and current.name == path.name:
            self.config.pointer_file.unlink(missing_ok=True)
        logger.debug("Deleted session %s", path)

    async def _write_json(self, path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(payload)

    async def _read_model(self, path: Path, model: type[ModelT]) -> ModelT | None:
        if not path.exists():
            return None
        async with aiofiles.open(path, encoding="utf-8") as f:
            return model.model_validate_json(await f.read())
