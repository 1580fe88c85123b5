"""Coordinates crawl sessions: crawl, categorize, refine and export."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from llmdump.categories import (
    SplitResult,
    categorize_sites,
    generate_identifier,
)
from llmdump.config import AppConfig, CleanupMode, ExportMode
from llmdump.crawl import BaseCrawler, FirecrawlCrawler
from llmdump.oracle import MarkdownCleaner, OpenAIOracle
from llmdump.oracle.base import Oracle
from llmdump.output import write_documents_to_file
from llmdump.session import Session
from llmdump.storage import SessionStore
from llmdump.tokens import format_tokens

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs session workflows and persists every change."""

    def __init__(
        self,
        config: AppConfig,
        console: Console | None = None,
        store: SessionStore | None = None,
        crawler: BaseCrawler | None = None,
        oracle: Oracle | None = None,
    ):
        self.config = config
        self.console = console or Console()
        self.store = store or SessionStore(config.storage)
        # Pre-built collaborators are used as-is, without entering their context
        self._crawler = crawler
        self._oracle = oracle

    async def start_new_crawl(self, url: str, limit: int | None = None) -> Session:
        """Crawl ``url``, name and categorize the pages, then persist the session.

        Nothing is written unless crawl, naming and categorization all succeed.
        """
        limit = limit or self.config.crawl.limit
        self.console.print(f"[blue]Crawling {escape(url)} with limit {limit}...[/blue]")

        async with self._crawler_context() as crawler:
            with self.console.status("Waiting for crawl to finish..."):
                crawl_result = await crawler.crawl_with_retry(url, limit)

        documents = crawl_result.documents()
        self.console.print(f"[green]Crawled {len(documents)} pages[/green]")

        async with self._oracle_context() as oracle:
            with self.console.status("Naming crawl..."):
                identifier = await generate_identifier(documents, oracle)
            with self.console.status("Categorizing pages..."):
                categories = await categorize_sites(documents, oracle)

        path = await self.store.create_session(crawl_result, categories, identifier)
        session = Session.open(crawl_result, categories, identifier, path)
        if session.categories != categories:
            await self.save(session)

        self.console.print(f"[green]Saved crawl as {path.name}[/green]")
        return session

    async def open_crawl(self, name: str | None = None) -> Session | None:
        """Load a stored session by name, or the current one; make it current."""
        path = self.store.session_path(name) if name else await self.store.get_current_path()
        if path is None or not path.is_dir():
            return None

        crawl_result = await self.store.load_crawl_result(path)
        categories = await self.store.load_categories(path)
        identifier = await self.store.load_identifier(path)
        if crawl_result is None or categories is None or identifier is None:
            logger.warning("Session %s is missing artifacts", path)
            return None

        await self.store.set_current(path)
        return Session.open(crawl_result, categories, identifier, path)

    def list_crawls(self) -> list[str]:
        return self.store.list_crawls()

    async def delete_crawl(self, name: str) -> None:
        await self.store.delete_crawl(name)

    async def save(self, session: Session) -> None:
        if session.path is None:
            raise ValueError("Session has no storage path")
        await self.store.save_categories(session.categories, session.path)

    async def prune(self, session: Session, category_name: str, urls: list[str]) -> Session:
        session = session.prune(category_name, urls)
        await self.save(session)
        return session

    async def split(self, session: Session, category_name: str) -> tuple[Session, SplitResult]:
        async with self._oracle_context() as oracle:
            with self.console.status(f"Splitting {escape(category_name)}..."):
                session, result = await session.split(category_name, oracle)
        await self.save(session)
        return session, result

    async def export(
        self,
        session: Session,
        mode: ExportMode | None = None,
        cleanup: CleanupMode | None = None,
        output_dir: Path | None = None,
    ) -> list[Path]:
        """Write the session's categories as Markdown; returns the files written."""
        mode = mode or self.config.export.mode
        cleanup = cleanup or self.config.export.cleanup
        if output_dir is None:
            if session.path is None:
                raise ValueError("Session has no storage path; pass output_dir")
            output_dir = self.store.output_dir(session.path)

        logger.debug(
            "Exporting %s (%s, cleanup=%s) to %s",
            session.name, mode.value, cleanup.value, output_dir,
        )

        if cleanup == CleanupMode.AI:
            async with self._oracle_context() as oracle:
                with self.console.status("Cleaning and writing documents..."):
                    return await write_documents_to_file(
                        session.categories, session.identifier, session.crawl_result,
                        output_dir, oracle, mode,
                    )

        cleaner = MarkdownCleaner() if cleanup == CleanupMode.LOCAL else None
        return await write_documents_to_file(
            session.categories, session.identifier, session.crawl_result,
            output_dir, cleaner, mode,
        )

    def print_summary(self, session: Session) -> None:
        """Print document, category and token totals."""
        summary = session.summary()

        table = Table(
            title=(
                f"Documents: {summary.documents} - Categories: {summary.category_count}"
                f" ~ {format_tokens(summary.tokens)} tokens"
            ),
            title_justify="left",
        )
        table.add_column("#", style="dim", justify="right")
        table.add_column("Category", style="green")
        table.add_column("Documents", justify="right")
        table.add_column("~Tokens", justify="right")

        for i, row in enumerate(summary.categories, 1):
            table.add_row(str(i), escape(row.name), str(row.documents), format_tokens(row.tokens))

        self.console.print(table)

    def print_split_result(self, result: SplitResult) -> None:
        for name in result.merged:
            self.console.print(f"[yellow]Merged with existing category: {escape(name)}[/yellow]")
        for name in result.created:
            self.console.print(f"[green]Created new category: {escape(name)}[/green]")

    @asynccontextmanager
    async def _crawler_context(self) -> AsyncIterator[BaseCrawler]:
        if self._crawler is not None:
            yield self._crawler
            return
        async with FirecrawlCrawler(self.config.crawl) as crawler:
            yield crawler

    @asynccontextmanager
    async def _oracle_context(self) -> AsyncIterator[Oracle]:
        if self._oracle is not None:
            yield self._oracle
            return
        if not self.config.oracle.api_key:
            raise ValueError("OpenAI API key is required")
        async with OpenAIOracle(self.config.oracle) as oracle:
            yield oracle
