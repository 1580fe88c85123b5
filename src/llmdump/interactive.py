"""Interactive menus for reviewing, refining and exporting crawls."""

import logging
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from llmdump import __version__
from llmdump.config import CleanupMode, ExportMode
from llmdump.orchestrator import Orchestrator
from llmdump.output import extract_headers
from llmdump.session import Session
from llmdump.tokens import estimate_tokens, format_tokens

logger = logging.getLogger(__name__)

_OUTLINE_LINES = 5


class InteractiveSession:
    """Guide the operator through crawling, pruning, splitting and exporting."""

    def __init__(self, orchestrator: Orchestrator, console: Optional[Console] = None):
        self.orchestrator = orchestrator
        self.console = console or orchestrator.console

    async def run(self) -> None:
        """Show the main menu until the operator exits."""
        self.console.print()
        self.console.print(Panel.fit(
            "[bold blue]LLMDump[/bold blue]\n"
            "Crawl documentation, clean up extra markup and write Markdown for LLMs\n"
            f"[dim]v{__version__}[/dim]",
            border_style="blue",
        ))

        while True:
            self.console.print()
            self.console.print("[bold]Main menu[/bold]")
            self.console.print("  1. Start new crawl")
            self.console.print("  2. Open existing crawl")
            self.console.print("  3. Delete crawl")
            self.console.print("  4. Exit")
            choice = Prompt.ask("What would you like to do?", choices=["1", "2", "3", "4"], default="2")

            if choice == "1":
                session = await self._start_new_crawl()
            elif choice == "2":
                session = await self._open_existing_crawl()
            elif choice == "3":
                await self._delete_crawl()
                continue
            else:
                self.console.print("[blue]Goodbye![/blue]")
                return

            if session:
                await self.processing_menu(session)

    async def _start_new_crawl(self) -> Optional[Session]:
        url = Prompt.ask("Enter the URL to crawl (blank to go back)", default="").strip()
        if not url:
            return None
        limit = IntPrompt.ask(
            "Maximum number of pages to crawl",
            default=self.orchestrator.config.crawl.limit,
        )
        try:
            return await self.orchestrator.start_new_crawl(url, limit)
        except Exception as e:
            logger.debug("New crawl failed", exc_info=True)
            self.console.print(f"[red]Error crawling website: {escape(str(e))}[/red]")
            return None

    def _select_crawl(self, action: str) -> Optional[str]:
        crawls = self.orchestrator.list_crawls()
        if not crawls:
            self.console.print("[yellow]No existing crawls found.[/yellow]")
            return None

        table = Table(show_header=True)
        table.add_column("#", style="dim", width=3)
        table.add_column("Crawl", style="cyan")
        table.add_row("0", "cancel")
        for i, name in enumerate(crawls, 1):
            table.add_row(str(i), name)
        self.console.print(table)

        choice = IntPrompt.ask(
            f"Select a crawl to {action}",
            default=0,
            choices=[str(i) for i in range(len(crawls) + 1)],
        )
        return crawls[choice - 1] if choice else None

    async def _open_existing_crawl(self) -> Optional[Session]:
        name = self._select_crawl("open")
        if not name:
            return None
        session = await self.orchestrator.open_crawl(name)
        if session is None:
            self.console.print("[yellow]Missing data from selected crawl.[/yellow]")
        return session

    async def _delete_crawl(self) -> None:
        name = self._select_crawl("delete")
        if not name:
            return
        if Confirm.ask(f"Are you sure you want to delete {name}?", default=False):
            await self.orchestrator.delete_crawl(name)
            self.console.print(f"[green]Deleted {name}[/green]")

    async def processing_menu(self, session: Session) -> Session:
        """Review and export one session until the operator goes back."""
        while True:
            self.console.print()
            self.orchestrator.print_summary(session)
            self.console.print("  1. View/prune documents (in case the crawl picked up junk)")
            self.console.print("  2. Export & clean documents (AI)")
            self.console.print("  3. Export with local cleanup (no AI, faster)")
            self.console.print("  4. Export raw documents")
            self.console.print("  5. Back to main menu")
            choice = Prompt.ask("What would you like to do?", choices=["1", "2", "3", "4", "5"], default="1")

            if choice == "1":
                session = await self.browse_categories(session)
            elif choice == "5":
                return session
            else:
                cleanup = {"2": CleanupMode.AI, "3": CleanupMode.LOCAL, "4": CleanupMode.NONE}[choice]
                await self._export(session, cleanup)

    async def _export(self, session: Session, cleanup: CleanupMode) -> None:
        summary = session.summary()
        self.console.print("\n[bold]How would you like to concatenate the documents?[/bold]")
        self.console.print(f"  1. All to one file ~ {format_tokens(summary.tokens)} tokens")
        self.console.print(f"  2. One file per category ~ {summary.average_tokens_per_category:,} tokens")
        self.console.print("  3. Back")
        choice = Prompt.ask("Choose output mode", choices=["1", "2", "3"], default="1")
        if choice == "3":
            return

        mode = ExportMode.SINGLE if choice == "1" else ExportMode.MULTIPLE
        try:
            paths = await self.orchestrator.export(session, mode, cleanup)
        except Exception as e:
            logger.debug("Export failed", exc_info=True)
            self.console.print(f"[red]Error writing documents to file: {escape(str(e))}[/red]")
            return

        self.console.print("[green]Documents written to:[/green]")
        for path in paths:
            self.console.print(f"  [blue]- {path}[/blue]")

    def _show_category(self, session: Session, index: int) -> None:
        category = session.categories.categories[index]
        lines = []
        for i, url in enumerate(category.ref_urls, 1):
            page = session.crawl_result.find(url)
            markdown = (page.markdown if page else None) or ""
            title = (page.title if page else None) or url
            description = (page.metadata.description if page else None) or "No description"
            doc_tokens = format_tokens(estimate_tokens(markdown))
            lines.append(f"[bold]{i}. {escape(title)}[/bold] ~ {doc_tokens} tokens")
            lines.append(f"   [italic]{escape(url)}[/italic]")
            lines.append(f"   {escape(description)}")
            for header in extract_headers(markdown)[:_OUTLINE_LINES]:
                lines.append(f"   [dim]{escape(header)}[/dim]")
            lines.append("")

        tokens = session.summary().categories[index].tokens
        self.console.print(Panel(
            "\n".join(lines).rstrip() or "[dim]No documents[/dim]",
            title=f"{escape(category.category)} ~ {format_tokens(tokens)} tokens",
            subtitle=f"Page {index + 1} of {len(session.categories.categories)}",
        ))

    async def browse_categories(self, session: Session) -> Session:
        """Page through categories, pruning or splitting them in place."""
        index = 0
        while session.categories.categories:
            index = min(index, len(session.categories.categories) - 1)
            self._show_category(session, index)
            category = session.categories.categories[index]

            choices = {"b": "Back to menu", "x": "Prune documents", "s": "Split category (AI)"}
            if index < len(session.categories.categories) - 1:
                choices["n"] = "Next page"
            if index > 0:
                choices["p"] = "Previous page"
            self.console.print("  " + "  ".join(f"[cyan]{k}[/cyan]={v}" for k, v in choices.items()))
            action = Prompt.ask("Navigation", choices=list(choices), default="n" if "n" in choices else "b")

            if action == "n":
                index += 1
            elif action == "p":
                index -= 1
            elif action == "x":
                session = await self._prune(session, category.category, category.ref_urls)
            elif action == "s":
                session = await self._split(session, category.category, len(category.ref_urls))
            else:
                break
        return session

    async def _prune(self, session: Session, category_name: str, urls: list[str]) -> Session:
        raw = Prompt.ask("Document numbers to remove, comma separated (blank to cancel)", default="")
        selected = []
        for part in raw.split(","):
            part = part.strip()
            if part.isdigit() and 1 <= int(part) <= len(urls):
                selected.append(urls[int(part) - 1])
            elif part:
                self.console.print(f"[yellow]Ignoring '{escape(part)}'[/yellow]")
        if not selected:
            self.console.print("[yellow]Pruning cancelled.[/yellow]")
            return session

        session = await self.orchestrator.prune(session, category_name, selected)
        self.console.print(f"[green]Pruned {len(selected)} document(s).[/green]")
        return session

    async def _split(self, session: Session, category_name: str, size: int) -> Session:
        if not Confirm.ask(
            f'Split "{escape(category_name)}" into multiple categories using AI? '
            f"This will recategorize {size} sites.",
            default=False,
        ):
            self.console.print("[yellow]Category split cancelled.[/yellow]")
            return session

        try:
            session, result = await self.orchestrator.split(session, category_name)
        except Exception as e:
            logger.debug("Split failed", exc_info=True)
            self.console.print(f"[red]Failed to split category: {escape(str(e))}[/red]")
            return session

        self.orchestrator.print_split_result(result)
        for category in result.proposed.categories:
            self.console.print(f"\n[blue]{escape(category.category)}:[/blue]")
            for url in category.ref_urls:
                page = session.crawl_result.find(url)
                self.console.print(f"  [dim]- {escape((page.title if page else None) or url)}[/dim]")
        Prompt.ask("Press enter to continue", default="", show_default=False)
        return session
