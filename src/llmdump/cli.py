"""Command-line interface for llmdump."""

import asyncio
import logging
import os
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from llmdump import __version__
from llmdump.config import DEFAULT_CONFIG_PATH, AppConfig, CleanupMode, ExportMode, mask_secret
from llmdump.interactive import InteractiveSession
from llmdump.orchestrator import Orchestrator
from llmdump.session import Session

app = typer.Typer(
    name="llmdump",
    help="Crawl documentation, group it into categories and write LLM-ready Markdown.",
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"llmdump version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # HTTP client chatter drowns out our own debug output
    for noisy in ("httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def _resolve_config(
    config_path: Path,
    data_dir: Optional[Path],
    firecrawl_key: Optional[str],
    openai_key: Optional[str],
    verbose: bool,
) -> AppConfig:
    """Load the config file, then layer environment and command-line values on top.

    Keys given on the command line are saved to the config file for later runs.
    """
    config = AppConfig.load(config_path)

    if firecrawl_key or openai_key:
        stored = config.model_copy(deep=True)
        if firecrawl_key:
            stored.crawl.api_key = firecrawl_key
        if openai_key:
            stored.oracle.api_key = openai_key
        stored.save(config_path)
        config = stored

    config.crawl.api_key = firecrawl_key or os.environ.get("FIRECRAWL_API_KEY") or config.crawl.api_key
    config.oracle.api_key = openai_key or os.environ.get("OPENAI_API_KEY") or config.oracle.api_key
    config.oracle.base_url = os.environ.get("OPENAI_BASE_URL") or config.oracle.base_url
    if data_dir is not None:
        config.storage.data_dir = data_dir
    config.verbose = verbose or config.verbose
    return config


def _run(coro: Coroutine[Any, Any, Any], verbose: bool) -> Any:
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if verbose:
            console.print_exception()
        raise typer.Exit(1)


def _orchestrator(ctx: typer.Context) -> Orchestrator:
    config: AppConfig = ctx.obj
    return Orchestrator(config, console)


async def _require_session(orchestrator: Orchestrator, name: Optional[str]) -> Session:
    session = await orchestrator.open_crawl(name)
    if session is None:
        target = name or "current crawl"
        raise ValueError(f"No usable crawl found for {target}. Run 'llmdump list' to see stored crawls.")
    return session


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    config_path: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        envvar="LLMDUMP_CONFIG",
        help="Path to the TOML config file",
    ),
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Directory holding stored crawls (default: ./.data)",
    ),
    firecrawl_key: Optional[str] = typer.Option(
        None,
        "--firecrawl-key",
        "-k",
        help="Firecrawl API key (saved to the config file)",
    ),
    openai_key: Optional[str] = typer.Option(
        None,
        "--openai-key",
        "-o",
        help="OpenAI API key (saved to the config file)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
):
    """Crawl documentation and curate it for LLM context windows.

    Without a command, opens the interactive menu.
    """
    _configure_logging(verbose)
    config = _resolve_config(config_path, data_dir, firecrawl_key, openai_key, verbose)
    ctx.obj = config
    ctx.meta["config_path"] = config_path

    if ctx.invoked_subcommand is None:
        orchestrator = Orchestrator(config, console)
        orchestrator.store.ensure_directories()
        _run(InteractiveSession(orchestrator, console).run(), config.verbose)


@app.command()
def crawl(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="URL to start crawling from"),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-l",
        min=1,
        help="Maximum number of pages to crawl (default from config: 50)",
    ),
):
    """
    Crawl a site, name and categorize its pages, and store the result.

    Examples:

        llmdump crawl https://docs.example.com

        llmdump crawl https://docs.example.com --limit 200
    """
    orchestrator = _orchestrator(ctx)

    async def _crawl():
        session = await orchestrator.start_new_crawl(url, limit)
        orchestrator.print_summary(session)

    _run(_crawl(), ctx.obj.verbose)


@app.command("list")
def list_crawls(ctx: typer.Context):
    """List stored crawls."""
    orchestrator = _orchestrator(ctx)
    crawls = orchestrator.list_crawls()
    if not crawls:
        console.print("[yellow]No existing crawls found.[/yellow]")
        return

    current = asyncio.run(orchestrator.store.get_current_path())

    table = Table(title="Stored Crawls")
    table.add_column("Name", style="cyan")
    table.add_column("Current", justify="center")
    for name in crawls:
        table.add_row(escape(name), "*" if current is not None and current.name == name else "")
    console.print(table)


@app.command()
def show(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Crawl name (default: current crawl)"),
):
    """Show categories with document and token totals."""
    orchestrator = _orchestrator(ctx)

    async def _show():
        session = await _require_session(orchestrator, name)
        console.print(f"[bold]{escape(session.identifier.identifier)}[/bold] [dim]({session.name})[/dim]")
        orchestrator.print_summary(session)

    _run(_show(), ctx.obj.verbose)


@app.command()
def export(
    ctx: typer.Context,
    name: Optional[str] = typer.Argument(None, help="Crawl name (default: current crawl)"),
    mode: Optional[ExportMode] = typer.Option(
        None,
        "--mode",
        "-m",
        help="'single' (one file) or 'multiple' (one file per category)",
    ),
    cleanup: Optional[CleanupMode] = typer.Option(
        None,
        "--cleanup",
        help="'ai' (language model), 'local' (rule based) or 'none' (raw)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        help="Output directory (default: the crawl's output/ directory)",
    ),
):
    """
    Write a crawl's categories as Markdown.

    Examples:

        llmdump export --mode multiple

        llmdump export docs-2025 --cleanup none --output ./docs/
    """
    orchestrator = _orchestrator(ctx)

    async def _export():
        session = await _require_session(orchestrator, name)
        return await orchestrator.export(session, mode, cleanup, output)

    paths = _run(_export(), ctx.obj.verbose)
    if not paths:
        console.print("[yellow]No non-empty categories to export.[/yellow]")
        return
    console.print("[green]Documents written to:[/green]")
    for path in paths:
        console.print(f"  [blue]- {path}[/blue]")


@app.command()
def delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Crawl name to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete a stored crawl."""
    orchestrator = _orchestrator(ctx)
    if name not in orchestrator.list_crawls():
        console.print(f"[red]No stored crawl named {escape(name)}.[/red]")
        raise typer.Exit(1)
    if not yes and not typer.confirm(f"Are you sure you want to delete {name}?"):
        raise typer.Exit(0)
    _run(orchestrator.delete_crawl(name), ctx.obj.verbose)
    console.print(f"[green]Deleted {escape(name)}[/green]")


@app.command("config")
def show_config(
    ctx: typer.Context,
    firecrawl_key: Optional[str] = typer.Option(None, "--firecrawl-key", help="Store a Firecrawl API key"),
    openai_key: Optional[str] = typer.Option(None, "--openai-key", help="Store an OpenAI API key"),
):
    """Store API keys and show the effective configuration (keys masked)."""
    config: AppConfig = ctx.obj
    if firecrawl_key or openai_key:
        config_path: Path = ctx.meta["config_path"]
        stored = AppConfig.load(config_path)
        if firecrawl_key:
            stored.crawl.api_key = config.crawl.api_key = firecrawl_key
        if openai_key:
            stored.oracle.api_key = config.oracle.api_key = openai_key
        stored.save(config_path)
        console.print(f"[green]Saved API keys to {config_path}[/green]")

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Firecrawl API key", mask_secret(config.crawl.api_key))
    table.add_row("OpenAI API key", mask_secret(config.oracle.api_key))
    table.add_row("Crawl API URL", config.crawl.api_url)
    table.add_row("Crawl page limit", str(config.crawl.limit))
    table.add_row("Model", config.oracle.model)
    table.add_row("Data directory", str(config.storage.data_dir))
    table.add_row("Export mode", config.export.mode.value)
    table.add_row("Export cleanup", config.export.cleanup.value)
    console.print(table)


if __name__ == "__main__":
    app()
