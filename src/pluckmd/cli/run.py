import asyncio
import dataclasses
import logging
from pathlib import Path
from typing import Annotated

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from pluckmd.cache import InMemoryCache
from pluckmd.config import GO_EXTRACTORS, Settings, load_settings
from pluckmd.core.ports.extractor import Extractor
from pluckmd.core.process import MarkdownProcessor
from pluckmd.core.resolve import ContentResolver
from pluckmd.core.run import Runner
from pluckmd.exceptions import PluckError, exception_hint
from pluckmd.extract.command import CommandExtractor
from pluckmd.extract.go import GoExtractor
from pluckmd.extract.yaml import YAMLExtractor
from pluckmd.fetch.github import GitHubFetcher
from pluckmd.fetch.local import LocalFetcher

console = Console()

DirOption = Annotated[
    Path,
    typer.Option("--dir", "-d", help="Directory containing markdown files to process (recursive)."),
]
TimeoutOption = Annotated[
    float | None,
    typer.Option("--timeout", "-t", help="Max run time in seconds (default: PLUCKMD_TIMEOUT or 60)."),
]
BaseDirOption = Annotated[
    Path | None,
    typer.Option(help="Directory that relative source paths resolve against (default: cwd)."),
]
GoExtractorOption = Annotated[
    str | None,
    typer.Option(help="Go extraction backend: tree-sitter or pluck."),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def create_processor(settings: Settings, client: httpx.AsyncClient) -> MarkdownProcessor:
    """Wire a processor around a fresh session cache. GitHub is tried before the local disk."""
    fetchers = [GitHubFetcher(client, token=settings.github_token), LocalFetcher(settings.base_dir)]
    go_extractor: Extractor = CommandExtractor() if settings.go_extractor == "pluck" else GoExtractor()
    return MarkdownProcessor(ContentResolver(InMemoryCache(), fetchers), [go_extractor, YAMLExtractor()])


def _resolve_settings(timeout: float | None, base_dir: Path | None, go_extractor: str | None) -> Settings:
    try:
        settings = load_settings()
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None

    if go_extractor is not None and go_extractor not in GO_EXTRACTORS:
        supported = escape(str(list(GO_EXTRACTORS)))
        console.print(f"[red]Unsupported Go extractor '{escape(go_extractor)}'. Supported: {supported}[/red]")
        raise typer.Exit(1)

    return dataclasses.replace(
        settings,
        timeout=timeout if timeout is not None else settings.timeout,
        base_dir=base_dir if base_dir is not None else settings.base_dir,
        go_extractor=go_extractor or settings.go_extractor,
    )


def _execute(directory: Path, settings: Settings, write: bool) -> list[Path]:
    async def _run() -> list[Path]:
        async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
            processor = create_processor(settings, client)
            try:
                return await Runner(processor).run(directory, timeout=settings.timeout, write=write)
            finally:
                await processor.close()

    try:
        return asyncio.run(_run())
    except PluckError as exc:
        console.print(f"[red]Failed:[/red] {escape(str(exc))}")
        hint = exception_hint(exc)
        if hint and hint != str(exc):
            console.print(f"  cause: {escape(hint)}")
        raise typer.Exit(1) from None


def run(
    dir: DirOption,
    timeout: TimeoutOption = None,
    base_dir: BaseDirOption = None,
    go_extractor: GoExtractorOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Render every pluck directive under DIR and write changed files back."""
    configure_logging(verbose)
    settings = _resolve_settings(timeout, base_dir, go_extractor)
    changed = _execute(dir, settings, write=True)
    for path in changed:
        console.print(f"[green]Updated[/green] {escape(str(path))}")
    console.print(f"{len(changed)} file(s) updated")


def check(
    dir: DirOption,
    timeout: TimeoutOption = None,
    base_dir: BaseDirOption = None,
    go_extractor: GoExtractorOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Exit non-zero if any markdown file under DIR has stale snippets. Nothing is written."""
    configure_logging(verbose)
    settings = _resolve_settings(timeout, base_dir, go_extractor)
    stale = _execute(dir, settings, write=False)
    if not stale:
        console.print("[green]All snippets are up to date[/green]")
        return
    for path in stale:
        console.print(f"[yellow]Stale[/yellow] {escape(str(path))}")
    raise typer.Exit(1)
