"""markharvest CLI application using Typer."""

import asyncio
import sys
import time
from enum import Enum
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule

from markharvest import __version__
from markharvest.config import settings
from markharvest.core.harvesting import (
    HarvestedDocument,
    MarkdownHarvester,
    RetrievalPolicy,
    SegmentedDocument,
    extract_urls,
)
from markharvest.utils.logging import configure_logging

app = typer.Typer(
    name="markharvest",
    help="markharvest - extract clean Markdown from the URLs found in text",
    add_completion=False,
)
console = Console()


class Mode(str, Enum):
    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        console.print(f"[bold cyan]markharvest[/bold cyan] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """markharvest - extract clean Markdown from the URLs found in text."""
    pass


def read_text(text: str | None) -> str:
    """
    Resolve the input text from the argument, piped stdin or an interactive prompt.

    Raises:
        typer.Exit: If no text was provided
    """
    if text is None and not sys.stdin.isatty():
        text = sys.stdin.read()
    if text is None:
        console.print("Enter text containing URLs to extract content from:")
        console.print("[dim]Example: Check out https://example.com and https://httpbin.org/html[/dim]")
        text = typer.prompt("Your text")
    if not text or not text.strip():
        console.print("\n[bold red]❌ No input text provided[/bold red]")
        raise typer.Exit(code=1)
    return text


def show_document(document: HarvestedDocument) -> None:
    console.print(Rule(f"[bold cyan]{document.source}[/bold cyan]"))
    console.print(document.markdown, markup=False, highlight=False)


def show_segmented(document: SegmentedDocument) -> None:
    console.print(Rule(f"[bold cyan]{document.source}[/bold cyan]"))
    if document.error:
        console.print(f"[bold red]❌ Segmentation failed:[/bold red] {document.error}")
        return
    for segment in document.segments:
        console.print(
            f"[yellow]── segment {segment.sequence}/{len(document.segments)} "
            f"({len(segment.text)} chars, {segment.overlap_length} overlap)[/yellow]"
        )
        console.print(segment.text, markup=False, highlight=False)


def show_no_urls() -> None:
    console.print("\n[yellow]💡 No URLs found in the input text[/yellow]")


@app.command()
def harvest(
    text: Annotated[
        str | None,
        typer.Argument(help="Text containing URLs (read from stdin or prompted when omitted)"),
    ] = None,
    mode: Annotated[
        Mode,
        typer.Option("--mode", "-m", help="Process URLs one by one or all at once"),
    ] = Mode.SEQUENTIAL,
    chunk_size: Annotated[
        int | None,
        typer.Option("--chunk-size", "-c", help="Split each document into segments of this many characters"),
    ] = None,
    overlap: Annotated[
        int | None,
        typer.Option("--overlap", "-o", help="Characters repeated between segments (default from settings)"),
    ] = None,
    timeout: Annotated[
        int | None,
        typer.Option("--timeout", "-t", help="Per-request timeout in milliseconds"),
    ] = settings.request_timeout_ms,
    max_redirects: Annotated[
        int,
        typer.Option("--max-redirects", help="Maximum redirects followed per request"),
    ] = settings.max_redirects,
    cookies: Annotated[
        bool,
        typer.Option("--cookies/--no-cookies", help="Keep cookies between requests"),
    ] = settings.persist_cookies,
    log_level: Annotated[
        LogLevel,
        typer.Option("--log-level", help="Logging level", case_sensitive=False),
    ] = LogLevel(settings.log_level),
) -> None:
    """
    Fetch every URL found in TEXT and print its main content as Markdown.

    Examples:
        # Sequential processing
        markharvest harvest "Read https://example.com/article"

        # Concurrent processing, results printed as they arrive
        markharvest harvest "https://a.example https://b.example" --mode concurrent

        # Segments of 800 characters with 80 characters of overlap
        markharvest harvest "https://example.com" --chunk-size 800 --overlap 80
    """
    configure_logging(log_level=log_level.value, environment=settings.environment)
    text = read_text(text)

    builder = RetrievalPolicy.builder().max_redirects(max_redirects).persist_cookies(cookies)
    if timeout is not None:
        builder = builder.timeout(timeout)
    policy = builder.build()

    # The configured overlap only applies when it fits the requested size
    default_overlap = settings.chunk_overlap
    if chunk_size is not None and overlap is None and default_overlap is not None:
        if default_overlap < chunk_size:
            overlap = default_overlap

    harvester = MarkdownHarvester()
    start_time = time.perf_counter()
    delivered = 0

    if mode is Mode.SEQUENTIAL:
        if chunk_size is None:
            documents = harvester.harvest(text, policy)
            for document in documents:
                show_document(document)
        else:
            documents = harvester.harvest_segmented(text, policy, chunk_size, overlap)
            for document in documents:
                show_segmented(document)
        delivered = len(documents)
        if not extract_urls(text):
            show_no_urls()
    else:

        def on_result(document: HarvestedDocument | SegmentedDocument | None) -> None:
            nonlocal delivered
            if document is None:
                show_no_urls()
            elif isinstance(document, SegmentedDocument):
                delivered += 1
                show_segmented(document)
            else:
                delivered += 1
                show_document(document)

        if chunk_size is None:
            asyncio.run(harvester.harvest_streaming(text, policy, on_result))
        else:
            asyncio.run(
                harvester.harvest_segmented_streaming(text, policy, chunk_size, overlap, on_result)
            )

    elapsed = time.perf_counter() - start_time
    console.print(
        Panel(
            f"[bold green]✅ {delivered} document(s) harvested[/bold green] "
            f"in {elapsed:.2f}s ({mode.value})",
            border_style="green",
        )
    )


@app.command()
def urls(
    text: Annotated[
        str | None,
        typer.Argument(help="Text containing URLs (read from stdin or prompted when omitted)"),
    ] = None,
) -> None:
    """List the URLs discovered in TEXT, in order of first appearance."""
    found = extract_urls(read_text(text))
    if not found:
        show_no_urls()
        return
    for url in found:
        console.print(url, markup=False, highlight=False)


if __name__ == "__main__":
    app()
