"""Command-line interface for bookshelf.

Built with Typer for commands and Rich for output.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import Config, get_config

app = typer.Typer(
    name="bookshelf",
    help="Build the bookshelf books.json from Goodreads.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def configure_logging(verbose: bool = False) -> None:
    """Route library logging through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def resolve_config(**overrides) -> Config:
    """Apply command-line overrides (ignoring unset ones) to the global config."""
    config = get_config()
    overrides = {key: value for key, value in overrides.items() if value is not None}
    return replace(config, **overrides) if overrides else config


def check_config(config: Config, require_feed: bool) -> None:
    """Print configuration errors and exit if there are any."""
    errors = config.validate(require_feed=require_feed)
    for error in errors:
        print_error(error)
    if errors:
        raise typer.Exit(1)


def format_book_table(books: list, title: str = "Books") -> Table:
    """Create a rich table for displaying books."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Title", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("Read", style="yellow")
    table.add_column("Rating", justify="center")
    table.add_column("Cover", justify="center")
    table.add_column("Source")

    for book in books:
        rating = "★" * book.rating + "☆" * (5 - book.rating) if book.rating else "-"
        table.add_row(
            book.title,
            book.author,
            book.read_at or "-",
            rating,
            "✓" if book.image_url else "-",
            book.source.value,
        )

    return table


# ============================================================================
# Commands
# ============================================================================


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Build the bookshelf books.json from Goodreads."""
    configure_logging(verbose)


@app.command()
def version() -> None:
    """Show version."""
    console.print(f"bookshelf {__version__}")


@app.command()
def fetch(
    csv_path: Optional[Path] = typer.Option(None, "--csv", "-c", help="Goodreads CSV export"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="books.json path"),
    feed_url: Optional[str] = typer.Option(None, "--feed-url", "-f", help="Goodreads RSS feed URL"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Merge without writing"),
) -> None:
    """Merge the CSV export, RSS feed and existing books.json."""
    from .api import GoodreadsError
    from .etl import PipelineError, make_client, run_fetch
    from .export import DocumentError
    from .imports import ParseError

    config = resolve_config(csv_path=csv_path, output_path=output, feed_url=feed_url)
    check_config(config, require_feed=True)
    client = make_client(config)

    console.print("[dim]Starting book data collection...[/dim]")
    try:
        result = run_fetch(config=config, client=client, dry_run=dry_run)
    except (PipelineError, GoodreadsError, DocumentError, ParseError) as e:
        print_error(f"Error fetching or parsing book data: {e}")
        raise typer.Exit(1)

    stats = result.stats
    table = Table(title="Merge Summary", show_header=False)
    table.add_column("Source", style="cyan")
    table.add_column("Books", justify="right")
    table.add_row("Existing books.json", str(stats.existing))
    table.add_row("From CSV", str(stats.csv))
    table.add_row("From RSS", str(stats.feed))
    table.add_row("Covers kept from existing", str(stats.donated_images))
    table.add_row("[bold]Merged result[/bold]", f"[bold]{stats.total}[/bold]")
    console.print(table)

    if result.books:
        oldest, newest = result.oldest, result.newest
        console.print("\nDate range:")
        console.print(f"  Oldest: {oldest.read_at or 'No date'} - {oldest.title}")
        console.print(f"  Newest: {newest.read_at or 'No date'} - {newest.title}")

    if dry_run:
        print_info("Dry run: books.json not written.")
    else:
        print_success(f"Wrote {stats.total} books to {result.output_path}")


@app.command()
def covers(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="books.json path"),
    delay: Optional[float] = typer.Option(
        None, "--delay", "-d", help="Seconds between page requests"
    ),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Max books to look up"),
    progress: bool = typer.Option(True, "--progress/--no-progress", help="Show progress bar"),
) -> None:
    """Scrape Goodreads book pages for missing cover images."""
    from .etl import PipelineError, books_needing_covers, make_client, run_covers
    from .export import DocumentError, load_document

    config = resolve_config(output_path=output, cover_delay=delay)
    check_config(config, require_feed=False)
    output_path = config.output_path

    try:
        document = load_document(output_path)
    except DocumentError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if document is None:
        print_error(f"{output_path} not found")
        raise typer.Exit(1)

    missing = books_needing_covers(document.books)
    console.print(f"Found {len(missing)} books without covers")
    if not missing:
        print_success("All books have covers! Nothing to do.")
        return

    try:
        result = run_covers(
            config=config,
            client=make_client(config),
            document=document,
            limit=limit,
            show_progress=progress,
        )
    except (PipelineError, DocumentError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    for title, reason in result.failures:
        print_warning(f"{title}: {reason}")

    console.print("\n[bold]Summary[/bold]")
    console.print(f"  Total processed: {result.processed}")
    console.print(f"  Successfully updated: {result.updated}")
    console.print(f"  Failed: {result.failed}")
    if result.processed:
        print_success(f"Saved {output_path}")


@app.command()
def show(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="books.json path"),
    limit: int = typer.Option(20, "--limit", "-l", help="Max books to show"),
) -> None:
    """Show the books in books.json."""
    from .export import DocumentError, load_document

    config = get_config()
    output_path = output or config.output_path

    try:
        document = load_document(output_path)
    except DocumentError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if document is None:
        print_error(f"{output_path} not found")
        raise typer.Exit(1)

    if not document.books:
        console.print("[dim]No books found.[/dim]")
        return

    console.print(format_book_table(document.books[:limit], title=f"Books ({len(document.books)})"))
    if document.last_updated:
        print_info(f"Last updated: {document.last_updated}")
