"""
MarkPort v1 - Ingest CLI

Command-line interface for previewing bookmark export files and importing
them through a running import service.

Usage:
    markport-ingest preview --file ~/bookmarks.html
    markport-ingest upload --file ~/pocket.csv --server http://localhost:8000
    markport-ingest formats
"""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from config import get_config
from importer import BookmarkImportError, parse_bookmark_file
from importer.parsers import get_registry

from .client import ImportClient, ImportClientError, JobLostError, PollTimeoutError

console = Console()

EXIT_OK = 0
EXIT_REQUEST_ERROR = 1
EXIT_JOB_FAILED = 2
EXIT_JOB_LOST = 3
EXIT_TIMEOUT = 4


def read_file(file: Path) -> str:
    """Read an export file as UTF-8 text, exiting on decode errors"""
    try:
        return file.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError:
        console.print(f"[red]Error:[/red] {file} is not valid UTF-8 text")
        sys.exit(EXIT_REQUEST_ERROR)


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """MarkPort - Bookmark Import Tool"""
    pass


@cli.command()
@click.option(
    "--file", "-f",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a bookmark export (Netscape HTML, Pinboard JSON, Pocket or Instapaper CSV)"
)
@click.option(
    "--limit", "-n",
    default=10,
    type=int,
    help="Number of bookmarks to show (default: 10)"
)
def preview(file: Path, limit: int):
    """
    Show what an export file contains without importing it.

    Detects the format locally and lists the first bookmarks found.
    """
    console.print(f"\n[bold blue]Bookmark File Preview[/bold blue]")
    console.print(f"File: {file}")
    console.print()

    try:
        result = parse_bookmark_file(read_file(file))
    except BookmarkImportError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_REQUEST_ERROR)

    console.print(f"Format: [cyan]{result.format.value}[/cyan]")
    console.print(f"Bookmarks: [green]{len(result.bookmarks)}[/green]")
    console.print()

    if not result.bookmarks:
        console.print("[yellow]No importable bookmarks found (only http/https URLs are kept).[/yellow]")
        return

    table = Table(title=f"First {min(limit, len(result.bookmarks))} bookmarks")
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("URL", style="green", max_width=60)
    table.add_column("Tags")
    table.add_column("Created")

    for bookmark in result.bookmarks[:limit]:
        table.add_row(
            bookmark.title or "-",
            bookmark.url,
            ", ".join(bookmark.tags) or "-",
            bookmark.created_at,
        )

    console.print(table)


@cli.command()
@click.option(
    "--file", "-f",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to a bookmark export file"
)
@click.option(
    "--server", "-s",
    default=None,
    help="Import service URL (default: MARKPORT_SERVER_URL or http://localhost:8000)"
)
@click.option(
    "--poll-interval",
    default=None,
    type=float,
    help="Seconds between status checks (default: 2)"
)
@click.option(
    "--timeout",
    default=None,
    type=float,
    help="Seconds to wait for the import to finish (default: 600)"
)
def upload(file: Path, server: str | None, poll_interval: float | None, timeout: float | None):
    """
    Import an export file through the import service.

    Uploads the file, then polls the import job until it finishes.
    """
    settings = get_config().client
    server = server or settings.server_url
    poll_interval = poll_interval or settings.poll_interval
    timeout = timeout or settings.poll_timeout

    console.print(f"\n[bold blue]MarkPort Import[/bold blue]")
    console.print(f"File: {file}")
    console.print(f"Server: {server}")
    console.print()

    with ImportClient(server) as client:
        try:
            body = client.upload(file)
        except ImportClientError as e:
            console.print(f"[red]Import rejected:[/red] {e}")
            sys.exit(EXIT_REQUEST_ERROR)

        result = body.get("result", {})
        console.print(f"Format: [cyan]{result.get('format')}[/cyan]")
        console.print(f"Bookmarks in file: {result.get('total', 0)}")
        console.print(f"Already saved (skipped): {result.get('skipped', 0)}")

        job_id = body.get("jobId")
        if not job_id:
            console.print()
            console.print("[bold green]Nothing new to import.[/bold green]")
            print_results(result)
            return

        console.print(f"Job: {job_id}")
        console.print()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            console=console,
        ) as progress:
            task = progress.add_task("Importing bookmarks...", total=100)

            def on_update(status: dict) -> None:
                progress.update(task, completed=status.get("progress", 0))

            try:
                final = client.wait(
                    job_id,
                    interval=poll_interval,
                    timeout=timeout,
                    on_update=on_update,
                )
            except JobLostError:
                console.print("[red]Import result lost:[/red] the job is no longer known to the server.")
                sys.exit(EXIT_JOB_LOST)
            except PollTimeoutError as e:
                console.print(f"[yellow]Stopped waiting:[/yellow] {e}. The import may still finish on the server.")
                sys.exit(EXIT_TIMEOUT)
            except ImportClientError as e:
                console.print(f"[red]Status check failed:[/red] {e}")
                sys.exit(EXIT_REQUEST_ERROR)

    console.print()
    if final.get("status") == "failed":
        console.print("[bold red]Import failed.[/bold red]")
        print_results(final)
        sys.exit(EXIT_JOB_FAILED)

    console.print("[bold green]Import Complete![/bold green]")
    print_results(final)


@cli.command()
def formats():
    """List the supported export formats."""
    for name in get_registry().list_formats():
        console.print(f"  - {name}")


def print_results(result: dict) -> None:
    """Display import counts as a table"""
    results_table = Table(title="Results")
    results_table.add_column("Metric", style="cyan")
    results_table.add_column("Count", justify="right", style="green")

    results_table.add_row("Total in file", str(result.get("total", 0)))
    results_table.add_row("Imported", str(result.get("imported", 0)))
    results_table.add_row("Duplicates skipped", str(result.get("skipped", 0)))
    results_table.add_row("Failed", str(result.get("failed", 0)))

    console.print(results_table)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == "__main__":
    main()
