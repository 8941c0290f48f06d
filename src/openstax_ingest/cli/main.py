"""
CLI Main - Typer command-line interface.
========================================

Commands:
- scrape: Sweep OpenStax chapter pages and import (or preview) formulas
- search: Search imported formulas by chapter or keyword
- info: Show configuration and the chapter plan
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from openstax_ingest.shared.logging import get_logger

logger = get_logger(__name__)

app = typer.Typer(
    name="openstax-ingest",
    help="""OpenStax Ingest - formula scraper for University Physics

Scrapes chapter introduction pages of the three OpenStax University Physics
volumes, extracts chapter summaries and formulas, deduplicates formulas by
content hash, and imports them for the Physics Study Hub.

Chapter rules (config/settings.yaml):
  • VOL1 - all chapters (1-17)
  • VOL2 - chapters 1-4
  • VOL3 - chapters 1-4

QUICK START:

  openstax-ingest scrape --dry-run        # Preview what would be imported
  openstax-ingest scrape                  # Scrape and import
  openstax-ingest search -k "energy"      # Search imported formulas
""",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def _parse_volumes(volumes: Optional[list[str]]):
    from openstax_ingest.shared.schemas import Volume

    if not volumes:
        return None
    try:
        return [Volume(v.strip().upper()) for v in volumes]
    except ValueError:
        console.print(f"[red]Unknown volume in {volumes}; expected VOL1, VOL2 or VOL3[/red]")
        raise typer.Exit(2)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
):
    """Configure logging from settings before any command runs."""
    from openstax_ingest.shared.config import get_settings
    from openstax_ingest.shared.logging import setup_logging

    settings = get_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.get_effective_log_level(),
        use_rich=settings.logging.rich_console,
        log_file=settings.logging.file or None,
        log_format=settings.logging.format,
        force=True,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Scrape Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def scrape(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Extract and summarize only; do not import anything.",
    ),
    volume: Optional[list[str]] = typer.Option(
        None,
        "--volume", "-v",
        help="Restrict the sweep to a volume (VOL1, VOL2, VOL3). Repeatable.",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Directory for chapters.jsonl and formulas.jsonl. Default: data/processed.",
    ),
):
    """
    🌐 Scrape OpenStax University Physics chapters.

    Visits every configured chapter introduction page one at a time, with a
    fixed delay after each request. Chapters that fail are skipped.

    Examples:
        openstax-ingest scrape --dry-run
        openstax-ingest scrape -v VOL2
    """
    from openstax_ingest.shared.config import get_settings
    from openstax_ingest.shared.errors import FatalSweepError, ImporterError
    from openstax_ingest.ingestion.pipeline import run_sweep
    from openstax_ingest.reporting.report import SweepReporter
    from openstax_ingest.storage.importer import JsonlImporter

    settings = get_settings()
    config = settings.get_effective_scraping()
    volumes = _parse_volumes(volume)
    reporter = SweepReporter(console)

    reporter.print_header(dry_run)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=console,
    ) as progress:
        task = progress.add_task("Chapters", total=None)

        def on_progress(current: int, total: int, ref) -> None:
            progress.update(task, total=total, completed=current - 1, description=f"{ref}")

        try:
            result = run_sweep(config, volumes=volumes, progress_callback=on_progress)
        except FatalSweepError as e:
            logger.error(f"Sweep failed: {e}")
            console.print(f"\n[bold red]❌ SCRAPER FAILED:[/bold red] {e}")
            raise typer.Exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Scrape aborted by user[/yellow]")
            raise typer.Exit(130)

        progress.update(task, completed=progress.tasks[0].total or 0)

    if dry_run:
        reporter.report_dry_run(result)
        return

    paths = settings.resolved_paths
    if output_dir is not None:
        chapters_file = output_dir / paths.chapters_file.name
        formulas_file = output_dir / paths.formulas_file.name
    else:
        chapters_file, formulas_file = paths.chapters_file, paths.formulas_file

    importer = JsonlImporter(chapters_file, formulas_file)
    try:
        summary = importer.import_sweep(result)
    except ImporterError as e:
        logger.error(str(e))
        console.print(f"\n[bold red]❌ IMPORT FAILED:[/bold red] {e}")
        raise typer.Exit(1)

    reporter.report_import(result, summary)


# ─────────────────────────────────────────────────────────────────────────────
# Search Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def search(
    chapter: Optional[str] = typer.Option(
        None,
        "--chapter", "-c",
        help="Chapter key such as VOL1-CH5.",
    ),
    keyword: Optional[str] = typer.Option(
        None,
        "--keyword", "-k",
        help="Case-insensitive text to look for in title, LaTeX, description or tags.",
    ),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum number of results."),
    input_dir: Optional[Path] = typer.Option(
        None,
        "--input", "-i",
        help="Directory holding chapters.jsonl and formulas.jsonl. Default: data/processed.",
    ),
):
    """
    🔍 Search imported formulas.

    Examples:
        openstax-ingest search -c VOL1-CH5
        openstax-ingest search -k "kinetic energy" -n 5
    """
    from openstax_ingest.shared.config import get_settings
    from openstax_ingest.storage.search import FormulaCatalog

    paths = get_settings().resolved_paths
    if input_dir is not None:
        chapters_file = input_dir / paths.chapters_file.name
        formulas_file = input_dir / paths.formulas_file.name
    else:
        chapters_file, formulas_file = paths.chapters_file, paths.formulas_file

    if not formulas_file.exists():
        console.print(f"[red]Formulas file not found: {formulas_file}[/red]")
        console.print("Run 'openstax-ingest scrape' first.")
        raise typer.Exit(1)

    catalog = FormulaCatalog.load(chapters_file, formulas_file)
    hits = catalog.search(chapter=chapter, keyword=keyword, limit=limit)

    if not hits:
        console.print("[yellow]No formulas found.[/yellow]")
        return

    table = Table(title=f"Formulas ({len(hits)})")
    table.add_column("Chapter", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("LaTeX", style="green")
    for hit in hits:
        table.add_row(hit.chapter_id, escape(hit.title), escape(hit.latex))
    console.print(table)


# ─────────────────────────────────────────────────────────────────────────────
# Info Command
# ─────────────────────────────────────────────────────────────────────────────


@app.command()
def info():
    """
    ℹ️ Show configuration and the chapter plan.
    """
    from openstax_ingest import __version__
    from openstax_ingest.shared.config import get_settings
    from openstax_ingest.ingestion.pipeline import ChapterPlan, format_chapter_numbers
    from openstax_ingest.shared.schemas import Volume

    settings = get_settings()
    config = settings.get_effective_scraping()
    plan = ChapterPlan.from_config(config)

    console.print(Panel(
        f"[bold]OpenStax Ingest v{__version__}[/bold]\n"
        f"User agent: {config.user_agent}\n"
        f"Delay after fetch: {config.rate_limit}s\n"
        f"Timeout: {config.timeout}s",
        title="ℹ️ Info",
    ))

    table = Table(title="Chapter Plan")
    table.add_column("Volume", style="cyan", no_wrap=True)
    table.add_column("Base URL", overflow="fold")
    table.add_column("Chapters", justify="right", no_wrap=True)
    for vol in Volume:
        chapters = format_chapter_numbers(plan.numbers_for(vol))
        table.add_row(vol.value, config.get_volume(vol.value).base_url, chapters)
    console.print(table)

    console.print("\n[bold]Paths:[/bold]")
    paths = settings.resolved_paths
    for name, path in [("Chapters", paths.chapters_file), ("Formulas", paths.formulas_file)]:
        exists = "✓" if path.exists() else "✗"
        console.print(f"  {name}: {path} [{exists}]")


# ─────────────────────────────────────────────────────────────────────────────
# Entry Point
# ─────────────────────────────────────────────────────────────────────────────


def cli():
    """CLI entry point."""
    app()


if __name__ == "__main__":
    cli()
