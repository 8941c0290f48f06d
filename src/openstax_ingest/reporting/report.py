"""
Report Module - Console summaries of a sweep.
=============================================

Dry-run mode prints aggregate counts and a small sample of chapters and
formulas; nothing is persisted. Live mode prints the same counts followed
by what the importer did.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from openstax_ingest.shared.logging import get_console
from openstax_ingest.shared.schemas import ImportSummary, SweepResult

SAMPLE_CHAPTERS = 3
SAMPLE_FORMULAS = 5
SAMPLE_LATEX_LENGTH = 80


class SweepReporter:
    """Render sweep results to a Rich console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_console()

    def print_header(self, dry_run: bool) -> None:
        mode = "DRY RUN (preview only)" if dry_run else "LIVE (will import data)"
        self.console.print(
            Panel(f"[bold]Mode:[/bold] {mode}", title="OpenStax Physics Scraper")
        )

    def print_counts(self, result: SweepResult) -> None:
        table = Table(title="Scraping Complete", show_header=False)
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")

        table.add_row("Total chapters scraped", str(len(result.chapters)))
        for volume, count in result.chapters_by_volume().items():
            table.add_row(f"  {volume.value}", str(count))
        table.add_row("Total formulas found", str(len(result.raw_formulas)))
        table.add_row("Unique formulas (after dedup)", str(len(result.formulas)))
        table.add_row("Duplicates removed", str(result.duplicate_count))
        if result.skipped:
            table.add_row("Chapters skipped", f"[red]{len(result.skipped)}[/red]")

        self.console.print(table)

        for skipped in result.skipped:
            self.console.print(f"  [yellow]Skipped {skipped.chapter}: {skipped.reason}[/yellow]")

    def print_samples(self, result: SweepResult) -> None:
        self.console.print("\n[bold]Sample chapters:[/bold]")
        for chapter in result.chapters[:SAMPLE_CHAPTERS]:
            self.console.print(
                f"  - {chapter.volume.value} Ch{chapter.number}: {chapter.title}",
                markup=False,
            )

        self.console.print("\n[bold]Sample formulas:[/bold]")
        for formula in result.formulas[:SAMPLE_FORMULAS]:
            self.console.print(f"  - {formula.title} ({formula.chapter_id})", markup=False)
            self.console.print(f"    {formula.latex[:SAMPLE_LATEX_LENGTH]}...", markup=False)

    def report_dry_run(self, result: SweepResult) -> None:
        self.print_counts(result)
        self.console.print("\n[yellow]DRY RUN - No data was imported[/yellow]")
        self.print_samples(result)
        self.console.print("\nRun without --dry-run to import the results")

    def report_import(self, result: SweepResult, summary: ImportSummary) -> None:
        self.print_counts(result)
        self.console.print(
            f"\n[bold green]✓ Imported to {summary.destination}[/bold green]\n"
            f"  Chapters: {summary.chapters_created} created, {summary.chapters_updated} updated\n"
            f"  Formulas: {summary.formulas_created} created, {summary.formulas_updated} updated"
        )
        if summary.formulas_orphaned:
            self.console.print(
                f"  [yellow]{summary.formulas_orphaned} formulas had no chapter record[/yellow]"
            )
