"""Terminal rendering of run results and version listings."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tagscribe.models.schemas import GenerationResult, VersionEntry


def render_result(result: GenerationResult, console: Console | None = None) -> None:
    """Render a generation summary to the terminal using Rich. Never uses print()."""
    if console is None:
        console = Console()

    summary_table = Table(title="Summary", show_header=True)
    summary_table.add_column("Metric", style="bold")
    summary_table.add_column("Value", justify="right")
    summary_table.add_row("Repository", result.repository)
    summary_table.add_row("Changelog", result.destination)
    summary_table.add_row("Created", "yes" if result.created else "no")
    summary_table.add_row("Tags fetched", str(result.tags_fetched))
    summary_table.add_row("Already documented", str(len(result.documented_versions)))
    summary_table.add_row("Added", str(len(result.added_versions)))

    console.print(Panel(summary_table, title="tagscribe"))

    if result.added_versions:
        added_table = Table(title="New Versions", show_header=True)
        added_table.add_column("Version", style="green")
        for version in result.added_versions:
            added_table.add_row(version)
        console.print(added_table)
    else:
        console.print("[dim]No new versions; only the Unreleased section was refreshed.[/dim]")


def render_versions(entries: list[VersionEntry], console: Console | None = None) -> None:
    """Render the resolved version -> tag mapping, newest first."""
    if console is None:
        console = Console()

    if not entries:
        console.print("[yellow]No matching tags found.[/yellow]")
        return

    table = Table(title="Changelog Versions", show_header=True)
    table.add_column("Version", style="bold")
    table.add_column("Tag")
    table.add_column("Commit", style="dim")
    for entry in entries:
        table.add_row(entry.version, entry.tag, entry.commit_sha[:7])
    console.print(table)
