"""Command-line interface for beadlink."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from beadlink.correlation import FileLookup, OrphanDetector
from beadlink.integrations.beads import (
    BeadsClient,
    BeadsConfig,
    BeadsViewerClient,
    load_history_report,
)
from beadlink.models import DetectorSettings, ExtractOptions, FileLookupResult, HistoryReport, Settings

app = typer.Typer(
    name="beadlink",
    help="Correlate git history with beads issues - file lookups, hotspots and orphan commits",
    add_completion=False,
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else Settings().log_level
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, stream=sys.stderr, force=True)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _beads_config(repo_path: Path) -> BeadsConfig:
    settings = Settings()
    return BeadsConfig(
        repo_path=repo_path,
        bd_path=settings.bd_path,
        bv_path=settings.bv_path,
        timeout=settings.command_timeout,
    )


def _load_report(history: Optional[Path], repo_path: Path) -> HistoryReport:
    """Read a saved history file, or ask bv for one."""
    if history is not None:
        return load_history_report(history)
    return BeadsViewerClient(_beads_config(repo_path)).history()


def _print_lookup(result: FileLookupResult) -> None:
    for error in result.pattern_errors:
        console.print(f"[bold yellow]Pattern error:[/bold yellow] {escape(error)}")

    console.print(f"\n[bold]{escape(result.file_path)}[/bold]: {result.total_beads} issue(s)")

    for label, refs, style in (
        ("Open", result.open_beads, "green"),
        ("Closed", result.closed_beads, "dim"),
    ):
        if not refs:
            continue
        table = Table(title=f"{label} issues", show_header=True, header_style="bold magenta")
        table.add_column("Issue", style="cyan")
        table.add_column("Title", style=style)
        table.add_column("Status")
        table.add_column("Commits", justify="right", style="yellow")
        table.add_column("Changes", justify="right")
        table.add_column("Last touch", style="blue")
        for ref in refs:
            table.add_row(
                ref.bead_id,
                ref.title[:60],
                ref.status,
                str(len(ref.commit_shas)),
                str(ref.total_changes),
                ref.last_touch.strftime("%Y-%m-%d %H:%M"),
            )
        console.print(table)


@app.command()
def lookup(
    path: str = typer.Argument(..., help="File, directory or glob pattern"),
    repo_path: Path = typer.Option(Path("."), "--repo", "-r", help="Repository containing .beads"),
    history: Optional[Path] = typer.Option(None, "--history", "-H", help="Saved 'bv --robot-history' JSON"),
    glob: bool = typer.Option(False, "--glob", "-g", help="Treat PATH as a glob pattern"),
    live: bool = typer.Option(False, "--live", help="Refresh issue status from bd"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of tables"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Show the issues that touched a file, directory or glob."""
    _configure_logging(verbose)
    try:
        file_lookup = FileLookup.from_report(_load_report(history, repo_path))
        if live:
            file_lookup = file_lookup.with_live_status(BeadsClient(_beads_config(repo_path)).list_all())

        result = file_lookup.lookup_by_file_glob(path) if glob else file_lookup.lookup_by_file(path)

        if as_json:
            console.print_json(result.model_dump_json())
        else:
            _print_lookup(result)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def hotspots(
    repo_path: Path = typer.Option(Path("."), "--repo", "-r", help="Repository containing .beads"),
    history: Optional[Path] = typer.Option(None, "--history", "-H", help="Saved 'bv --robot-history' JSON"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum files to show (0 = all)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """List files touched by the most issues."""
    _configure_logging(verbose)
    try:
        file_lookup = FileLookup.from_report(_load_report(history, repo_path))
        stats = file_lookup.get_stats()

        console.print(
            f"[bold blue]Indexed files:[/bold blue] {stats.total_files}  "
            f"[bold blue]Issue links:[/bold blue] {stats.total_bead_links}  "
            f"[bold blue]Shared files:[/bold blue] {stats.files_with_multiple_beads}\n"
        )

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("File", style="cyan")
        table.add_column("Issues", justify="right", style="yellow")
        table.add_column("Open", justify="right", style="green")
        table.add_column("Closed", justify="right", style="dim")

        for spot in file_lookup.get_hotspots(limit):
            table.add_row(spot.file_path, str(spot.total_beads), str(spot.open_beads), str(spot.closed_beads))

        console.print(table)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def files(
    repo_path: Path = typer.Option(Path("."), "--repo", "-r", help="Repository containing .beads"),
    history: Optional[Path] = typer.Option(None, "--history", "-H", help="Saved 'bv --robot-history' JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """List every file in the reverse index."""
    _configure_logging(verbose)
    try:
        for path in FileLookup.from_report(_load_report(history, repo_path)).get_all_files():
            console.print(path, highlight=False)
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def orphans(
    repo_path: Path = typer.Argument(Path("."), help="Path to Git repository"),
    history: Optional[Path] = typer.Option(None, "--history", "-H", help="Saved 'bv --robot-history' JSON"),
    limit: int = typer.Option(0, "--limit", "-n", help="Maximum commits to examine (0 = all)"),
    since: Optional[str] = typer.Option(None, "--since", help="Only commits after this date"),
    until: Optional[str] = typer.Option(None, "--until", help="Only commits before this date"),
    branch: str = typer.Option("HEAD", "--branch", "-b", help="Branch to scan"),
    min_suspicion: Optional[int] = typer.Option(None, "--min-suspicion", help="Override the reporting threshold"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Find commits that look like issue work but are not linked to an issue."""
    _configure_logging(verbose)
    try:
        settings = DetectorSettings()
        if min_suspicion is not None:
            settings = settings.model_copy(update={"min_suspicion": min_suspicion})

        report = _load_report(history, repo_path)
        detector = OrphanDetector(report, repo_path=repo_path, settings=settings)
        options = ExtractOptions(limit=limit, since=since, until=until, branch=branch)

        console.print(f"[bold green]Scanning commits from:[/bold green] {repo_path}")
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Scoring commits...", total=None)
            result = detector.detect(options)
            progress.update(task, completed=True)

        stats = result.stats
        console.print(f"\n[bold]Orphan report[/bold] ({result.git_range}, data {result.data_hash})")
        console.print(f"[cyan]Commits examined:[/cyan] {stats.total_commits}")
        console.print(f"[cyan]Linked to issues:[/cyan] {stats.correlated_count}")
        console.print(f"[cyan]Unlinked:[/cyan] {stats.orphan_count} ({stats.orphan_ratio:.0%})")
        console.print(f"[cyan]Suspicious:[/cyan] {stats.candidate_count} (avg score {stats.avg_suspicion:.1f})")

        if result.candidates:
            table = Table(show_header=True, header_style="bold magenta")
            table.add_column("Commit", style="cyan", width=10)
            table.add_column("Score", justify="right", style="yellow")
            table.add_column("Probable issue", style="green")
            table.add_column("Signals")
            table.add_column("Message", style="white")

            for candidate in result.candidates:
                top = candidate.probable_beads[0]
                table.add_row(
                    candidate.short_sha,
                    str(candidate.suspicion_score),
                    f"{top.bead_id} ({top.confidence}%)",
                    ", ".join(top.reasons),
                    candidate.message.split("\n")[0][:60],
                )
            console.print(table)

        if output:
            output.parent.mkdir(parents=True, exist_ok=True)
            with open(output, "w") as f:
                json.dump(result.model_dump(mode="json"), f, indent=2)
            console.print(f"[bold green]✓[/bold green] Saved to {output}")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from beadlink import __version__

    console.print(f"[bold]beadlink[/bold] version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
