"""
Command-line interface for benchmark history files.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..core.commit import commit_from_git, load_event_file
from ..core.datafile import load_data_file, now_ms, save_data_file
from ..core.errors import BenchmarkHistoryError
from ..core.extra import try_parse_extra
from ..core.metrics import (
    DEFAULT_ALERT_THRESHOLD,
    BenchComparison,
    bench_series,
    compare_entries,
    summarize_series,
)
from ..core.models import BenchmarkEntry
from ..core.store import DEFAULT_SUITE, BenchmarkStore
from ..core.validation import DEFAULT_MAX_UPDATE_LAG_MS, Severity, validate_data
from ..extractors import extract_benches, is_bigger_better, list_tools

app = typer.Typer(
    help="Benchmark History - inspect and extend continuous-benchmarking data files"
)
console = Console()


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _format_date(epoch_ms: int) -> str:
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def _format_value(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}"


@app.command()
def show(
    data_file: Path = typer.Argument(
        ..., envvar="BENCHMARK_DATA_FILE", help="data.js or JSON history file"
    ),
    suite: Optional[str] = typer.Option(
        None, "--suite", "-s", help="Only show this suite"
    ),
) -> None:
    """Show the entries of a history file."""
    try:
        data = load_data_file(data_file)
    except (BenchmarkHistoryError, OSError) as e:
        rprint(f"[red]Error reading benchmark data: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    suites = [suite] if suite else data.suites()
    if not suites:
        rprint("[yellow]No benchmark suites found[/yellow]")
        return

    rprint(f"[blue]Repository: {data.repo_url}[/blue]")
    rprint(f"[blue]Last update: {_format_date(data.last_update)} UTC[/blue]")

    for name in suites:
        entries = data.entries.get(name)
        if entries is None:
            rprint(f"[red]Unknown suite: {name}[/red]")
            raise typer.Exit(1)

        table = Table(title=f"{name} ({len(entries)} entries)")
        table.add_column("Commit", style="cyan")
        table.add_column("Date (UTC)", style="green")
        table.add_column("Bench", style="magenta")
        table.add_column("Value", style="yellow", justify="right")
        table.add_column("Unit", style="blue")

        for entry in entries:
            for bench in entry.benches:
                table.add_row(
                    entry.commit.short_id,
                    _format_date(entry.date),
                    bench.name,
                    _format_value(bench.value),
                    bench.unit,
                )

        console.print(table)


@app.command()
def validate(
    data_file: Path = typer.Argument(
        ..., envvar="BENCHMARK_DATA_FILE", help="data.js or JSON history file"
    ),
    max_lag_seconds: float = typer.Option(
        DEFAULT_MAX_UPDATE_LAG_MS / 1000,
        "--max-lag-seconds",
        help="Allowed gap between lastUpdate and the newest entry date",
    ),
) -> None:
    """Check a history file for schema and consistency problems."""
    try:
        data = load_data_file(data_file)
    except (BenchmarkHistoryError, OSError) as e:
        rprint(f"[red]Error reading benchmark data: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    report = validate_data(data, max_update_lag_ms=int(max_lag_seconds * 1000))

    for issue in report.issues:
        color = "red" if issue.severity is Severity.ERROR else "yellow"
        rprint(
            f"[{color}]{issue.severity.value}[/{color}] "
            f"{escape(issue.location())}: {escape(issue.message)}"
        )

    if not report.ok:
        rprint(
            f"[red]{len(report.errors)} error(s), {len(report.warnings)} warning(s)[/red]"
        )
        raise typer.Exit(1)

    rprint(f"[green]OK[/green] ({len(report.warnings)} warning(s))")


@app.command()
def history(
    data_file: Path = typer.Argument(
        ..., envvar="BENCHMARK_DATA_FILE", help="data.js or JSON history file"
    ),
    bench: str = typer.Option(..., "--bench", "-b", help="Bench name (e.g. factorize/1)"),
    suite: str = typer.Option(
        DEFAULT_SUITE, "--suite", "-s", envvar="BENCHMARK_SUITE", help="Suite name"
    ),
) -> None:
    """Show the history and summary statistics of one bench."""
    try:
        data = load_data_file(data_file)
    except (BenchmarkHistoryError, OSError) as e:
        rprint(f"[red]Error reading benchmark data: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    series = bench_series(data, suite, bench)
    if len(series) == 0:
        rprint(f"[yellow]No measurements of {bench} in suite {suite}[/yellow]")
        raise typer.Exit(1)

    table = Table(title=f"{suite} / {bench}")
    table.add_column("Commit", style="cyan")
    table.add_column("Date (UTC)", style="green")
    table.add_column(f"Value ({series.unit})", style="yellow", justify="right")
    table.add_column("GC time", style="magenta", justify="right")
    table.add_column("Memory", style="blue", justify="right")
    table.add_column("Allocs", style="red", justify="right")

    store = BenchmarkStore(data)
    for entry, measured in store.history(bench, suite):
        extra = try_parse_extra(measured.extra)
        table.add_row(
            entry.commit.short_id,
            _format_date(entry.date),
            _format_value(measured.value),
            _format_value(extra.gctime) if extra else "N/A",
            _format_value(extra.memory) if extra else "N/A",
            _format_value(extra.allocs) if extra else "N/A",
        )
    console.print(table)

    summary = summarize_series(series)
    rprint(
        f"\n[cyan]n={summary.count}[/cyan] "
        f"mean={_format_value(summary.mean)} median={_format_value(summary.median)} "
        f"std={_format_value(summary.std)} min={_format_value(summary.min)} "
        f"max={_format_value(summary.max)}"
    )
    if summary.change is not None:
        rprint(f"Latest vs previous: {summary.change:.3f}x")
    if summary.memory_stable is not None:
        rprint(
            f"Memory stable: {summary.memory_stable} | "
            f"Allocations stable: {summary.allocs_stable}"
        )


@app.command()
def compare(
    data_file: Path = typer.Argument(
        ..., envvar="BENCHMARK_DATA_FILE", help="data.js or JSON history file"
    ),
    suite: str = typer.Option(
        DEFAULT_SUITE, "--suite", "-s", envvar="BENCHMARK_SUITE", help="Suite name"
    ),
    threshold: float = typer.Option(
        DEFAULT_ALERT_THRESHOLD,
        "--threshold",
        envvar="BENCHMARK_ALERT_THRESHOLD",
        help="Ratio above which a change is reported as a regression",
    ),
    tool: Optional[str] = typer.Option(
        None, "--tool", "-t", help="Override the tool recorded in the entries"
    ),
) -> None:
    """Compare the latest entry of a suite against the previous one."""
    try:
        data = load_data_file(data_file)
    except (BenchmarkHistoryError, OSError) as e:
        rprint(f"[red]Error reading benchmark data: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    entries = data.entries.get(suite, [])
    if len(entries) < 2:
        rprint(f"[yellow]Suite {suite} needs at least two entries to compare[/yellow]")
        return

    previous, current = entries[-2], entries[-1]
    comparisons = compare_entries(
        previous,
        current,
        bigger_is_better=is_bigger_better(tool or current.tool),
        threshold=threshold,
    )
    _print_comparison_table(previous, current, comparisons)


@app.command()
def append(
    data_file: Path = typer.Argument(
        ..., envvar="BENCHMARK_DATA_FILE", help="data.js or JSON history file"
    ),
    output_file: Path = typer.Option(
        ..., "--output", "-o", help="Benchmark tool output to record"
    ),
    tool: str = typer.Option(..., "--tool", "-t", help="Tool that produced the output"),
    suite: str = typer.Option(
        DEFAULT_SUITE, "--suite", "-s", envvar="BENCHMARK_SUITE", help="Suite name"
    ),
    event: Optional[Path] = typer.Option(
        None, "--event", envvar="GITHUB_EVENT_PATH", help="GitHub push event payload"
    ),
    use_git: bool = typer.Option(
        False, "--git", help="Read commit metadata from the local git repository"
    ),
    repo_url: Optional[str] = typer.Option(
        None, "--repo-url", envvar="BENCHMARK_REPO_URL", help="Repository URL"
    ),
    threshold: float = typer.Option(
        DEFAULT_ALERT_THRESHOLD,
        "--threshold",
        envvar="BENCHMARK_ALERT_THRESHOLD",
        help="Ratio above which a change is reported as a regression",
    ),
    fail_on_alert: bool = typer.Option(
        False, "--fail-on-alert", help="Exit with status 1 when a regression is found"
    ),
) -> None:
    """Record benchmark tool output as a new entry."""
    try:
        store = BenchmarkStore.open(data_file, repo_url)
        benches = extract_benches(tool, output_file.read_text(encoding="utf-8"))

        if use_git:
            commit = commit_from_git(repo_url or store.data.repo_url)
        elif event is not None:
            commit = load_event_file(event)
        else:
            rprint("[red]No commit source: pass --event or --git[/red]")
            raise typer.Exit(1)

        entry = BenchmarkEntry(commit=commit, date=now_ms(), tool=tool, benches=benches)
        previous = store.latest_entry(suite)

        store.add_entry(entry, suite)
        store.save()
    except (BenchmarkHistoryError, OSError) as e:
        rprint(f"[red]Error appending benchmark entry: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    rprint(
        f"[green]Recorded {len(benches)} bench(es) for {commit.short_id} "
        f"in suite {suite}[/green]"
    )

    if previous is None:
        return

    comparisons = compare_entries(
        previous, entry, bigger_is_better=is_bigger_better(tool), threshold=threshold
    )
    _print_comparison_table(previous, entry, comparisons)

    alerts: List[BenchComparison] = [c for c in comparisons if c.alert]
    if alerts:
        rprint(
            f"[red]Possible performance regression in {len(alerts)} bench(es) "
            f"(threshold {threshold:.2f}x)[/red]"
        )
        if fail_on_alert:
            raise typer.Exit(1)


@app.command()
def convert(
    source: Path = typer.Argument(..., help="History file to read"),
    destination: Path = typer.Argument(
        ..., help="File to write; a .json suffix writes plain JSON, otherwise data.js"
    ),
) -> None:
    """Rewrite a history file between data.js and plain JSON."""
    try:
        data = load_data_file(source)
        save_data_file(data, destination)
    except (BenchmarkHistoryError, OSError) as e:
        rprint(f"[red]Error converting benchmark data: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    rprint(f"[green]Wrote {destination}[/green]")


@app.command()
def tools() -> None:
    """List tools whose output can be recorded."""
    table = Table(title="Supported Tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Better", style="green")

    for name in list_tools():
        table.add_row(name, "bigger" if is_bigger_better(name) else "smaller")

    console.print(table)


def _print_comparison_table(
    previous: BenchmarkEntry, current: BenchmarkEntry, comparisons: List[BenchComparison]
) -> None:
    """Print a formatted comparison table."""
    if not comparisons:
        rprint("[yellow]No benches in common with the previous entry[/yellow]")
        return

    table = Table(
        title=f"{current.commit.short_id} vs {previous.commit.short_id}"
    )
    table.add_column("Bench", style="cyan")
    table.add_column("Previous", style="yellow", justify="right")
    table.add_column("Current", style="yellow", justify="right")
    table.add_column("Unit", style="blue")
    table.add_column("Ratio", style="magenta", justify="right")
    table.add_column("Status")

    for c in comparisons:
        status = "[red]ALERT[/red]" if c.alert else "[green]ok[/green]"
        table.add_row(
            c.name,
            _format_value(c.previous),
            _format_value(c.current),
            c.unit,
            f"{c.ratio:.2f}x",
            status,
        )

    console.print(table)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
