from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table


def _status(res: Dict[str, Any]) -> str:
    if res.get("error") and not res.get("written"):
        return "[red]failed[/red]"
    if res.get("error") or res.get("failed_batches"):
        return "[yellow]partial[/yellow]"
    if not res.get("decoded"):
        return "[yellow]empty[/yellow]"
    return "[green]ok[/green]"


def _memory_mb(peak_rss_bytes: Optional[int]) -> str:
    if not peak_rss_bytes:
        return "N/A"
    return f"{peak_rss_bytes / (1024 * 1024):.2f}"


def print_report(report: Dict[str, Any], console: Optional[Console] = None) -> None:
    """
    Render an import report as rich tables.

    Per-file results come first, then totals by kind and, when the report
    carries them, the store statistics sorted by position count.
    """
    console = console or Console()
    files: List[Dict[str, Any]] = report.get("files") or []

    if not files:
        console.print("[yellow]No catalog files found.[/yellow]")
        return

    title = f"Catalog Import: {report.get('source_dir', '')}"
    if report.get("dry_run"):
        title = f"{title}\n[dim]Dry run, nothing written[/dim]"

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("File", style="cyan", no_wrap=True)
    table.add_column("Kind", style="blue")
    table.add_column("Decoded", justify="right", style="magenta")
    table.add_column("Written", justify="right", style="bold green")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Duration (s)", justify="right", style="green")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")
    table.add_column("Status")

    for res in files:
        table.add_row(
            res.get("file", "?"),
            res.get("kind", "?"),
            f"{res.get('decoded', 0):,}",
            f"{res.get('written', 0):,}",
            f"{res.get('skipped', 0):,}",
            f"{res.get('duration_seconds', 0.0):.2f}",
            _memory_mb(res.get("peak_rss_bytes")),
            _status(res),
        )
    console.print(table)

    totals: Dict[str, Dict[str, int]] = report.get("totals") or {}
    for kind, bucket in sorted(totals.items()):
        console.print(
            f"[bold]{kind}[/bold]: {bucket['written']:,} written / {bucket['decoded']:,} decoded "
            f"from {bucket['files']} files ({bucket['failed_files']} with errors)"
        )

    stats = report.get("stats")
    if stats:
        print_stats(stats, console)


def print_stats(stats: Dict[str, Any], console: Optional[Console] = None) -> None:
    """Render store statistics (categories, positions, positions per file)."""
    console = console or Console()
    table = Table(
        title=f"Categories: {stats['categories']:,}  Positions: {stats['positions']:,}",
        box=box.SIMPLE,
        caption="Sorted by positions (descending)",
    )
    table.add_column("Source file", style="cyan")
    table.add_column("Positions", justify="right", style="magenta")

    by_file = sorted(stats.get("positions_by_file", {}).items(), key=lambda kv: kv[1], reverse=True)
    for name, count in by_file:
        table.add_row(name, f"{count:,}")
    console.print(table)
