#!/usr/bin/env python3
"""Terminal view of the scrape run log.

Quick check of how recent runs went and which phase is the bottleneck
(index listings vs. detail pages vs. the final write).

Usage:
    python scripts/log_dashboard.py              # last 20 runs
    python scripts/log_dashboard.py --tail 50
    python scripts/log_dashboard.py --task scrape
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.table import Table

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))

from calaccess_lobbyists.run_log import RunRecord, get_log_path, load_recent_runs  # noqa: E402

console = Console()

_STATUS_STYLE = {"ok": "green", "empty": "yellow", "error": "red", "running": "dim"}


def _t(s: str) -> str:
    """Shorten an ISO timestamp to month/day hour:minute."""
    try:
        return datetime.fromisoformat(s).strftime("%m/%d %H:%M")
    except ValueError:
        return s[:16]


def _fmt_dur(s: float | None) -> str:
    if s is None:
        return "-"
    if s >= 60:
        return f"{s / 60:.1f}m"
    return f"{s:.1f}s"


def _slowest_phases(run: RunRecord, n: int = 2) -> str:
    phases = sorted(run.phases, key=lambda p: p.get("duration_s") or 0, reverse=True)
    parts = []
    for p in phases[:n]:
        detail = f" ({p['detail']})" if p.get("detail") else ""
        parts.append(f"{p.get('name', '?')}: {_fmt_dur(p.get('duration_s'))}{detail}")
    return ", ".join(parts)


def _phase_averages(runs: list[RunRecord]) -> dict[str, float]:
    durations: dict[str, list[float]] = {}
    for run in runs:
        for p in run.phases:
            durations.setdefault(p.get("name", "?"), []).append(p.get("duration_s") or 0)
    return {name: sum(d) / len(d) for name, d in durations.items()}


def main() -> int:
    parser = argparse.ArgumentParser(description="View the scrape run log.")
    parser.add_argument(
        "--tail",
        "-n",
        type=int,
        default=20,
        help="Number of recent runs to show (default: 20).",
    )
    parser.add_argument(
        "--task",
        type=str,
        default=None,
        help="Filter by task name (e.g. scrape).",
    )
    args = parser.parse_args()

    path = get_log_path()
    if not path.exists():
        console.print(f"[dim]Run log empty or missing: {path}[/]")
        console.print("[dim]Run 'python scripts/scrape.py' to generate entries.[/]")
        return 0

    runs = load_recent_runs(n=args.tail, task=args.task)
    if not runs:
        console.print(f"[dim]No runs found (task={args.task or 'any'}).[/]")
        return 0

    table = Table(title=f"Run log (last {len(runs)})", title_style="bold green")
    table.add_column("Started", style="dim")
    table.add_column("Task", style="yellow")
    table.add_column("Session")
    table.add_column("Took", justify="right")
    table.add_column("Status")
    table.add_column("Slowest phases", style="dim")
    for run in runs:
        style = _STATUS_STYLE.get(run.status, "red")
        table.add_row(
            _t(run.started_at),
            run.task,
            str(run.meta.get("session", "")),
            _fmt_dur(run.duration_s),
            f"[{style}]{run.status}[/]",
            _slowest_phases(run),
        )
    console.print(table)

    averages = _phase_averages(runs)
    if averages:
        top = sorted(averages.items(), key=lambda x: x[1], reverse=True)[:3]
        parts = [f"{name}: {_fmt_dur(avg)}" for name, avg in top]
        console.print(f"[bold green]Bottleneck (avg phase time):[/] {', '.join(parts)}")
    console.print(f"[dim]Log file: {path}[/]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
