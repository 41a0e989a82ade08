#!/usr/bin/env python3
"""Scrape the Cal-Access lobbyist directory for one legislative session.

  Phase 1: Index -- one listing page per letter (A-Z, plus "0" for the rest)
  Phase 2: Detail -- one page per lobbyist (address, ethics, relationships)
  Then: sort by name/id and write ``lobbyists-{session}.json``.

Usage::

    python scripts/scrape.py                  # 2023-2024 session
    python scripts/scrape.py --session 2021   # 2021-2022 session

Network behaviour (workers, timeout, retries, output directory) comes from
``CAL_*`` environment variables; see ``calaccess_lobbyists.config``.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from rich.console import Console
from rich.table import Table

# Ensure the project is importable
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))

from calaccess_lobbyists.config import DEFAULT_SESSION  # noqa: E402
from calaccess_lobbyists.pipeline import ScrapeResult, run  # noqa: E402
from calaccess_lobbyists.run_log import RunLogger  # noqa: E402
from calaccess_lobbyists.scrapers.index import SHARDS  # noqa: E402

console = Console()


def _print_summary(result: ScrapeResult, elapsed: float) -> None:
    summary = Table(title="Scrape Complete", show_lines=True, title_style="bold green")
    summary.add_column("Step", style="bold")
    summary.add_column("Output", style="dim")
    summary.add_row("Session", f"{result.session}-{result.session + 1}")
    summary.add_row("Index", f"{len(SHARDS)} shards, {len(result.records):,} lobbyists")
    summary.add_row(
        "Detail",
        f"{result.populated:,} populated, {len(result.failed_ids):,} failed",
    )
    summary.add_row("Output", str(result.output_path))
    summary.add_row("[bold]Total[/]", f"[bold]{elapsed:.1f}s[/]")
    console.print(summary)
    if result.failed_ids:
        console.print(f"[yellow]Detail pages that failed:[/] {', '.join(result.failed_ids)}")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Scrape Cal-Access lobbyist registrations for one session.",
    )
    parser.add_argument(
        "--session",
        type=int,
        default=DEFAULT_SESSION,
        help=f"Starting year of the legislative session (default: {DEFAULT_SESSION}).",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    t0 = time.perf_counter()
    with RunLogger("scrape", meta={"session": args.session}) as log:
        result = run(args.session, log=log)
        if result is None:
            log.set_status("empty")
            return
        log.meta["lobbyists"] = len(result.records)
        log.meta["detail_failures"] = len(result.failed_ids)

    _print_summary(result, time.perf_counter() - t0)


if __name__ == "__main__":
    main()
