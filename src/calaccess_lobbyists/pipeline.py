"""Two-phase scrape: index shards, then detail pages, then one JSON file.

Phase 1 drains every index shard before phase 2 starts, so the record list
is complete and no longer growing while detail tasks run.  Detail tasks only
return values; the driver thread merges them onto the records after the
second drain.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from .client import CalAccessClient
from .config import DEFAULT_SESSION, MAX_WORKERS, OUTPUT_DIR
from .models import LobbyistDetail, LobbyistRecord
from .orchestrator import TaskPool
from .run_log import RunLogger
from .scrapers.detail import scrape_lobbyist_detail
from .scrapers.index import SHARDS, scrape_index_shard
from .writer import write_records

LOGGER = logging.getLogger(__name__)

# Progress line cadence for the detail phase.
_DETAIL_LOG_EVERY = 50


@dataclass
class ScrapeResult:
    session: int
    records: list[LobbyistRecord]
    output_path: Path
    failed_ids: list[str] = field(default_factory=list)

    @property
    def populated(self) -> int:
        failed = set(self.failed_ids)
        return sum(1 for r in self.records if r.id not in failed)


def discover_lobbyists(
    client: CalAccessClient, session: int, pool: TaskPool
) -> list[LobbyistRecord]:
    """Phase 1: every shard of the index.  Any failed shard aborts the run."""
    for shard in SHARDS:
        pool.submit(scrape_index_shard, client, shard, session, label=shard)
    outcomes = pool.drain()

    failures = [o for o in outcomes if not o.ok]
    for o in failures:
        LOGGER.error("Index shard %s failed: %s", o.label, o.error)
    if failures:
        raise failures[0].error

    records: list[LobbyistRecord] = []
    for o in outcomes:
        records.extend(o.result)
    return records


def _detail_task(
    client: CalAccessClient, lobbyist_id: str, session: int
) -> LobbyistDetail | None:
    try:
        return scrape_lobbyist_detail(client, lobbyist_id, session)
    except Exception:
        LOGGER.exception("Error scraping info for %s", lobbyist_id)
        return None


def enrich_lobbyists(
    client: CalAccessClient,
    session: int,
    records: list[LobbyistRecord],
    pool: TaskPool,
) -> list[str]:
    """Phase 2: merge detail fields onto *records*; returns the ids that failed."""
    ids = list(dict.fromkeys(r.id for r in records))
    for lobbyist_id in ids:
        pool.submit(_detail_task, client, lobbyist_id, session, label=lobbyist_id)
    outcomes = pool.drain()

    details: dict[str, LobbyistDetail] = {}
    failed: list[str] = []
    for o in outcomes:
        if o.ok and o.result is not None:
            details[o.label] = o.result
        else:
            failed.append(o.label)

    for record in records:
        detail = details.get(record.id)
        if detail is not None:
            record.merge(detail)
    return sorted(failed)


def run(
    session: int = DEFAULT_SESSION,
    *,
    client: CalAccessClient | None = None,
    output_dir: Path = OUTPUT_DIR,
    max_workers: int = MAX_WORKERS,
    log: RunLogger | None = None,
) -> ScrapeResult | None:
    """Scrape one session and write ``lobbyists-{session}.json``.

    Returns ``None`` without writing anything when the index yields no
    lobbyists at all, which means the site or the network is broken rather
    than the session being empty.
    """
    LOGGER.info("Scraping for the %d-%d session", session, session + 1)
    own_client = client is None
    if client is None:
        client = CalAccessClient(pool_size=max_workers)

    try:
        with TaskPool(max_workers) as pool:
            t0 = time.perf_counter()
            records = discover_lobbyists(client, session, pool)
            if log is not None:
                log.phase(
                    "Index",
                    duration_s=time.perf_counter() - t0,
                    detail=f"{len(SHARDS)} shards, {len(records)} lobbyists",
                )

            if not records:
                LOGGER.warning(
                    "Found zero lobbyists - something messed up and not going to save anything"
                )
                return None

            pool.log_every = _DETAIL_LOG_EVERY
            t0 = time.perf_counter()
            failed = enrich_lobbyists(client, session, records, pool)
            if log is not None:
                log.phase(
                    "Detail",
                    duration_s=time.perf_counter() - t0,
                    detail=f"{len(records)} lobbyists, {len(failed)} detail failures",
                )
    finally:
        if own_client:
            client.close()

    t0 = time.perf_counter()
    path = write_records(records, session, output_dir)
    if log is not None:
        log.phase("Write", duration_s=time.perf_counter() - t0, detail=str(path))
    LOGGER.info("All done")
    return ScrapeResult(session=session, records=records, output_path=path, failed_ids=failed)
