"""Append-only run log for scrape runs.

One JSON object per line: task name, start/end, per-phase durations, status
and task-specific meta (session, record counts).  Lets you compare how long
the index and detail phases took across runs and spot runs that failed or
found nothing.

Usage:
    from calaccess_lobbyists.run_log import RunLogger

    with RunLogger("scrape", meta={"session": 2023}) as log:
        log.phase("Index", duration_s=12.3, detail="27 shards, 1450 lobbyists")
        log.phase("Detail", duration_s=410.0)
    # On exit, the run is appended to .run_log.jsonl
"""

from __future__ import annotations

import json
import logging
import os
import time
import uuid
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from pathlib import Path

LOGGER = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path(".run_log.jsonl")


@dataclass
class RunRecord:
    """One line in the run log."""

    run_id: str
    task: str
    started_at: str  # ISO
    ended_at: str | None = None
    duration_s: float | None = None
    status: str = "running"  # ok | error | empty | running
    phases: list[dict] = field(default_factory=list)  # [{name, duration_s, detail}]
    error: str | None = None
    meta: dict = field(default_factory=dict)

    def to_json_line(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json_line(cls, line: str) -> RunRecord | None:
        """Parse one log line; blank or malformed lines give ``None``."""
        line = line.strip()
        if not line:
            return None
        try:
            d = json.loads(line)
        except json.JSONDecodeError:
            return None
        if not isinstance(d, dict):
            return None
        known = {f.name for f in fields(cls)}
        d = {k: v for k, v in d.items() if k in known}
        d.setdefault("run_id", "")
        d.setdefault("task", "")
        d.setdefault("started_at", "")
        d.setdefault("status", "ok")
        return cls(**d)


class RunLogger:
    """Context manager recording a single run."""

    def __init__(
        self,
        task: str,
        *,
        log_path: Path | None = None,
        meta: dict | None = None,
    ):
        self.task = task
        self.log_path = log_path if log_path is not None else get_log_path()
        self.meta = dict(meta or {})
        self.run_id = str(uuid.uuid4())[:8]
        self._started_at: str | None = None
        self._start_time: float | None = None
        self._phases: list[dict] = []
        self._status = "ok"
        self._error: str | None = None

    def start(self) -> None:
        self._started_at = datetime.now(timezone.utc).isoformat()
        self._start_time = time.perf_counter()
        self._phases = []
        self._status = "ok"
        self._error = None

    def phase(self, name: str, *, duration_s: float, detail: str | None = None) -> None:
        self._phases.append({"name": name, "duration_s": round(duration_s, 2), "detail": detail})

    def set_status(self, status: str) -> None:
        self._status = status

    @property
    def phases(self) -> list[dict]:
        return list(self._phases)

    def end(self, status: str = "ok", error: str | None = None) -> None:
        self._status = status
        self._error = error
        self._write()

    def _write(self) -> None:
        if self._start_time is None:
            return
        ended_at = datetime.now(timezone.utc).isoformat()
        duration_s = round(time.perf_counter() - self._start_time, 2)
        record = RunRecord(
            run_id=self.run_id,
            task=self.task,
            started_at=self._started_at or ended_at,
            ended_at=ended_at,
            duration_s=duration_s,
            status=self._status,
            phases=self._phases,
            error=self._error,
            meta=self.meta,
        )
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(record.to_json_line() + "\n")
        except OSError as e:
            LOGGER.warning("Run log append failed: %s", e)

    def __enter__(self) -> RunLogger:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self._status = "error"
            self._error = f"{exc_type.__name__}: {exc_val}" if exc_val else exc_type.__name__
        self.end(self._status, self._error)
        return None  # do not suppress


def load_recent_runs(
    n: int = 20,
    *,
    task: str | None = None,
    log_path: Path | None = None,
) -> list[RunRecord]:
    """The last *n* runs, newest first.  Optionally filter by task."""
    path = log_path or get_log_path()
    if not path.exists():
        return []
    records: list[RunRecord] = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            rec = RunRecord.from_json_line(line)
            if rec is None:
                continue
            if task is None or rec.task == task:
                records.append(rec)
    records.reverse()
    return records[:n]


def get_log_path() -> Path:
    return Path(os.environ.get("CAL_RUN_LOG", str(DEFAULT_LOG_PATH)))
