from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from .config import OUTPUT_DIR
from .models import LobbyistRecord

LOGGER = logging.getLogger(__name__)


def sort_records(records: Iterable[LobbyistRecord]) -> list[LobbyistRecord]:
    """Order by name, then id (plain case-sensitive string comparison)."""
    return sorted(records, key=lambda r: (r.name, r.id))


def output_path(session: int, output_dir: Path = OUTPUT_DIR) -> Path:
    return Path(output_dir) / f"lobbyists-{session}.json"


def render_records(records: Iterable[LobbyistRecord]) -> str:
    """Pretty-printed JSON of the sorted records, with no trailing newline."""
    data = [r.to_dict() for r in sort_records(records)]
    return json.dumps(data, indent=2, ensure_ascii=False)


def write_records(
    records: Iterable[LobbyistRecord],
    session: int,
    output_dir: Path = OUTPUT_DIR,
) -> Path:
    """Replace the session's output file with *records* (atomic write)."""
    path = output_path(session, output_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    LOGGER.info("Sorting")
    text = render_records(records)
    LOGGER.info("Saving to %s", path.name)
    tmp = path.with_suffix(".json.tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(text)
        tmp.replace(path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise
    return path
