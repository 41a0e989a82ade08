"""Centralized configuration for the Cal-Access lobbyist scraper.

All settings live here so they can be overridden by environment variables or a
``.env`` file without touching source code.

**Profile system:** Set ``CAL_PROFILE=dev`` (default) or ``CAL_PROFILE=prod``.
``dev`` reproduces the site-friendly plain behaviour (no timeout, no retries);
``prod`` adds a request timeout and a single retry.  Any individual ``CAL_*``
var still overrides the profile value.

Usage::

    from calaccess_lobbyists.config import BASE_URL, DEFAULT_SESSION

    url = f"{BASE_URL}/Lobbying/Lobbyists/list.aspx?letter=A&session={DEFAULT_SESSION}"
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

LOGGER = logging.getLogger(__name__)

# ── Profile ──────────────────────────────────────────────────────────────────

PROFILE: str = os.getenv("CAL_PROFILE", "dev").lower().strip()

_PROFILE_DEFAULTS: dict[str, dict[str, str]] = {
    "dev": {
        "CAL_TIMEOUT_SECONDS": "0",
        "CAL_RETRIES": "0",
        "CAL_REQUEST_DELAY": "0",
    },
    "prod": {
        "CAL_TIMEOUT_SECONDS": "30",
        "CAL_RETRIES": "1",
        "CAL_REQUEST_DELAY": "0",
    },
}

if PROFILE not in _PROFILE_DEFAULTS:
    LOGGER.warning("Unknown CAL_PROFILE=%r, falling back to 'dev'.", PROFILE)
    PROFILE = "dev"

_defaults = _PROFILE_DEFAULTS[PROFILE]


def _env(key: str, fallback: str = "") -> str:
    """Read an env var, falling back to profile default then *fallback*."""
    return os.getenv(key, _defaults.get(key, fallback))


# ── Site ─────────────────────────────────────────────────────────────────────
BASE_URL: str = _env("CAL_BASE_URL", "https://cal-access.sos.ca.gov").rstrip("/")

# Legislative sessions are named by their starting (odd) year.
DEFAULT_SESSION: int = int(_env("CAL_SESSION", "2023"))

# ── Network ──────────────────────────────────────────────────────────────────
MAX_WORKERS: int = int(_env("CAL_MAX_WORKERS", "4"))
# 0 means no timeout: a hung request holds its worker slot.
TIMEOUT_SECONDS: float = float(_env("CAL_TIMEOUT_SECONDS", "0"))
RETRIES: int = int(_env("CAL_RETRIES", "0"))
REQUEST_DELAY: float = float(_env("CAL_REQUEST_DELAY", "0"))

# ── Output ───────────────────────────────────────────────────────────────────
OUTPUT_DIR: Path = Path(_env("CAL_OUTPUT_DIR", "."))

if MAX_WORKERS < 1:
    LOGGER.warning("CAL_MAX_WORKERS=%d is invalid, using 1.", MAX_WORKERS)
    MAX_WORKERS = 1
