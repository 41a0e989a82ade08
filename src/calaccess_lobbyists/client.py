"""HTTP access to the Cal-Access lobbyist pages."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import BASE_URL, MAX_WORKERS, REQUEST_DELAY, RETRIES, TIMEOUT_SECONDS

LOGGER = logging.getLogger(__name__)

LIST_PATH = "/Lobbying/Lobbyists/list.aspx"
DETAIL_PATH = "/Lobbying/Lobbyists/Detail.aspx"


@dataclass
class CalAccessClient:
    base_url: str = BASE_URL
    timeout_seconds: float = TIMEOUT_SECONDS
    retries: int = RETRIES
    request_delay: float = REQUEST_DELAY
    pool_size: int = MAX_WORKERS
    _session: requests.Session = field(default_factory=requests.Session, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _last_request_time: float = field(default=0.0, repr=False)

    def __post_init__(self) -> None:
        """Mount a pooled adapter; retries only when configured."""
        max_retries: Retry | int = 0
        if self.retries > 0:
            max_retries = Retry(
                total=self.retries,
                backoff_factor=1.0,
                status_forcelist=[429, 500, 502, 503, 504],
            )
        adapter = HTTPAdapter(
            max_retries=max_retries,
            pool_connections=self.pool_size,
            pool_maxsize=self.pool_size,
        )
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)
        self.base_url = self.base_url.rstrip("/")

    # ── URLs ──────────────────────────────────────────────────────────────

    def list_url(self, shard: str, session: int) -> str:
        return f"{self.base_url}{LIST_PATH}?letter={shard}&session={session}"

    def detail_url(self, lobbyist_id: str, session: int) -> str:
        return f"{self.base_url}{DETAIL_PATH}?id={lobbyist_id}&session={session}"

    # ── throttled HTTP ────────────────────────────────────────────────────

    def _throttled_get(self, url: str) -> requests.Response:
        """GET, spacing request starts by ``request_delay`` across threads."""
        wait = 0.0
        if self.request_delay > 0:
            with self._lock:
                elapsed = time.time() - self._last_request_time
                wait = max(0.0, self.request_delay - elapsed)
                # Reserve our slot by advancing the timestamp before releasing the lock.
                self._last_request_time = time.time() + wait
        if wait > 0:
            time.sleep(wait)
        timeout = self.timeout_seconds if self.timeout_seconds > 0 else None
        return self._session.get(url, timeout=timeout)

    def get_html(self, url: str) -> str:
        """Fetch *url* and return the body; non-2xx responses raise ``HTTPError``."""
        LOGGER.debug("GET %s", url)
        resp = self._throttled_get(url)
        resp.raise_for_status()
        return resp.text

    def close(self) -> None:
        self._session.close()
