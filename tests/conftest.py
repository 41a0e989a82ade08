from __future__ import annotations

import threading
import time
from collections.abc import Callable

import pytest
import requests

from calaccess_lobbyists.client import CalAccessClient
from calaccess_lobbyists.models import LobbyistRecord, RelationshipRecord

# ── Sample page fragments ─────────────────────────────────────────────────────
# Modeled on the Cal-Access markup: tab-indented cell text, uppercase headings,
# no ids or classes on the data tables.

ADDRESS_TABLE = (
    "<table><tbody>"
    "<tr><td>ADDRESS</td></tr>"
    "<tr><td>\n\t\t1215 K STREET, SUITE 1100"
    "\n\t\tSACRAMENTO, CA 95814"
    "\n\t\tPhone: (916) 555-0100"
    "\n\t\tEmail: jdoe@example.com\n\t</td></tr>"
    "</tbody></table>"
)

MAILING_ADDRESS_TABLE = (
    "<table><tbody>"
    "<tr><td>MAILING ADDRESS</td></tr>"
    "<tr><td>\n\t\tP.O. BOX 1000\n\t\tSACRAMENTO, CA 95812\n\t</td></tr>"
    "</tbody></table>"
)

ETHICS_TABLE = (
    "<table><tbody>"
    "<tr><td>ETHICS COURSE COMPLETION DATE</td><td>REGISTRATION DATE</td>"
    "<td>STATUS</td></tr>"
    "<tr><td> 02/14/2023 </td><td> 01/03/2023 </td><td> ACTIVE </td></tr>"
    "</tbody></table>"
)

ETHICS_TABLE_NO_COURSE = (
    "<table><tbody>"
    "<tr><td>ETHICS COURSE COMPLETION DATE</td><td>REGISTRATION DATE</td>"
    "<td>STATUS</td></tr>"
    "<tr><td>  </td><td>01/03/2023</td><td>ACTIVE</td></tr>"
    "</tbody></table>"
)

RELATIONSHIPS_TABLE = (
    "<table><tbody>"
    '<tr><td colspan="4">LOBBYIST RELATIONSHIPS</td></tr>'
    "<tr><td>NAME</td><td>TYPE</td><td>EFFECTIVE DATE</td><td>TERMINATION DATE</td></tr>"
    "<tr><td>CAPITOL ADVOCACY LLC</td><td>LOBBYING FIRM</td>"
    "<td>01/01/2023</td><td> </td></tr>"
    "<tr><td>WESTERN GROWERS ASSOCIATION</td><td>EMPLOYER</td>"
    "<td>01/01/2023</td><td>06/30/2023</td></tr>"
    "</tbody></table>"
)


def build_detail_page(*sections: str, chrome: int = 7) -> str:
    """A detail page: *chrome* layout tables followed by *sections*.

    The third layout table mentions ADDRESS so tests notice if the chrome is
    not skipped.
    """
    layout = []
    for i in range(chrome):
        label = "SITE ADDRESS: 1500 11TH STREET" if i == 2 else f"NAV {i}"
        layout.append(f"<table><tr><td>{label}</td></tr></table>")
    return "<html><body>" + "".join(layout) + "".join(sections) + "</body></html>"


def build_index_page(rows: list[tuple[str, str]], session: int = 2023) -> str:
    """A listing page with one row per ``(id, name)`` after the header row."""
    body = ["<tr><th>NAME</th></tr>"]
    for lobbyist_id, name in rows:
        body.append(
            f'<tr><td><a href="Detail.aspx?id={lobbyist_id}&session={session}">{name}</a>'
            "</td></tr>"
        )
    return (
        '<html><body><table id="lobbyists"><tbody>'
        + "".join(body)
        + "</tbody></table></body></html>"
    )


FULL_DETAIL_PAGE = build_detail_page(
    ADDRESS_TABLE, MAILING_ADDRESS_TABLE, ETHICS_TABLE, RELATIONSHIPS_TABLE
)


# ── Fake HTTP client ──────────────────────────────────────────────────────────


class FakeClient(CalAccessClient):
    """Serves canned pages by URL and records how many requests overlap.

    Listing pages that are not registered come back empty (header row only);
    unregistered detail pages come back as a page with no data sections.
    """

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        *,
        failures: set[str] | None = None,
        delay: float = 0.0,
    ):
        super().__init__(base_url="https://cal-access.test")
        self.pages = dict(pages or {})
        self.failures = set(failures or ())
        self.delay = delay
        self.requested: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._counter_lock = threading.Lock()

    def get_html(self, url: str) -> str:
        with self._counter_lock:
            self.requested.append(url)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if url in self.failures:
                raise requests.ConnectionError(f"connection refused: {url}")
            if url in self.pages:
                return self.pages[url]
            if "list.aspx" in url:
                return build_index_page([])
            return build_detail_page()
        finally:
            with self._counter_lock:
                self.in_flight -= 1


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture
def fake_client_factory() -> Callable[..., FakeClient]:
    return FakeClient


@pytest.fixture
def index_page() -> Callable[..., str]:
    return build_index_page


@pytest.fixture
def detail_page() -> Callable[..., str]:
    return build_detail_page


@pytest.fixture
def full_detail_page() -> str:
    return FULL_DETAIL_PAGE


@pytest.fixture
def sections() -> dict[str, str]:
    return {
        "address": ADDRESS_TABLE,
        "mailing_address": MAILING_ADDRESS_TABLE,
        "ethics": ETHICS_TABLE,
        "ethics_no_course": ETHICS_TABLE_NO_COURSE,
        "relationships": RELATIONSHIPS_TABLE,
    }


@pytest.fixture
def sample_record() -> LobbyistRecord:
    return LobbyistRecord(
        id="1234567",
        name="DOE, JANE",
        address="1215 K STREET, SUITE 1100\nSACRAMENTO, CA 95814",
        phone="(916) 555-0100",
        email="jdoe@example.com",
        registration_date="01/03/2023",
        ethics_course_completion_date="02/14/2023",
        status="ACTIVE",
        relationships=[
            RelationshipRecord(
                entity_name="CAPITOL ADVOCACY LLC",
                type="LOBBYING FIRM",
                effective_date="01/01/2023",
            )
        ],
    )
