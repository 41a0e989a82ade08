"""Alphabetic lobbyist index: one listing page per shard.

Each listing page has a ``#lobbyists`` table whose first row is a header and
whose remaining rows link every lobbyist name to its detail page::

    <td><a href="Detail.aspx?id=1234567&session=2023">SMITH, JANE</a></td>

Names are whitespace-trimmed, so indentation around the link in the cell does
not leak into the dataset the way the raw cell text would.
"""

from __future__ import annotations

import logging
import re

from ..client import CalAccessClient
from ..models import LobbyistRecord
from ..sections import StructureError, node_text, parse_html

LOGGER = logging.getLogger(__name__)

# 26 letters plus a catch-all shard for names that do not start with a letter.
SHARDS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0"

LISTING_TABLE_ID = "lobbyists"

_RE_ID_PARAM = re.compile(r"id=([^&]*)")


def lobbyist_id_from_href(href: str) -> str:
    """Text after the first ``id=`` up to the next ``&``."""
    m = _RE_ID_PARAM.search(href)
    if not m or not m.group(1):
        raise StructureError(f"No id= parameter in link {href!r}")
    return m.group(1)


def parse_index_page(html: str) -> list[LobbyistRecord]:
    soup = parse_html(html)
    table = soup.find(id=LISTING_TABLE_ID)
    if table is None:
        raise StructureError(f"Listing table #{LISTING_TABLE_ID} not found")

    records: list[LobbyistRecord] = []
    for i, row in enumerate(table.find_all("tr")):
        if i == 0:
            continue
        cells = row.find_all("td")
        if not cells:
            raise StructureError(f"Listing row {i} has no cells")
        link = cells[0].find("a", href=True)
        if link is None:
            raise StructureError(f"Listing row {i} has no detail link")
        name = node_text(cells[0]).strip()
        if not name:
            raise StructureError(f"Listing row {i} has no name")
        records.append(LobbyistRecord(id=lobbyist_id_from_href(link["href"]), name=name))
    return records


def scrape_index_shard(client: CalAccessClient, shard: str, session: int) -> list[LobbyistRecord]:
    """Fetch and parse one shard; errors propagate to the caller."""
    LOGGER.info("Scraping lobbyists for %s", shard)
    html = client.get_html(client.list_url(shard, session))
    records = parse_index_page(html)
    LOGGER.info("  %s: %d lobbyists", shard, len(records))
    return records
