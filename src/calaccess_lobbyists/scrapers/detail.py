"""Per-lobbyist detail page: address, registration, ethics and relationships."""

from __future__ import annotations

import logging

from ..client import CalAccessClient
from ..models import LobbyistDetail
from ..sections import StructureError, extract_sections, locate_sections, parse_html

LOGGER = logging.getLogger(__name__)


def parse_detail_page(html: str) -> LobbyistDetail:
    """Build the detail fields from a page.

    Sections missing from the page leave their fields unset.  A section that
    is present but laid out differently raises :class:`StructureError` naming
    every such section.
    """
    soup = parse_html(html)
    results = extract_sections(locate_sections(soup))

    mismatches = [f"{r.section}: {r.error}" for r in results if not r.ok]
    if mismatches:
        raise StructureError("; ".join(mismatches))

    values: dict = {}
    for result in results:
        values.update(result.values)
    return LobbyistDetail(**values)


def scrape_lobbyist_detail(
    client: CalAccessClient, lobbyist_id: str, session: int
) -> LobbyistDetail:
    LOGGER.info("Scraping lobbyist info for %s", lobbyist_id)
    html = client.get_html(client.detail_url(lobbyist_id, session))
    return parse_detail_page(html)
