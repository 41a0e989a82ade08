"""Best-effort HTML heuristics for Cal-Access lobbyist pages.

The detail page carries no ids or classes on its data tables.  Each section
(address, mailing address, ethics/registration, relationships) is found by
scanning table bodies for a heading keyword in their markup, and fields are
then read by row and cell position.

Locating and extracting are kept separate:

* :func:`locate_sections` maps a parsed page to the table body of each section
  (``None`` when the section is not on the page).
* ``extract_*`` functions turn one located body into field values wrapped in a
  :class:`SectionResult`, so a row or cell that is not where we expect it
  becomes a reported mismatch instead of an ``IndexError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from .models import RelationshipRecord

LOGGER = logging.getLogger(__name__)

HTML_PARSER = "html5lib"

# Site navigation and page header tables that precede the data sections.
LEADING_CHROME_TABLES = 7

ADDRESS_MARKER = "ADDRESS"
MAILING_ADDRESS_MARKER = "MAILING ADDRESS"
ETHICS_MARKER = "ETHICS COURSE COMPLETION DATE"
RELATIONSHIPS_MARKER = "LOBBYIST RELATIONSHIPS"

_ADDRESS_LINE_DELIMITER = "\n\t\t"
_PHONE_LABEL = "Phone: "
_EMAIL_LABEL = "Email: "


class StructureError(ValueError):
    """A table, row, cell or link the page should have is missing."""


@dataclass
class SectionResult:
    """Outcome of extracting one section: field values or a mismatch message."""

    section: str
    values: dict = field(default_factory=dict)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def mismatch(cls, section: str, message: str) -> SectionResult:
        return cls(section=section, error=message)


@dataclass
class LocatedSections:
    address: Tag | None = None
    mailing_address: Tag | None = None
    ethics: Tag | None = None
    relationships: Tag | None = None


# ── Parsing and text helpers ─────────────────────────────────────────────────


def parse_html(html: str) -> BeautifulSoup:
    """Parse a page the way a browser would.

    Cal-Access markup may leave out optional end tags such as ``</td>`` and
    ``</tr>``; the HTML5 tree builder closes those cells where a browser does
    instead of nesting each one inside the last.
    """
    return BeautifulSoup(html, HTML_PARSER)


def node_text(tag: Tag) -> str:
    """Concatenated text of *tag*, with line endings normalized to ``\\n``."""
    return tag.get_text().replace("\r\n", "\n").replace("\r", "\n")


def _rows(body: Tag) -> list[Tag]:
    return body.find_all("tr")


def _cells(row: Tag) -> list[Tag]:
    return row.find_all("td")


# ── Locator ──────────────────────────────────────────────────────────────────


def table_bodies(soup: BeautifulSoup) -> list[Tag]:
    """Every table body in document order.

    The HTML5 tree builder gives every table at least one ``<tbody>``, whether
    or not the markup spells it out.
    """
    return soup.find_all("tbody")


def data_bodies(soup: BeautifulSoup) -> list[Tag]:
    """Table bodies after the leading layout chrome."""
    return table_bodies(soup)[LEADING_CHROME_TABLES:]


def find_section(bodies: list[Tag], marker: str, exclude: str | None = None) -> Tag | None:
    """First body whose markup contains *marker* (and not *exclude*)."""
    for body in bodies:
        markup = body.decode_contents()
        if marker not in markup:
            continue
        if exclude is not None and exclude in markup:
            continue
        return body
    return None


def locate_sections(soup: BeautifulSoup) -> LocatedSections:
    bodies = data_bodies(soup)
    return LocatedSections(
        address=find_section(bodies, ADDRESS_MARKER, exclude=MAILING_ADDRESS_MARKER),
        mailing_address=find_section(bodies, MAILING_ADDRESS_MARKER),
        ethics=find_section(bodies, ETHICS_MARKER),
        relationships=find_section(bodies, RELATIONSHIPS_MARKER),
    )


# ── Extractors ───────────────────────────────────────────────────────────────


def extract_address(body: Tag) -> SectionResult:
    """Street address (first two lines), phone and email from the address block."""
    rows = _rows(body)
    if len(rows) < 2:
        return SectionResult.mismatch("address", f"expected 2+ rows, found {len(rows)}")

    # The cell text starts with indentation before the first delimiter.
    lines = node_text(rows[1]).split(_ADDRESS_LINE_DELIMITER)[1:]
    values: dict = {"address": "\n".join(lines[:2])}
    for line in lines:
        if "Phone" in line:
            values["phone"] = line.replace(_PHONE_LABEL, "", 1).strip()
        elif "Email" in line:
            values["email"] = line.replace(_EMAIL_LABEL, "", 1).strip()
    return SectionResult("address", values)


def extract_mailing_address(body: Tag) -> SectionResult:
    rows = _rows(body)
    if len(rows) < 2:
        return SectionResult.mismatch("mailing_address", f"expected 2+ rows, found {len(rows)}")
    text = node_text(rows[1]).strip().replace("\t\t", "")
    return SectionResult("mailing_address", {"mailing_address": text})


def extract_ethics(body: Tag) -> SectionResult:
    """Ethics course date, registration date and status, by cell position."""
    rows = _rows(body)
    if len(rows) < 2:
        return SectionResult.mismatch("ethics", f"expected 2+ rows, found {len(rows)}")
    cells = _cells(rows[1])
    if len(cells) < 3:
        return SectionResult.mismatch("ethics", f"expected 3+ cells, found {len(cells)}")

    completed = node_text(cells[0]).strip()
    return SectionResult(
        "ethics",
        {
            "ethics_course_completion_date": completed or None,
            "registration_date": node_text(cells[1]).strip(),
            "status": node_text(cells[2]).strip(),
        },
    )


def extract_relationships(body: Tag) -> SectionResult:
    """One :class:`RelationshipRecord` per row after the two header rows."""
    relationships: list[RelationshipRecord] = []
    for i, row in enumerate(_rows(body)[2:], start=2):
        cells = _cells(row)
        if len(cells) < 4:
            return SectionResult.mismatch(
                "relationships", f"row {i} has {len(cells)} cells, expected 4+"
            )
        terminated = node_text(cells[3]).strip()
        relationships.append(
            RelationshipRecord(
                entity_name=node_text(cells[0]).strip(),
                type=node_text(cells[1]).strip(),
                effective_date=node_text(cells[2]).strip(),
                termination_date=terminated or None,
            )
        )
    return SectionResult("relationships", {"relationships": relationships})


def extract_sections(located: LocatedSections) -> list[SectionResult]:
    """Run the extractor for every section that was found on the page."""
    extractors = (
        ("address", located.address, extract_address),
        ("mailing_address", located.mailing_address, extract_mailing_address),
        ("ethics", located.ethics, extract_ethics),
        ("relationships", located.relationships, extract_relationships),
    )
    results: list[SectionResult] = []
    for section, body, extract in extractors:
        if body is None:
            LOGGER.debug("No %s table on page; leaving its fields unset.", section)
            continue
        results.append(extract(body))
    return results
