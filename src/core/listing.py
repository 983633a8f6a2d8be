"""Listing-page models and the layered ticket match.

The portal never returns the id of a record it just created, so the ticket is
recovered by finding the row that belongs to the submitted work item.
"""
from html.parser import HTMLParser

from pydantic import BaseModel

from src.core.matching import normalize

TICKET_COLUMN = 0
TAX_ID_COLUMN = 3
COMPANY_COLUMN = 4
MIN_CELLS = 5

FIRST_ROW_STRATEGY = "first_row"


class DropdownCandidate(BaseModel):
    """A (label, value) pair scraped live from a select control."""

    label: str
    value: str


class ListingRow(BaseModel):
    ticket: str
    tax_id: str = ""
    company: str = ""

    @classmethod
    def from_cells(cls, cells: list[str]) -> "ListingRow | None":
        if len(cells) < MIN_CELLS:
            return None
        return cls(
            ticket=cells[TICKET_COLUMN].strip(),
            tax_id=cells[TAX_ID_COLUMN].strip(),
            company=cells[COMPANY_COLUMN].strip(),
        )


class ListingMatch(BaseModel):
    ticket: str
    strategy: str
    degraded: bool = False


def match_row(rows: list[ListingRow], tax_id: str, company: str) -> ListingMatch | None:
    """Strategies 1-3: exact tax id, exact company, company containment."""
    wanted_tax_id = (tax_id or "").strip().lower()
    if wanted_tax_id:
        for row in rows:
            if row.tax_id.strip().lower() == wanted_tax_id:
                return ListingMatch(ticket=row.ticket, strategy="tax_id")

    wanted_company = normalize(company)
    if not wanted_company:
        return None

    for row in rows:
        if normalize(row.company) == wanted_company:
            return ListingMatch(ticket=row.ticket, strategy="company_exact")

    for row in rows:
        row_company = normalize(row.company)
        if row_company and (wanted_company in row_company or row_company in wanted_company):
            return ListingMatch(ticket=row.ticket, strategy="company_partial")

    return None


class _ListingTableParser(HTMLParser):
    """Collects the text of every <td> per <tr> inside <tbody>."""

    def __init__(self):
        super().__init__()
        self.rows: list[list[str]] = []
        self._in_tbody = False
        self._row: list[str] | None = None
        self._cell: list[str] | None = None

    def handle_starttag(self, tag, attrs):
        if tag == "tbody":
            self._in_tbody = True
        elif tag == "tr" and self._in_tbody:
            self._row = []
        elif tag == "td" and self._row is not None:
            self._cell = []

    def handle_endtag(self, tag):
        if tag == "td" and self._cell is not None and self._row is not None:
            self._row.append(" ".join("".join(self._cell).split()))
            self._cell = None
        elif tag == "tr" and self._row is not None:
            self.rows.append(self._row)
            self._row = None
        elif tag == "tbody":
            self._in_tbody = False

    def handle_data(self, data):
        if self._cell is not None:
            self._cell.append(data)


def parse_listing_html(html: str) -> list[ListingRow]:
    """Parse listing rows out of a page dump. Rows with too few cells are skipped."""
    parser = _ListingTableParser()
    parser.feed(html or "")
    parser.close()
    rows = []
    for cells in parser.rows:
        row = ListingRow.from_cells(cells)
        if row is not None:
            rows.append(row)
    return rows
