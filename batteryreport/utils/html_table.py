"""Extract battery usage rows from the HTML form of a Windows battery report."""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


TABLE_ROW_REGEX = re.compile(r'<tr[^>]*>(.*?)</tr>', re.IGNORECASE | re.DOTALL)
TABLE_CELL_REGEX = re.compile(r'<t[dh][^>]*>(.*?)</t[dh]>', re.IGNORECASE | re.DOTALL)
HTML_TAG_REGEX = re.compile(r'<[^>]*>')
WHITESPACE_REGEX = re.compile(r'\s+')

MIN_ROW_CONTENT_LENGTH = 10
MIN_CELLS_PER_ROW = 3

# Keyword sets used to classify cells (case-insensitive substring match)
STATE_KEYWORDS = ('active', 'standby', 'suspended', 'charging', 'connected', 'report generated')
SOURCE_KEYWORDS = ('battery', 'ac')


@dataclass
class TableRow:
    """Cells of one report table row, classified by content."""

    timestamp: Optional[str] = None
    state: Optional[str] = None
    source: Optional[str] = None
    percent: Optional[str] = None
    mwh: Optional[str] = None


def clean_cell_text(cell_html: str) -> str:
    """Strip tags and entities from a cell and collapse whitespace."""
    text = HTML_TAG_REGEX.sub(' ', cell_html)
    text = text.replace('&nbsp;', ' ')
    return WHITESPACE_REGEX.sub(' ', text).strip()


def strip_markup(html: str) -> str:
    """Replace every tag with a space, keeping line structure intact."""
    return HTML_TAG_REGEX.sub(' ', html).replace('&nbsp;', ' ')


def extract_cells(row_html: str) -> List[str]:
    """Return the non-empty text of every <td>/<th> cell in a row."""
    cells = []
    for match in TABLE_CELL_REGEX.finditer(row_html):
        text = clean_cell_text(match.group(1))
        if text:
            cells.append(text)
    return cells


def classify_cells(cells: List[str], timestamp_regex, percent_regex, mwh_regex) -> TableRow:
    """
    Map positional cells onto report fields.

    The first cell is the timestamp only if it matches the timestamp
    pattern. Remaining cells are tested against every category; when
    several cells match the same category the last one wins.
    """
    row = TableRow()

    if cells and timestamp_regex.match(cells[0]):
        row.timestamp = cells[0]

    for cell in cells[1:]:
        lowered = cell.lower()

        if any(keyword in lowered for keyword in STATE_KEYWORDS):
            row.state = cell

        if any(keyword in lowered for keyword in SOURCE_KEYWORDS):
            row.source = cell

        if percent_regex.search(cell):
            row.percent = cell

        if mwh_regex.search(cell):
            row.mwh = cell

    return row


def extract_table_rows(html: str, timestamp_regex, percent_regex, mwh_regex) -> List[TableRow]:
    """
    Find usage rows in every table of an HTML battery report.

    Header rows, rows with too little content, and rows with fewer than
    three cells are skipped. A row is kept only when both a timestamp and
    a battery percentage were identified.

    Args:
        html: Full HTML document
        timestamp_regex: Compiled pattern matching report timestamps
        percent_regex: Compiled pattern matching "NN %"
        mwh_regex: Compiled pattern matching "N,NNN mWh"

    Returns:
        Classified rows in document order
    """
    rows = []

    for row_match in TABLE_ROW_REGEX.finditer(html):
        row_html = row_match.group(1)

        if '<th' in row_html.lower() or len(row_html.strip()) < MIN_ROW_CONTENT_LENGTH:
            continue

        cells = extract_cells(row_html)
        if len(cells) < MIN_CELLS_PER_ROW:
            continue

        row = classify_cells(cells, timestamp_regex, percent_regex, mwh_regex)
        if row.timestamp and row.percent:
            rows.append(row)

    logger.debug(f"Extracted {len(rows)} usage rows from HTML report")
    return rows
