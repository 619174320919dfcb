"""
Parse a convention schedule page into calendar events.

The real HTML structure (one table per convention day):
- <table class="schedule-table"><tbody>
- Row 1: building headers. The first <th> is the corner above the time
  column; buildings carry colspan = number of rooms; spacer columns are
  <th class="schedule-filler">.
- Row 2: one room <th> per column (spacers included).
- Data rows: <th class="schedule-time">10:15 am</th> followed by <td> cells.
  An event is a <td> with rowspan (duration) and colspan (rooms), whose
  title attribute holds the full event name (the visible text may be
  truncated) and whose onclick is like "location.href='/schedule/event/123'".
- The header rows are repeated at the bottom of the table.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag  # type: ignore[import]

from .errors import ScheduleFormatError
from .grid_events import SKIP_COLUMN, TIME_COLUMN, RawCell, ScheduleEvent, extract_events
from .time_axis import build_time_axis

logger = logging.getLogger(__name__)

FILLER_CLASS = "schedule-filler"
TIME_CLASS = "schedule-time"
TABLE_SELECTOR = "table.schedule-table"


# ──────────────────────────────────────────────────────────────────
#  Header decoding
# ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class HeaderCell:
    """One building-row header: label spread over colspan room columns."""

    label: str
    colspan: int = 1
    filler: bool = False


def decode_locations(
    group_cells: Sequence[HeaderCell], room_labels: Sequence[str]
) -> List[str]:
    """
    Combine the building row and the room row into one label per column.

    Position 0 is the time column; grid column c is described by
    position c + 1. Spacer columns hold SKIP_COLUMN.

    >>> decode_locations([HeaderCell("Hall A", 2)], ["101", "102"])
    ['__time__', 'Hall A: 101', 'Hall A: 102']
    """
    columns: List[str] = [TIME_COLUMN]
    for cell in group_cells:
        if cell.filler:
            # spacers never repeat, whatever their colspan says
            columns.append(SKIP_COLUMN)
            continue
        label = (cell.label or "").strip()
        if not label:
            raise ScheduleFormatError("Building header has no text.")
        columns.extend([f"{label}:"] * max(cell.colspan, 1))

    column_idx = 1
    for room in room_labels:
        if column_idx >= len(columns):
            raise ScheduleFormatError(
                f"Room row has more columns than the building row ({len(columns) - 1})."
            )
        if columns[column_idx] != SKIP_COLUMN:
            room = (room or "").strip()
            if not room:
                raise ScheduleFormatError(
                    f"Room header for column {column_idx} has no text."
                )
            columns[column_idx] = f"{columns[column_idx]} {room}"
        column_idx += 1

    if column_idx != len(columns):
        raise ScheduleFormatError(
            f"Room row covers {column_idx - 1} columns, "
            f"building row covers {len(columns) - 1}."
        )
    return columns


def _span(cell: Tag, attr: str) -> int:
    try:
        return max(int(cell.get(attr, 1)), 1)
    except (TypeError, ValueError):
        return 1


def _is_filler(cell: Tag) -> bool:
    return FILLER_CLASS in (cell.get("class") or [])


def _header_cells(building_row: Tag) -> List[HeaderCell]:
    ths = building_row.find_all("th", recursive=False)
    if not ths:
        raise ScheduleFormatError("Building row has no header cells.")
    # ths[0] is the corner above the time column
    return [
        HeaderCell(
            label=th.get_text(" ", strip=True),
            colspan=_span(th, "colspan"),
            filler=_is_filler(th),
        )
        for th in ths[1:]
    ]


def _room_labels(room_row: Tag, skip_corner: bool = False) -> List[str]:
    ths = room_row.find_all("th", recursive=False)
    if skip_corner:
        ths = ths[1:]
    labels: List[str] = []
    for th in ths:
        text = th.get_text(" ", strip=True)
        if not text and not _is_filler(th):
            raise ScheduleFormatError("Room header has no text.")
        labels.append(text)
    return labels


def parse_locations(building_row: Tag, room_row: Tag) -> List[str]:
    """Location axis of one schedule table, read from its two header rows."""
    corner = building_row.find("th", recursive=False)
    # Without rowspan the corner repeats at the start of the room row
    skip_corner = corner is not None and _span(corner, "rowspan") < 2
    return decode_locations(
        _header_cells(building_row), _room_labels(room_row, skip_corner=skip_corner)
    )


# ──────────────────────────────────────────────────────────────────
#  Grid expansion
# ──────────────────────────────────────────────────────────────────

def expand_table(rows: Sequence[Tag]) -> List[List[Tag]]:
    """
    Expand rowspan/colspan so every covered position holds its cell.

    A <td rowspan="3" colspan="2"> shows up in 6 positions of the result,
    always as the same Tag object. Spans running past the last row are cut.
    """
    grid: Dict[int, Dict[int, Tag]] = {i: {} for i in range(len(rows))}

    for row_idx, row in enumerate(rows):
        occupied = grid[row_idx]
        col = 0
        for cell in row.find_all(["td", "th"], recursive=False):
            # Skip columns still covered by a rowspan from an earlier row
            while col in occupied:
                col += 1
            rowspan = _span(cell, "rowspan")
            colspan = _span(cell, "colspan")
            for dr in range(rowspan):
                target = grid.get(row_idx + dr)
                if target is None:
                    break
                for dc in range(colspan):
                    target[col + dc] = cell
            col += colspan

    return [[cells[c] for c in sorted(cells)] for _, cells in sorted(grid.items())]


_ONCLICK_URL_RE = re.compile(r"'([^']*)'")


def parse_onclick_url(onclick: str, base_url: Optional[str] = None) -> str:
    """
    Return the first single-quoted token of an inline click handler.

    >>> parse_onclick_url("location.href='/schedule/event/12'", "https://example.com/schedule")
    'https://example.com/schedule/event/12'
    """
    m = _ONCLICK_URL_RE.search(onclick or "")
    if not m or not m.group(1).strip():
        raise ScheduleFormatError(f"Cannot find a link in onclick={onclick!r}")
    href = m.group(1).strip()
    return urljoin(base_url, href) if base_url else href


def _raw_cell(cell: Tag, base_url: Optional[str]) -> RawCell:
    identity = (cell.get("title") or "").strip()
    if not identity:
        return RawCell(identity="", text=cell.get_text(" ", strip=True))
    onclick = cell.get("onclick")
    url = parse_onclick_url(onclick, base_url) if onclick else None
    return RawCell(identity=identity, text=cell.get_text(" ", strip=True), url=url)


def to_raw_grid(expanded: Sequence[Sequence[Tag]], base_url: Optional[str] = None) -> List[List[RawCell]]:
    """Convert expanded data rows (time column included) into RawCell rows."""
    cache: Dict[int, RawCell] = {}
    grid: List[List[RawCell]] = []
    for row in expanded:
        out: List[RawCell] = []
        for cell in row[1:]:
            key = id(cell)
            if key not in cache:
                cache[key] = _raw_cell(cell, base_url)
            out.append(cache[key])
        grid.append(out)
    return grid


# ──────────────────────────────────────────────────────────────────
#  Table parsing
# ──────────────────────────────────────────────────────────────────

def _row_signature(row: Tag) -> tuple:
    return tuple(th.get_text(" ", strip=True) for th in row.find_all("th", recursive=False))


def _split_rows(table: Tag) -> tuple[Tag, Tag, List[Tag]]:
    body = table.find("tbody") or table
    rows = body.find_all("tr", recursive=False)
    if len(rows) < 3:
        raise ScheduleFormatError(
            f"Schedule table has {len(rows)} rows; expected two header rows and data rows."
        )
    building_row, room_row, data_rows = rows[0], rows[1], rows[2:]

    # The page repeats its header rows at the bottom
    headers = {_row_signature(building_row), _row_signature(room_row)}
    while data_rows and _row_signature(data_rows[-1]) in headers:
        data_rows = data_rows[:-1]
    if not data_rows:
        raise ScheduleFormatError("Schedule table has no data rows.")
    return building_row, room_row, data_rows


def parse_time_labels(data_rows: Sequence[Tag]) -> List[str]:
    labels: List[str] = []
    for i, row in enumerate(data_rows):
        th = row.find("th", class_=TIME_CLASS)
        text = th.get_text(" ", strip=True) if th else ""
        if not text:
            raise ScheduleFormatError(f"Failed to parse time from first column of row {i}.")
        labels.append(text)
    return labels


def parse_schedule_table(
    table: Tag,
    reference_date: date,
    base_url: Optional[str] = None,
    known_sentinels: Optional[Mapping[str, str]] = None,
) -> List[ScheduleEvent]:
    """Decode one schedule table (one convention day) into events."""
    building_row, room_row, data_rows = _split_rows(table)

    locations = parse_locations(building_row, room_row)
    times = build_time_axis(
        parse_time_labels(data_rows), reference_date, known_sentinels=known_sentinels
    )
    grid = to_raw_grid(expand_table(data_rows), base_url)

    events = extract_events(grid, locations, times)
    logger.info(
        "%s: %d rows × %d columns, %d events",
        reference_date.isoformat(), len(grid), len(locations) - 1, len(events),
    )
    return events


# ──────────────────────────────────────────────────────────────────
#  Public API
# ──────────────────────────────────────────────────────────────────

def parse_schedule_html(
    html_path: str | Path | None = None,
    html_content: str | None = None,
    start_date: date | str | None = None,
    base_url: str | None = None,
    known_sentinels: Optional[Mapping[str, str]] = None,
) -> List[ScheduleEvent]:
    """
    Parse every schedule table of a convention schedule page.

    :param html_path: Path to a saved schedule page.
    :param html_content: Raw HTML string (alternative to html_path).
    :param start_date: Date of the first table; table i is start_date + i days.
    :param base_url: Page URL, used to absolutize event links.
    :param known_sentinels: Optional last-row validation table, see build_time_axis.
    :returns: Events of all tables, ordered by start, location and name.
    """
    if html_content is not None:
        html = html_content
    elif html_path is not None:
        html = Path(html_path).read_text(encoding="utf-8", errors="ignore")
    else:
        raise ValueError("Provide either html_path or html_content.")

    if start_date is None:
        raise ValueError("start_date is required (date of the first schedule table).")
    if isinstance(start_date, str):
        start_date = date.fromisoformat(start_date)

    soup = BeautifulSoup(html, "html.parser")
    tables = soup.select(TABLE_SELECTOR)
    if not tables:
        raise ScheduleFormatError(
            f"Could not find any schedule table ({TABLE_SELECTOR}) in the HTML."
        )

    events: List[ScheduleEvent] = []
    for day, table in enumerate(tables):
        events.extend(
            parse_schedule_table(
                table,
                start_date + timedelta(days=day),
                base_url=base_url,
                known_sentinels=known_sentinels,
            )
        )

    events.sort(key=lambda e: (e.start, e.location, e.name))
    return events
