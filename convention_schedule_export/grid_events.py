"""
Recover events from an expanded schedule grid.

The grid is the schedule table after rowspan/colspan expansion: a panel that
visually covers 4 rows × 2 rooms appears verbatim in all 8 positions. There
is no explicit event structure in the page, so an event is recognized purely
by identity (its canonical title) repeating across adjacent positions.

Known limitation: identity is the only key. Two different panels that share
the exact same title within one table collapse into the first one seen.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .errors import ScheduleFormatError


TIME_COLUMN = "__time__"
SKIP_COLUMN = "__skip__"


@dataclass(frozen=True)
class RawCell:
    """One position of the expanded grid."""

    identity: str
    text: str = ""
    url: Optional[str] = None


@dataclass
class EventRecord:
    """
    Grid footprint of one event.

    row_end and column_end are exclusive.
    """

    name: str
    row_start: int
    row_end: int
    column_start: int
    column_end: int
    url: Optional[str] = None


@dataclass(frozen=True)
class ScheduleEvent:
    """A calendar-ready event."""

    name: str
    start: datetime
    end: datetime
    location: str
    url: Optional[str] = None
    description: Optional[str] = None

    def with_description(self, description: str) -> "ScheduleEvent":
        return replace(self, description=description)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "name": self.name,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "location": self.location,
            "url": self.url,
            "description": self.description,
        }


Grid = Sequence[Sequence[RawCell]]


def _scan_row_end(grid: Grid, row: int, col: int, identity: str) -> int:
    end = row + 1
    while end < len(grid) and col < len(grid[end]) and grid[end][col].identity == identity:
        end += 1
    return end


def extract_event_records(grid: Grid) -> Dict[str, EventRecord]:
    """
    Single row-major pass over the grid, first occurrence wins.

    The top-left occurrence of an identity fixes its start row, its first
    column and (by scanning straight down that column) its end row. Later
    occurrences of the same identity only widen column_end.
    """
    records: Dict[str, EventRecord] = {}
    for r, row in enumerate(grid):
        for c, cell in enumerate(row):
            identity = cell.identity
            if not identity:
                continue
            seen = records.get(identity)
            if seen is not None:
                if c >= seen.column_end:
                    seen.column_end = c + 1
                continue
            records[identity] = EventRecord(
                name=identity,
                row_start=r,
                row_end=_scan_row_end(grid, r, c, identity),
                column_start=c,
                column_end=c + 1,
                url=cell.url,
            )
    return records


def materialize_events(
    records: Dict[str, EventRecord],
    locations: Sequence[str],
    time_axis: Sequence[datetime],
    row_count: int,
) -> List[ScheduleEvent]:
    """
    Turn grid footprints into timed, located events.

    locations[0] belongs to the time column, so grid column c maps to
    locations[c + 1]. time_axis carries one trailing sentinel, so an event
    ending on the last row reads its end from it.
    """
    if len(time_axis) != row_count + 1:
        raise ScheduleFormatError(
            f"Time axis has {len(time_axis)} entries for {row_count} rows; "
            "expected one trailing sentinel."
        )

    events: List[ScheduleEvent] = []
    for record in records.values():
        loc_idx = record.column_start + 1
        if loc_idx >= len(locations):
            raise ScheduleFormatError(
                f"Event {record.name!r} sits in column {record.column_start}, "
                f"beyond the {len(locations) - 1} located columns."
            )
        location = locations[loc_idx]
        if location == SKIP_COLUMN:
            raise ScheduleFormatError(
                f"Event {record.name!r} sits in a spacer column."
            )
        events.append(
            ScheduleEvent(
                name=record.name,
                start=time_axis[record.row_start],
                end=time_axis[record.row_end],
                location=location,
                url=record.url,
            )
        )
    return events


def extract_events(
    grid: Grid,
    locations: Sequence[str],
    time_axis: Sequence[datetime],
) -> List[ScheduleEvent]:
    """Extract every distinct event of one schedule table."""
    records = extract_event_records(grid)
    return materialize_events(records, locations, time_axis, row_count=len(grid))
