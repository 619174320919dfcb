"""
Build the time axis of a schedule grid from its row labels.

The first column of every data row holds a start-time label such as
"10:15 am". The table never labels the end of its last row, so one extra
boundary is extrapolated and appended: the axis always has one entry more
than the grid has rows, and row r spans axis[r] → axis[r + 1].

The schedule day runs from 8:00 am to 8:00 am; labels before 8:00 am belong
to the night after the reference date.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Dict, List, Mapping, Optional, Sequence

from .errors import ScheduleFormatError


DAY_BOUNDARY_HOUR = 8
DEFAULT_ROW_DURATION = timedelta(minutes=15)

_LABEL_RE = re.compile(r"^(\d{1,2}):(\d{2})\s*(am|pm)$", re.I)


def _split_label(label: str) -> tuple[int, int, str]:
    m = _LABEL_RE.match((label or "").strip())
    if not m:
        raise ScheduleFormatError(f"Unrecognized time label: {label!r}")
    hour, minute, suffix = int(m.group(1)), int(m.group(2)), m.group(3).lower()
    if not 1 <= hour <= 12 or minute > 59:
        raise ScheduleFormatError(f"Time label out of range: {label!r}")
    return hour, minute, suffix


def parse_time_label(label: str, reference_date: date) -> datetime:
    """
    Convert "H:MM am|pm" into an absolute datetime on the schedule day.

    "1:00 pm" → reference_date 13:00, "1:45 am" → reference_date + 1 day 01:45.
    """
    hour, minute, suffix = _split_label(label)
    day_offset = 0
    if suffix == "pm":
        if hour != 12:
            hour += 12
    else:
        if hour == 12:
            hour = 0
        if hour < DAY_BOUNDARY_HOUR:
            day_offset = 1
    base = datetime(reference_date.year, reference_date.month, reference_date.day)
    return base + timedelta(days=day_offset, hours=hour, minutes=minute)


def build_time_axis(
    labels: Sequence[str],
    reference_date: date,
    row_duration: Optional[timedelta] = None,
    known_sentinels: Optional[Mapping[str, str]] = None,
) -> List[datetime]:
    """
    Parse every row label and append the sentinel end-of-table boundary.

    :param labels: One time label per data row, top to bottom.
    :param reference_date: Calendar date the table belongs to.
    :param row_duration: Fixed row length for the sentinel. When omitted the
        gap between the last two labels is reused (15 minutes for a single row).
    :param known_sentinels: Optional {last label: sentinel label} table. When
        given, the last label must be listed and its sentinel must agree with
        the extrapolated one; a layout change then fails loudly.
    :returns: len(labels) + 1 datetimes.
    """
    if not labels:
        raise ScheduleFormatError("Schedule table has no time rows.")

    axis = [parse_time_label(label, reference_date) for label in labels]

    if row_duration is not None:
        step = row_duration
    elif len(axis) >= 2:
        step = axis[-1] - axis[-2]
    else:
        step = DEFAULT_ROW_DURATION
    if step <= timedelta(0):
        raise ScheduleFormatError(
            f"Cannot extrapolate past {labels[-1]!r}: row step is {step}."
        )
    sentinel = axis[-1] + step

    if known_sentinels is not None:
        _check_known_sentinel(labels[-1], axis[-1], sentinel, reference_date, known_sentinels)

    axis.append(sentinel)
    return axis


def _check_known_sentinel(
    last_label: str,
    last: datetime,
    sentinel: datetime,
    reference_date: date,
    known_sentinels: Mapping[str, str],
) -> None:
    normalized: Dict[str, str] = {
        k.strip().lower(): v for k, v in known_sentinels.items()
    }
    expected_label = normalized.get(last_label.strip().lower())
    if expected_label is None:
        raise ScheduleFormatError(
            f"Unexpected last time row {last_label!r}; the table layout has changed."
        )
    expected = parse_time_label(expected_label, reference_date)
    # "8:00 am" after "7:45 am" is the next morning, not the reference day
    while expected <= last:
        expected += timedelta(days=1)
    if expected != sentinel:
        raise ScheduleFormatError(
            f"Last row {last_label!r} should end at {expected_label!r}, "
            f"but the row step gives {sentinel:%H:%M}."
        )
