"""
Export schedule events to ICS, CSV, and JSON.
"""
from __future__ import annotations

import csv
import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

import icalendar
import pytz

from .grid_events import ScheduleEvent

# Convention venue timezone
TZ_LOCAL = "America/New_York"

CSV_FIELDS = ["name", "start", "end", "location", "url", "description"]


def _uid(event: ScheduleEvent) -> str:
    """Deterministic UID: same event on the same slot keeps its UID across exports."""
    uid_string = f"{event.name}-{event.location}-{event.start.isoformat()}"
    return hashlib.md5(uid_string.encode("utf-8")).hexdigest() + "@convention-schedule-export"


def export_ics(
    events: Sequence[ScheduleEvent],
    out_path: str | Path,
    tz_name: str = TZ_LOCAL,
    calendar_name: str = "Convention Schedule",
) -> None:
    """Export events to iCalendar (.ics) for Apple/Google calendar."""
    tz = pytz.timezone(tz_name)

    cal = icalendar.Calendar()
    cal.add("prodid", "-//Convention Schedule Export//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", calendar_name)
    cal.add("x-wr-timezone", tz_name)

    for ev in events:
        event = icalendar.Event()
        event.add("uid", _uid(ev))
        event.add("summary", ev.name)
        event.add("location", ev.location)
        event.add("dtstart", tz.localize(ev.start))
        event.add("dtend", tz.localize(ev.end))
        event.add("dtstamp", datetime.now(timezone.utc))
        if ev.description:
            event.add("description", ev.description)
        if ev.url:
            event.add("url", ev.url)
        cal.add_component(event)

    Path(out_path).write_text(cal.to_ical().decode("utf-8"), encoding="utf-8")


def export_csv(events: Sequence[ScheduleEvent], out_path: str | Path) -> None:
    """Export events to CSV."""
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction="ignore")
        w.writeheader()
        w.writerows(ev.to_dict() for ev in events)


def export_json(events: Sequence[ScheduleEvent], out_path: str | Path) -> None:
    """Export events to JSON."""
    Path(out_path).write_text(
        json.dumps([ev.to_dict() for ev in events], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )


def export(events: Sequence[ScheduleEvent], out_path: str | Path, fmt: str) -> None:
    """Export to the given format: ics, csv, or json."""
    fmt = fmt.lower()
    if fmt == "ics":
        export_ics(events, out_path)
    elif fmt == "csv":
        export_csv(events, out_path)
    elif fmt == "json":
        export_json(events, out_path)
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use ics, csv, or json.")
