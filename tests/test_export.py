import csv
import json
from datetime import datetime

import pytest

from convention_schedule_export.export import export, export_ics
from convention_schedule_export.grid_events import ScheduleEvent


EVENTS = [
    ScheduleEvent(
        name="Opening Ceremonies",
        start=datetime(2024, 5, 24, 10, 0),
        end=datetime(2024, 5, 24, 10, 30),
        location="Hynes: Hall A",
        url="https://www.animeboston.com/schedule/event/1",
        description="Kick off the weekend.",
    ),
    ScheduleEvent(
        name="Late Night Karaoke",
        start=datetime(2024, 5, 25, 1, 0),
        end=datetime(2024, 5, 25, 2, 0),
        location="Sheraton: Republic",
    ),
]


def test_export_ics(tmp_path):
    out_path = tmp_path / "test.ics"
    export_ics(EVENTS, out_path)

    assert out_path.exists()
    content = out_path.read_text(encoding="utf-8")

    # Verify standard ICS elements
    assert "BEGIN:VCALENDAR" in content
    assert content.count("BEGIN:VEVENT") == 2
    assert "END:VCALENDAR" in content

    # Verify Timezone is applied correctly
    assert "DTSTART;TZID=America/New_York:20240524T100000" in content
    assert "DTEND;TZID=America/New_York:20240524T103000" in content
    assert "DTSTART;TZID=America/New_York:20240525T010000" in content

    assert "SUMMARY:Opening Ceremonies" in content
    assert "LOCATION:Hynes: Hall A" in content
    assert "DESCRIPTION:Kick off the weekend." in content
    assert "@convention-schedule-export" in content


def test_export_ics_uid_is_deterministic(tmp_path):
    first, second = tmp_path / "a.ics", tmp_path / "b.ics"
    export_ics(EVENTS, first)
    export_ics(EVENTS, second)

    def uids(path):
        return [line for line in path.read_text(encoding="utf-8").splitlines() if line.startswith("UID:")]

    assert uids(first) == uids(second)
    assert len(set(uids(first))) == 2


def test_export_json(tmp_path):
    out_path = tmp_path / "events.json"
    export(EVENTS, out_path, "json")
    data = json.loads(out_path.read_text(encoding="utf-8"))
    assert data[0]["name"] == "Opening Ceremonies"
    assert data[0]["start"] == "2024-05-24T10:00:00"
    assert data[1]["url"] is None


def test_export_csv(tmp_path):
    out_path = tmp_path / "events.csv"
    export(EVENTS, out_path, "CSV")
    with open(out_path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["name"] for r in rows] == ["Opening Ceremonies", "Late Night Karaoke"]
    assert rows[1]["location"] == "Sheraton: Republic"


def test_export_unknown_format(tmp_path):
    with pytest.raises(ValueError, match="Unsupported format"):
        export(EVENTS, tmp_path / "x.txt", "txt")
