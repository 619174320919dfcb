"""Tests for time_axis.py – row labels to absolute row boundaries."""
import pytest
from datetime import date, datetime, timedelta

from convention_schedule_export.errors import ScheduleFormatError
from convention_schedule_export.time_axis import build_time_axis, parse_time_label

D = date(2024, 5, 24)


class TestParseTimeLabel:
    def test_pm(self):
        assert parse_time_label("1:00 pm", D) == datetime(2024, 5, 24, 13, 0)
        assert parse_time_label("4:45 PM", D) == datetime(2024, 5, 24, 16, 45)

    def test_noon_stays_noon(self):
        assert parse_time_label("12:30 pm", D) == datetime(2024, 5, 24, 12, 30)

    def test_morning_after_boundary(self):
        assert parse_time_label("8:00 am", D) == datetime(2024, 5, 24, 8, 0)
        assert parse_time_label("11:15 am", D) == datetime(2024, 5, 24, 11, 15)

    def test_early_morning_rolls_to_next_day(self):
        assert parse_time_label("1:45 am", D) == datetime(2024, 5, 25, 1, 45)
        assert parse_time_label("7:45 am", D) == datetime(2024, 5, 25, 7, 45)

    def test_midnight_is_next_day(self):
        assert parse_time_label("12:00 am", D) == datetime(2024, 5, 25, 0, 0)

    def test_whitespace_and_no_space(self):
        assert parse_time_label("  9:30am ", D) == datetime(2024, 5, 24, 9, 30)

    @pytest.mark.parametrize("label", ["", "13:00", "noon", "13:00 pm", "9:75 am"])
    def test_invalid(self, label):
        with pytest.raises(ScheduleFormatError):
            parse_time_label(label, D)


class TestBuildTimeAxis:
    def test_sentinel_appended(self):
        axis = build_time_axis(["1:00 pm", "1:15 pm"], D)
        assert axis == [
            datetime(2024, 5, 24, 13, 0),
            datetime(2024, 5, 24, 13, 15),
            datetime(2024, 5, 24, 13, 30),
        ]

    def test_sentinel_quarter_past_last_row(self):
        axis = build_time_axis(["4:30 pm", "4:45 pm"], D)
        assert axis[-1] == datetime(2024, 5, 24, 17, 0)

    def test_single_row_uses_default_duration(self):
        axis = build_time_axis(["4:45 pm"], D)
        assert axis == [datetime(2024, 5, 24, 16, 45), datetime(2024, 5, 24, 17, 0)]

    def test_length_is_rows_plus_one(self):
        labels = ["10:00 am", "10:15 am", "10:30 am", "10:45 am"]
        assert len(build_time_axis(labels, D)) == len(labels) + 1

    def test_crosses_midnight(self):
        axis = build_time_axis(["11:45 pm", "12:00 am"], D)
        assert axis == [
            datetime(2024, 5, 24, 23, 45),
            datetime(2024, 5, 25, 0, 0),
            datetime(2024, 5, 25, 0, 15),
        ]

    def test_explicit_row_duration(self):
        axis = build_time_axis(["1:00 pm", "1:30 pm"], D, row_duration=timedelta(minutes=15))
        assert axis[-1] == datetime(2024, 5, 24, 13, 45)

    def test_non_increasing_rows_raise(self):
        with pytest.raises(ScheduleFormatError, match="extrapolate"):
            build_time_axis(["1:15 pm", "1:00 pm"], D)

    def test_empty_raises(self):
        with pytest.raises(ScheduleFormatError):
            build_time_axis([], D)


class TestKnownSentinels:
    KNOWN = {"1:45 am": "2:00 am", "11:45 pm": "12:00 am"}

    def test_known_last_label_passes(self):
        axis = build_time_axis(["1:30 am", "1:45 am"], D, known_sentinels=self.KNOWN)
        assert axis[-1] == datetime(2024, 5, 25, 2, 0)

    def test_unknown_last_label_raises(self):
        with pytest.raises(ScheduleFormatError, match="layout has changed"):
            build_time_axis(["3:30 am", "3:45 am"], D, known_sentinels=self.KNOWN)

    def test_disagreeing_sentinel_raises(self):
        # 30-minute rows extrapolate to 2:15 am, not the listed 2:00 am
        with pytest.raises(ScheduleFormatError, match="should end"):
            build_time_axis(["1:15 am", "1:45 am"], D, known_sentinels=self.KNOWN)

    def test_sentinel_at_day_boundary_is_next_morning(self):
        axis = build_time_axis(["7:30 am", "7:45 am"], D, known_sentinels={"7:45 am": "8:00 am"})
        assert axis[-1] == datetime(2024, 5, 25, 8, 0)

    def test_sentinel_past_midnight(self):
        axis = build_time_axis(["11:30 pm", "11:45 pm"], D, known_sentinels=self.KNOWN)
        assert axis[-1] == datetime(2024, 5, 25, 0, 0)
