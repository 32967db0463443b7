"""
test_response_parser.py
-----------------------
Tests for turning free-text LLM replies into EventRecords.
"""
from datetime import date, timedelta

import pytest

from aicalendar.errors import NoEventsParsed, ParseError
from aicalendar.response_parser import parse_events, parse_iso_date


class TestParseEvents:
    """Tests for parse_events."""

    def test_single_day_and_range(self) -> None:
        """A single date and a range both become events."""
        text = "New Year: 2025-01-01\nGeneric Holiday: 2025-07-04 - 2025-07-06"
        events = parse_events(text, "Holidays")

        assert len(events) == 2
        new_year, holiday = events
        assert new_year.name == "New Year"
        assert new_year.start_date == new_year.end_date == date(2025, 1, 1)
        assert not new_year.is_range
        assert holiday.start_date == date(2025, 7, 4)
        assert holiday.end_date == holiday.start_date + timedelta(days=2)

    def test_subject_tagged_and_group_empty(self) -> None:
        """Events carry the subject name; the group is filled later."""
        events = parse_events("Diwali: 2025-10-20", "Diwali")
        assert events[0].subject == "Diwali"
        assert events[0].group == ""

    def test_keeps_reply_order(self) -> None:
        """Events come out in the order of the reply."""
        text = "B: 2025-02-01\nA: 2025-01-01\nC: 2025-03-01"
        assert [e.name for e in parse_events(text, "S")] == ["B", "A", "C"]

    @pytest.mark.parametrize("line", [
        "Here is the list you asked for",
        "Event without separator 2025-01-01",
        "Bad Date: January 1st",
        "Bad Range: 2025-01-01 - soon",
        "Impossible Date: 2025-02-30",
        "Loose Format: 2025-1-1",
        "Backwards: 2025-05-10 - 2025-05-01",
        ": 2025-01-01",
        "Event Name: 2025-01-01",
        "<Event Name>: 2025-01-01",
        "Trailing Text: 2025-01-01 (approximately)",
    ])
    def test_malformed_lines_dropped(self, line: str) -> None:
        """Lines that are not Name: Date or Name: Date - Date are skipped."""
        events = parse_events(f"{line}\nGood: 2025-06-01", "S")
        assert [e.name for e in events] == ["Good"]

    def test_list_markers_stripped(self) -> None:
        """Bullets and numbering in front of event lines are ignored."""
        text = "- Alpha: 2025-01-01\n* Beta: 2025-01-02\n3. Gamma: 2025-01-03\n4) Delta: 2025-01-04"
        assert [e.name for e in parse_events(text, "S")] == ["Alpha", "Beta", "Gamma", "Delta"]

    def test_name_and_date_trimmed(self) -> None:
        """Whitespace around the name and dates is removed."""
        events = parse_events("   Spring Fair  :  2025-04-01 -  2025-04-03  ", "S")
        assert events[0].name == "Spring Fair"
        assert events[0].end_date == date(2025, 4, 3)

    def test_splits_on_first_separator(self) -> None:
        """A name containing ': ' makes the date part unparseable, so the line is dropped."""
        with pytest.raises(NoEventsParsed):
            parse_events("Festival: Opening: 2025-01-01", "S")

    def test_windows_line_endings(self) -> None:
        """CRLF replies parse the same as LF replies."""
        events = parse_events("A: 2025-01-01\r\nB: 2025-01-02\r\n", "S")
        assert len(events) == 2

    def test_no_events_raises(self) -> None:
        """A reply with nothing usable signals NoEventsParsed."""
        with pytest.raises(NoEventsParsed) as excinfo:
            parse_events("I am not sure about these dates.\nSorry!", "Mystery")
        assert excinfo.value.subject == "Mystery"
        assert excinfo.value.skipped_lines == 2
        assert isinstance(excinfo.value, ParseError)

    def test_empty_reply_raises(self) -> None:
        """Empty text is a NoEventsParsed condition, not a crash."""
        with pytest.raises(NoEventsParsed):
            parse_events("", "S")


class TestParseIsoDate:
    """Tests for parse_iso_date."""

    def test_valid(self) -> None:
        assert parse_iso_date(" 2024-02-29 ") == date(2024, 2, 29)

    @pytest.mark.parametrize("text", ["2025-02-29", "20250101", "2025-01", "01/02/2025", ""])
    def test_invalid(self, text: str) -> None:
        assert parse_iso_date(text) is None
