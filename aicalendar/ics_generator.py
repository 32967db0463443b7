"""
ICS Generator for creating iCalendar (.ics) files.
Generates RFC5545-compliant all-day event calendars and reads them back.
"""

import hashlib
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from dateutil import tz as dateutil_tz

from aicalendar.errors import FileWriteError
from aicalendar.event_models import CalendarFile, EventRecord
from aicalendar.logging_helper import Log

PRODID = "-//AI Calendar//Event Calendar Generator//EN"
UID_DOMAIN = "aicalendar.local"
MAX_LINE_OCTETS = 75

# Properties whose values change on every run
TIMESTAMP_PROPERTIES = ("CREATED", "DTSTAMP", "LAST-MODIFIED")


def _escape_ical_text(text: str) -> str:
    """
    Escape text for iCalendar format (RFC5545).
    Escapes commas, semicolons, backslashes, and newlines.
    """
    if text is None:
        return ""

    # Replace backslashes first (before other replacements)
    text = text.replace('\\', '\\\\')
    text = text.replace(';', '\\;')
    text = text.replace(',', '\\,')
    text = text.replace('\r', '')
    text = text.replace('\n', '\\n')
    return text


def _unescape_ical_text(text: str) -> str:
    result = []
    chars = iter(text)
    for char in chars:
        if char != '\\':
            result.append(char)
            continue
        escaped = next(chars, '')
        result.append('\n' if escaped in ('n', 'N') else escaped)
    return ''.join(result)


def _fold_line(line: str) -> str:
    """
    Fold a content line to 75 octets per physical line.
    Continuation lines start with a single space.
    """
    if len(line.encode('utf-8')) <= MAX_LINE_OCTETS:
        return line

    lines = []
    current_line = ""
    for char in line:
        test_line = current_line + char
        if len(test_line.encode('utf-8')) <= MAX_LINE_OCTETS:
            current_line = test_line
        else:
            lines.append(current_line)
            current_line = " " + char
    if current_line:
        lines.append(current_line)
    return '\r\n'.join(lines)


def _format_ical_datetime(dt: datetime) -> str:
    """Format a UTC datetime as YYYYMMDDTHHMMSSZ."""
    return dt.strftime('%Y%m%dT%H%M%SZ')


def _format_ical_date(d: date) -> str:
    return d.strftime('%Y%m%d')


def event_uid(event: EventRecord) -> str:
    """
    Stable identifier for an event.

    Hashes name, both dates and subject so that same-named events in different
    years or with different spans do not collide.
    """
    uid_string = f"{event.name}|{event.start_date.isoformat()}|{event.end_date.isoformat()}|{event.subject}"
    return hashlib.sha1(uid_string.encode('utf-8')).hexdigest()[:20] + f"@{UID_DOMAIN}"


def exclusive_end(event: EventRecord) -> date:
    """All-day end date: the day after the last included day."""
    return event.end_date + timedelta(days=1)


def event_description(event: EventRecord) -> str:
    parts = [f"Group: {event.group}", f"Subject: {event.subject}"]
    if event.is_range:
        parts.append(f"Dates: {event.start_date.isoformat()} to {event.end_date.isoformat()}")
    return "\n".join(parts)


def _vevent_lines(event: EventRecord, stamp: str) -> List[str]:
    return [
        "BEGIN:VEVENT",
        f"UID:{event_uid(event)}",
        f"CREATED:{stamp}",
        f"DTSTAMP:{stamp}",
        f"LAST-MODIFIED:{stamp}",
        f"DTSTART;VALUE=DATE:{_format_ical_date(event.start_date)}",
        f"DTEND;VALUE=DATE:{_format_ical_date(exclusive_end(event))}",
        f"SUMMARY:{_escape_ical_text(event.name)}",
        f"DESCRIPTION:{_escape_ical_text(event_description(event))}",
        "TRANSP:TRANSPARENT",
        "END:VEVENT",
    ]


def render_calendar(events: Iterable[EventRecord], display_name: str, now: Optional[datetime] = None) -> str:
    """
    Render events as one VCALENDAR document.

    Args:
        events: Events in the order they should appear
        display_name: Calendar name shown by calendar apps
        now: Emission time for CREATED/DTSTAMP/LAST-MODIFIED (defaults to current UTC time)

    Returns:
        ICS text with CRLF line endings
    """
    if now is None:
        now = datetime.now(dateutil_tz.tzutc())
    stamp = _format_ical_datetime(now)

    ics_lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-CALNAME:{_escape_ical_text(f'Global Calendar - {display_name}')}",
        f"X-WR-CALDESC:{_escape_ical_text(f'AI-generated calendar of events for {display_name}')}",
    ]
    for event in events:
        ics_lines.extend(_vevent_lines(event, stamp))
    ics_lines.append("END:VCALENDAR")

    return '\r\n'.join(_fold_line(line) for line in ics_lines) + '\r\n'


def emit_calendar(events: List[EventRecord], display_name: str, path: Path) -> CalendarFile:
    """
    Render events and write them to path, overwriting any previous file.

    Raises:
        FileWriteError: if the file cannot be written
    """
    ics_content = render_calendar(events, display_name)
    path = Path(path)
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(ics_content)
    except OSError as e:
        Log.error(f"ICS generation failed for {display_name}: {e}")
        Log.kv({"stage": "ics", "result": "failed", "ics_path": str(path), "error": str(e)})
        raise FileWriteError(f"Failed to write {path}: {e}") from e

    Log.info(f"ICS file generated: {path}")
    Log.kv({"stage": "ics", "result": "success", "ics_path": str(path), "events": len(events)})
    return CalendarFile(path=path, display_name=display_name, event_count=len(events))


def _unfold(text: str) -> List[str]:
    lines: List[str] = []
    for raw in text.replace('\r\n', '\n').split('\n'):
        if raw.startswith((' ', '\t')) and lines:
            lines[-1] += raw[1:]
        elif raw:
            lines.append(raw)
    return lines


def _parse_ical_date(value: str) -> date:
    return datetime.strptime(value.strip()[:8], '%Y%m%d').date()


def parse_calendar(text: str) -> List[Tuple[str, date, date]]:
    """
    Read back (name, start_date, end_date) for each VEVENT in a calendar.

    End dates are converted from the exclusive DTEND back to the last included day.
    """
    results = []
    current = None
    for line in _unfold(text):
        if line == "BEGIN:VEVENT":
            current = {}
            continue
        if line == "END:VEVENT":
            if current is not None and {"SUMMARY", "DTSTART", "DTEND"} <= current.keys():
                start = _parse_ical_date(current["DTSTART"])
                end = _parse_ical_date(current["DTEND"]) - timedelta(days=1)
                results.append((_unescape_ical_text(current["SUMMARY"]), start, max(start, end)))
            current = None
            continue
        if current is None or ':' not in line:
            continue
        prop, value = line.split(':', 1)
        current[prop.split(';', 1)[0].upper()] = value
    return results
