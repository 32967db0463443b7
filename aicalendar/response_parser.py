"""
Response parser for converting raw LLM replies into EventRecords.

The reply is natural-language output, not a contract. Every line is scanned
on its own; anything that does not look like "Name: YYYY-MM-DD" or
"Name: YYYY-MM-DD - YYYY-MM-DD" is skipped with a warning.
"""

import re
from datetime import date
from typing import List, Optional

from dateutil import parser as dateutil_parser

from aicalendar.errors import NoEventsParsed
from aicalendar.event_models import EventRecord
from aicalendar.logging_helper import Log

NAME_SEPARATOR = ": "
RANGE_SEPARATOR = " - "

# Template labels the backend sometimes echoes back instead of a real name
PLACEHOLDER_NAMES = frozenset({"event name", "<event name>", "[event name]"})

_LIST_MARKER = re.compile(r"^(?:[-*•]|\d+[.)])\s+")
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_events(raw_text: str, subject_name: str) -> List[EventRecord]:
    """
    Parse a backend reply into events for one subject.

    Args:
        raw_text: Reply text from an LLMClient
        subject_name: Subject the reply was requested for

    Returns:
        Events in reply order, with an empty group tag

    Raises:
        NoEventsParsed: if no line yielded an event
    """
    events = []
    skipped = 0
    lines = (raw_text or "").splitlines()
    Log.info(f"Parsing {len(lines)} lines for {subject_name}")

    for line in lines:
        event = _parse_line(line, subject_name)
        if event is None:
            if line.strip():
                skipped += 1
            continue
        events.append(event)

    Log.kv({"stage": "parse", "subject": subject_name, "events": len(events), "skipped": skipped})
    if not events:
        raise NoEventsParsed(subject_name, skipped)
    return events


def _parse_line(line: str, subject_name: str) -> Optional[EventRecord]:
    text = _LIST_MARKER.sub("", line.strip())
    if not text:
        return None

    parts = text.split(NAME_SEPARATOR, 1)
    if len(parts) != 2:
        Log.warn(f"Skipping invalid line: {line}")
        return None

    name = parts[0].strip()
    if not name or name.lower() in PLACEHOLDER_NAMES:
        Log.warn(f"Skipping line with placeholder name: {line}")
        return None

    date_part = parts[1].strip()
    if RANGE_SEPARATOR in date_part:
        start_text, end_text = date_part.split(RANGE_SEPARATOR, 1)
        start_date = parse_iso_date(start_text)
        end_date = parse_iso_date(end_text)
    else:
        start_date = end_date = parse_iso_date(date_part)

    if start_date is None or end_date is None:
        Log.warn(f"Error parsing date '{date_part}' for {name}")
        return None
    if end_date < start_date:
        Log.warn(f"Skipping range that ends before it starts: {line}")
        return None

    return EventRecord(name=name, start_date=start_date, end_date=end_date, subject=subject_name)


def parse_iso_date(text: str) -> Optional[date]:
    """Parse a strict YYYY-MM-DD date, returning None for anything else."""
    text = text.strip()
    if not _ISO_DATE.fullmatch(text):
        return None
    try:
        return dateutil_parser.isoparse(text).date()
    except ValueError:
        return None
