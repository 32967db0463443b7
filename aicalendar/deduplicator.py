"""
Collapse repeated events across subjects and groups.
"""

from typing import Iterable, List

from aicalendar.event_models import EventRecord
from aicalendar.logging_helper import Log


def dedupe(events: Iterable[EventRecord]) -> List[EventRecord]:
    """
    Keep the first occurrence of each (name, start_date, end_date).

    The same named event reported under two subjects is one real-world event,
    so group and subject do not take part in the comparison.
    """
    seen = set()
    unique = []
    total = 0
    for event in events:
        total += 1
        if event.key in seen:
            continue
        seen.add(event.key)
        unique.append(event)

    Log.kv({"stage": "dedupe", "input": total, "unique": len(unique), "dropped": total - len(unique)})
    return unique
