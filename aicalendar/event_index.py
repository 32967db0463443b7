"""
In-memory grouping of events by subject and owning group.

Output file naming lives here so that the emitter and the page composer
agree on it:

    all_events.ics
    <group_slug>_events.ics
    <group_slug>_<subject_slug>_events.ics
"""

from typing import Dict, Iterator, List, Sequence

from aicalendar.errors import ConfigLoadError
from aicalendar.event_models import CalendarPartition, EventRecord, Group

ALL_EVENTS_FILENAME = "all_events.ics"
ALL_EVENTS_DISPLAY_NAME = "All Events"


def slugify(name: str) -> str:
    """Lowercase a name and replace spaces (and path separators) with underscores."""
    slug = name.strip().lower()
    for char in (" ", "/", "\\"):
        slug = slug.replace(char, "_")
    return slug


def group_filename(group_name: str) -> str:
    return f"{slugify(group_name)}_events.ics"


def subject_filename(group_name: str, subject_name: str) -> str:
    return f"{slugify(group_name)}_{slugify(subject_name)}_events.ics"


def check_filenames(groups: Sequence[Group]) -> None:
    """
    Make sure every calendar file the groups can produce has its own name.

    Raises:
        ConfigLoadError: if two partitions would write the same file
    """
    owners: Dict[str, str] = {ALL_EVENTS_FILENAME: ALL_EVENTS_DISPLAY_NAME}
    for group in groups:
        candidates = [(group_filename(group.name), f"group '{group.name}'")]
        candidates.extend(
            (subject_filename(group.name, subject.name), f"subject '{subject.name}' of group '{group.name}'")
            for subject in group.subjects
        )
        for filename, owner in candidates:
            if filename in owners:
                raise ConfigLoadError(f"{owner} and {owners[filename]} would both write {filename}")
            owners[filename] = owner


class EventIndex:
    """
    Read-only view over the deduplicated event set.

    Filters never re-sort: the relative order of the input is preserved.
    """

    def __init__(self, events: Sequence[EventRecord], groups: Sequence[Group]):
        self._events = tuple(events)
        self._groups = tuple(groups)
        check_filenames(self._groups)

    def by_group(self, group_name: str) -> List[EventRecord]:
        return [e for e in self._events if e.group == group_name]

    def by_subject(self, subject_name: str) -> List[EventRecord]:
        return [e for e in self._events if e.subject == subject_name]

    def partitions(self) -> Iterator[CalendarPartition]:
        """
        Yield one partition per calendar file to emit.

        Order: all events, then each group followed by its subjects.
        Partitions without events are skipped since there is no file to emit.
        """
        if self._events:
            yield CalendarPartition(
                kind="all",
                display_name=ALL_EVENTS_DISPLAY_NAME,
                filename=ALL_EVENTS_FILENAME,
                events=self._events,
            )

        for group in self._groups:
            group_events = self.by_group(group.name)
            if group_events:
                yield CalendarPartition(
                    kind="group",
                    display_name=group.name,
                    filename=group_filename(group.name),
                    events=tuple(group_events),
                )

            for subject in group.subjects:
                subject_events = self.by_subject(subject.name)
                if subject_events:
                    yield CalendarPartition(
                        kind="subject",
                        display_name=subject.name,
                        filename=subject_filename(group.name, subject.name),
                        events=tuple(subject_events),
                    )
