"""
Event data models for calendar generation.
Defines Subject and Group (from configuration) and EventRecord (from LLM replies).
"""

from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Subject:
    """A named thing events are requested for (festival, holiday set, observance)."""
    name: str
    authority_url: Optional[str] = None
    additional_info: Optional[str] = None


@dataclass(frozen=True)
class Group:
    """
    A named collection of subjects sharing one text-generation backend.
    Built from one configuration document.
    """
    name: str
    ai_provider: str
    subjects: Tuple[Subject, ...] = ()


@dataclass(frozen=True)
class EventRecord:
    """
    One parsed event spanning start_date..end_date (inclusive).
    The group tag is empty until the pipeline assigns it via with_group().
    """
    name: str
    start_date: date
    end_date: date
    subject: str
    group: str = ""

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Event name must not be empty")
        if self.end_date < self.start_date:
            raise ValueError(
                f"Event '{self.name}' ends before it starts: {self.start_date} > {self.end_date}"
            )

    @property
    def key(self) -> Tuple[str, date, date]:
        """Uniqueness key: two records with the same key are the same event."""
        return (self.name, self.start_date, self.end_date)

    @property
    def is_range(self) -> bool:
        return self.end_date > self.start_date

    def with_group(self, group: str) -> "EventRecord":
        return replace(self, group=group)


@dataclass(frozen=True)
class CalendarPartition:
    """A named slice of the event set that becomes one .ics file."""
    kind: str  # "all", "group" or "subject"
    display_name: str
    filename: str
    events: Tuple[EventRecord, ...]


@dataclass(frozen=True)
class CalendarFile:
    """A written .ics artifact."""
    path: Path
    display_name: str
    event_count: int


@dataclass(frozen=True)
class SubjectWarning:
    """A recoverable failure recorded against a (group, subject) pair."""
    group: str
    subject: Optional[str]
    kind: str
    message: str


@dataclass
class RunResult:
    """Everything one pipeline run produced."""
    events: List[EventRecord] = field(default_factory=list)
    warnings: List[SubjectWarning] = field(default_factory=list)
    calendar_files: List[CalendarFile] = field(default_factory=list)
    page_path: Optional[Path] = None
