"""
Exception types raised by the calendar pipeline.

ConfigLoadError and FileWriteError are fatal for a run. QueryError and
ParseError/NoEventsParsed are recorded against the failing subject and the
run continues with the remaining subjects.
"""


class CalendarError(Exception):
    """Base class for all pipeline errors."""


class ConfigLoadError(CalendarError):
    """Group configuration could not be read or is invalid."""


class QueryError(CalendarError):
    """The text-generation backend failed to answer a prompt."""


class ParseError(CalendarError):
    """A backend reply could not be turned into events."""


class NoEventsParsed(ParseError):
    """A backend reply contained no usable event lines."""

    def __init__(self, subject: str, skipped_lines: int = 0):
        self.subject = subject
        self.skipped_lines = skipped_lines
        super().__init__(
            f"No events parsed for {subject} ({skipped_lines} line(s) skipped)"
        )


class FileWriteError(CalendarError):
    """An output artifact could not be written."""
