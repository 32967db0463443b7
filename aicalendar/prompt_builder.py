"""
Prompt construction for event-list requests.
"""

from aicalendar.event_models import Subject


def build_prompt(subject: Subject, year: int) -> str:
    """
    Build the instruction asking the backend for a subject's events in a year.

    The reply format it asks for is exactly what response_parser accepts:
    one event per line, "Name: YYYY-MM-DD" or "Name: YYYY-MM-DD - YYYY-MM-DD".
    """
    lines = [
        f"Please provide a list of events for {subject.name} for the year {year}. "
        "Use your knowledge base and ensure cultural accuracy.",
    ]
    if subject.authority_url:
        lines.append(f"Prefer dates published by {subject.authority_url}.")
    if subject.additional_info:
        lines.append(subject.additional_info.strip())
    lines.extend([
        "",
        "Format each event on its own line as:",
        "Event Name: YYYY-MM-DD",
        "or, for events spanning several days:",
        "Event Name: YYYY-MM-DD - YYYY-MM-DD",
        "",
        "Use the real name of each event; do not use generic placeholders such as \"Event Name\". "
        "If you are not certain of an event's date, omit the event rather than guessing. "
        "Do not include any other text.",
    ])
    return "\n".join(lines)
