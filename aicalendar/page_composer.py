"""
page_composer.py
----------------
Jinja2 rendering of the browsable calendar page (docs/index.html).

The page lists subjects grouped by their owning group, a table of all
events in generation order, and links to every emitted .ics file.
Filtering by subject happens client-side; the template carries
data-group/data-subject attributes on each row for that.

Usage:
    html = compose_page(events, groups, partitions, year=2025)
    write_page(html, Path("docs/index.html"))

    # Testing: supply templates as dict
    html = compose_page(events, groups, partitions, templates={"calendar_template.html": "..."})
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path
from typing import Dict, Optional, Sequence

# --- Third-party imports ---
from jinja2 import BaseLoader, DictLoader, Environment, FileSystemLoader, select_autoescape

# --- Local imports ---
from aicalendar.errors import FileWriteError
from aicalendar.event_models import CalendarPartition, EventRecord, Group
from aicalendar.logging_helper import Log

TEMPLATES_DIR = Path(__file__).parent / "templates"
PAGE_TEMPLATE = "calendar_template.html"


def _build_environment(templates: Optional[Dict[str, str]] = None) -> Environment:
    loader: BaseLoader
    if templates is not None:
        loader = DictLoader(templates)
    else:
        loader = FileSystemLoader(str(TEMPLATES_DIR))

    env = Environment(
        loader=loader,
        autoescape=select_autoescape(["html"], default_for_string=True, default=True),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    return env


def compose_page(
    events: Sequence[EventRecord],
    groups: Sequence[Group],
    partitions: Sequence[CalendarPartition],
    year: Optional[int] = None,
    templates: Optional[Dict[str, str]] = None,
) -> str:
    """
    Render the interactive calendar page.

    Args:
        events: Deduplicated events; table rows keep this order
        groups: Configured groups, for the subject selector
        partitions: Emitted calendar partitions, for the download links
        year: Year the events were requested for
        templates: Optional dict of template strings (tests)

    Returns:
        Rendered HTML
    """
    env = _build_environment(templates)
    template = env.get_template(PAGE_TEMPLATE)
    html = template.render(
        events=list(events),
        groups=list(groups),
        partitions=list(partitions),
        year=year,
    )
    Log.kv({"stage": "page", "events": len(events), "groups": len(groups), "links": len(partitions)})
    return html


def write_page(html: str, path: Path) -> Path:
    """
    Write the rendered page.

    Raises:
        FileWriteError: if the file cannot be written
    """
    path = Path(path)
    try:
        path.write_text(html, encoding="utf-8")
    except OSError as e:
        Log.error(f"Failed to write page {path}: {e}")
        raise FileWriteError(f"Failed to write {path}: {e}") from e
    Log.info(f"HTML calendar generated: {path}")
    return path
