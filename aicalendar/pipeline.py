"""
Calendar pipeline: query every configured subject, parse and merge the
replies, then write the .ics files and the HTML page.

Subjects are queried on a bounded thread pool. Results are collected in
submission order, so the merged event list (and therefore which duplicate
survives deduplication) is the same however the threads are scheduled.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from aicalendar.deduplicator import dedupe
from aicalendar.errors import FileWriteError, ParseError, QueryError
from aicalendar.event_index import EventIndex
from aicalendar.event_models import EventRecord, Group, RunResult, Subject, SubjectWarning
from aicalendar.ics_generator import emit_calendar
from aicalendar.llm_client import LLMClient, get_llm_client
from aicalendar.logging_helper import Log
from aicalendar.page_composer import compose_page, write_page
from aicalendar.prompt_builder import build_prompt
from aicalendar.response_parser import parse_events

PAGE_FILENAME = "index.html"

# Maps a group to the client answering its prompts
ClientFactory = Callable[[Group], LLMClient]


@dataclass
class SubjectTask:
    """One (group, subject) query, numbered in generation order."""
    index: int
    group: Group
    subject: Subject
    client: LLMClient


@dataclass
class SubjectOutcome:
    task: SubjectTask
    events: List[EventRecord] = field(default_factory=list)
    warning: Optional[SubjectWarning] = None


def default_client_factory(settings: dict) -> ClientFactory:
    """Build a factory resolving each group's aiProvider from settings."""
    def factory(group: Group) -> LLMClient:
        return get_llm_client(
            group.ai_provider,
            api_key=settings.get("api_key", ""),
            model=settings.get("model", ""),
            use_stub=settings.get("use_stub", False),
        )
    return factory


def query_subject(task: SubjectTask, year: int) -> SubjectOutcome:
    """Query and parse one subject; failures become a warning instead of raising."""
    group, subject = task.group, task.subject
    prompt = build_prompt(subject, year)
    Log.info(f"Querying AI for {subject.name} ({group.name}), task #{task.index}")

    try:
        response = task.client.query(prompt)
        events = parse_events(response, subject.name)
    except QueryError as e:
        Log.warn(f"Error querying AI for {subject.name} events in group {group.name}: {e}")
        return SubjectOutcome(task, warning=SubjectWarning(group.name, subject.name, "query", str(e)))
    except ParseError as e:
        Log.warn(f"Error parsing events for {subject.name} in group {group.name}: {e}")
        return SubjectOutcome(task, warning=SubjectWarning(group.name, subject.name, "parse", str(e)))
    except Exception as e:
        Log.error(f"Unexpected error for {subject.name} in group {group.name}: {e}")
        return SubjectOutcome(task, warning=SubjectWarning(group.name, subject.name, "unexpected", str(e)))

    Log.info(f"Generated {len(events)} events for {subject.name}")
    return SubjectOutcome(task, events=[event.with_group(group.name) for event in events])


def plan_tasks(groups: Sequence[Group], client_factory: ClientFactory, warnings: List[SubjectWarning]) -> List[SubjectTask]:
    """
    Number every (group, subject) pair in configuration order.
    Groups whose provider cannot be resolved are recorded in warnings and skipped.
    """
    tasks = []
    for group in groups:
        try:
            client = client_factory(group)
        except QueryError as e:
            Log.warn(f"Error getting AI provider for group {group.name}: {e}")
            warnings.extend(
                SubjectWarning(group.name, subject.name, "provider", str(e)) for subject in group.subjects
            )
            continue
        for subject in group.subjects:
            tasks.append(SubjectTask(len(tasks), group, subject, client))
    return tasks


def collect_events(
    groups: Sequence[Group],
    year: int,
    client_factory: ClientFactory,
    max_workers: int = 1,
) -> RunResult:
    """
    Query every subject and return the deduplicated events plus per-subject warnings.
    """
    Log.section("Event Collection")
    result = RunResult()
    tasks = plan_tasks(groups, client_factory, result.warnings)

    collected: List[EventRecord] = []
    if tasks:
        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
            outcomes = list(executor.map(lambda task: query_subject(task, year), tasks))
        for outcome in outcomes:
            if outcome.warning is not None:
                result.warnings.append(outcome.warning)
            collected.extend(outcome.events)

    Log.info(f"Total number of events generated: {len(collected)}")
    result.events = dedupe(collected)
    Log.kv({
        "stage": "collect",
        "subjects": len(tasks),
        "events": len(result.events),
        "warnings": len(result.warnings),
    })
    return result


def publish(result: RunResult, groups: Sequence[Group], output_dir: Path, year: Optional[int] = None) -> RunResult:
    """
    Write one .ics per non-empty partition and the index page.

    Raises:
        FileWriteError: on the first artifact that cannot be written
    """
    Log.section("ICS Generator")
    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        Log.error(f"Cannot create output directory {output_dir}: {e}")
        raise FileWriteError(f"Cannot create output directory {output_dir}: {e}") from e

    index = EventIndex(result.events, groups)
    partitions = list(index.partitions())
    if not partitions:
        Log.info("No events to generate ICS files for.")

    for partition in partitions:
        calendar_file = emit_calendar(list(partition.events), partition.display_name, output_dir / partition.filename)
        result.calendar_files.append(calendar_file)

    Log.section("Page Composer")
    html = compose_page(result.events, groups, partitions, year=year)
    result.page_path = write_page(html, output_dir / PAGE_FILENAME)
    return result


def run_pipeline(
    groups: Sequence[Group],
    year: int,
    output_dir: Path,
    client_factory: ClientFactory,
    max_workers: int = 1,
    disable_ai: bool = False,
) -> RunResult:
    """
    Run a full pass: collect, deduplicate, emit calendars and page.
    """
    if disable_ai:
        Log.info("AI queries are disabled, skipping AI calls.")
        result = RunResult()
    else:
        result = collect_events(groups, year, client_factory, max_workers=max_workers)

    publish(result, groups, output_dir, year=year)
    Log.kv({
        "stage": "run",
        "events": len(result.events),
        "calendar_files": len(result.calendar_files),
        "warnings": len(result.warnings),
    })
    return result
