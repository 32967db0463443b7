"""
conftest.py
-----------
Shared pytest fixtures for the calendar generator tests.

Provides fixtures for:
- Sample groups and subjects
- A fake LLM client answering from canned replies
- Config directories on disk
"""
import json
import os
import re
import tempfile
from datetime import date

import pytest

# Keep log files out of the project tree; read lazily on the first log write
os.environ.setdefault("AICALENDAR_LOG_DIR", tempfile.mkdtemp(prefix="aicalendar-logs-"))

from aicalendar.errors import QueryError  # noqa: E402
from aicalendar.event_models import EventRecord, Group, Subject  # noqa: E402
from aicalendar.llm_client import LLMClient  # noqa: E402

_SUBJECT_PATTERN = re.compile(r"events for (?P<subject>.+?) for the year \d{4}")


class FakeLLMClient(LLMClient):
    """Answers prompts from a {subject name: reply or exception} mapping."""

    provider = "fake"

    def __init__(self, replies):
        self.replies = replies
        self.prompts = []

    def query(self, prompt: str) -> str:
        self.prompts.append(prompt)
        subject = _SUBJECT_PATTERN.search(prompt).group("subject")
        reply = self.replies.get(subject)
        if isinstance(reply, Exception):
            raise reply
        if reply is None:
            raise QueryError(f"no canned reply for {subject}")
        return reply


# ----- Model Fixtures -----

@pytest.fixture
def festivals_group():
    return Group(
        name="Festivals",
        ai_provider="openai",
        subjects=(Subject("Diwali"), Subject("Holi", additional_info="Include Holika Dahan.")),
    )


@pytest.fixture
def culture_group():
    return Group(
        name="World Culture",
        ai_provider="claude",
        subjects=(Subject("Culture Days", authority_url="https://example.org/days"),),
    )


@pytest.fixture
def groups(festivals_group, culture_group):
    return [festivals_group, culture_group]


@pytest.fixture
def canned_replies():
    return {
        "Diwali": "Diwali: 2025-10-20\nDhanteras: 2025-10-18",
        "Holi": "Here are the events:\n- Holika Dahan: 2025-03-13\n- Holi: 2025-03-14\nNote: dates vary",
        "Culture Days": "Diwali: 2025-10-20\nWorld Heritage Week: 2025-11-19 - 2025-11-25",
    }


@pytest.fixture
def fake_client(canned_replies):
    return FakeLLMClient(canned_replies)


@pytest.fixture
def sample_events():
    return [
        EventRecord("New Year", date(2025, 1, 1), date(2025, 1, 1), "Holidays", "Festivals"),
        EventRecord("Carnival", date(2025, 3, 1), date(2025, 3, 4), "Carnivals", "Festivals"),
        EventRecord("Museum Night", date(2025, 5, 17), date(2025, 5, 17), "Museums", "Culture"),
        EventRecord("Easter", date(2025, 4, 20), date(2025, 4, 20), "Holidays", "Festivals"),
    ]


# ----- Path Fixtures -----

@pytest.fixture
def config_dir(tmp_path):
    """Directory with two valid group config files."""
    directory = tmp_path / "configs"
    directory.mkdir()
    (directory / "a_festivals.json").write_text(json.dumps({
        "groupName": "Festivals",
        "aiProvider": "openai",
        "calendarItems": [
            {"name": "Diwali", "additionalInfo": "Five days."},
            {"name": "Holi"},
        ],
    }), encoding="utf-8")
    (directory / "b_culture.json").write_text(json.dumps({
        "groupName": "World Culture",
        "aiProvider": "Claude",
        "calendarItems": [
            {"name": "Culture Days", "authorityUrl": "https://example.org/days"},
        ],
    }), encoding="utf-8")
    (directory / "notes.txt").write_text("not a config", encoding="utf-8")
    return directory
