"""
test_event_index.py
-------------------
Tests for EventIndex filtering, partitioning and file naming.
"""
import pytest

from aicalendar.errors import ConfigLoadError
from aicalendar.event_index import (
    ALL_EVENTS_FILENAME,
    EventIndex,
    check_filenames,
    group_filename,
    slugify,
    subject_filename,
)
from aicalendar.event_models import Group, Subject


class TestSlugify:
    """Tests for slugify and the file naming scheme."""

    def test_lowercase_and_underscores(self) -> None:
        assert slugify("World Culture") == "world_culture"

    def test_path_separators_replaced(self) -> None:
        assert slugify("Arts/Crafts") == "arts_crafts"

    def test_filenames(self) -> None:
        assert group_filename("World Culture") == "world_culture_events.ics"
        assert subject_filename("World Culture", "Culture Days") == "world_culture_culture_days_events.ics"


class TestFilters:
    """Tests for by_group and by_subject."""

    def test_by_group(self, sample_events) -> None:
        index = EventIndex(sample_events, [])
        result = index.by_group("Festivals")
        assert [e.name for e in result] == ["New Year", "Carnival", "Easter"]
        assert all(e.group == "Festivals" for e in result)

    def test_by_subject(self, sample_events) -> None:
        index = EventIndex(sample_events, [])
        result = index.by_subject("Holidays")
        assert [e.name for e in result] == ["New Year", "Easter"]
        assert all(e.subject == "Holidays" for e in result)

    def test_unknown_names_empty(self, sample_events) -> None:
        index = EventIndex(sample_events, [])
        assert index.by_group("Nope") == []
        assert index.by_subject("Nope") == []

    def test_filters_return_copies(self, sample_events) -> None:
        index = EventIndex(sample_events, [])
        index.by_group("Festivals").clear()
        assert len(index.by_group("Festivals")) == 3


class TestPartitions:
    """Tests for partitions()."""

    def test_partition_order_and_names(self, sample_events) -> None:
        groups = [
            Group("Festivals", "openai", (Subject("Holidays"), Subject("Carnivals"))),
            Group("Culture", "claude", (Subject("Museums"),)),
        ]
        partitions = list(EventIndex(sample_events, groups).partitions())

        assert [p.filename for p in partitions] == [
            ALL_EVENTS_FILENAME,
            "festivals_events.ics",
            "festivals_holidays_events.ics",
            "festivals_carnivals_events.ics",
            "culture_events.ics",
            "culture_museums_events.ics",
        ]
        assert [p.kind for p in partitions] == ["all", "group", "subject", "subject", "group", "subject"]
        assert len(partitions[0].events) == 4

    def test_empty_partitions_skipped(self, sample_events) -> None:
        """Groups and subjects without events produce no file."""
        groups = [
            Group("Festivals", "openai", (Subject("Holidays"), Subject("Silent Subject"))),
            Group("Empty Group", "openai", (Subject("Nothing"),)),
        ]
        filenames = [p.filename for p in EventIndex(sample_events, groups).partitions()]
        assert "festivals_silent_subject_events.ics" not in filenames
        assert "empty_group_events.ics" not in filenames
        assert "empty_group_nothing_events.ics" not in filenames

    def test_no_events_no_partitions(self) -> None:
        groups = [Group("Festivals", "openai", (Subject("Holidays"),))]
        assert list(EventIndex([], groups).partitions()) == []


class TestCheckFilenames:
    """Tests for rejecting groups and subjects that map to the same file."""

    def test_distinct_names_accepted(self, groups) -> None:
        check_filenames(groups)

    def test_group_named_all(self) -> None:
        groups = [Group("All", "openai", (Subject("Holidays"),))]
        with pytest.raises(ConfigLoadError, match="all_events.ics"):
            check_filenames(groups)

    def test_subject_file_matches_group_file(self) -> None:
        """Group 'Foo' with subject 'Bar' and group 'Foo Bar' both want foo_bar_events.ics."""
        groups = [
            Group("Foo", "openai", (Subject("Bar"),)),
            Group("Foo Bar", "openai", (Subject("Baz"),)),
        ]
        with pytest.raises(ConfigLoadError, match="foo_bar_events.ics"):
            check_filenames(groups)

    def test_names_differing_only_by_case(self) -> None:
        groups = [
            Group("Festivals", "openai", (Subject("Holi"),)),
            Group("festivals", "claude", (Subject("Diwali"),)),
        ]
        with pytest.raises(ConfigLoadError, match="festivals_events.ics"):
            check_filenames(groups)

    def test_repeated_subject_in_group(self) -> None:
        groups = [Group("Festivals", "openai", (Subject("Holi"), Subject("Holi")))]
        with pytest.raises(ConfigLoadError, match="festivals_holi_events.ics"):
            check_filenames(groups)

    def test_index_rejects_colliding_groups(self, sample_events) -> None:
        groups = [
            Group("Foo", "openai", (Subject("Bar"),)),
            Group("Foo Bar", "openai", ()),
        ]
        with pytest.raises(ConfigLoadError):
            EventIndex(sample_events, groups)
