import pendulum
import pytest

from loreline.repository.event import EventRepository


def write_events(tmp_path, text):
    path = tmp_path / "events.yaml"
    path.write_text(text)
    return EventRepository(path)


def test_mapping_with_base_date(tmp_path):
    repository = write_events(
        tmp_path,
        """
base_date: 2024-01-01
events:
  - id: founding
    title: Founding
    time_start: 0
    time_end: 10
    color: red
  - id: council
    time_start: 2.5
    parent_event_id: founding
    display_order: 3
""",
    )

    events = repository.events

    assert repository.base_date == pendulum.datetime(2024, 1, 1)
    assert [ev["id"] for ev in events] == ["founding", "council"]
    assert events[0]["color"] == "red"
    assert events[1]["time_end"] is None
    assert events[1]["parent_event_id"] == "founding"
    assert events[1]["display_order"] == 3


def test_plain_list(tmp_path):
    repository = write_events(tmp_path, "- id: a\n  time_start: 1\n")

    assert repository.base_date is None
    assert repository.get_event("a")["time_start"] == 1


def test_empty_file(tmp_path):
    assert write_events(tmp_path, "").events == []


def test_untimed_events_are_kept(tmp_path):
    repository = write_events(tmp_path, "- id: someday\n")

    assert repository.get_all_events()[0]["time_start"] is None


def test_unknown_fields_are_ignored(tmp_path):
    repository = write_events(tmp_path, "- id: a\n  mood: grim\n")

    assert "mood" not in repository.events[0]


def test_get_all_events_returns_copies(tmp_path):
    repository = write_events(tmp_path, "- id: a\n  time_start: 1\n")

    repository.get_all_events()[0]["time_start"] = 99

    assert repository.events[0]["time_start"] == 1


def test_missing_event(tmp_path):
    repository = write_events(tmp_path, "- id: a\n")

    with pytest.raises(ValueError):
        repository.get_event("b")


@pytest.mark.parametrize(
    "text",
    [
        "- id: a\n  time_start: [1\n",
        "just a string",
        "events: 5",
        "- 5",
        "- title: no id\n",
        "- id: a\n- id: a\n",
        "- id: a\n  time_start: soon\n",
        "- id: a\n  time_start: true\n",
        "- id: a\n  time_start: .nan\n",
        "- id: a\n  time_start: 10\n  time_end: 5\n",
        "- id: a\n  display_order: first\n",
        "base_date: 5\nevents: []\n",
        "base_date: not a date\nevents: []\n",
    ],
)
def test_malformed_files(tmp_path, text):
    repository = write_events(tmp_path, text)

    with pytest.raises(ValueError):
        repository.events
