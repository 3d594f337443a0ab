from loreline.service.hierarchy import build_event_rows, group_events_by_parent
from tests.fixtures import make_event


def row_summary(rows):
    return [(row["event"]["id"], row["depth"]) for row in rows]


def test_groups_are_sorted_by_time_then_display_order():
    events = [
        make_event("late", 50),
        make_event("second", 10, display_order=2),
        make_event("first", 10, display_order=1),
        make_event("floating", None),
    ]

    groups = group_events_by_parent(events)

    assert [ev["id"] for ev in groups[None]] == ["floating", "first", "second", "late"]


def test_unknown_parent_is_treated_as_root():
    groups = group_events_by_parent([make_event("orphan", 5, parent_event_id="gone")])

    assert [ev["id"] for ev in groups[None]] == ["orphan"]


def test_rows_are_depth_first():
    events = [
        make_event("war", 0, 100),
        make_event("battle", 10, 20, parent_event_id="war"),
        make_event("skirmish", 12, parent_event_id="battle"),
        make_event("treaty", 110),
        make_event("siege", 50, 60, parent_event_id="war"),
    ]

    rows = build_event_rows(events)

    assert row_summary(rows) == [
        ("war", 0),
        ("battle", 1),
        ("skirmish", 2),
        ("siege", 1),
        ("treaty", 0),
    ]
    assert rows[0]["has_children"]
    assert not rows[2]["has_children"]


def test_collapsed_parent_hides_all_descendants():
    events = [
        make_event("war", 0, 100),
        make_event("battle", 10, 20, parent_event_id="war"),
        make_event("skirmish", 12, parent_event_id="battle"),
        make_event("treaty", 110),
    ]

    rows = build_event_rows(events, frozenset({"war"}))

    assert row_summary(rows) == [("war", 0), ("treaty", 0)]
    assert rows[0]["is_collapsed"]
    assert rows[0]["has_children"]


def test_parent_cycle_emits_each_event_once():
    events = [
        make_event("a", 0, parent_event_id="b"),
        make_event("b", 5, parent_event_id="a"),
    ]

    rows = build_event_rows(events)

    assert row_summary(rows) == [("a", 0), ("b", 1)]
