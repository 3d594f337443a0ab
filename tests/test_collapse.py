import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from loreline.model.segment_type import SegmentType
from loreline.service.collapse import (
    TimelineCollapse,
    adjust_time,
    compute_segments,
    get_collapsed_segments,
    get_event_duration,
    make_segment_id,
)
from tests.fixtures import make_event, make_scenario_events

WIDE_VIEWPORT = {"min_time": 0, "max_time": 1000}


@st.composite
def event_lists(draw, max_size=12):
    raw = draw(
        st.lists(
            st.tuples(
                st.integers(min_value=-1000, max_value=1000),
                st.one_of(st.none(), st.integers(min_value=0, max_value=200)),
            ),
            max_size=max_size,
        )
    )
    return [
        make_event(f"e{i}", start, None if length is None else start + length)
        for i, (start, length) in enumerate(raw)
    ]


class TestComputeSegments:
    def test_no_events_no_segments(self):
        assert compute_segments([]) == []

    def test_single_event(self):
        segments = compute_segments([make_event("a", 5, 8)])

        assert len(segments) == 1
        assert segments[0]["type"] == SegmentType.EVENT
        assert segments[0]["event_ids"] == ["a"]
        assert segments[0]["duration"] == 3

    def test_short_gap_stays_long_gap_collapses(self):
        segments = compute_segments(make_scenario_events())

        assert [s["type"] for s in segments] == [
            SegmentType.EVENT,
            SegmentType.GAP,
            SegmentType.EVENT,
            SegmentType.COLLAPSED,
            SegmentType.EVENT,
        ]

        short_gap = segments[1]
        assert short_gap["start_time"] == 10
        assert short_gap["end_time"] == 15
        assert short_gap["collapsed_segment"] is None

        long_gap = segments[3]["collapsed_segment"]
        assert long_gap is not None
        assert long_gap["id"] == "gap_20_400"
        assert long_gap["duration"] == 380
        assert long_gap["collapse_threshold"] == pytest.approx(22.5)
        assert long_gap["is_collapsed"] is True

    def test_events_are_sorted_by_start(self):
        events = list(reversed(make_scenario_events()))

        segments = compute_segments(events)

        event_ids = [s["event_ids"][0] for s in segments if s["type"] == SegmentType.EVENT]
        assert event_ids == ["a", "b", "c"]

    def test_ties_keep_input_order(self):
        events = [make_event("second", 5), make_event("first", 5)]

        segments = compute_segments(events)

        assert [s["event_ids"][0] for s in segments] == ["second", "first"]

    def test_untimed_events_are_skipped(self):
        events = [make_event("a", 0, 10), make_event("floating", None)]

        segments = compute_segments(events)

        assert len(segments) == 1

    def test_zero_end_time_is_respected(self):
        events = [make_event("a", -5, 0), make_event("b", 100, 101)]

        segments = compute_segments(events)

        assert segments[0]["end_time"] == 0
        assert segments[1]["start_time"] == 0

    def test_overlapping_events_leave_no_gap(self):
        events = [make_event("a", 0, 50), make_event("b", 20, 30)]

        segments = compute_segments(events)

        assert all(s["type"] == SegmentType.EVENT for s in segments)

    def test_point_events_count_as_one_unit(self):
        assert get_event_duration(make_event("a", 7)) == 1
        # threshold 3 * (1 + 1) / 2 = 3
        segments = compute_segments([make_event("a", 0), make_event("b", 4)])
        assert segments[1]["type"] == SegmentType.COLLAPSED
        assert segments[1]["collapsed_segment"]["collapse_threshold"] == 3

    def test_gap_equal_to_threshold_is_not_collapsible(self):
        segments = compute_segments([make_event("a", 0), make_event("b", 3)])

        assert segments[1]["type"] == SegmentType.GAP
        assert segments[1]["collapsed_segment"] is None

    def test_threshold_multiplier_is_configurable(self):
        segments = compute_segments(make_scenario_events(), threshold_multiplier=100)

        assert get_collapsed_segments(segments) == []

    def test_expanded_gap_keeps_descriptor(self):
        segments = compute_segments(make_scenario_events(), frozenset({"gap_20_400"}))

        gap = segments[3]
        assert gap["type"] == SegmentType.GAP
        assert gap["collapsed_segment"]["id"] == "gap_20_400"
        assert gap["collapsed_segment"]["is_collapsed"] is False

    def test_unknown_expanded_ids_are_ignored(self):
        assert compute_segments(
            make_scenario_events(), frozenset({"gap_1_2"})
        ) == compute_segments(make_scenario_events())

    def test_segment_id_drops_trailing_zero(self):
        assert make_segment_id(20.0, 400.0) == "gap_20_400"
        assert make_segment_id(2.5, 7) == "gap_2.5_7"

    @given(event_lists())
    def test_deterministic(self, events):
        assert compute_segments(events) == compute_segments(events)

    @given(event_lists(), st.floats(min_value=0.5, max_value=10))
    def test_collapsible_exactly_when_over_threshold(self, events, multiplier):
        segments = compute_segments(events, threshold_multiplier=multiplier)

        for index, segment in enumerate(segments):
            if segment["type"] == SegmentType.EVENT:
                continue
            previous_event = segments[index - 1]
            next_event = segments[index + 1]
            assert previous_event["type"] == SegmentType.EVENT
            assert next_event["type"] == SegmentType.EVENT

            threshold = multiplier * (
                previous_event["duration"] + next_event["duration"]
            ) / 2
            is_collapsible = segment["collapsed_segment"] is not None
            assert is_collapsible == (segment["duration"] > threshold)

    @given(event_lists())
    def test_collapsible_gaps_default_to_collapsed(self, events):
        for segment in compute_segments(events):
            if segment["collapsed_segment"] is not None:
                assert segment["type"] == SegmentType.COLLAPSED
                assert segment["collapsed_segment"]["is_collapsed"]

    @given(event_lists())
    def test_segments_are_in_time_order(self, events):
        starts = [s["start_time"] for s in compute_segments(events)]

        assert starts == sorted(starts)


class TestAdjustTime:
    def test_identity_without_collapsed_gaps(self):
        segments = compute_segments([make_event("a", 0, 10), make_event("b", 15, 20)])

        for time_value in (-50, 0, 12.5, 20, 300):
            assert adjust_time(time_value, segments, 80) == time_value

    def test_collapsed_gap_is_compressed(self):
        segments = compute_segments(make_scenario_events())

        assert adjust_time(10, segments, 80) == 10
        assert adjust_time(20, segments, 80) == 20
        assert adjust_time(210, segments, 80) == pytest.approx(60)
        assert adjust_time(400, segments, 80) == pytest.approx(100)
        assert adjust_time(405, segments, 80) == pytest.approx(105)

    def test_gap_shorter_than_collapsed_width_is_not_stretched(self):
        segments = compute_segments(make_scenario_events())

        # collapsed width 1000 is more than the 380 the gap spans
        assert adjust_time(210, segments, 1000) == pytest.approx(210)
        assert adjust_time(405, segments, 1000) == pytest.approx(405)

    @settings(max_examples=200)
    @given(
        event_lists(),
        st.floats(min_value=1, max_value=500),
        st.integers(min_value=-2000, max_value=2000),
        st.integers(min_value=0, max_value=2000),
    )
    def test_monotonic_and_never_stretches(self, events, units, start, delta):
        segments = compute_segments(events)
        t1 = start
        t2 = start + delta

        a1 = adjust_time(t1, segments, units)
        a2 = adjust_time(t2, segments, units)

        tolerance = 1e-6 * max(1, abs(t1), abs(t2))
        assert a2 >= a1 - tolerance
        assert a2 - a1 <= delta + tolerance

    @given(
        event_lists(),
        st.floats(min_value=1, max_value=500),
        st.integers(min_value=0, max_value=1000),
        st.integers(min_value=1, max_value=1000),
    )
    def test_spacing_preserved_after_last_collapsed_gap(self, events, units, offset, delta):
        segments = compute_segments(events)
        collapsed = get_collapsed_segments(segments)
        last_end = max((c["end_time"] for c in collapsed), default=0)
        t1 = last_end + 1 + offset
        t2 = t1 + delta

        difference = adjust_time(t2, segments, units) - adjust_time(t1, segments, units)

        assert difference == pytest.approx(delta)

    def test_spacing_shrinks_across_a_collapsed_gap(self):
        segments = compute_segments(make_scenario_events())

        difference = adjust_time(405, segments, 80) - adjust_time(5, segments, 80)

        assert difference < 400


class TestTimelineCollapse:
    def test_collapsed_time_units_follow_viewport_and_zoom(self):
        collapse = TimelineCollapse(make_scenario_events(), WIDE_VIEWPORT)
        assert collapse.get_collapsed_segment_time_units() == pytest.approx(80)

        collapse.set_zoom_level(2)
        assert collapse.get_collapsed_segment_time_units() == pytest.approx(40)

    def test_adjusted_position_with_collapsed_gap(self):
        collapse = TimelineCollapse(make_scenario_events(), WIDE_VIEWPORT)

        assert collapse.get_adjusted_position(15) == 15
        assert collapse.get_adjusted_position(405) == pytest.approx(105)

    def test_adjusted_position_is_identity_when_expanded(self):
        collapse = TimelineCollapse(make_scenario_events(), WIDE_VIEWPORT)
        collapse.toggle_segment_collapse("gap_20_400")

        assert collapse.get_adjusted_position(405) == 405

    def test_toggle_round_trip(self):
        collapse = TimelineCollapse(make_scenario_events(), WIDE_VIEWPORT)
        before = collapse.time_segments

        collapse.toggle_segment_collapse("gap_20_400")
        assert collapse.is_segment_expanded("gap_20_400")
        assert collapse.time_segments[3]["type"] == SegmentType.GAP

        collapse.toggle_segment_collapse("gap_20_400")
        assert not collapse.is_segment_expanded("gap_20_400")
        assert collapse.time_segments == before

    def test_segments_are_cached_until_an_input_changes(self):
        collapse = TimelineCollapse(make_scenario_events(), WIDE_VIEWPORT)
        first = collapse.time_segments

        assert collapse.time_segments is first

        collapse.set_events([make_event("a", 0, 10)])
        assert collapse.time_segments is not first
        assert len(collapse.time_segments) == 1

    def test_setting_same_viewport_keeps_revision(self):
        collapse = TimelineCollapse(make_scenario_events(), WIDE_VIEWPORT)
        revision = collapse.revision

        collapse.set_viewport(dict(WIDE_VIEWPORT))
        collapse.set_zoom_level(1.0)

        assert collapse.revision == revision

    def test_adjusted_viewport_range(self):
        collapse = TimelineCollapse(make_scenario_events(), WIDE_VIEWPORT)
        # 380 of the gap overlaps, 80 stays on screen
        assert collapse.get_adjusted_viewport_range() == pytest.approx(700)

        collapse.set_viewport({"min_time": 0, "max_time": 100})
        # collapsed width is now 8; overlap 20..100 saves 72
        assert collapse.get_adjusted_viewport_range() == pytest.approx(28)

    def test_adjusted_viewport_range_without_collapse(self):
        collapse = TimelineCollapse([make_event("a", 0, 10)], WIDE_VIEWPORT)

        assert collapse.get_adjusted_viewport_range() == 1000

    def test_invalid_zoom_level(self):
        with pytest.raises(ValueError):
            TimelineCollapse([], WIDE_VIEWPORT, zoom_level=0)

        collapse = TimelineCollapse([], WIDE_VIEWPORT)
        with pytest.raises(ValueError):
            collapse.set_zoom_level(-1)

    def test_degenerate_viewport_is_clamped(self):
        collapse = TimelineCollapse(
            make_scenario_events(), {"min_time": 5, "max_time": 5}
        )

        units = collapse.get_collapsed_segment_time_units()

        assert math.isfinite(units)
        assert units > 0

    def test_custom_settings(self):
        collapse = TimelineCollapse(
            make_scenario_events(),
            WIDE_VIEWPORT,
            settings={
                "collapse_threshold_multiplier": 3.0,
                "collapsed_segment_pixel_width": 40.0,
                "reference_timeline_width": 1000.0,
                "min_tick_pixel_spacing": 80.0,
                "target_tick_count": 15,
            },
        )

        assert collapse.get_collapsed_segment_time_units() == pytest.approx(40)
