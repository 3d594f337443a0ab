# SPDX-License-Identifier: MIT

import logging
from typing import AbstractSet, Iterable, Optional

from loreline.configuration import LayoutSettings, get_default_layout_settings
from loreline.model.event import Event, TimeValue
from loreline.model.segment import CollapsedSegment, TimeSegment
from loreline.model.segment_type import SegmentType
from loreline.model.viewport import Viewport
from loreline.time import format_time_value

logger = logging.getLogger(__name__)

# Floor for viewport ranges used as divisors
MIN_TIME_RANGE = 1e-9


def get_timed_events(events: Iterable[Event]) -> list[Event]:
    """
    Return the events that can be laid out, sorted by start time.

    Events without a start time are dropped. The sort is stable so events
    sharing a start time keep their input order.
    """
    timed_events = [ev for ev in events if ev.get("time_start") is not None]
    timed_events.sort(key=lambda ev: ev["time_start"])  # type: ignore[arg-type,return-value]
    return timed_events


def get_event_end(event: Event) -> TimeValue:
    start = event["time_start"]
    assert start is not None
    end = event.get("time_end")
    return end if end is not None else start


def get_event_duration(event: Event) -> TimeValue:
    start = event["time_start"]
    assert start is not None
    return max(1, get_event_end(event) - start)


def make_segment_id(start_time: TimeValue, end_time: TimeValue) -> str:
    return f"gap_{format_time_value(start_time)}_{format_time_value(end_time)}"


def compute_segments(
    events: Iterable[Event],
    expanded_segment_ids: AbstractSet[str] = frozenset(),
    threshold_multiplier: float = 3.0,
) -> list[TimeSegment]:
    """
    Partition a list of events into event, gap and collapsed segments.

    Every timed event yields one event segment. Between two consecutive
    events the gap is collapsible when it is longer than
    ``threshold_multiplier`` times the mean duration of the two events.
    Collapsible gaps are collapsed unless their id is in
    ``expanded_segment_ids``, in which case they are emitted as a plain gap
    that still carries its collapse descriptor.

    Args:
        events: Events in any order; those without a start time are skipped
        expanded_segment_ids: Ids of collapsible gaps the user expanded
        threshold_multiplier: Factor applied to the mean neighbouring duration

    Returns:
        Segments in ascending time order
    """
    timed_events = get_timed_events(events)
    segments: list[TimeSegment] = []

    for i, current_event in enumerate(timed_events):
        current_start = current_event["time_start"]
        assert current_start is not None
        current_end = get_event_end(current_event)
        current_duration = get_event_duration(current_event)

        segments.append(
            {
                "type": SegmentType.EVENT,
                "start_time": current_start,
                "end_time": current_end,
                "duration": current_duration,
                "event_ids": [current_event["id"]],
                "collapsed_segment": None,
            }
        )

        if i + 1 >= len(timed_events):
            break

        next_event = timed_events[i + 1]
        next_start = next_event["time_start"]
        assert next_start is not None
        gap_start = current_end
        gap_end = next_start
        gap_duration = gap_end - gap_start

        # Overlapping or touching events leave nothing to show between them
        if gap_duration <= 0:
            continue

        next_duration = get_event_duration(next_event)
        collapse_threshold = (
            threshold_multiplier * (current_duration + next_duration) / 2
        )

        if gap_duration > collapse_threshold:
            segment_id = make_segment_id(gap_start, gap_end)
            is_expanded = segment_id in expanded_segment_ids
            collapsed_segment: CollapsedSegment = {
                "id": segment_id,
                "start_time": gap_start,
                "end_time": gap_end,
                "duration": gap_duration,
                "is_collapsed": not is_expanded,
                "collapse_threshold": collapse_threshold,
            }
            segments.append(
                {
                    "type": SegmentType.GAP if is_expanded else SegmentType.COLLAPSED,
                    "start_time": gap_start,
                    "end_time": gap_end,
                    "duration": gap_duration,
                    "event_ids": None,
                    "collapsed_segment": collapsed_segment,
                }
            )
        else:
            segments.append(
                {
                    "type": SegmentType.GAP,
                    "start_time": gap_start,
                    "end_time": gap_end,
                    "duration": gap_duration,
                    "event_ids": None,
                    "collapsed_segment": None,
                }
            )

    return segments


def get_collapsed_segments(segments: Iterable[TimeSegment]) -> list[CollapsedSegment]:
    """Return the descriptors of segments currently displayed collapsed."""
    return [
        segment["collapsed_segment"]
        for segment in segments
        if segment["type"] == SegmentType.COLLAPSED
        and segment["collapsed_segment"] is not None
    ]


def adjust_time(
    time_value: TimeValue,
    segments: Iterable[TimeSegment],
    collapsed_time_units: float,
) -> float:
    """
    Map an absolute time onto the compressed axis.

    Each collapsed gap is squeezed to ``collapsed_time_units``. Times inside
    a collapsed gap are mapped linearly into that compressed width and times
    after it are shifted left by what the gap saved.
    """
    cumulative_compression = 0.0

    for collapsed in get_collapsed_segments(segments):
        start_time = collapsed["start_time"]
        end_time = collapsed["end_time"]
        duration = max(1, collapsed["duration"])
        # A gap shorter than the collapsed width is never stretched
        compressed_width = min(collapsed_time_units, duration)

        if time_value > end_time:
            cumulative_compression += max(0, duration - collapsed_time_units)
        elif time_value > start_time:
            progress = (time_value - start_time) / duration
            return start_time - cumulative_compression + progress * compressed_width

    return time_value - cumulative_compression


class TimelineCollapse:
    """
    Segmentation and collapse state for one timeline.

    Holds the events, the data viewport and the zoom level, plus the set of
    collapsible gaps the user expanded. Segments are recomputed lazily
    whenever any of those inputs changes; nothing derived is patched in
    place.
    """

    def __init__(
        self,
        events: Iterable[Event],
        viewport: Viewport,
        zoom_level: float = 1.0,
        settings: Optional[LayoutSettings] = None,
    ) -> None:
        self._events: list[Event] = list(events)
        self._viewport: Viewport = dict(viewport)  # type: ignore[assignment]
        self._zoom_level = self.__validate_zoom_level(zoom_level)
        self.settings: LayoutSettings = settings or get_default_layout_settings()
        # Membership means the gap is expanded; collapsible gaps default to collapsed
        self._expanded_segment_ids: set[str] = set()

        self._revision = 0
        self._segments: Optional[list[TimeSegment]] = None
        self._segments_revision = -1

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    @property
    def viewport(self) -> Viewport:
        return dict(self._viewport)  # type: ignore[return-value]

    @property
    def zoom_level(self) -> float:
        return self._zoom_level

    @property
    def expanded_segment_ids(self) -> frozenset[str]:
        return frozenset(self._expanded_segment_ids)

    @property
    def time_segments(self) -> list[TimeSegment]:
        if self._segments is None or self._segments_revision != self._revision:
            self._segments = compute_segments(
                self._events,
                self._expanded_segment_ids,
                self.settings["collapse_threshold_multiplier"],
            )
            self._segments_revision = self._revision
            logger.debug(
                "computed %d segments (%d collapsed) at revision %d",
                len(self._segments),
                len(get_collapsed_segments(self._segments)),
                self._revision,
            )
        return self._segments

    def __validate_zoom_level(self, zoom_level: float) -> float:
        if zoom_level <= 0:
            raise ValueError(f"zoom level must be greater than zero, got {zoom_level}")
        return zoom_level

    def __invalidate(self) -> None:
        self._revision += 1

    def set_events(self, events: Iterable[Event]) -> None:
        self._events = list(events)
        self.__invalidate()

    def set_viewport(self, viewport: Viewport) -> None:
        if viewport == self._viewport:
            return
        self._viewport = dict(viewport)  # type: ignore[assignment]
        self.__invalidate()

    def set_zoom_level(self, zoom_level: float) -> None:
        zoom_level = self.__validate_zoom_level(zoom_level)
        if zoom_level == self._zoom_level:
            return
        self._zoom_level = zoom_level
        self.__invalidate()

    def toggle_segment_collapse(self, segment_id: str) -> None:
        if segment_id in self._expanded_segment_ids:
            self._expanded_segment_ids.remove(segment_id)
        else:
            self._expanded_segment_ids.add(segment_id)
        logger.debug(
            "toggled %s, now %s",
            segment_id,
            "expanded" if segment_id in self._expanded_segment_ids else "collapsed",
        )
        self.__invalidate()

    def is_segment_expanded(self, segment_id: str) -> bool:
        return segment_id in self._expanded_segment_ids

    def get_collapsed_segment_time_units(self) -> float:
        """
        Time span that a collapsed gap occupies on screen.

        A fixed pixel width measured against the reference timeline width,
        converted with the zoomed viewport range, so collapsed gaps look the
        same size at any zoom level or data range.
        """
        viewport_range = self._viewport["max_time"] - self._viewport["min_time"]
        if viewport_range <= 0:
            logger.warning(
                "degenerate viewport %s..%s, clamping range",
                self._viewport["min_time"],
                self._viewport["max_time"],
            )
            viewport_range = MIN_TIME_RANGE
        zoomed_range = viewport_range / self._zoom_level
        return (
            self.settings["collapsed_segment_pixel_width"]
            * zoomed_range
            / self.settings["reference_timeline_width"]
        )

    def get_adjusted_position(self, time_value: TimeValue) -> float:
        segments = self.time_segments
        if not get_collapsed_segments(segments):
            return time_value
        return adjust_time(
            time_value, segments, self.get_collapsed_segment_time_units()
        )

    def get_adjusted_viewport_range(self) -> float:
        min_time = self._viewport["min_time"]
        max_time = self._viewport["max_time"]
        original_range = max_time - min_time
        collapsed_time_units = self.get_collapsed_segment_time_units()

        compression_savings = 0.0
        for collapsed in get_collapsed_segments(self.time_segments):
            start_time = collapsed["start_time"]
            end_time = collapsed["end_time"]
            if start_time < max_time and end_time > min_time:
                overlap_duration = min(end_time, max_time) - max(start_time, min_time)
                compression_savings += max(0, overlap_duration - collapsed_time_units)

        return original_range - compression_savings
