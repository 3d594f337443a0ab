# SPDX-License-Identifier: MIT

import logging
import math
from typing import Any, Callable, Iterable, Optional

from loreline.model.event import Event, TimeValue
from loreline.model.position import (
    CollapsedSegmentWithPosition,
    EventWithPosition,
    PositionResult,
    Tick,
    TimelineElements,
)
from loreline.model.segment import TimeSegment
from loreline.model.viewport import Viewport
from loreline.service.collapse import MIN_TIME_RANGE, get_event_end, get_timed_events
from loreline.time import LabelFormatter

logger = logging.getLogger(__name__)

# Narrowest rendered element, in percent of the timeline width
MIN_POSITION_WIDTH = 0.5

# Elements this far outside the 0-100 range are still laid out
VISIBILITY_MARGIN = 10.0

DEFAULT_MIN_TICK_PIXEL_SPACING = 80.0
DEFAULT_TARGET_TICK_COUNT = 15

NICE_INTERVALS = (1, 2, 5)


class TimelineCalculator:
    """
    Converts between time values and positions on a rendered timeline.

    All derived viewport quantities are computed once at construction from
    the data viewport, zoom, pan and the adjusted-position function. Build a
    new calculator whenever any of those inputs change.
    """

    def __init__(
        self,
        viewport: Viewport,
        zoom_level: float,
        pan_offset: float,
        timeline_width: float,
        get_adjusted_position: Callable[[TimeValue], float],
        format_label: LabelFormatter,
        min_tick_pixel_spacing: float = DEFAULT_MIN_TICK_PIXEL_SPACING,
        target_tick_count: int = DEFAULT_TARGET_TICK_COUNT,
    ) -> None:
        if zoom_level <= 0:
            raise ValueError(f"zoom level must be greater than zero, got {zoom_level}")
        if timeline_width <= 0:
            raise ValueError(
                f"timeline width must be greater than zero, got {timeline_width}"
            )
        if target_tick_count <= 0:
            raise ValueError(
                f"target tick count must be greater than zero, got {target_tick_count}"
            )

        self.viewport: Viewport = dict(viewport)  # type: ignore[assignment]
        self.zoom_level = zoom_level
        self.pan_offset = pan_offset
        self.timeline_width = timeline_width
        self.get_adjusted_position = get_adjusted_position
        self.format_label = format_label
        self.min_tick_pixel_spacing = min_tick_pixel_spacing
        self.target_tick_count = target_tick_count

        self.__calculate_viewport_properties()

    def __calculate_viewport_properties(self) -> None:
        self.base_viewport_range = self.viewport["max_time"] - self.viewport["min_time"]
        if self.base_viewport_range <= 0:
            logger.warning(
                "degenerate viewport %s..%s, clamping range",
                self.viewport["min_time"],
                self.viewport["max_time"],
            )
            self.base_viewport_range = MIN_TIME_RANGE
        self.zoomed_viewport_range = self.base_viewport_range / self.zoom_level
        self.zoomed_viewport_start = self.viewport["min_time"] - (
            self.pan_offset * self.zoomed_viewport_range / 100
        )
        self.adjusted_zoomed_viewport_start = self.get_adjusted_position(
            self.zoomed_viewport_start
        )
        self.adjusted_zoomed_viewport_end = self.get_adjusted_position(
            self.zoomed_viewport_start + self.zoomed_viewport_range
        )
        self.adjusted_zoomed_viewport_range = (
            self.adjusted_zoomed_viewport_end - self.adjusted_zoomed_viewport_start
        )
        if self.adjusted_zoomed_viewport_range <= 0:
            logger.warning(
                "adjusted viewport range %s is not positive, clamping",
                self.adjusted_zoomed_viewport_range,
            )
            self.adjusted_zoomed_viewport_range = MIN_TIME_RANGE

    def time_to_percentage(self, time_value: TimeValue) -> float:
        adjusted_time = self.get_adjusted_position(time_value)
        return (
            (adjusted_time - self.adjusted_zoomed_viewport_start)
            / self.adjusted_zoomed_viewport_range
        ) * 100

    def percentage_to_time(self, percentage: float) -> float:
        """
        Map a percentage back onto the adjusted time axis.

        This is a linear inverse; inside collapsed gaps it does not recover
        the original time.
        """
        return (
            self.adjusted_zoomed_viewport_start
            + (percentage / 100) * self.adjusted_zoomed_viewport_range
        )

    def time_to_pixel(self, time_value: TimeValue) -> float:
        return (self.time_to_percentage(time_value) / 100) * self.timeline_width

    def pixel_to_time(self, pixel: float) -> float:
        return self.percentage_to_time((pixel / self.timeline_width) * 100)

    def get_pixels_per_time_unit(self) -> float:
        return self.timeline_width / self.adjusted_zoomed_viewport_range

    def calculate_position(
        self, start_time: TimeValue, end_time: Optional[TimeValue] = None
    ) -> PositionResult:
        if end_time is None:
            end_time = start_time

        left = self.time_to_percentage(start_time)
        right = self.time_to_percentage(end_time)
        width = max(MIN_POSITION_WIDTH, right - left)

        left_pixel = self.time_to_pixel(start_time)
        width_pixel = max(
            MIN_POSITION_WIDTH * self.timeline_width / 100,
            self.time_to_pixel(end_time) - left_pixel,
        )

        visible = (
            left < 100 + VISIBILITY_MARGIN
            and (left + width) > -VISIBILITY_MARGIN
            and width > 0
        )

        return {
            "left": left,
            "width": width,
            "left_pixel": left_pixel,
            "width_pixel": width_pixel,
            "visible": visible,
        }

    def calculate_event_positions(
        self, events: Iterable[Event]
    ) -> list[EventWithPosition]:
        positioned: list[EventWithPosition] = []
        for event in events:
            start = event.get("time_start")
            if start is None:
                continue
            event_with_position: EventWithPosition = {
                **event,  # type: ignore[typeddict-item]
                "position": self.calculate_position(start, event.get("time_end")),
            }
            positioned.append(event_with_position)
        return positioned

    def calculate_collapsed_segment_positions(
        self, time_segments: Iterable[TimeSegment]
    ) -> list[CollapsedSegmentWithPosition]:
        positioned: list[CollapsedSegmentWithPosition] = []
        for segment in time_segments:
            collapsed_segment = segment["collapsed_segment"]
            if collapsed_segment is None:
                continue
            positioned.append(
                {
                    "segment": collapsed_segment,
                    "position": self.calculate_position(
                        collapsed_segment["start_time"], collapsed_segment["end_time"]
                    ),
                }
            )
        return positioned

    def generate_ticks(self, events: Iterable[Event]) -> list[Tick]:
        """
        Generate ruler ticks.

        With no timed events the ruler uses evenly spaced "nice" intervals.
        Otherwise ticks are anchored to event boundaries and thinned out so
        that no two are closer than ``min_tick_pixel_spacing`` pixels.
        """
        timed_events = get_timed_events(events)

        if len(timed_events) == 0:
            logger.debug("generating static ticks")
            return self.__generate_static_ticks()
        logger.debug("generating ticks from %d events", len(timed_events))
        return self.__generate_event_based_ticks(timed_events)

    def get_tick_interval(self) -> float:
        raw_interval = self.zoomed_viewport_range / self.target_tick_count
        magnitude = 10 ** math.floor(math.log10(raw_interval))
        normalized = raw_interval / magnitude

        nice_interval = 10
        for candidate in NICE_INTERVALS:
            if normalized <= candidate:
                nice_interval = candidate
                break

        return nice_interval * magnitude

    def __generate_static_ticks(self) -> list[Tick]:
        tick_interval = self.get_tick_interval()
        zoomed_viewport_end = self.zoomed_viewport_start + self.zoomed_viewport_range

        # Step by index rather than accumulating the interval to avoid drift
        first_index = math.floor(self.zoomed_viewport_start / tick_interval)
        last_index = math.ceil(zoomed_viewport_end / tick_interval)

        ticks: list[Tick] = []
        for index in range(first_index, last_index + 1):
            time_value = index * tick_interval
            position = self.calculate_position(time_value)
            if position["visible"]:
                ticks.append(
                    {
                        "time_value": time_value,
                        "position": position,
                        "label": self.format_label(time_value),
                    }
                )
        return ticks

    def __generate_event_based_ticks(self, timed_events: list[Event]) -> list[Tick]:
        candidates: set[float] = set()

        for event in timed_events:
            event_start = event["time_start"]
            assert event_start is not None
            event_end = get_event_end(event)
            event_duration = max(1, event_end - event_start)

            candidates.add(event_start)
            candidates.add(event_end)
            candidates.add(event_start + event_duration / 2)
            candidates.add(event_end + event_duration)
            candidates.add(event_end + event_duration * 2)

        kept_pixels: list[float] = []
        kept_times: list[float] = []
        for time_value in sorted(candidates):
            pixel_position = self.time_to_pixel(time_value)
            too_close = any(
                abs(pixel_position - kept_pixel) < self.min_tick_pixel_spacing
                for kept_pixel in kept_pixels
            )
            if not too_close:
                kept_pixels.append(pixel_position)
                kept_times.append(time_value)

        ticks: list[Tick] = []
        for time_value in kept_times:
            position = self.calculate_position(time_value)
            if position["visible"]:
                ticks.append(
                    {
                        "time_value": time_value,
                        "position": position,
                        "label": self.format_label(time_value),
                    }
                )
        return ticks

    def calculate_all_elements(
        self, events: Iterable[Event], time_segments: Iterable[TimeSegment]
    ) -> TimelineElements:
        events = list(events)
        return {
            "events": self.calculate_event_positions(events),
            "collapsed_segments": self.calculate_collapsed_segment_positions(
                time_segments
            ),
            "ticks": self.generate_ticks(events),
        }

    def get_debug_info(self) -> dict[str, Any]:
        return {
            "zoom_level": self.zoom_level,
            "pan_offset": self.pan_offset,
            "timeline_width": self.timeline_width,
            "base_viewport_range": self.base_viewport_range,
            "zoomed_viewport_range": self.zoomed_viewport_range,
            "zoomed_viewport_start": self.zoomed_viewport_start,
            "adjusted_zoomed_viewport_start": self.adjusted_zoomed_viewport_start,
            "adjusted_zoomed_viewport_range": self.adjusted_zoomed_viewport_range,
            "pixels_per_time_unit": self.get_pixels_per_time_unit(),
        }
