# SPDX-License-Identifier: MIT

import logging
from typing import Iterable, Optional

from loreline.configuration import LayoutSettings, get_default_layout_settings
from loreline.model.event import Event
from loreline.model.position import TimelineElements
from loreline.model.segment import TimeSegment
from loreline.service.calculator import TimelineCalculator
from loreline.service.collapse import TimelineCollapse
from loreline.service.viewport import ViewportState, compute_timeline_data
from loreline.time import LabelFormatter

logger = logging.getLogger(__name__)


class TimelineLayout:
    """
    Binds the collapse engine, the viewport state and the calculator.

    The calculator is rebuilt only when the collapse engine, the viewport
    state or the timeline width changed since it was last built. Both
    upstream objects expose a revision counter that every mutation bumps,
    so the cache key is just those counters plus the width.
    """

    def __init__(
        self,
        events: Iterable[Event],
        timeline_width: float,
        format_label: LabelFormatter,
        settings: Optional[LayoutSettings] = None,
    ) -> None:
        if timeline_width <= 0:
            raise ValueError(
                f"timeline width must be greater than zero, got {timeline_width}"
            )
        self.settings: LayoutSettings = settings or get_default_layout_settings()
        self.format_label = format_label
        self._events = list(events)
        self._timeline_width = timeline_width

        self.viewport_state = ViewportState(compute_timeline_data(self._events))
        self.collapse = TimelineCollapse(
            self._events,
            self.viewport_state.viewport,
            self.viewport_state.zoom_level,
            self.settings,
        )

        self._calculator: Optional[TimelineCalculator] = None
        self._calculator_key: Optional[tuple[int, int, float]] = None

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    @property
    def timeline_width(self) -> float:
        return self._timeline_width

    @property
    def time_segments(self) -> list[TimeSegment]:
        self.__sync_collapse()
        return self.collapse.time_segments

    @property
    def calculator(self) -> TimelineCalculator:
        self.__sync_collapse()
        key = (
            self.collapse.revision,
            self.viewport_state.revision,
            self._timeline_width,
        )
        if self._calculator is None or self._calculator_key != key:
            self._calculator = TimelineCalculator(
                self.viewport_state.viewport,
                self.viewport_state.zoom_level,
                self.viewport_state.pan_offset,
                self._timeline_width,
                self.collapse.get_adjusted_position,
                self.format_label,
                min_tick_pixel_spacing=self.settings["min_tick_pixel_spacing"],
                target_tick_count=self.settings["target_tick_count"],
            )
            self._calculator_key = key
            logger.debug("rebuilt calculator for key %s", key)
        return self._calculator

    def __sync_collapse(self) -> None:
        # The collapse engine sizes collapsed gaps from the viewport and zoom,
        # so it has to see the current ones before anything is derived
        self.collapse.set_viewport(self.viewport_state.viewport)
        self.collapse.set_zoom_level(self.viewport_state.zoom_level)

    def set_events(self, events: Iterable[Event]) -> None:
        self._events = list(events)
        self.collapse.set_events(self._events)
        self.viewport_state.set_timeline_data(compute_timeline_data(self._events))

    def set_timeline_width(self, timeline_width: float) -> None:
        if timeline_width <= 0:
            raise ValueError(
                f"timeline width must be greater than zero, got {timeline_width}"
            )
        self._timeline_width = timeline_width

    def toggle_segment_collapse(self, segment_id: str) -> None:
        self.collapse.toggle_segment_collapse(segment_id)

    def get_adjusted_viewport_range(self) -> float:
        self.__sync_collapse()
        return self.collapse.get_adjusted_viewport_range()

    def calculate_all_elements(self) -> TimelineElements:
        calculator = self.calculator
        return calculator.calculate_all_elements(self._events, self.time_segments)
