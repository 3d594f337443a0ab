# SPDX-License-Identifier: MIT

import logging
from typing import Iterable

from loreline.model.event import Event
from loreline.model.viewport import TimelineData, Viewport
from loreline.service.collapse import get_event_end, get_timed_events
from loreline.template.viewport import (
    get_timeline_data_template,
    get_viewport_template,
)

logger = logging.getLogger(__name__)

ZOOM_STEP = 1.5
MIN_ZOOM_LEVEL = 0.001

# Smallest data range considered when padding the timeline
MIN_DATA_RANGE = 10
# Share of the data range added on each side, with an absolute floor
DATA_PADDING_RATIO = 0.25
MIN_DATA_PADDING = 20
# Extra room around the data when zooming to fit
FIT_PADDING_RATIO = 1.4

# Drag deltas are converted to percentages against this width
PAN_PSEUDO_WIDTH = 1000


def compute_timeline_data(events: Iterable[Event]) -> TimelineData:
    """
    Compute the full data-driven time range for a set of events.

    The range covers every timed event plus padding on both sides so there
    is room to place new events outside the existing ones. Without any timed
    events the range defaults to 0..100.
    """
    timed_events = get_timed_events(events)
    if len(timed_events) == 0:
        return get_timeline_data_template()

    start_times = [ev["time_start"] for ev in timed_events]
    end_times = [get_event_end(ev) for ev in timed_events]

    data_min_time = min(start_times)  # type: ignore[type-var]
    data_max_time = max(end_times)
    data_range = max(data_max_time - data_min_time, MIN_DATA_RANGE)  # type: ignore[operator]

    padding = max(data_range * DATA_PADDING_RATIO, MIN_DATA_PADDING)
    min_time = data_min_time - padding  # type: ignore[operator]
    max_time = data_max_time + padding

    return {
        "min_time": min_time,
        "max_time": max_time,
        "time_range": max_time - min_time,
    }


class ViewportState:
    """
    Zoom, pan and data viewport of a timeline.

    ``viewport`` is the un-zoomed frame handed to the calculator; it is as
    wide as the timeline data and only moves when a pan is committed or the
    view is re-centred. The visible window is derived from it with the zoom
    level and the pending pan offset.
    """

    def __init__(self, timeline_data: TimelineData) -> None:
        self.timeline_data = timeline_data
        self.zoom_level = 1.0
        self.pan_offset = 0.0
        self.viewport_manually_set = False
        self.viewport: Viewport = get_viewport_template()
        self._revision = 0
        self.sync_viewport()

    @property
    def revision(self) -> int:
        return self._revision

    def __touch(self) -> None:
        self._revision += 1

    def get_visible_range(self) -> Viewport:
        """Return the time window currently on screen."""
        zoomed_viewport_range = self.__get_frame_range() / self.zoom_level
        visible_start = self.viewport["min_time"] - (
            self.pan_offset * zoomed_viewport_range / 100
        )
        return {
            "min_time": visible_start,
            "max_time": visible_start + zoomed_viewport_range,
        }

    def __get_frame_range(self) -> float:
        return self.viewport["max_time"] - self.viewport["min_time"]

    def __center_frame_on(self, center: float) -> None:
        frame_range = self.timeline_data["time_range"]
        half_visible = frame_range / self.zoom_level / 2
        self.viewport = {
            "min_time": center - half_visible,
            "max_time": center - half_visible + frame_range,
        }

    def set_timeline_data(self, timeline_data: TimelineData) -> None:
        self.timeline_data = timeline_data
        self.sync_viewport()

    def set_viewport(self, viewport: Viewport, manually_set: bool = True) -> None:
        self.viewport = {
            "min_time": viewport["min_time"],
            "max_time": viewport["max_time"],
        }
        self.viewport_manually_set = manually_set
        self.__touch()

    def set_zoom_level(self, zoom_level: float) -> None:
        visible = self.get_visible_range()
        self.zoom_level = max(MIN_ZOOM_LEVEL, zoom_level)
        if self.viewport_manually_set:
            # Keep whatever the user panned to in the middle of the screen
            self.pan_offset = 0.0
            self.__center_frame_on((visible["min_time"] + visible["max_time"]) / 2)
        self.__touch()

    def set_pan_offset(self, pan_offset: float) -> None:
        self.pan_offset = pan_offset
        self.__touch()

    def zoom_in(self) -> None:
        self.set_zoom_level(self.zoom_level * ZOOM_STEP)

    def zoom_out(self) -> None:
        previous_zoom = self.zoom_level
        new_zoom = previous_zoom / ZOOM_STEP
        # Zooming back out past the fitted view drops any pan
        if new_zoom <= 1 and previous_zoom > 1:
            self.pan_offset = 0.0
        self.set_zoom_level(new_zoom)

    def zoom_reset(self) -> None:
        self.zoom_level = 1.0
        self.pan_offset = 0.0
        self.viewport_manually_set = False
        self.sync_viewport()

    def zoom_to_fit(self, events: Iterable[Event]) -> None:
        timed_events = get_timed_events(events)
        if len(timed_events) == 0:
            return

        data_min_time = min(ev["time_start"] for ev in timed_events)  # type: ignore[type-var]
        data_max_time = max(get_event_end(ev) for ev in timed_events)

        data_range = max(1, data_max_time - data_min_time)  # type: ignore[operator]
        padded_range = data_range * FIT_PADDING_RATIO

        self.zoom_level = max(
            MIN_ZOOM_LEVEL, self.timeline_data["time_range"] / padded_range
        )
        self.pan_offset = 0.0
        self.viewport_manually_set = False

        data_center = (data_min_time + data_max_time) / 2  # type: ignore[operator]
        visible_start = data_center - padded_range / 2
        self.viewport = {
            "min_time": visible_start,
            "max_time": visible_start + self.timeline_data["time_range"],
        }
        logger.debug(
            "zoomed to fit %s..%s at zoom %.4f",
            visible_start,
            visible_start + padded_range,
            self.zoom_level,
        )
        self.__touch()

    def pan_by_pixels(
        self, delta_x: float, pseudo_width: float = PAN_PSEUDO_WIDTH
    ) -> None:
        """Pan by a drag of ``delta_x`` pixels; dragging right shows earlier times."""
        delta_percentage = (delta_x / pseudo_width) * 100
        self.set_pan_offset(self.pan_offset - delta_percentage)

    def commit_pan(self) -> None:
        """Fold the pending pan offset into the viewport and reset it."""
        zoomed_viewport_range = self.__get_frame_range() / self.zoom_level
        time_shift = (self.pan_offset / 100) * zoomed_viewport_range

        self.viewport = {
            "min_time": self.viewport["min_time"] - time_shift,
            "max_time": self.viewport["max_time"] - time_shift,
        }
        self.viewport_manually_set = True
        self.pan_offset = 0.0
        self.__touch()

    def sync_viewport(self) -> None:
        """Re-anchor the viewport on the timeline data unless the user moved it."""
        if self.timeline_data["time_range"] > 0:
            if not self.viewport_manually_set:
                self.viewport = {
                    "min_time": self.timeline_data["min_time"],
                    "max_time": self.timeline_data["max_time"],
                }
            else:
                visible = self.get_visible_range()
                self.__center_frame_on((visible["min_time"] + visible["max_time"]) / 2)
        self.__touch()
