# SPDX-License-Identifier: MIT

from loreline.model.viewport import TimelineData, Viewport

DEFAULT_MIN_TIME = 0.0
DEFAULT_MAX_TIME = 100.0


def get_viewport_template() -> Viewport:
    return {
        "min_time": DEFAULT_MIN_TIME,
        "max_time": DEFAULT_MAX_TIME,
    }


def get_timeline_data_template() -> TimelineData:
    return {
        "min_time": DEFAULT_MIN_TIME,
        "max_time": DEFAULT_MAX_TIME,
        "time_range": DEFAULT_MAX_TIME - DEFAULT_MIN_TIME,
    }
