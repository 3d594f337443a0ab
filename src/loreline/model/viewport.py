# SPDX-License-Identifier: MIT

from typing import TypedDict

from loreline.model.event import TimeValue


class Viewport(TypedDict):
    min_time: TimeValue
    max_time: TimeValue


class TimelineData(TypedDict):
    min_time: TimeValue
    max_time: TimeValue
    time_range: TimeValue
