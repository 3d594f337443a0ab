# SPDX-License-Identifier: MIT

from typing import TypedDict

from loreline.model.event import Event, TimeValue
from loreline.model.segment import CollapsedSegment


class PositionResult(TypedDict):
    left: float
    width: float
    left_pixel: float
    width_pixel: float
    visible: bool


class EventWithPosition(Event):
    position: PositionResult


class CollapsedSegmentWithPosition(TypedDict):
    segment: CollapsedSegment
    position: PositionResult


class Tick(TypedDict):
    time_value: TimeValue
    position: PositionResult
    label: str


class TimelineElements(TypedDict):
    events: list[EventWithPosition]
    collapsed_segments: list[CollapsedSegmentWithPosition]
    ticks: list[Tick]
