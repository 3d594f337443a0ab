# SPDX-License-Identifier: MIT

from typing import Optional, TypedDict

from loreline.model.entity_id import EntityId
from loreline.model.event import TimeValue


class CollapsedSegment(TypedDict):
    id: str
    start_time: TimeValue
    end_time: TimeValue
    duration: TimeValue
    is_collapsed: bool
    collapse_threshold: float


class TimeSegment(TypedDict):
    type: str
    start_time: TimeValue
    end_time: TimeValue
    duration: TimeValue
    event_ids: Optional[list[EntityId]]
    collapsed_segment: Optional[CollapsedSegment]
