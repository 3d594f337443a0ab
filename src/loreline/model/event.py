# SPDX-License-Identifier: MIT

from typing import Optional, TypeAlias, TypedDict

from loreline.model.entity_id import EntityId

TimeValue: TypeAlias = float


class Event(TypedDict):
    id: EntityId
    title: Optional[str]
    description: Optional[str]
    color: Optional[str]
    time_start: Optional[TimeValue]
    time_end: Optional[TimeValue]
    parent_event_id: Optional[EntityId]
    display_order: int
