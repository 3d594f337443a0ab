# SPDX-License-Identifier: MIT

from typing import TypedDict

from loreline.model.event import Event


class EventRow(TypedDict):
    event: Event
    depth: int
    has_children: bool
    is_collapsed: bool
