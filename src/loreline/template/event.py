# SPDX-License-Identifier: MIT

from loreline.model.entity_id import EntityId
from loreline.model.event import Event


def get_event_template(id: EntityId) -> Event:
    return {
        "id": id,
        "title": None,
        "description": None,
        "color": None,
        "time_start": None,
        "time_end": None,
        "parent_event_id": None,
        "display_order": 0,
    }
