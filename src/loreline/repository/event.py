# SPDX-License-Identifier: MIT

import datetime
import logging
import math
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

import pendulum
from yaml import YAMLError, load

try:
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Loader  # type: ignore[assignment]

from loreline.model.entity_id import EntityId
from loreline.model.event import Event
from loreline.template.event import get_event_template
from loreline.time import base_date_from_str_optional

logger = logging.getLogger(__name__)

EVENT_FIELDS = frozenset(get_event_template("").keys())


class EventRepository:
    """
    Read-only access to an event file.

    The file holds either a list of events or a mapping with an ``events``
    list and an optional ``base_date``. It is parsed on first access.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._events: Optional[list[Event]] = None
        self._base_date: Optional[pendulum.DateTime] = None

    @property
    def events(self) -> list[Event]:
        if self._events is None:
            self.__load_data()
        if self._events is None:
            raise ValueError(f"events could not be loaded from {self.path}")
        return self._events

    @property
    def base_date(self) -> Optional[pendulum.DateTime]:
        if self._events is None:
            self.__load_data()
        return self._base_date

    def __load_data(self) -> None:
        try:
            raw_document = load(self.path.read_text(), Loader=Loader)
        except YAMLError as e:
            raise ValueError(f"{self.path} is not valid YAML: {e}") from e

        if raw_document is None:
            raw_events: Any = []
            raw_base_date = None
        elif isinstance(raw_document, list):
            raw_events = raw_document
            raw_base_date = None
        elif isinstance(raw_document, dict):
            raw_events = raw_document.get("events") or []
            raw_base_date = raw_document.get("base_date")
        else:
            raise ValueError(
                f"{self.path} must contain a list of events or a mapping with 'events'"
            )

        if not isinstance(raw_events, list):
            raise ValueError(f"'events' in {self.path} must be a list")

        if raw_base_date is not None and not isinstance(
            raw_base_date, (str, datetime.date)
        ):
            raise ValueError(f"'base_date' in {self.path} must be a date")
        self._base_date = base_date_from_str_optional(raw_base_date)

        events: list[Event] = []
        seen_ids: set[EntityId] = set()
        for index, raw_event in enumerate(raw_events):
            event = self.__convert_event_for_deserialization(index, raw_event)
            if event["id"] in seen_ids:
                raise ValueError(f"event {index}: duplicate id {event['id']!r}")
            seen_ids.add(event["id"])
            events.append(event)

        untimed = sum(1 for ev in events if ev["time_start"] is None)
        logger.debug(
            "loaded %d events from %s (%d without a start time)",
            len(events),
            self.path,
            untimed,
        )
        self._events = events

    def __convert_event_for_deserialization(self, index: int, raw_event: Any) -> Event:
        if not isinstance(raw_event, dict):
            raise ValueError(f"event {index}: expected a mapping, got {raw_event!r}")

        raw_id = raw_event.get("id")
        if raw_id is None or str(raw_id).strip() == "":
            raise ValueError(f"event {index}: missing id")

        unknown_fields = set(raw_event.keys()) - EVENT_FIELDS
        if unknown_fields:
            logger.debug(
                "event %s: ignoring fields %s", raw_id, ", ".join(sorted(map(str, unknown_fields)))
            )

        event = get_event_template(str(raw_id))
        for field in ("title", "description", "color"):
            value = raw_event.get(field)
            event[field] = str(value) if value is not None else None  # type: ignore[literal-required]

        event["time_start"] = self.__parse_time(index, "time_start", raw_event)
        event["time_end"] = self.__parse_time(index, "time_end", raw_event)
        if (
            event["time_start"] is not None
            and event["time_end"] is not None
            and event["time_end"] < event["time_start"]
        ):
            raise ValueError(
                f"event {index}: time_end {event['time_end']} is before "
                f"time_start {event['time_start']}"
            )

        parent_id = raw_event.get("parent_event_id")
        event["parent_event_id"] = str(parent_id) if parent_id is not None else None

        display_order = raw_event.get("display_order", 0)
        if isinstance(display_order, bool) or not isinstance(display_order, int):
            raise ValueError(f"event {index}: display_order must be an integer")
        event["display_order"] = display_order

        return event

    def __parse_time(self, index: int, field: str, raw_event: dict[str, Any]) -> Any:
        value = raw_event.get(field)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"event {index}: {field} must be a number, got {value!r}")
        if not math.isfinite(value):
            raise ValueError(f"event {index}: {field} must be finite, got {value!r}")
        return value

    def get_event(self, id: EntityId) -> Event:
        for event in self.events:
            if event["id"] == id:
                return deepcopy(event)
        raise ValueError(f"no event with id {id!r}")

    def get_all_events(self) -> list[Event]:
        return deepcopy(self.events)
