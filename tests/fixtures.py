"""Shared builders for layout tests."""

from typing import Optional

from loreline.model.event import Event
from loreline.template.event import get_event_template


def make_event(
    id: str,
    time_start: Optional[float],
    time_end: Optional[float] = None,
    parent_event_id: Optional[str] = None,
    display_order: int = 0,
    title: Optional[str] = None,
) -> Event:
    event = get_event_template(id)
    event["title"] = title if title is not None else id
    event["time_start"] = time_start
    event["time_end"] = time_end
    event["parent_event_id"] = parent_event_id
    event["display_order"] = display_order
    return event


def make_scenario_events() -> list[Event]:
    """Three events: a short gap between the first two, a long one before the third."""
    return [
        make_event("a", 0, 10),
        make_event("b", 15, 20),
        make_event("c", 400, 410),
    ]


def identity(time_value: float) -> float:
    return time_value


def raw_label(time_value: float) -> str:
    return f"t{time_value:g}"
