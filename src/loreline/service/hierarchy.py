# SPDX-License-Identifier: MIT

from typing import AbstractSet, Iterable, Optional

from loreline.model.entity_id import EntityId
from loreline.model.event import Event
from loreline.model.event_row import EventRow


def group_events_by_parent(
    events: Iterable[Event],
) -> dict[Optional[EntityId], list[Event]]:
    """
    Group events under their parent id.

    Root events, and events whose parent is not part of ``events``, are
    grouped under ``None``. Each group is ordered by start time, then by
    display order; events without a start time sort as if they started at 0.
    """
    events = list(events)
    known_ids = {ev["id"] for ev in events}

    parent_map: dict[Optional[EntityId], list[Event]] = {}
    for event in events:
        parent_id = event.get("parent_event_id")
        if parent_id is not None and parent_id not in known_ids:
            parent_id = None
        parent_map.setdefault(parent_id, []).append(event)

    for event_list in parent_map.values():
        event_list.sort(
            key=lambda ev: (ev.get("time_start") or 0, ev.get("display_order") or 0)
        )

    return parent_map


def build_event_rows(
    events: Iterable[Event],
    collapsed_parents: AbstractSet[EntityId] = frozenset(),
) -> list[EventRow]:
    """
    Flatten the event hierarchy into display rows, depth first.

    Children of a parent listed in ``collapsed_parents`` are left out. An
    event is emitted at most once, so a cycle in the parent links cannot
    recurse forever; events only reachable through a cycle become roots.
    """
    events = list(events)
    parent_map = group_events_by_parent(events)
    rows: list[EventRow] = []
    emitted: set[EntityId] = set()

    def visit(event: Event, depth: int) -> None:
        if event["id"] in emitted:
            return
        emitted.add(event["id"])

        children = parent_map.get(event["id"], [])
        is_collapsed = event["id"] in collapsed_parents
        rows.append(
            {
                "event": event,
                "depth": depth,
                "has_children": len(children) > 0,
                "is_collapsed": is_collapsed,
            }
        )
        if is_collapsed:
            # Mark hidden descendants so they are not picked up as cycle roots
            stack = list(children)
            while stack:
                child = stack.pop()
                if child["id"] not in emitted:
                    emitted.add(child["id"])
                    stack.extend(parent_map.get(child["id"], []))
            return
        for child in children:
            visit(child, depth + 1)

    for root in parent_map.get(None, []):
        visit(root, 0)

    # Whatever is left hangs off a parent cycle
    for event in sorted(
        events,
        key=lambda ev: (ev.get("time_start") or 0, ev.get("display_order") or 0),
    ):
        if event["id"] not in emitted:
            visit(event, 0)

    return rows
