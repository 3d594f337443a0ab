# SPDX-License-Identifier: MIT

from loreline.model.event import Event

DEFAULT_EVENT_COLOR = "cyan"
COLLAPSED_GAP_COLOR = "grey50"
EXPANDED_GAP_COLOR = "grey30"


def percentage_to_column(percentage: float, chart_width: int) -> int:
    """Map a percentage of the timeline onto a character column."""
    return int((percentage / 100) * chart_width // 1)


def clip_span(start_column: int, end_column: int, chart_width: int) -> tuple[int, int]:
    """
    Clip a half-open column span to the chart.

    Spans always cover at least one column before clipping, so point events
    stay visible. An empty span is returned as ``(0, 0)``.
    """
    end_column = max(end_column, start_column + 1)
    start_column = max(0, start_column)
    end_column = min(chart_width, end_column)
    if end_column <= start_column:
        return (0, 0)
    return (start_column, end_column)


def event_title(event: Event) -> str:
    return event["title"] or event["description"] or event["id"]


def truncate(text: str, width: int) -> str:
    if len(text) > width:
        return text[: max(0, width - 3)] + "..."
    return text.ljust(width)


def is_point_event(event: Event) -> bool:
    return event["time_end"] is None or event["time_end"] == event["time_start"]
