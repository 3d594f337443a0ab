# SPDX-License-Identifier: MIT

from typing import Optional

from rich.console import Console
from rich.padding import Padding
from rich.text import Text

from loreline.model.entity_id import EntityId
from loreline.model.event_row import EventRow
from loreline.model.position import (
    CollapsedSegmentWithPosition,
    EventWithPosition,
    Tick,
    TimelineElements,
)
from loreline.view.view.util import (
    COLLAPSED_GAP_COLOR,
    DEFAULT_EVENT_COLOR,
    EXPANDED_GAP_COLOR,
    clip_span,
    event_title,
    is_point_event,
    percentage_to_column,
    truncate,
)
from loreline.view.view.views.header import header


def timeline_view(
    report_name: str,
    elements: TimelineElements,
    rows: list[EventRow],
    range_description: Optional[str] = None,
    sub_header: Optional[str] = None,
    left_column_width: int = 30,
) -> None:
    """
    Display laid-out events on a horizontal timeline.

    The chart fills whatever the terminal leaves after the title column.
    Ticks are drawn on a ruler above the events and collapsed gaps get their
    own row of ``≈`` markers so the compressed stretches are obvious.

    Args:
        report_name: The name of the report
        elements: Event positions, collapsed gap positions and ticks
        rows: Event rows in display order, from the hierarchy builder
        range_description: Optional line describing the visible range
        sub_header: Optional sub-header, usually the events file
        left_column_width: Width of the title column (defaults to 30)
    """
    header(report_name, sub_header)

    console = Console()

    if len(rows) == 0:
        console.print("\n[dim]No events to display[/dim]\n")
        return

    chart_width = max(10, console.width - left_column_width - 1)

    if range_description is not None:
        console.print(Padding(f"[bold]{range_description}[/bold]", (1, 0, 0, 1)))

    positions: dict[EntityId, EventWithPosition] = {
        ev["id"]: ev for ev in elements["events"]
    }

    chart_elements: list[Text] = []
    chart_elements.extend(
        _build_ruler_rows(elements["ticks"], chart_width, left_column_width)
    )
    if len(elements["collapsed_segments"]) > 0:
        chart_elements.append(
            _build_gap_row(elements["collapsed_segments"], chart_width, left_column_width)
        )
    for row in rows:
        chart_elements.append(
            _build_event_row(row, positions.get(row["event"]["id"]), chart_width, left_column_width)
        )

    console.print()
    for element in chart_elements:
        console.print(element, no_wrap=True, overflow="crop")
    console.print()


def _build_ruler_rows(
    ticks: list[Tick], chart_width: int, left_column_width: int
) -> list[Text]:
    """
    Build the tick label row and the tick mark row.

    Labels that would run into the previous label are dropped; the tick mark
    is still drawn so the spacing stays readable.
    """
    label_row = Text(" " * left_column_width + " ")
    mark_row = Text(" " * left_column_width + " ")

    label_cells = [" "] * chart_width
    mark_cells = ["─"] * chart_width

    next_free_column = 0
    for tick in ticks:
        column = percentage_to_column(tick["position"]["left"], chart_width)
        if column < 0 or column >= chart_width:
            continue
        mark_cells[column] = "┬"

        label = tick["label"]
        if column < next_free_column or column + len(label) > chart_width:
            continue
        for offset, char in enumerate(label):
            label_cells[column + offset] = char
        next_free_column = column + len(label) + 1

    label_row.append("".join(label_cells), style="bold")
    mark_row.append("".join(mark_cells), style="dim")
    return [label_row, mark_row]


def _build_gap_row(
    collapsed_segments: list[CollapsedSegmentWithPosition],
    chart_width: int,
    left_column_width: int,
) -> Text:
    row = Text()
    row.append(truncate("collapsed gaps", left_column_width) + " ", style="dim")

    cells: list[Optional[str]] = [None] * chart_width
    for item in collapsed_segments:
        position = item["position"]
        if not position["visible"]:
            continue
        start_column = percentage_to_column(position["left"], chart_width)
        end_column = percentage_to_column(position["left"] + position["width"], chart_width)
        start_column, end_column = clip_span(start_column, end_column, chart_width)
        marker = "≈" if item["segment"]["is_collapsed"] else "·"
        for column in range(start_column, end_column):
            cells[column] = marker

    for cell in cells:
        if cell is None:
            row.append(" ")
        elif cell == "≈":
            row.append(cell, style=COLLAPSED_GAP_COLOR)
        else:
            row.append(cell, style=EXPANDED_GAP_COLOR)
    return row


def _build_event_row(
    event_row: EventRow,
    event_with_position: Optional[EventWithPosition],
    chart_width: int,
    left_column_width: int,
) -> Text:
    event = event_row["event"]
    color = event["color"] or DEFAULT_EVENT_COLOR

    # Format the left column: indentation, expander and title
    expander = ""
    if event_row["has_children"]:
        expander = "▸ " if event_row["is_collapsed"] else "▾ "
    left_col = "  " * event_row["depth"] + expander + event_title(event)

    row = Text()
    row.append(truncate(left_col, left_column_width) + " ", style=color)

    if event_with_position is None:
        row.append("(no start time)", style="dim italic")
        return row

    position = event_with_position["position"]
    if not position["visible"]:
        row.append("(out of view)", style="dim italic")
        return row

    start_column = percentage_to_column(position["left"], chart_width)
    end_column = percentage_to_column(position["left"] + position["width"], chart_width)
    start_column, end_column = clip_span(start_column, end_column, chart_width)
    if end_column == 0:
        row.append("(out of view)", style="dim italic")
        return row

    marker = "◆" if is_point_event(event) else "█"
    row.append(" " * start_column)
    row.append(marker * (end_column - start_column), style=color)
    return row
