# SPDX-License-Identifier: MIT

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from loreline.model.segment import TimeSegment
from loreline.model.segment_type import SegmentType
from loreline.time import format_time_value
from loreline.view.view.util import COLLAPSED_GAP_COLOR
from loreline.view.view.views.header import header


def segments_view(
    report_name: str,
    segments: list[TimeSegment],
    sub_header: Optional[str] = None,
) -> None:
    header(report_name, sub_header)

    console = Console()
    if len(segments) == 0:
        console.print("\n[dim]No events with a start time[/dim]\n")
        return

    segments_table = Table(box=box.SIMPLE)
    segments_table.add_column("type")
    segments_table.add_column("start", justify="right")
    segments_table.add_column("end", justify="right")
    segments_table.add_column("duration", justify="right")
    segments_table.add_column("threshold", justify="right")
    segments_table.add_column("id / events")

    for segment in segments:
        collapsed_segment = segment["collapsed_segment"]
        threshold = ""
        if collapsed_segment is not None:
            threshold = format_time_value(round(collapsed_segment["collapse_threshold"], 4))

        if segment["type"] == SegmentType.EVENT:
            identity = ", ".join(segment["event_ids"] or [])
        elif collapsed_segment is not None:
            identity = collapsed_segment["id"]
        else:
            identity = ""

        segment_type = segment["type"]
        if segment_type == SegmentType.COLLAPSED:
            segment_type = f"[{COLLAPSED_GAP_COLOR}]collapsed[/{COLLAPSED_GAP_COLOR}]"
        elif segment_type == SegmentType.GAP and collapsed_segment is not None:
            segment_type = "gap (expanded)"

        segments_table.add_row(
            segment_type,
            format_time_value(segment["start_time"]),
            format_time_value(segment["end_time"]),
            format_time_value(segment["duration"]),
            threshold,
            identity,
        )

    console.print(segments_table)
