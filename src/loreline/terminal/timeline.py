# SPDX-License-Identifier: MIT

import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer

from loreline.repository.configuration import CONFIGURATION_REPO
from loreline.repository.event import EventRepository
from loreline.service.hierarchy import build_event_rows
from loreline.service.layout import TimelineLayout
from loreline.terminal.parse import parse_base_date, parse_positive_float
from loreline.time import get_label_formatter
from loreline.view.view.views.segment import segments_view
from loreline.view.view.views.tick import ticks_view
from loreline.view.view.views.timeline import timeline_view

logger = logging.getLogger(__name__)

EventsFileArgument = Annotated[
    Path,
    typer.Argument(
        help="YAML file with an 'events' list",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]
ZoomOption = Annotated[
    Optional[float],
    typer.Option(
        "--zoom",
        "-z",
        parser=parse_positive_float,
        help="zoom level, 1 fits the padded data range",
    ),
]
PanOption = Annotated[
    float,
    typer.Option("--pan", "-p", help="pan offset in percent of the visible range"),
]
WidthOption = Annotated[
    Optional[float],
    typer.Option(
        "--width",
        "-w",
        parser=parse_positive_float,
        help="timeline width in pixels (defaults to the configured width)",
    ),
]
ExpandOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--expand",
        "-x",
        help="id of a collapsed gap to expand (repeatable)",
    ),
]
FitOption = Annotated[
    bool, typer.Option("--fit", "-f", help="zoom to fit all timed events")
]
ZoomInOption = Annotated[
    int, typer.Option("--zoom-in", min=0, help="zoom in this many steps")
]
ZoomOutOption = Annotated[
    int, typer.Option("--zoom-out", min=0, help="zoom out this many steps")
]
BaseDateOption = Annotated[
    Optional[pendulum.DateTime],
    typer.Option(
        "--base-date",
        "-b",
        parser=parse_base_date,
        help="project base date (YYYY-MM-DD) used for tick labels",
    ),
]


def load_events(events_file: Path) -> EventRepository:
    repository = EventRepository(events_file)
    try:
        # Force the load so malformed files fail here
        repository.events
    except (ValueError, OSError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    return repository


def build_layout(
    repository: EventRepository,
    zoom: Optional[float] = None,
    pan: float = 0.0,
    width: Optional[float] = None,
    expand: Optional[list[str]] = None,
    fit: bool = False,
    zoom_in: int = 0,
    zoom_out: int = 0,
    base_date: Optional[pendulum.DateTime] = None,
) -> TimelineLayout:
    config = CONFIGURATION_REPO.get_config()
    settings = CONFIGURATION_REPO.get_layout_settings()

    # Command line first, then the events file, then the configuration
    if base_date is None:
        base_date = repository.base_date
    if base_date is None and config["base_date"] is not None:
        try:
            base_date = parse_base_date(str(config["base_date"]))
        except typer.BadParameter as e:
            typer.echo(f"Error: configured base_date: {e}", err=True)
            raise typer.Exit(1)

    layout = TimelineLayout(
        repository.events,
        width if width is not None else config["timeline_width"],
        get_label_formatter(base_date, config["tick_label_format"]),
        settings,
    )

    viewport_state = layout.viewport_state
    if fit:
        viewport_state.zoom_to_fit(repository.events)
    if zoom is not None:
        viewport_state.set_zoom_level(zoom)
    for _ in range(zoom_in):
        viewport_state.zoom_in()
    for _ in range(zoom_out):
        viewport_state.zoom_out()
    if pan != 0:
        viewport_state.set_pan_offset(pan)

    for segment_id in expand or []:
        if not layout.collapse.is_segment_expanded(segment_id):
            layout.toggle_segment_collapse(segment_id)

    known_ids = {
        segment["collapsed_segment"]["id"]
        for segment in layout.time_segments
        if segment["collapsed_segment"] is not None
    }
    for segment_id in expand or []:
        if segment_id not in known_ids:
            logger.warning("no collapsible gap with id %s", segment_id)

    return layout


def describe_visible_range(layout: TimelineLayout) -> str:
    viewport_state = layout.viewport_state
    visible = viewport_state.get_visible_range()
    calculator = layout.calculator
    return (
        f"{calculator.format_label(visible['min_time'])} to "
        f"{calculator.format_label(visible['max_time'])} "
        f"(zoom {viewport_state.zoom_level:.3g}, pan {viewport_state.pan_offset:.3g}%)"
    )


def render(
    events_file: EventsFileArgument,
    zoom: ZoomOption = None,
    pan: PanOption = 0.0,
    width: WidthOption = None,
    expand: ExpandOption = None,
    collapse_parents: Annotated[
        Optional[list[str]],
        typer.Option(
            "--collapse-parent",
            "-c",
            help="hide the children of this event (repeatable)",
        ),
    ] = None,
    fit: FitOption = False,
    zoom_in: ZoomInOption = 0,
    zoom_out: ZoomOutOption = 0,
    base_date: BaseDateOption = None,
) -> None:
    """Render the events of a file as a timeline."""
    repository = load_events(events_file)
    layout = build_layout(
        repository, zoom, pan, width, expand, fit, zoom_in, zoom_out, base_date
    )
    elements = layout.calculate_all_elements()
    rows = build_event_rows(repository.events, frozenset(collapse_parents or []))

    timeline_view(
        "timeline",
        elements,
        rows,
        range_description=describe_visible_range(layout),
        sub_header=str(events_file),
    )


def segments(
    events_file: EventsFileArgument,
    expand: ExpandOption = None,
) -> None:
    """List the event, gap and collapsed segments of a file."""
    repository = load_events(events_file)
    layout = build_layout(repository, expand=expand)
    segments_view("segments", layout.time_segments, sub_header=str(events_file))


def ticks(
    events_file: EventsFileArgument,
    zoom: ZoomOption = None,
    pan: PanOption = 0.0,
    width: WidthOption = None,
    expand: ExpandOption = None,
    fit: FitOption = False,
    zoom_in: ZoomInOption = 0,
    zoom_out: ZoomOutOption = 0,
    base_date: BaseDateOption = None,
) -> None:
    """List the ruler ticks for the current view."""
    repository = load_events(events_file)
    layout = build_layout(
        repository, zoom, pan, width, expand, fit, zoom_in, zoom_out, base_date
    )
    ticks_view(
        "ticks",
        layout.calculator.generate_ticks(repository.events),
        sub_header=str(events_file),
    )
