# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from loreline import configuration
from loreline.repository.configuration import CONFIGURATION_REPO
from loreline.terminal.custom_typer import AliasedTyperGroup
from loreline.terminal.parse import parse_base_date

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


@app.command("view, v")
def view() -> None:
    """Display current configuration settings."""
    config = CONFIGURATION_REPO.get_config()

    console = Console()
    table = Table()
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row(
        "show_header",
        "✓ Enabled" if config["show_header"] else "✗ Disabled",
    )
    table.add_row(
        "collapse_threshold_multiplier", str(config["collapse_threshold_multiplier"])
    )
    table.add_row(
        "collapsed_segment_pixel_width", str(config["collapsed_segment_pixel_width"])
    )
    table.add_row("reference_timeline_width", str(config["reference_timeline_width"]))
    table.add_row("min_tick_pixel_spacing", str(config["min_tick_pixel_spacing"]))
    table.add_row("target_tick_count", str(config["target_tick_count"]))
    table.add_row("timeline_width", str(config["timeline_width"]))
    table.add_row("base_date", str(config["base_date"]) if config["base_date"] else "None")
    table.add_row("tick_label_format", config["tick_label_format"])
    table.add_row("config_path", str(configuration.APP_CONFIG_PATH))

    console.print(table)


@app.command("set, s")
def set(
    show_header: Annotated[
        Optional[bool],
        typer.Option(
            "--show-header/--no-show-header",
            help="Enable/disable the report header",
        ),
    ] = None,
    collapse_threshold_multiplier: Annotated[
        Optional[float],
        typer.Option(
            "--collapse-threshold-multiplier",
            help="A gap collapses when longer than this times the mean neighbouring event duration",
        ),
    ] = None,
    collapsed_segment_pixel_width: Annotated[
        Optional[float],
        typer.Option(
            "--collapsed-segment-pixel-width",
            help="On-screen width of a collapsed gap, in reference pixels",
        ),
    ] = None,
    reference_timeline_width: Annotated[
        Optional[float],
        typer.Option(
            "--reference-timeline-width",
            help="Timeline width the collapsed gap width is measured against",
        ),
    ] = None,
    min_tick_pixel_spacing: Annotated[
        Optional[float],
        typer.Option(
            "--min-tick-pixel-spacing",
            help="Minimum distance in pixels between event-anchored ticks",
        ),
    ] = None,
    target_tick_count: Annotated[
        Optional[int],
        typer.Option(
            "--target-tick-count",
            help="Approximate number of ticks when no event has a start time",
        ),
    ] = None,
    timeline_width: Annotated[
        Optional[int],
        typer.Option(
            "--timeline-width",
            help="Default timeline width in pixels",
        ),
    ] = None,
    base_date: Annotated[
        Optional[str],
        typer.Option(
            "--base-date",
            help="Default project base date (YYYY-MM-DD) for tick labels",
        ),
    ] = None,
    remove_base_date: Annotated[
        bool,
        typer.Option("--remove-base-date", help="Show raw time values in tick labels"),
    ] = False,
    tick_label_format: Annotated[
        Optional[str],
        typer.Option(
            "--tick-label-format",
            help="pendulum format string for tick labels, e.g. 'DD MMM YY'",
        ),
    ] = None,
) -> None:
    """Update configuration settings."""
    if base_date is not None:
        # Validate now so a bad date never reaches the file
        parse_base_date(base_date)

    try:
        CONFIGURATION_REPO.update_config(
            show_header=show_header,
            collapse_threshold_multiplier=collapse_threshold_multiplier,
            collapsed_segment_pixel_width=collapsed_segment_pixel_width,
            reference_timeline_width=reference_timeline_width,
            min_tick_pixel_spacing=min_tick_pixel_spacing,
            target_tick_count=target_tick_count,
            timeline_width=timeline_width,
            base_date=base_date,
            remove_base_date=remove_base_date,
            tick_label_format=tick_label_format,
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    view()
