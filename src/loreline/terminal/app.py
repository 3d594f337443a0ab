# SPDX-License-Identifier: MIT

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from loreline.terminal import configuration, timeline
from loreline.terminal.custom_typer import AliasedTyperGroup
from loreline.view import state as view_state

app = typer.Typer(
    cls=AliasedTyperGroup,
    help="Loreline - worldbuilding timelines in the CLI",
    no_args_is_help=True,
)
app.add_typer(configuration.app, name="config, c")
app.command(name="render, r", no_args_is_help=True)(timeline.render)
app.command(name="segments, sg", no_args_is_help=True)(timeline.segments)
app.command(name="ticks, tk", no_args_is_help=True)(timeline.ticks)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def main_callback(
    no_header: Annotated[
        bool,
        typer.Option(
            "--no-header",
            "-nh",
            help="Suppress header output in reports",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-V",
            help="Log layout decisions",
        ),
    ] = False,
) -> None:
    """
    Loreline - worldbuilding timelines in the CLI

    Global options that apply to all commands.
    """
    configure_logging(verbose)
    if no_header:
        view_state.set_show_header(False)


def run() -> None:
    app()
