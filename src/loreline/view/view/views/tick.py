# SPDX-License-Identifier: MIT

from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from loreline.model.position import Tick
from loreline.time import format_time_value
from loreline.view.view.views.header import header


def ticks_view(
    report_name: str,
    ticks: list[Tick],
    sub_header: Optional[str] = None,
) -> None:
    header(report_name, sub_header)

    console = Console()
    if len(ticks) == 0:
        console.print("\n[dim]No ticks in view[/dim]\n")
        return

    ticks_table = Table(box=box.SIMPLE)
    ticks_table.add_column("time", justify="right")
    ticks_table.add_column("left %", justify="right")
    ticks_table.add_column("pixel", justify="right")
    ticks_table.add_column("label")

    for tick in ticks:
        ticks_table.add_row(
            format_time_value(tick["time_value"]),
            f"{tick['position']['left']:.2f}",
            f"{tick['position']['left_pixel']:.1f}",
            tick["label"],
        )

    console.print(ticks_table)
