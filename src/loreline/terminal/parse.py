# SPDX-License-Identifier: MIT

from typing import Optional

import pendulum
import typer

from loreline.time import base_date_from_str


def parse_base_date(base_date_param: Optional[str]) -> Optional[pendulum.DateTime]:
    if base_date_param is None:
        return None
    try:
        return base_date_from_str(base_date_param)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def parse_positive_float(value_param: Optional[str]) -> Optional[float]:
    if value_param is None:
        return None
    try:
        value = float(value_param)
    except ValueError:
        raise typer.BadParameter(f"Expected a number, got {value_param!r}")
    if value <= 0:
        raise typer.BadParameter(f"Must be greater than zero, got {value_param}")
    return value
