# SPDX-License-Identifier: MIT

import datetime
from typing import Callable, Optional, TypeAlias, cast

import pendulum

from loreline.model.event import TimeValue

LabelFormatter: TypeAlias = Callable[[TimeValue], str]

SECONDS_PER_DAY = 24 * 60 * 60


def base_date_from_str(base_date: str | datetime.date) -> pendulum.DateTime:
    """
    Parse a project base date.

    YAML hands unquoted dates over as ``datetime.date`` objects, so those are
    accepted as well as ISO strings. The result is midnight UTC unless the
    input carried its own time and zone.
    """
    if isinstance(base_date, datetime.datetime):
        return pendulum.instance(base_date, tz="UTC")
    if isinstance(base_date, datetime.date):
        return pendulum.datetime(base_date.year, base_date.month, base_date.day)
    try:
        parsed = pendulum.parse(base_date, tz="UTC")
    except ValueError as e:
        raise ValueError(f"invalid base date {base_date!r}: {e}") from e
    if isinstance(parsed, pendulum.DateTime):
        return parsed
    if isinstance(parsed, pendulum.Date):
        return pendulum.datetime(parsed.year, parsed.month, parsed.day)
    raise ValueError(f"invalid base date {base_date!r}: not a calendar date")


def base_date_from_str_optional(
    base_date: Optional[str | datetime.date],
) -> Optional[pendulum.DateTime]:
    if base_date is None:
        return None
    return base_date_from_str(base_date)


def project_days_to_datetime(
    days_since_base: TimeValue, base_date: pendulum.DateTime
) -> pendulum.DateTime:
    return base_date.add(seconds=days_since_base * SECONDS_PER_DAY)


def datetime_to_project_days(
    value: pendulum.DateTime, base_date: pendulum.DateTime
) -> float:
    return (value - base_date).total_seconds() / SECONDS_PER_DAY


def format_project_date(days_since_base: TimeValue, base_date: pendulum.DateTime) -> str:
    return project_days_to_datetime(days_since_base, base_date).format("YYYY-MM-DD")


def format_project_datetime(
    days_since_base: TimeValue, base_date: pendulum.DateTime
) -> str:
    return project_days_to_datetime(days_since_base, base_date).format(
        "YYYY-MM-DD HH:mm"
    )


def format_time_value(value: TimeValue) -> str:
    """Render an axis value without a trailing ``.0`` for whole numbers."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return repr(value)
    return str(value)


def make_label_formatter(
    base_date: pendulum.DateTime, fmt: str = "DD MMM YY"
) -> LabelFormatter:
    def format_label(time_value: TimeValue) -> str:
        try:
            moment = project_days_to_datetime(time_value, base_date)
        except (OverflowError, ValueError):
            # Outside the years a datetime can hold
            return format_time_value(time_value)
        return cast(str, moment.format(fmt))

    return format_label


def make_raw_label_formatter() -> LabelFormatter:
    return format_time_value


def get_label_formatter(
    base_date: Optional[pendulum.DateTime], fmt: str = "DD MMM YY"
) -> LabelFormatter:
    if base_date is None:
        return make_raw_label_formatter()
    return make_label_formatter(base_date, fmt)
