# SPDX-License-Identifier: MIT

"""Report rendering flags shared by every view."""

from contextvars import ContextVar

# Set from the configuration at startup and by --no-header
_header_enabled: ContextVar[bool] = ContextVar("loreline_show_header", default=True)


def set_show_header(value: bool) -> None:
    _header_enabled.set(value)


def get_show_header() -> bool:
    """Whether reports start with the loreline header."""
    return _header_enabled.get()
