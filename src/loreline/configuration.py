# SPDX-License-Identifier: MIT

from pathlib import Path
from typing import Optional, TypedDict

import platformdirs

APP_NAME = "loreline"

CONFIG_PATH: Path = platformdirs.user_config_path(APP_NAME)
APP_CONFIG_PATH: Path = CONFIG_PATH / "config.yaml"


class LayoutSettings(TypedDict):
    collapse_threshold_multiplier: float
    collapsed_segment_pixel_width: float
    reference_timeline_width: float
    min_tick_pixel_spacing: float
    target_tick_count: int


class Configuration(TypedDict):
    show_header: bool
    collapse_threshold_multiplier: float
    collapsed_segment_pixel_width: float
    reference_timeline_width: float
    min_tick_pixel_spacing: float
    target_tick_count: int
    timeline_width: int
    base_date: Optional[str]
    tick_label_format: str


# Keys that must hold a strictly positive number
POSITIVE_NUMERIC_KEYS = (
    "collapse_threshold_multiplier",
    "collapsed_segment_pixel_width",
    "reference_timeline_width",
    "min_tick_pixel_spacing",
    "target_tick_count",
    "timeline_width",
)


def get_default_configuration() -> Configuration:
    return {
        "show_header": True,
        "collapse_threshold_multiplier": 3.0,
        "collapsed_segment_pixel_width": 80.0,
        "reference_timeline_width": 1000.0,
        "min_tick_pixel_spacing": 80.0,
        "target_tick_count": 15,
        "timeline_width": 1000,
        "base_date": None,
        "tick_label_format": "DD MMM YY",
    }


def get_default_layout_settings() -> LayoutSettings:
    return layout_settings_from_config(get_default_configuration())


def layout_settings_from_config(config: Configuration) -> LayoutSettings:
    """
    Extract the layout engine parameters from a full configuration.

    The engine classes only ever see this subset so they stay free of
    any file system access.
    """
    return {
        "collapse_threshold_multiplier": float(config["collapse_threshold_multiplier"]),
        "collapsed_segment_pixel_width": float(config["collapsed_segment_pixel_width"]),
        "reference_timeline_width": float(config["reference_timeline_width"]),
        "min_tick_pixel_spacing": float(config["min_tick_pixel_spacing"]),
        "target_tick_count": int(config["target_tick_count"]),
    }
