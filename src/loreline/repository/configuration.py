# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from typing import Any, Optional

from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader  # noqa: F401
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from loreline import configuration

logger = logging.getLogger(__name__)


class ConfigurationRepository:
    def __init__(self) -> None:
        self._config: Optional[configuration.Configuration] = None
        self.is_dirty = False

    @property
    def config(self) -> configuration.Configuration:
        if self._config is None:
            self.__load_data()
        if self._config is None:
            raise ValueError("configuration could not be loaded")
        return self._config

    def __load_data(self) -> None:
        raw_config = load(configuration.APP_CONFIG_PATH.read_text(), Loader=Loader)
        if raw_config is None:
            raw_config = {}
        if not isinstance(raw_config, dict):
            raise ValueError(
                f"{configuration.APP_CONFIG_PATH} must contain a mapping of settings"
            )

        # Back-fill settings added after the file was first written
        defaults = configuration.get_default_configuration()
        for key, value in defaults.items():
            if key not in raw_config:
                logger.debug("config key %s missing, using default %r", key, value)
                raw_config[key] = value

        for key in configuration.POSITIVE_NUMERIC_KEYS:
            self.__validate_positive(key, raw_config[key])

        self._config = raw_config  # type: ignore[assignment]

    def __save_data(self, config: configuration.Configuration) -> None:
        configuration.APP_CONFIG_PATH.write_text(dump(dict(config), Dumper=Dumper))

    def __validate_positive(self, key: str, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{key} must be a number, got {value!r}")
        if value <= 0:
            raise ValueError(f"{key} must be greater than zero, got {value}")

    def flush(self) -> bool:
        if self._config is not None and self.is_dirty:
            self.__save_data(self._config)
            self.is_dirty = False
            return True
        return False

    def reset(self) -> None:
        """Drop the cached configuration so the next access re-reads the file."""
        self._config = None
        self.is_dirty = False

    def get_config(self) -> configuration.Configuration:
        return deepcopy(self.config)

    def get_layout_settings(self) -> configuration.LayoutSettings:
        return configuration.layout_settings_from_config(self.config)

    def update_config(
        self,
        show_header: Optional[bool] = None,
        collapse_threshold_multiplier: Optional[float] = None,
        collapsed_segment_pixel_width: Optional[float] = None,
        reference_timeline_width: Optional[float] = None,
        min_tick_pixel_spacing: Optional[float] = None,
        target_tick_count: Optional[int] = None,
        timeline_width: Optional[int] = None,
        base_date: Optional[str] = None,
        remove_base_date: bool = False,
        tick_label_format: Optional[str] = None,
    ) -> None:
        numeric_updates: dict[str, Optional[float]] = {
            "collapse_threshold_multiplier": collapse_threshold_multiplier,
            "collapsed_segment_pixel_width": collapsed_segment_pixel_width,
            "reference_timeline_width": reference_timeline_width,
            "min_tick_pixel_spacing": min_tick_pixel_spacing,
            "target_tick_count": target_tick_count,
            "timeline_width": timeline_width,
        }
        # Validate everything before touching the cached config
        for key, value in numeric_updates.items():
            if value is not None:
                self.__validate_positive(key, value)

        self.is_dirty = True

        if show_header is not None:
            self.config["show_header"] = show_header
        if collapse_threshold_multiplier is not None:
            self.config["collapse_threshold_multiplier"] = collapse_threshold_multiplier
        if collapsed_segment_pixel_width is not None:
            self.config["collapsed_segment_pixel_width"] = collapsed_segment_pixel_width
        if reference_timeline_width is not None:
            self.config["reference_timeline_width"] = reference_timeline_width
        if min_tick_pixel_spacing is not None:
            self.config["min_tick_pixel_spacing"] = min_tick_pixel_spacing
        if target_tick_count is not None:
            self.config["target_tick_count"] = target_tick_count
        if timeline_width is not None:
            self.config["timeline_width"] = timeline_width
        if base_date is not None:
            self.config["base_date"] = base_date
        if remove_base_date:
            self.config["base_date"] = None
        if tick_label_format is not None:
            self.config["tick_label_format"] = tick_label_format


CONFIGURATION_REPO = ConfigurationRepository()
