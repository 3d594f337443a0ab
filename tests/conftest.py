from pathlib import Path
from typing import Iterator

import pytest

from loreline import configuration
from loreline.initialize import initialize
from loreline.repository.configuration import CONFIGURATION_REPO
from loreline.view import state as view_state


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the configuration at a throwaway directory and initialize it."""
    config_dir = tmp_path / "config"
    app_config_path = config_dir / "config.yaml"
    monkeypatch.setattr(configuration, "CONFIG_PATH", config_dir)
    monkeypatch.setattr(configuration, "APP_CONFIG_PATH", app_config_path)
    CONFIGURATION_REPO.reset()
    initialize()

    yield app_config_path

    CONFIGURATION_REPO.reset()
    view_state.set_show_header(True)
