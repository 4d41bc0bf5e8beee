"""Shared pytest fixtures."""
import os
from pathlib import Path

import pytest

from i18n_scanner import config as config_module

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def clean_env(monkeypatch):
    """Isolated environment without I18N_SCAN_* variables or a cached EnvConfig."""
    environ = {key: value for key, value in os.environ.items() if not key.startswith("I18N_SCAN_")}
    monkeypatch.setattr(os, "environ", environ)
    monkeypatch.setattr(config_module, "_config", None)
    monkeypatch.chdir(FIXTURES_DIR)
    return environ
