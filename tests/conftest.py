from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from claudia_api.core import config as core_config  # noqa: E402


@pytest.fixture()
def claude_dir(tmp_path, monkeypatch):
    """Point CLAUDE_DIR at a temporary directory and reset the settings cache."""
    root = tmp_path / ".claude"
    monkeypatch.setenv("CLAUDE_DIR", str(root))
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    core_config.get_settings.cache_clear()
    yield root
    core_config.get_settings.cache_clear()
