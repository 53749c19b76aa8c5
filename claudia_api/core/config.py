"""
Configuration helpers for the Claudia API.

Settings is built once per process from environment variables and then passed
explicitly to the app factory, which hands the resolved paths to each store.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    claude_dir: Path
    cors_origins: tuple[str, ...]
    log_level: str

    @property
    def settings_file(self) -> Path:
        return self.claude_dir / "settings.json"

    @property
    def projects_dir(self) -> Path:
        return self.claude_dir / "projects"


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _list(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
        if value is None:
            return default
        items = tuple(item.strip() for item in value.split(",") if item.strip())
        return items or default

    claude_dir = os.getenv("CLAUDE_DIR") or os.path.join("~", ".claude")

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        claude_dir=Path(claude_dir).expanduser(),
        cors_origins=_list(os.getenv("CORS_ORIGINS"), ("*",)),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
