"""Read/replace the user settings document and the sections stored inside it."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Mapping

from claudia_api.repositories import json_storage
from claudia_api.repositories.json_storage import StorageParseError

logger = logging.getLogger(__name__)

CLAUDE_DEFAULTS = {"model": "haiku", "provider": "anthropic"}
CLAUDE_SECTION = "claude"
SYSTEM_PROMPT_KEY = "systemPrompt"


class SettingsService:
    """The settings file is a single JSON object, replaced atomically on every save."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    def get(self) -> dict:
        with self._lock:
            data = json_storage.load_document(self.path, {})
        if not isinstance(data, dict):
            raise StorageParseError(f"Expected a JSON object in {self.path}", self.path)
        return data

    def replace(self, document: Mapping[str, Any]) -> dict:
        data = dict(document)
        with self._lock:
            json_storage.write(self.path, data)
        logger.info("Saved settings to %s", self.path)
        return data

    def _merge(self, key: str, value: Any) -> dict:
        with self._lock:
            data = self.get()
            data[key] = value
            return self.replace(data)

    def get_claude(self) -> dict:
        section = self.get().get(CLAUDE_SECTION)
        merged = dict(CLAUDE_DEFAULTS)
        if isinstance(section, dict):
            merged.update(section)
        return merged

    def update_claude(self, values: Mapping[str, Any]) -> dict:
        with self._lock:
            merged = self.get_claude()
            merged.update(values)
            self._merge(CLAUDE_SECTION, merged)
        return merged

    def get_system_prompt(self) -> dict:
        prompt = self.get().get(SYSTEM_PROMPT_KEY)
        return {"prompt": prompt if isinstance(prompt, str) else ""}

    def set_system_prompt(self, prompt: str | None) -> dict:
        value = prompt or ""
        self._merge(SYSTEM_PROMPT_KEY, value)
        return {"prompt": value}
