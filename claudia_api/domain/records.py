"""Record kinds (agents, slash commands) and their partial-record models."""
from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 9

# Keys managed by the service; a partial record can never overwrite them on update.
PROTECTED_FIELDS = ("id", "createdAt", "updatedAt")


def generate_id(length: int = ID_LENGTH) -> str:
    """Short random [0-9a-z] token."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2026-01-02T03:04:05.678Z."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


class RecordPatch(BaseModel):
    """Fields shared by every partial record; all optional."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    def supplied(self) -> dict[str, Any]:
        """Fields present in the payload with a non-null value, keyed by stored name."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


class AgentPatch(RecordPatch):
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")
    model: Optional[str] = None


class SlashCommandPatch(RecordPatch):
    description: Optional[str] = None
    script: Optional[str] = None


@dataclass(frozen=True)
class RecordKind:
    """Describes one collection: its label, document name and field defaults."""

    name: str
    label: str
    filename: str
    patch_model: type[RecordPatch]
    defaults: tuple[tuple[str, str], ...]

    def parse(self, partial: RecordPatch | Mapping[str, Any] | None) -> RecordPatch:
        if isinstance(partial, self.patch_model):
            return partial
        if isinstance(partial, RecordPatch):
            partial = partial.model_dump(by_alias=True, exclude_unset=True)
        return self.patch_model.model_validate(dict(partial or {}))

    def build(self, patch: RecordPatch, record_id: str, now: str) -> dict[str, Any]:
        """Full record from a partial: empty or missing values fall back to defaults."""
        values = patch.supplied()
        record: dict[str, Any] = {"id": record_id}
        for key, default in self.defaults:
            record[key] = values.get(key) or default
        record["createdAt"] = values.get("createdAt") or now
        record["updatedAt"] = now
        return record


AGENT = RecordKind(
    name="agent",
    label="Agent",
    filename="agents.json",
    patch_model=AgentPatch,
    defaults=(("name", "New Agent"), ("systemPrompt", ""), ("model", "claude-opus")),
)

SLASH_COMMAND = RecordKind(
    name="command",
    label="Command",
    filename="commands.json",
    patch_model=SlashCommandPatch,
    defaults=(("name", "new-command"), ("description", ""), ("script", "")),
)
