"""
Record service behaviour for agents and slash commands on a temporary directory.
"""
from __future__ import annotations

import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Make the package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from claudia_api.domain.records import AGENT, SLASH_COMMAND, AgentPatch  # noqa: E402
from claudia_api.repositories import json_storage  # noqa: E402
from claudia_api.repositories.json_storage import JsonCollection, StorageParseError  # noqa: E402
from claudia_api.services.record_service import (  # noqa: E402
    RecordNotFoundError,
    RecordService,
    RecordValidationError,
)


class FakeClock:
    def __init__(self) -> None:
        self.moment = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.moment

    def advance(self, seconds: float) -> None:
        self.moment += timedelta(seconds=seconds)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def agents(tmp_path, clock, monkeypatch):
    collection = JsonCollection(tmp_path / "agents.json")
    collection.ensure_exists()
    svc = RecordService(AGENT, collection)
    monkeypatch.setattr(svc, "_now", clock)
    return svc


@pytest.fixture()
def commands(tmp_path, clock, monkeypatch):
    collection = JsonCollection(tmp_path / "commands.json")
    collection.ensure_exists()
    svc = RecordService(SLASH_COMMAND, collection)
    monkeypatch.setattr(svc, "_now", clock)
    return svc


def test_create_agent_with_defaults(agents):
    agent = agents.create({})

    assert agent["id"]
    assert len(agent["id"]) == 9
    assert agent["name"] == "New Agent"
    assert agent["systemPrompt"] == ""
    assert agent["model"] == "claude-opus"
    assert agent["createdAt"] == agent["updatedAt"] == "2026-01-02T03:04:05.678Z"


def test_create_command_with_defaults(commands):
    command = commands.create(None)

    assert command["name"] == "new-command"
    assert command["description"] == ""
    assert command["script"] == ""
    assert list(command) == ["id", "name", "description", "script", "createdAt", "updatedAt"]


def test_create_keeps_supplied_id_and_created_at(agents):
    agent = agents.create({"id": "fixed", "createdAt": "2020-01-01T00:00:00.000Z", "name": "Bot"})

    assert agent["id"] == "fixed"
    assert agent["createdAt"] == "2020-01-01T00:00:00.000Z"
    assert agent["updatedAt"] == "2026-01-02T03:04:05.678Z"


def test_create_treats_empty_strings_as_absent(agents):
    agent = agents.create({"name": "", "model": ""})

    assert agent["name"] == "New Agent"
    assert agent["model"] == "claude-opus"


def test_create_ignores_unknown_fields(agents):
    agent = agents.create({"name": "Bot", "color": "red"})

    assert "color" not in agent


def test_create_accepts_patch_model(agents):
    agent = agents.create(AgentPatch(system_prompt="Be terse"))

    assert agent["systemPrompt"] == "Be terse"


def test_create_rejects_duplicate_id(agents):
    agents.create({"id": "dup"})

    with pytest.raises(RecordValidationError) as excinfo:
        agents.create({"id": "dup"})

    assert excinfo.value.status_code == 409
    assert excinfo.value.code == "duplicate_id"
    assert len(agents.list()) == 1


def test_create_rejects_wrong_field_type(agents):
    with pytest.raises(RecordValidationError) as excinfo:
        agents.create({"name": ["not", "a", "string"]})

    assert excinfo.value.status_code == 400
    assert agents.list() == []


def test_end_to_end_create_list_delete(agents):
    agent = agents.create({"name": "Bot", "model": "claude-opus"})

    assert agent == {
        "id": agent["id"],
        "name": "Bot",
        "systemPrompt": "",
        "model": "claude-opus",
        "createdAt": "2026-01-02T03:04:05.678Z",
        "updatedAt": "2026-01-02T03:04:05.678Z",
    }
    assert agents.list() == [agent]
    assert agents.get(agent["id"]) == agent

    assert agents.delete(agent["id"]) is True
    assert agents.list() == []


def test_list_preserves_insertion_order(commands):
    ids = [commands.create({"name": f"cmd-{i}"})["id"] for i in range(3)]

    assert [c["id"] for c in commands.list()] == ids


def test_get_missing_returns_none(agents):
    assert agents.get("nope") is None


def test_update_cannot_change_identity(agents, clock):
    agent = agents.create({"name": "Bot"})
    clock.advance(5)

    updated = agents.update(agent["id"], {"id": "other", "name": "X", "createdAt": "1999-01-01T00:00:00.000Z"})

    assert updated["id"] == agent["id"]
    assert updated["name"] == "X"
    assert updated["createdAt"] == agent["createdAt"]
    assert agents.get("other") is None
    assert agents.get(agent["id"]) == updated


def test_update_refreshes_updated_at(agents, clock):
    agent = agents.create({"name": "Bot"})
    clock.advance(1.5)

    updated = agents.update(agent["id"], {"systemPrompt": "hello"})

    assert updated["updatedAt"] == "2026-01-02T03:04:07.178Z"
    assert updated["updatedAt"] != agent["updatedAt"]
    assert updated["updatedAt"] >= updated["createdAt"]


def test_empty_update_still_bumps_updated_at(agents, clock):
    agent = agents.create({})
    clock.advance(60)

    updated = agents.update(agent["id"], {})

    assert updated["updatedAt"] > agent["updatedAt"]
    assert {k: v for k, v in updated.items() if k != "updatedAt"} == {
        k: v for k, v in agent.items() if k != "updatedAt"
    }


def test_update_ignores_null_values(commands):
    command = commands.create({"name": "deploy", "script": "make deploy"})

    updated = commands.update(command["id"], {"script": None, "description": "Ship it"})

    assert updated["script"] == "make deploy"
    assert updated["description"] == "Ship it"


def test_update_preserves_unknown_stored_keys(tmp_path, clock, monkeypatch):
    collection = JsonCollection(tmp_path / "agents.json")
    collection.write([{"id": "legacy", "name": "Old", "createdAt": "2020-01-01T00:00:00.000Z", "tools": ["bash"]}])
    svc = RecordService(AGENT, collection)
    monkeypatch.setattr(svc, "_now", clock)

    updated = svc.update("legacy", {"name": "New"})

    assert updated["tools"] == ["bash"]
    assert updated["name"] == "New"


def test_update_missing_raises_not_found(agents):
    with pytest.raises(RecordNotFoundError) as excinfo:
        agents.update("ghost", {"name": "X"})

    assert excinfo.value.status_code == 404
    assert str(excinfo.value) == "Agent not found"


def test_delete_missing_leaves_collection_unchanged(commands):
    commands.create({"name": "a"})
    commands.create({"name": "b"})
    before = commands.list()

    with pytest.raises(RecordNotFoundError) as excinfo:
        commands.delete("ghost")

    assert str(excinfo.value) == "Command not found"
    assert commands.list() == before


def test_delete_removes_only_matching_record(agents):
    first = agents.create({"name": "one"})
    second = agents.create({"name": "two"})

    agents.delete(first["id"])

    assert agents.list() == [second]


def test_corrupt_file_propagates_parse_error(agents):
    agents.collection.path.write_text("[{", encoding="utf-8")

    with pytest.raises(StorageParseError):
        agents.list()
    with pytest.raises(StorageParseError):
        agents.create({})


def test_concurrent_creates_are_all_persisted(tmp_path):
    collection = JsonCollection(tmp_path / "agents.json")
    collection.ensure_exists()
    svc = RecordService(AGENT, collection)
    count = 40

    with ThreadPoolExecutor(max_workers=8) as pool:
        created = list(pool.map(lambda i: svc.create({"name": f"agent-{i}"}), range(count)))

    stored = svc.list()
    assert len(stored) == count
    assert len({r["id"] for r in stored}) == count
    assert sorted(r["name"] for r in stored) == sorted(r["name"] for r in created)
    assert json_storage.read(collection.path) == stored
