"""CRUD use cases for agents and slash commands backed by a JSON collection."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from claudia_api.domain.records import (
    PROTECTED_FIELDS,
    RecordKind,
    RecordPatch,
    format_timestamp,
    generate_id,
)
from claudia_api.repositories.json_storage import JsonCollection

logger = logging.getLogger(__name__)

Partial = Optional[Union[RecordPatch, Mapping[str, Any]]]


class RecordServiceError(Exception):
    """Logical failure of a record operation (as opposed to a storage failure)."""

    def __init__(self, message: str, code: str = "invalid", status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class RecordNotFoundError(RecordServiceError):
    def __init__(self, message: str):
        super().__init__(message, "not_found", 404)


class RecordValidationError(RecordServiceError):
    pass


class RecordService:
    """
    list/get/create/update/delete for one record kind.

    Storage errors (StorageIOError, StorageParseError) propagate unchanged;
    RecordNotFoundError and RecordValidationError are raised here.
    """

    def __init__(self, kind: RecordKind, collection: JsonCollection) -> None:
        self.kind = kind
        self.collection = collection

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _timestamp(self) -> str:
        return format_timestamp(self._now())

    def _not_found(self, record_id: str) -> RecordNotFoundError:
        logger.warning("%s %s not found", self.kind.label, record_id)
        return RecordNotFoundError(f"{self.kind.label} not found")

    def _parse(self, partial: Partial) -> RecordPatch:
        try:
            return self.kind.parse(partial)
        except ValidationError as exc:
            raise RecordValidationError(f"Invalid {self.kind.name} payload: {exc}") from exc

    @staticmethod
    def _index_of(records: list, record_id: str) -> int:
        for idx, record in enumerate(records):
            if isinstance(record, dict) and record.get("id") == record_id:
                return idx
        return -1

    def list(self) -> list[dict]:
        return self.collection.read()

    def get(self, record_id: str) -> Optional[dict]:
        records = self.collection.read()
        idx = self._index_of(records, record_id)
        return records[idx] if idx >= 0 else None

    def create(self, partial: Partial = None) -> dict:
        patch = self._parse(partial)
        now = self._timestamp()
        with self.collection.transaction() as records:
            existing = {r.get("id") for r in records if isinstance(r, dict)}
            record_id = patch.id
            if record_id:
                if record_id in existing:
                    raise RecordValidationError(
                        f"{self.kind.label} {record_id} already exists", "duplicate_id", 409
                    )
            else:
                record_id = generate_id()
                while record_id in existing:
                    record_id = generate_id()
            record = self.kind.build(patch, record_id, now)
            records.append(record)
        logger.info("Created %s %s", self.kind.name, record_id)
        return record

    def update(self, record_id: str, partial: Partial = None) -> dict:
        patch = self._parse(partial)
        changes = {k: v for k, v in patch.supplied().items() if k not in PROTECTED_FIELDS}
        with self.collection.transaction() as records:
            idx = self._index_of(records, record_id)
            if idx < 0:
                raise self._not_found(record_id)
            current = records[idx]
            updated = {**current, **changes}
            updated["id"] = current["id"]
            if "createdAt" in current:
                updated["createdAt"] = current["createdAt"]
            updated["updatedAt"] = self._timestamp()
            records[idx] = updated
        logger.info("Updated %s %s", self.kind.name, record_id)
        return updated

    def delete(self, record_id: str) -> bool:
        with self.collection.transaction() as records:
            idx = self._index_of(records, record_id)
            if idx < 0:
                raise self._not_found(record_id)
            del records[idx]
        logger.info("Deleted %s %s", self.kind.name, record_id)
        return True
