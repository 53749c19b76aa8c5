from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Request

from claudia_api.domain.records import AGENT, SLASH_COMMAND, RecordKind
from claudia_api.repositories.json_storage import StorageError
from claudia_api.routers.responses import error_response, ok
from claudia_api.services.record_service import (
    RecordNotFoundError,
    RecordService,
    RecordServiceError,
)


def _get_record_service(request: Request, kind: RecordKind) -> RecordService:
    services = getattr(getattr(request.app, "state", None), "record_services", None) or {}
    svc = services.get(kind.name)
    if not svc:
        raise RuntimeError(f"RecordService for {kind.name} not configured")
    return svc


def build_record_router(kind: RecordKind, prefix: str, tag: str) -> APIRouter:
    """Five CRUD endpoints for one record kind."""
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("")
    def list_records(request: Request):
        try:
            return ok(_get_record_service(request, kind).list())
        except StorageError as exc:
            return error_response(exc)

    @router.post("")
    def create_record(request: Request, payload: Optional[dict[str, Any]] = Body(None)):
        try:
            return ok(_get_record_service(request, kind).create(payload))
        except (RecordServiceError, StorageError) as exc:
            return error_response(exc)

    @router.get("/{record_id}")
    def get_record(record_id: str, request: Request):
        try:
            record = _get_record_service(request, kind).get(record_id)
        except StorageError as exc:
            return error_response(exc)
        if record is None:
            return error_response(RecordNotFoundError(f"{kind.label} not found"))
        return ok(record)

    @router.put("/{record_id}")
    def update_record(record_id: str, request: Request, payload: Optional[dict[str, Any]] = Body(None)):
        try:
            return ok(_get_record_service(request, kind).update(record_id, payload))
        except (RecordServiceError, StorageError) as exc:
            return error_response(exc)

    @router.delete("/{record_id}")
    def delete_record(record_id: str, request: Request):
        try:
            _get_record_service(request, kind).delete(record_id)
        except (RecordServiceError, StorageError) as exc:
            return error_response(exc)
        return ok({"deleted": True})

    return router


agents_router = build_record_router(AGENT, "/api/agents", "agents")
commands_router = build_record_router(SLASH_COMMAND, "/api/slash-commands", "slash-commands")
