from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from claudia_api.repositories.json_storage import StorageError
from claudia_api.routers.responses import error_response, ok
from claudia_api.services.settings_service import SettingsService

router = APIRouter(prefix="/api/settings", tags=["settings"])


def _get_settings_service(request: Request) -> SettingsService:
    svc = getattr(getattr(request.app, "state", None), "settings_service", None)
    if not svc:
        raise RuntimeError("SettingsService not configured")
    return svc


@router.get("")
def read_settings(request: Request):
    try:
        return ok(_get_settings_service(request).get())
    except StorageError as exc:
        return error_response(exc)


@router.post("")
def save_settings(request: Request, payload: Optional[dict[str, Any]] = Body(None)):
    try:
        return ok(_get_settings_service(request).replace(payload or {}))
    except StorageError as exc:
        return error_response(exc)


@router.get("/claude")
def read_claude_settings(request: Request):
    try:
        return ok(_get_settings_service(request).get_claude())
    except StorageError as exc:
        return error_response(exc)


@router.post("/claude")
def save_claude_settings(request: Request, payload: Optional[dict[str, Any]] = Body(None)):
    try:
        return ok(_get_settings_service(request).update_claude(payload or {}))
    except StorageError as exc:
        return error_response(exc)


@router.get("/system-prompt")
def read_system_prompt(request: Request):
    try:
        return ok(_get_settings_service(request).get_system_prompt())
    except StorageError as exc:
        return error_response(exc)


@router.post("/system-prompt")
def save_system_prompt(request: Request, payload: Optional[dict[str, Any]] = Body(None)):
    prompt = (payload or {}).get("prompt")
    if prompt is not None and not isinstance(prompt, str):
        return JSONResponse({"success": False, "error": "prompt must be a string"}, status_code=400)
    try:
        return ok(_get_settings_service(request).set_system_prompt(prompt))
    except StorageError as exc:
        return error_response(exc)
