from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from claudia_api.services.project_service import ProjectService

router = APIRouter(prefix="/api", tags=["projects"])


def _get_project_service(request: Request) -> ProjectService:
    svc = getattr(getattr(request.app, "state", None), "project_service", None)
    if not svc:
        raise RuntimeError("ProjectService not configured")
    return svc


@router.get("/projects")
def list_projects(request: Request):
    try:
        return _get_project_service(request).list_projects()
    except OSError as exc:
        return JSONResponse({"error": str(exc)}, status_code=500)


@router.get("/sessions/running")
def running_sessions(request: Request):
    return _get_project_service(request).running_sessions()
