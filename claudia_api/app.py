import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from claudia_api.core.config import Settings, get_settings
from claudia_api.core.log import configure_logging
from claudia_api.domain.records import AGENT, SLASH_COMMAND
from claudia_api.repositories.json_storage import JsonCollection
from claudia_api.routers import projects as projects_router
from claudia_api.routers import records as records_router
from claudia_api.routers import settings as settings_router
from claudia_api.services.project_service import ProjectService
from claudia_api.services.record_service import RecordService
from claudia_api.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

DEV_FRONTEND_ORIGINS = {"http://localhost:1420", "http://127.0.0.1:1420"}


def _configure_cors(app: FastAPI, settings: Settings) -> None:
    allowed = set(settings.cors_origins)
    if settings.app_env != "prod" and "*" not in allowed:
        allowed.update(DEV_FRONTEND_ORIGINS)
    origins = sorted(allowed)
    if not origins:
        return
    wildcard = "*" in origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if wildcard else origins,
        allow_credentials=not wildcard,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )


def _build_record_services(settings: Settings) -> dict[str, RecordService]:
    services = {}
    for kind in (AGENT, SLASH_COMMAND):
        collection = JsonCollection(settings.claude_dir / kind.filename)
        collection.ensure_exists()
        services[kind.name] = RecordService(kind, collection)
    return services


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory compatible with ``uvicorn --factory claudia_api.app:create_app``."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Claudia API")
    _configure_cors(app, settings)

    try:
        app.state.record_services = _build_record_services(settings)
    except Exception:
        logger.exception("Failed to initialize storage in %s", settings.claude_dir)
        raise
    logger.info("Storage initialized in %s", settings.claude_dir)

    app.state.settings = settings
    app.state.settings_service = SettingsService(settings.settings_file)
    app.state.project_service = ProjectService(settings.projects_dir)

    @app.get("/health")
    def health():
        return {"status": "ok", "claudeDir": str(settings.claude_dir)}

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse({"error": "Not found", "path": request.url.path}, status_code=404)
        return await http_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        messages = "; ".join(str(err.get("msg", "")) for err in exc.errors()) or "Invalid request"
        return JSONResponse({"success": False, "error": messages}, status_code=400)

    app.include_router(settings_router.router)
    app.include_router(projects_router.router)
    app.include_router(records_router.agents_router)
    app.include_router(records_router.commands_router)
    return app
