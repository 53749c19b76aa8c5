"""Response envelope shared by the JSON routers."""
from __future__ import annotations

import logging
from typing import Any

from fastapi.responses import JSONResponse

from claudia_api.repositories.json_storage import StorageError
from claudia_api.services.record_service import RecordServiceError

logger = logging.getLogger(__name__)


def ok(data: Any) -> dict:
    return {"success": True, "data": data}


def error_response(err: Exception) -> JSONResponse:
    """Map service and storage failures to status codes; anything else is a 500."""
    if isinstance(err, RecordServiceError):
        return JSONResponse({"success": False, "error": err.message}, status_code=err.status_code)
    if isinstance(err, StorageError):
        logger.error("Storage failure: %s", err.message)
        return JSONResponse({"success": False, "error": err.message}, status_code=500)
    logger.exception("Unexpected failure")
    return JSONResponse({"success": False, "error": str(err)}, status_code=500)
