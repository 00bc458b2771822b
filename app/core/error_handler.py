import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.errors import AppError

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)

    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.code.value})
