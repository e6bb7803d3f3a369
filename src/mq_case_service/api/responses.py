"""Response envelope and exception handlers.

Every body, success or failure, is ``{"status": <code>, "message": str, "data": any}``
with ``status`` echoing the HTTP status code.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from mq_case_service.core.exceptions import CaseServiceError, InternalError, RepositoryException
from mq_case_service.models import ApiResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error."


def _encode(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, (list, tuple)):
        return [_encode(item) for item in data]
    return jsonable_encoder(data)


def api_response(status_code: int, message: str, data: Any = None) -> JSONResponse:
    """Wrap ``data`` in the response envelope."""
    body = ApiResponse(status=status_code, message=message, data=_encode(data))
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def case_service_error_handler(request: Request, exc: CaseServiceError) -> JSONResponse:
    return api_response(exc.status_code, exc.message, exc.data)


async def repository_error_handler(request: Request, exc: RepositoryException) -> JSONResponse:
    """Rewrap storage failures; driver details stay in the log."""
    logger.error(f"Repository failure on {request.method} {request.url.path}: {exc}")
    return await case_service_error_handler(request, InternalError(INTERNAL_ERROR_MESSAGE))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    return api_response(status.HTTP_400_BAD_REQUEST, message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return api_response(exc.status_code, str(exc.detail))


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return await case_service_error_handler(request, InternalError(INTERNAL_ERROR_MESSAGE))


def setup_error_handlers(app: FastAPI) -> None:
    """Register envelope-producing handlers on the application."""
    app.add_exception_handler(CaseServiceError, case_service_error_handler)
    app.add_exception_handler(RepositoryException, repository_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
