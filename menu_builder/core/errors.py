from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class MenuBuilderError(Exception):
    """Base for errors that are safe to show to API callers."""

    kind = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, details: list[dict[str, Any]] | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationFailed(MenuBuilderError):
    kind = "validation_failed"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class Unauthorized(MenuBuilderError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class Forbidden(MenuBuilderError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFound(MenuBuilderError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class Conflict(MenuBuilderError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class ServiceUnavailable(MenuBuilderError):
    kind = "service_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service temporarily unavailable, please retry"


_KIND_BY_STATUS = {
    error_cls.status_code: error_cls.kind
    for error_cls in (ValidationFailed, Unauthorized, Forbidden, NotFound, Conflict, ServiceUnavailable)
}


def error_response(error: MenuBuilderError, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_payload(), headers=headers)


def _validation_details(exc: RequestValidationError) -> list[dict[str, Any]]:
    details = []
    for entry in exc.errors():
        location = [str(part) for part in entry.get("loc", ()) if part != "body"]
        details.append(
            {
                "field": ".".join(location),
                "message": entry.get("msg", "Invalid value"),
                "type": entry.get("type"),
            }
        )
    return jsonable_encoder(details)


async def _handle_domain_error(request: Request, exc: MenuBuilderError) -> JSONResponse:
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        level,
        "request failed kind=%s endpoint=%s %s",
        exc.kind,
        request.method,
        request.url.path,
    )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return error_response(exc, headers=headers)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(ValidationFailed(details=_validation_details(exc)))


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = _KIND_BY_STATUS.get(exc.status_code, "http_error")
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": kind, "message": message},
        headers=getattr(exc, "headers", None),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error endpoint=%s %s", request.method, request.url.path)
    return error_response(MenuBuilderError())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MenuBuilderError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(Exception, _handle_unexpected)
