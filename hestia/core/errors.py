"""Domain errors and the handlers that turn them into JSON responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError


class HestiaError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    reason: str = "Internal server error"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.reason)
        if reason:
            self.reason = reason


class Unauthenticated(HestiaError):
    status_code = 401
    reason = "Not authenticated"


class ValidationError(HestiaError):
    status_code = 400
    reason = "Invalid request"


class InvalidCoordinates(ValidationError):
    reason = "Invalid coordinates"


class Forbidden(HestiaError):
    status_code = 403
    reason = "Forbidden"


class NotFound(HestiaError):
    status_code = 404
    reason = "Not found"


class UserNotFound(NotFound):
    reason = "User not found"


class InternalError(HestiaError):
    status_code = 500


def _error_body(reason: str) -> dict:
    return {"success": False, "error": reason}


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HestiaError)
    async def hestia_error_handler(request: Request, exc: HestiaError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.reason}")
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.reason}")
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.reason))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        body = _error_body(ValidationError.reason)
        body["detail"] = jsonable_errors(exc)
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"{request.method} {request.url.path} store failure")
        return JSONResponse(status_code=500, content=_error_body(InternalError.reason))


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # pydantic may put non-serializable objects (exceptions) in ctx
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
