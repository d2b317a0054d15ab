"""
Errores de dominio y los handlers que los convierten en respuestas JSON.
Todo error sale de la API como {"message": ..., "error": ...}.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FinanceError(Exception):
    status_code = 500
    message = "Server Error"

    def __init__(self, message: str | None = None, error: str | None = None):
        self.message = message or self.message
        self.error = error or self.message
        super().__init__(self.message)


class MissingField(FinanceError):
    status_code = 400
    message = "Missing required fields"


class InvalidInput(FinanceError):
    status_code = 400
    message = "Invalid input"


class UnsupportedFrequency(FinanceError):
    status_code = 400
    message = "Unsupported frequency"


class NotFound(FinanceError):
    status_code = 404
    message = "Not found"


class Unauthorized(FinanceError):
    status_code = 401
    message = "User not authorized"


class UpstreamFailure(FinanceError):
    status_code = 500
    message = "Upstream service failed"


def _error_body(message: str, error) -> dict:
    return {"message": message, "error": error}


async def finance_error_handler(request: Request, exc: FinanceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.error)
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.error))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def _is_missing(error: dict) -> bool:
    # Un string vacío ("" desde el formulario) cuenta como campo faltante
    if error["type"] == "missing":
        return True
    return error["type"] == "string_too_short" and error.get("input") == ""


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    missing = [".".join(str(p) for p in e["loc"][1:]) for e in errors if _is_missing(e)]
    if missing:
        message = "Missing required fields"
        detail = f"Missing: {', '.join(missing)}"
    else:
        message = "Invalid input"
        detail = "; ".join(
            f"{'.'.join(str(p) for p in e['loc'][1:])}: {e['msg']}" for e in errors
        )
    return JSONResponse(status_code=400, content=_error_body(message, detail))


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_error_body("Server Error", str(exc)))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_error_body("Server Error", str(exc)))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FinanceError, finance_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
