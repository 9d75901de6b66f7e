"""
Error kinds raised by the services and rendered by the API.

Every error reaching a client has the shape {"success": false, "message": ...}.
Known kinds carry their own status code; anything else is logged with its
traceback and answered with a generic 500.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from jobboard.core.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class JobBoardError(Exception):
    """Base class for errors that are safe to show to the caller."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidRequestError(JobBoardError):
    status_code = 400


class UnauthorizedError(JobBoardError):
    status_code = 401


class NotFoundError(JobBoardError):
    status_code = 404


class ConflictError(JobBoardError):
    status_code = 409


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else err.get("msg", ""))
    return "; ".join(parts) or "Invalid request"


async def job_board_error_handler(request: Request, exc: JobBoardError) -> JSONResponse:
    logger.warning("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return error_response(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _format_validation_errors(exc)
    logger.warning("%s %s -> 400 %s", request.method, request.url.path, message)
    return error_response(400, message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the {success, message} error envelope on the app."""
    app.add_exception_handler(JobBoardError, job_board_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
