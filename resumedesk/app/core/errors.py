"""
Application error type and FastAPI handlers.

Every failure leaving a service is an AppError tagged with an ErrorKind.
The handlers render one JSON envelope: {"error": message, "kind": kind}.
"""
from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from resumedesk.app.core.logging_config import get_logger

logger = get_logger("core.errors")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INTERNAL = "internal"


HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AppError(Exception):
    """Tagged application error. `status` carries the resume status on conflicts."""

    def __init__(self, kind: ErrorKind, message: str, status: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status = status

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_dict(self) -> dict:
        body = {"error": self.message, "kind": self.kind.value}
        if self.status is not None:
            body["status"] = self.status
        return body

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.value!r}, message={self.message!r})"


def validation_error(message: str) -> AppError:
    return AppError(ErrorKind.VALIDATION, message)


def unauthorized(message: str = "Unauthorized") -> AppError:
    return AppError(ErrorKind.UNAUTHORIZED, message)


def not_found(message: str = "Resume not found") -> AppError:
    return AppError(ErrorKind.NOT_FOUND, message)


def conflict(current_status: str) -> AppError:
    return AppError(ErrorKind.CONFLICT, f"Resume is already {current_status}", status=current_status)


def service_unavailable(
    message: str = "Analysis service unavailable. Please try again later.",
) -> AppError:
    return AppError(ErrorKind.SERVICE_UNAVAILABLE, message)


def internal_error(message: str = "Internal server error") -> AppError:
    return AppError(ErrorKind.INTERNAL, message)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if exc.kind == ErrorKind.UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    message = f"Invalid request: {field} {first.get('msg', '')}".strip() if field else "Invalid request"
    return JSONResponse(
        status_code=422,
        content={"error": message, "kind": ErrorKind.VALIDATION.value},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error path=%s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=internal_error().to_dict(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
