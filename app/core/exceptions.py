from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class UploaderError(Exception):
    """Base error rendered as a ``{success: false, ...}`` envelope."""

    status_code = 500

    def __init__(self, message: str, error: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.error = error


class ClientInputError(UploaderError):
    status_code = 400


class NotFoundError(UploaderError):
    status_code = 404


class RemoteProviderError(UploaderError):
    """The media provider rejected or failed a call."""

    status_code = 500


def error_payload(message: str, error: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        payload["error"] = error
    return payload


def error_response(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    return JSONResponse(error_payload(message, error), status_code=status_code)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(UploaderError)
    async def uploader_error_handler(request: Request, exc: UploaderError):
        return error_response(exc.status_code, exc.message, exc.error)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_response(400, "Invalid request", str(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if exc.detail not in (None, "") else "Request failed"
        response = error_response(exc.status_code, str(detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response
