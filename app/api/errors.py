from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.domain.exceptions import (
    AuthError,
    AuthErrorKind,
    ResolutionError,
    StorageError,
    ValidationError,
    VerificationError,
)


logger = logging.getLogger(__name__)


def verification_http_error(error: VerificationError) -> HTTPException:
    return HTTPException(status_code=401, detail=error.kind.value)


def resolution_http_error(_error: ResolutionError) -> HTTPException:
    # Every resolution failure maps to one code.
    return HTTPException(status_code=401, detail="sign_in_rejected")


def auth_http_error(error: AuthError) -> HTTPException:
    if error.kind is AuthErrorKind.SESSION_NOT_FOUND:
        return HTTPException(status_code=404, detail="session_not_found")
    if error.kind is AuthErrorKind.MISSING_CREDENTIAL:
        return HTTPException(
            status_code=401,
            detail="missing_credential",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return HTTPException(
        status_code=401,
        detail="unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "invalid_request"})


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "invalid_request", "message": str(exc)})


async def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(
        "api: storage_error method=%s path=%s error=%s",
        request.method,
        request.url.path,
        exc,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"error": "internal_error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(StorageError, _storage_error_handler)
