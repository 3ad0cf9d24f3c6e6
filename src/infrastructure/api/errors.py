from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from src.domain.exceptions import (
    DerivativeBuildError,
    FileTooLargeError,
    InputRejectedError,
    StorageError,
    UnsupportedMediaTypeError,
)

_INPUT_STATUS = {
    UnsupportedMediaTypeError: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    FileTooLargeError: status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
}


def _error(status_code: int, detail: str, check: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "check": check})


async def input_rejected_handler(request: Request, exc: InputRejectedError) -> JSONResponse:
    status_code = _INPUT_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info("Rejected {} {}: {}", request.method, request.url.path, exc)
    return _error(status_code, str(exc), exc.check)


async def derivative_build_handler(request: Request, exc: DerivativeBuildError) -> JSONResponse:
    logger.error("Derivative build failed on {} {}: {}", request.method, request.url.path, exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), exc.tier)


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on {} {}: {}", request.method, request.url.path, exc)
    return _error(status.HTTP_502_BAD_GATEWAY, str(exc), "storage")


def add_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InputRejectedError, input_rejected_handler)
    app.add_exception_handler(DerivativeBuildError, derivative_build_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
