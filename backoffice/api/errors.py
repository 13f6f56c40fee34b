"""Map failures onto the response envelope."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backoffice.api.schemas.common import ApiResponse
from backoffice.core.exceptions import BackofficeError, InvalidInputError

logger = logging.getLogger(__name__)

# Codes for failures raised by the HTTP layer itself
HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "C001",
    status.HTTP_401_UNAUTHORIZED: "C004",
    status.HTTP_403_FORBIDDEN: "C005",
    status.HTTP_404_NOT_FOUND: "C003",
}


def error_response(status_code: int, code: str, message: str, headers=None) -> JSONResponse:
    body = ApiResponse.fail(error=code, message=message)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=headers,
    )


async def backoffice_error_handler(request: Request, exc: BackofficeError) -> JSONResponse:
    logger.warning("%s %s -> %s %s", request.method, request.url.path, exc.code, exc.message)
    return error_response(exc.status_code, exc.code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_ERROR_CODES.get(exc.status_code, "C002")
    return error_response(exc.status_code, code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = InvalidInputError.default_message
    return error_response(status.HTTP_400_BAD_REQUEST, InvalidInputError.code, message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BackofficeError, backoffice_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
