"""The ``{success, message, data}`` envelope every endpoint answers with."""

import logging
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def success(message: str = "Success", data: Any = None) -> dict:
    response = {"success": True, "message": message}
    if data is not None:
        response["data"] = jsonable_encoder(data, by_alias=True)
    return response


def database_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Database unavailable. Verify DATABASE_URL and database credentials.",
    )


def error_body(message: str = "Error occurred", errors: Any = None) -> dict:
    body = {"success": False, "message": message}
    if errors is not None:
        body["errors"] = errors
    return body


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, str):
        body = error_body(exc.detail)
    else:
        body = error_body("Request failed", errors=exc.detail)
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


def _describe_validation_error(error: dict) -> str:
    location = [str(part) for part in error.get("loc", ()) if part != "body"]
    message = str(error.get("msg", "Invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    if error.get("type") == "missing" and location:
        return f"Field '{location[-1]}' is required"
    if location and error.get("type") != "value_error":
        return f"{location[-1]}: {message}"
    return message


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = _describe_validation_error(errors[0]) if errors else "Invalid request"
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message, errors=jsonable_encoder(errors, exclude={"ctx", "input", "url"})),
    )
