"""Response envelope helpers.

Every endpoint answers with ``{data, message, error}`` and one of a fixed set
of HTTP statuses.
"""

from http import HTTPStatus
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from schemas.common import ApiResponse

FORBIDDEN_MESSAGE = "You don't have authority to access this route."
INTERNAL_ERROR_MESSAGE = "Something went wrong."


def respond(
    status_code: int = HTTPStatus.OK,
    message: str = "",
    data: Any = None,
    error: str = "",
) -> JSONResponse:
    """Build an envelope response.

    Args:
        status_code: HTTP status of the response.
        message: Human readable outcome.
        data: Payload; pydantic models are encoded.
        error: Short error tag, empty on success.

    Returns:
        JSONResponse carrying the envelope.
    """
    envelope = ApiResponse(data=jsonable_encoder(data), message=message, error=error)
    return JSONResponse(status_code=int(status_code), content=envelope.model_dump())


def success(message: str, data: Any = None) -> JSONResponse:
    return respond(HTTPStatus.OK, message, data)


def forbidden() -> JSONResponse:
    return respond(HTTPStatus.FORBIDDEN, FORBIDDEN_MESSAGE, error="Forbidden")


def internal_error() -> JSONResponse:
    return respond(
        HTTPStatus.INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE, error="Internal Server Error"
    )
