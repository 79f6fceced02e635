"""Uniform JSON responses with CORS headers."""

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

DEFAULT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "true",
}


def format_json_response(
    status_code: int = 200,
    data: Any = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Wrap `data` as {"data": ...}; caller headers override the defaults."""
    return JSONResponse(
        status_code=status_code,
        content={"data": jsonable_encoder({} if data is None else data)},
        headers={**DEFAULT_HEADERS, **(headers or {})},
    )


def error_response(status_code: int, message: str) -> JSONResponse:
    return format_json_response(status_code=status_code, data={"message": message})
