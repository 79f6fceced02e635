"""Request body helpers."""

from typing import Any

import pydantic
from fastapi import Request


async def read_json_object(request: Request) -> dict[str, Any]:
    """Return the body as a JSON object; empty or non-object bodies read as {}."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def validation_message(exc: pydantic.ValidationError) -> str:
    """First validation error as "<field>: <reason>"."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"])
    return f"{field}: {error['msg']}" if field else error["msg"]
