from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError


class BadRequest(Exception):
    def __init__(self, error: str, details: list[Any] | None = None):
        super().__init__(error)
        self.error = error
        self.details = details or []


def bad_request(error: str, details: list[Any] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": error, "details": details or []},
    )


def validation_details(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in exc.errors(include_url=False, include_context=False, include_input=False)
    ]


async def read_json_object(request: Request) -> dict[str, Any]:
    """Parse the request body, raising BadRequest unless it is a JSON object."""
    try:
        body = await request.json()
    except ValueError:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    return body
