"""JSON envelope responses and CORS header helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from fastapi.responses import JSONResponse, Response

from src.models import ApiResponse

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type, X-API-Key, Authorization"
MAX_AGE_SECONDS = 86400


def json_response(
    body: ApiResponse,
    status: int = 200,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        body.to_wire(),
        status_code=status,
        headers={"Content-Type": "application/json", **(headers or {})},
    )


def success_response(message: str, data: Any = None) -> JSONResponse:
    return json_response(ApiResponse(success=True, message=message, data=data), 200)


def error_response(message: str, status: int = 400) -> JSONResponse:
    return json_response(
        ApiResponse(success=False, message=message, error=message), status,
    )


def get_allowed_origin(request_origin: str | None, allowed_origins: Iterable[str]) -> str:
    """Pick the Access-Control-Allow-Origin value for a request.

    A wildcard in the allow-list always wins. A listed origin is echoed.
    Anything else gets the first configured origin rather than a denial.
    """
    origin = request_origin or "*"
    allowed = list(allowed_origins) or ["*"]

    if "*" in allowed:
        return "*"
    if origin in allowed:
        return origin
    return allowed[0] or "*"


def cors_headers(origin: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Max-Age": str(MAX_AGE_SECONDS),
    }


def with_cors(response: Response, origin: str) -> Response:
    """Return a copy of response with the CORS headers overlaid."""
    headers = dict(response.headers)
    headers.pop("content-length", None)
    headers.update(cors_headers(origin))
    return Response(
        content=response.body,
        status_code=response.status_code,
        headers=headers,
    )
