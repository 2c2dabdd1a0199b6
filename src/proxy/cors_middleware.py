"""ASGI middleware that attaches CORS headers and guards against crashes."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.proxy.errors import InternalError
from src.proxy.responses import cors_headers, error_response, get_allowed_origin, with_cors

logger = logging.getLogger(__name__)


class CorsMiddleware:
    """Answers preflight requests and adds CORS headers to every response.

    Also the outermost catch-all: an exception escaping the app becomes a
    500 envelope, provided the response has not started yet.
    """

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str] = ("*",)) -> None:
        self.app = app
        self._allowed_origins = tuple(allowed_origins)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        origin = get_allowed_origin(request.headers.get("origin"), self._allowed_origins)

        if request.method == "OPTIONS":
            response = Response(status_code=204, headers=cors_headers(origin))
            await response(scope, receive, send)
            return

        response_started = False

        async def send_with_cors(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
                headers = MutableHeaders(scope=message)
                for name, value in cors_headers(origin).items():
                    headers[name] = value
            await send(message)

        try:
            await self.app(scope, receive, send_with_cors)
        except Exception:
            logger.exception("Unhandled error while serving %s %s", request.method, request.url.path)
            if response_started:
                raise
            error = InternalError("Internal server error")
            response = with_cors(error_response(error.message, error.status_code), origin)
            await response(scope, receive, send)
