"""FastAPI application for the Turnstile-gated notification endpoint."""

from __future__ import annotations

from datetime import UTC, datetime

import httpx
from fastapi import FastAPI, Request, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.actions.base import Action
from src.actions.telegram import TelegramAction
from src.audit.logger import AuditLogger
from src.config import GatewayConfig
from src.proxy.cors_middleware import CorsMiddleware
from src.proxy.errors import GatewayError, MethodNotAllowed, NotFound
from src.proxy.pipeline import NotifyPipeline
from src.proxy.responses import error_response, success_response
from src.turnstile.verifier import TurnstileVerifier

HEALTH_PATHS = ("/", "/health")
NOTIFY_PATHS = ("/notify", "/api/notify")


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    config = GatewayConfig.from_env()
    audit_logger = None
    if config.audit_log_path:
        audit_logger = AuditLogger(
            config.audit_log_path,
            max_bytes=config.audit_log_max_bytes,
            backup_count=config.audit_log_backup_count,
        )
    return create_app(config, audit_logger=audit_logger)


def create_app(
    config: GatewayConfig,
    audit_logger: AuditLogger | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    action: Action | None = None,
) -> FastAPI:
    """Create the gateway app.

    ``transport`` is handed to both outbound clients (Turnstile and
    Telegram); ``action`` replaces the Telegram action entirely.

    Routing is by path: the health paths answer any method, the notify
    paths only POST. Requests the router cannot match, whatever their
    method, get a 404 or 405 envelope from the routing error handler.
    """
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None, redirect_slashes=False)

    pipeline = NotifyPipeline(
        api_key=config.api_key,
        verifier=TurnstileVerifier(config.turnstile_secret_key, transport=transport),
        action=action or TelegramAction(
            config.telegram_bot_token, config.telegram_chat_id, transport=transport,
        ),
        audit_logger=audit_logger,
    )

    def health_response() -> Response:
        status = {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "config": config.health().model_dump(by_alias=True),
        }
        return success_response("Service is healthy", status)

    async def health() -> Response:
        return health_response()

    async def notify(request: Request) -> Response:
        client_ip = request.headers.get(config.client_ip_header)
        try:
            result = await pipeline.run(
                request.headers,
                await request.body(),
                client_ip=client_ip,
                label=f"{request.method} {request.url.path}",
            )
        except GatewayError as exc:
            return error_response(exc.message, exc.status_code)
        return success_response(result.message)

    for path in HEALTH_PATHS:
        app.add_api_route(path, health, methods=["GET", "HEAD"])
    for path in NOTIFY_PATHS:
        app.add_api_route(path, notify, methods=["POST"])

    @app.exception_handler(StarletteHTTPException)
    async def routing_error(request: Request, exc: StarletteHTTPException) -> Response:
        # Unmatched path or method, including methods no route lists
        path = request.url.path
        if path in HEALTH_PATHS:
            return health_response()
        error: GatewayError
        if path in NOTIFY_PATHS:
            error = MethodNotAllowed("Method not allowed. Use POST.")
        elif exc.status_code in (404, 405):
            error = NotFound("Not found")
        else:
            return error_response(str(exc.detail), exc.status_code)
        return error_response(error.message, error.status_code)

    app.add_middleware(CorsMiddleware, allowed_origins=config.allowed_origins)

    return app
