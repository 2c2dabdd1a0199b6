"""Shared test fixtures for the notification gateway."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock
from urllib.parse import parse_qs

import httpx
import pytest

from src.audit.logger import AuditLogger
from src.config import GatewayConfig

BOT_TOKEN = "123456:test-bot-token"
CHAT_ID = "-100200300"
TURNSTILE_SECRET = "0x4AAAAAAA-test-secret"
API_KEY = "test-api-key-12345"


class FakeUpstream:
    """Stands in for the Turnstile and Telegram APIs behind an httpx transport."""

    def __init__(
        self,
        turnstile_reply: Any = None,
        telegram_reply: Any = None,
        telegram_status: int = 200,
    ) -> None:
        self.turnstile_reply = (
            {"success": True} if turnstile_reply is None else turnstile_reply
        )
        self.telegram_reply = (
            {"ok": True, "result": {"message_id": 42}}
            if telegram_reply is None else telegram_reply
        )
        self.telegram_status = telegram_status
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "challenges.cloudflare.com":
            return httpx.Response(200, json=self.turnstile_reply)
        if request.url.host == "api.telegram.org":
            return httpx.Response(self.telegram_status, json=self.telegram_reply)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requests_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    def turnstile_form(self, index: int = 0) -> dict[str, str]:
        request = self.requests_to("challenges.cloudflare.com")[index]
        return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


def make_config(**kwargs: Any) -> GatewayConfig:
    """Factory for a fully configured GatewayConfig; override fields as needed."""
    defaults: dict[str, Any] = {
        "turnstile_secret_key": TURNSTILE_SECRET,
        "telegram_bot_token": BOT_TOKEN,
        "telegram_chat_id": CHAT_ID,
    }
    defaults.update(kwargs)
    return GatewayConfig(**defaults)
