"""Telegram Bot API notification action.

Formats the payload as Telegram HTML and sends it with a single
sendMessage call. No retries: a failed send is reported to the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from src.actions.base import Action, ActionPayload, ActionResult

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"

# Whole floats at or above this keep exponent notation
_MAX_SAFE_INTEGRAL_FLOAT = 1e21


def escape_html(text: str) -> str:
    """Escape the three characters Telegram's HTML parse mode treats specially."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _integral_floats(value: Any) -> Any:
    """Turn whole-number floats into ints, recursing into lists and dicts.

    JSON numbers such as ``1.0`` render as ``1``.
    """
    if isinstance(value, float):
        if value.is_integer() and abs(value) < _MAX_SAFE_INTEGRAL_FLOAT:
            return int(value)
        return value
    if isinstance(value, list):
        return [_integral_floats(item) for item in value]
    if isinstance(value, dict):
        return {k: _integral_floats(v) for k, v in value.items()}
    return value


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "true" if value else "false"
    value = _integral_floats(value)
    if isinstance(value, int | float):
        return str(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def format_message(payload: ActionPayload) -> str:
    """Render subject, body and metadata as newline-separated HTML fragments.

    Metadata keeps insertion order; None values and values that render
    empty are skipped.
    """
    fields: list[str] = []

    if payload.subject and payload.subject.strip():
        fields.append(f"<b>{escape_html(payload.subject.strip())}</b>")

    if payload.message and payload.message.strip():
        fields.append(escape_html(payload.message.strip()))

    for key, value in (payload.metadata or {}).items():
        if value is None:
            continue
        rendered = _stringify(value)
        if rendered:
            fields.append(f"{escape_html(str(key))}: {escape_html(rendered)}")

    return "\n".join(fields)


class TelegramAction(Action):
    """Sends notifications to one Telegram chat."""

    name = "telegram"

    def __init__(
        self,
        bot_token: str | None,
        chat_id: str | None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._transport = transport

    def validate(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    async def execute(self, payload: ActionPayload) -> ActionResult:
        if not self.validate():
            return ActionResult(
                success=False,
                message="Telegram action is not properly configured",
            )

        url = f"{TELEGRAM_API_BASE}/bot{self._bot_token}/sendMessage"
        body = {
            "chat_id": self._chat_id,
            "text": format_message(payload),
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }

        try:
            async with httpx.AsyncClient(transport=self._transport, verify=True) as client:
                resp = await client.post(url, json=body)
                data: dict[str, Any] = resp.json()
        except Exception as exc:  # transport and decode errors are reported, not raised
            # The URL embeds the bot token, so only the exception type is logged
            logger.warning("Telegram sendMessage failed: %s", type(exc).__name__)
            return ActionResult(
                success=False,
                message=str(exc) or "Unknown error occurred",
            )

        if resp.is_error or not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else None
            logger.warning("Telegram rejected message (HTTP %s)", resp.status_code)
            return ActionResult(
                success=False,
                message=description or "Failed to send Telegram message",
                data=data,
            )

        return ActionResult(
            success=True,
            message="Notification sent successfully",
            data=data.get("result"),
        )
