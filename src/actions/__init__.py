"""Notification actions.

Each channel implements the Action interface; Telegram is the only one
shipped.
"""

from src.actions.base import Action, ActionPayload, ActionResult
from src.actions.telegram import TelegramAction, escape_html, format_message

__all__ = [
    "Action",
    "ActionPayload",
    "ActionResult",
    "TelegramAction",
    "escape_html",
    "format_message",
]
