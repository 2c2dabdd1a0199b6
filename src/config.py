"""Gateway configuration loaded from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from src.audit.logger import DEFAULT_BACKUP_COUNT, DEFAULT_MAX_BYTES
from src.models import HealthConfig

DEFAULT_CLIENT_IP_HEADER = "cf-connecting-ip"


def parse_allowed_origins(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated origin list, trimming each entry.

    Unset or blank input allows every origin.
    """
    if not raw:
        return ("*",)
    return tuple(origin.strip() for origin in raw.split(","))


class GatewayConfig(BaseModel):
    """Secrets, CORS and audit settings. Immutable once built.

    Secret values must never be logged or returned; use ``health()`` to
    report which ones are present.
    """

    model_config = ConfigDict(frozen=True)

    turnstile_secret_key: str | None = None
    telegram_bot_token: str | None = None
    telegram_chat_id: str | None = None
    api_key: str | None = None
    allowed_origins: tuple[str, ...] = ("*",)
    client_ip_header: str = DEFAULT_CLIENT_IP_HEADER
    audit_log_path: str | None = None
    audit_log_max_bytes: int = DEFAULT_MAX_BYTES
    audit_log_backup_count: int = DEFAULT_BACKUP_COUNT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GatewayConfig:
        env = os.environ if environ is None else environ
        return cls(
            turnstile_secret_key=env.get("TURNSTILE_SECRET_KEY") or None,
            telegram_bot_token=env.get("TELEGRAM_BOT_TOKEN") or None,
            telegram_chat_id=env.get("TELEGRAM_CHAT_ID") or None,
            api_key=env.get("API_KEY") or None,
            allowed_origins=parse_allowed_origins(env.get("ALLOWED_ORIGINS")),
            client_ip_header=(
                env.get("CLIENT_IP_HEADER") or DEFAULT_CLIENT_IP_HEADER
            ).lower(),
            audit_log_path=env.get("AUDIT_LOG_PATH") or None,
            audit_log_max_bytes=int(env.get("AUDIT_LOG_MAX_BYTES") or DEFAULT_MAX_BYTES),
            audit_log_backup_count=int(
                env.get("AUDIT_LOG_BACKUP_COUNT") or DEFAULT_BACKUP_COUNT,
            ),
        )

    def health(self) -> HealthConfig:
        return HealthConfig(
            turnstile=bool(self.turnstile_secret_key),
            telegram=bool(self.telegram_bot_token and self.telegram_chat_id),
            api_key_required=bool(self.api_key),
        )
