"""Shared Pydantic data models for the turnstile notification gateway."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class FailureReason(str, Enum):
    MISSING_KEY = "missing_key"
    INVALID_KEY = "invalid_key"
    NOT_CONFIGURED = "not_configured"
    MISSING_TOKEN = "missing_token"
    REJECTED = "rejected"
    TRANSPORT_ERROR = "transport_error"


class AuditEventType(str, Enum):
    AUTH_SUCCESS = "auth_success"
    AUTH_FAILURE = "auth_failure"
    VERIFICATION_FAILURE = "verification_failure"
    NOTIFICATION_SENT = "notification_sent"
    NOTIFICATION_FAILED = "notification_failed"


class RiskLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Wire Models ---


class NotificationRequest(BaseModel):
    """Body accepted by the notify endpoints."""

    turnstile_token: str | None = None
    message: str | None = None
    subject: str | None = None
    metadata: dict[str, Any] | None = None


class ApiResponse(BaseModel):
    """Envelope returned by every endpoint."""

    success: bool
    message: str
    data: Any = None
    error: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class HealthConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    turnstile: bool
    telegram: bool
    api_key_required: bool = Field(alias="apiKeyRequired")


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_ip: str | None = None
    action: str
    result: str  # "success" | "failure"
    risk_level: RiskLevel
    details: dict[str, object] | None = None
