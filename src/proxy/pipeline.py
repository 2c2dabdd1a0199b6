"""Notify pipeline: authenticate, validate, verify, then deliver.

Stages:
1. API key gate (skipped when no key is configured)
2. JSON body parse and required-field check
3. Turnstile verification
4. Action delivery

Each stage either passes or raises the matching GatewayError, which ends
the request. Audit events are emitted for auth, verification and delivery
outcomes.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from pydantic import ValidationError

from src.actions.base import Action, ActionPayload, ActionResult
from src.models import AuditEvent, AuditEventType, NotificationRequest, RiskLevel
from src.proxy.auth import validate_api_key
from src.proxy.errors import AuthFailure, DeliveryFailure, ValidationFailure, VerificationFailure

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.turnstile.verifier import TurnstileVerifier

logger = logging.getLogger(__name__)


def parse_notification(body: bytes) -> NotificationRequest:
    """Decode and check a notify request body."""
    try:
        raw = json.loads(body)
    except ValueError:
        raise ValidationFailure("Invalid JSON body") from None
    if not isinstance(raw, dict):
        raise ValidationFailure("Invalid JSON body")

    try:
        request = NotificationRequest.model_validate(raw)
    except ValidationError as exc:
        field = ".".join(str(part) for part in exc.errors()[0]["loc"])
        raise ValidationFailure(f"Invalid field: {field}") from None

    if not request.turnstile_token:
        raise ValidationFailure("Missing required field: turnstile_token")
    if not request.message:
        raise ValidationFailure("Missing required field: message")
    return request


class NotifyPipeline:
    """Runs one notify request through the gateway stages."""

    def __init__(
        self,
        api_key: str | None,
        verifier: TurnstileVerifier,
        action: Action,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._api_key = api_key
        self._verifier = verifier
        self._action = action
        self._audit = audit_logger

    async def run(
        self,
        headers: Mapping[str, str],
        body: bytes,
        client_ip: str | None = None,
        label: str = "POST /notify",
    ) -> ActionResult:
        # Stage 1: API key gate
        auth = validate_api_key(headers, self._api_key)
        if not auth.success:
            self._log(
                AuditEventType.AUTH_FAILURE, label, client_ip, "failure", RiskLevel.HIGH,
                {"reason": auth.reason.value if auth.reason else None},
            )
            raise AuthFailure(auth.error or "Authentication failed")
        if self._api_key:
            self._log(AuditEventType.AUTH_SUCCESS, label, client_ip, "success", RiskLevel.INFO)

        # Stage 2: body
        request = parse_notification(body)

        # Stage 3: Turnstile
        verification = await self._verifier.verify(request.turnstile_token or "", client_ip)
        if not verification.success:
            logger.info("Turnstile verification failed: %s", verification.error)
            self._log(
                AuditEventType.VERIFICATION_FAILURE, label, client_ip, "failure",
                RiskLevel.MEDIUM,
                {"reason": verification.reason.value if verification.reason else None},
            )
            raise VerificationFailure(verification.error or "Turnstile verification failed")

        # Stage 4: delivery
        if not self._action.validate():
            raise DeliveryFailure(f"{self._action.name.capitalize()} action not properly configured")

        result = await self._action.execute(ActionPayload(
            message=request.message or "",
            subject=request.subject,
            metadata=request.metadata or {},
        ))
        if not result.success:
            self._log(
                AuditEventType.NOTIFICATION_FAILED, label, client_ip, "failure",
                RiskLevel.LOW, {"action": self._action.name},
            )
            raise DeliveryFailure(result.message)

        self._log(
            AuditEventType.NOTIFICATION_SENT, label, client_ip, "success",
            RiskLevel.INFO, {"action": self._action.name},
        )
        return result

    def _log(
        self,
        event_type: AuditEventType,
        action: str,
        source_ip: str | None,
        result: str,
        risk_level: RiskLevel,
        details: dict[str, object] | None = None,
    ) -> None:
        if self._audit:
            self._audit.log(AuditEvent(
                event_type=event_type,
                source_ip=source_ip,
                action=action,
                result=result,
                risk_level=risk_level,
                details=details,
            ))
