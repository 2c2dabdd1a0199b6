"""Cloudflare Turnstile server-side token verification.

Posts the client token to the siteverify endpoint once and interprets the
reply. Failures, including transport errors, come back as a failed
VerificationResult rather than an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from src.models import FailureReason

logger = logging.getLogger(__name__)

TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"

ERROR_CODES: dict[str, str] = {
    "missing-input-secret": "The secret parameter was not passed",
    "invalid-input-secret": "The secret parameter was invalid or did not exist",
    "missing-input-response": "The response parameter was not passed",
    "invalid-input-response": "The response parameter is invalid or has expired",
    "invalid-widget-id": "The widget ID extracted from the parsed site secret key was invalid",
    "invalid-parsed-secret": "The secret extracted from the parsed site secret key was invalid",
    "bad-request": "The request was rejected because it was malformed",
    "timeout-or-duplicate": "The response parameter has already been validated before",
    "internal-error": "An internal error happened while validating the response",
}


@dataclass
class VerificationResult:
    success: bool
    error: str | None = None
    reason: FailureReason | None = None
    details: dict[str, Any] | None = None


def describe_error_codes(codes: Any) -> str:
    """Map siteverify error codes to readable text; unknown codes pass through.

    A bare string counts as a single code; anything else that is not a
    list is treated as no codes.
    """
    if isinstance(codes, str):
        codes = [codes]
    if not isinstance(codes, list) or not codes:
        return "Unknown verification error"
    return "; ".join(ERROR_CODES.get(str(code), str(code)) for code in codes)


class TurnstileVerifier:
    """Verifies Turnstile tokens against the siteverify API."""

    def __init__(
        self,
        secret_key: str | None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._transport = transport

    async def verify(self, token: str, remote_ip: str | None = None) -> VerificationResult:
        if not self._secret_key:
            return VerificationResult(
                success=False,
                error="Turnstile secret key not configured",
                reason=FailureReason.NOT_CONFIGURED,
            )

        if not token:
            return VerificationResult(
                success=False,
                error="Missing Turnstile token",
                reason=FailureReason.MISSING_TOKEN,
            )

        form = {"secret": self._secret_key, "response": token}
        if remote_ip:
            form["remoteip"] = remote_ip

        try:
            async with httpx.AsyncClient(transport=self._transport, verify=True) as client:
                resp = await client.post(TURNSTILE_VERIFY_URL, data=form)
                data: dict[str, Any] = resp.json()
        except Exception as exc:  # transport and decode errors are reported, not raised
            logger.warning("Turnstile verification request failed: %s", type(exc).__name__)
            return VerificationResult(
                success=False,
                error=str(exc) or "Failed to verify Turnstile token",
                reason=FailureReason.TRANSPORT_ERROR,
            )

        if not isinstance(data, dict) or data.get("success") is not True:
            codes = data.get("error-codes") if isinstance(data, dict) else None
            return VerificationResult(
                success=False,
                error=describe_error_codes(codes),
                reason=FailureReason.REJECTED,
                details=data if isinstance(data, dict) else None,
            )

        return VerificationResult(success=True, details=data)
