"""Optional shared-secret API key authentication."""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from dataclasses import dataclass

from src.models import FailureReason

_BEARER_PREFIX = "Bearer "

MISSING_KEY_MESSAGE = (
    "Missing API key. Provide via X-API-Key header or Authorization: Bearer <key>"
)
INVALID_KEY_MESSAGE = "Invalid API key"


@dataclass
class AuthResult:
    success: bool
    error: str | None = None
    reason: FailureReason | None = None


def secure_compare(a: str, b: str) -> bool:
    """Compare two strings in time independent of the first mismatch position.

    Strings of different length return False without scanning; length is
    not treated as secret.
    """
    if len(a) != len(b):
        return False
    return hmac.compare_digest(a.encode(), b.encode())


def extract_api_key(headers: Mapping[str, str]) -> str:
    """Return the candidate key from X-API-Key, else from Authorization."""
    lowered = {k.lower(): v for k, v in headers.items()}
    api_key = lowered.get("x-api-key", "")
    if api_key:
        return api_key
    auth_header = lowered.get("authorization", "")
    if auth_header.startswith(_BEARER_PREFIX):
        return auth_header[len(_BEARER_PREFIX):]
    return auth_header


def validate_api_key(headers: Mapping[str, str], api_key: str | None) -> AuthResult:
    """Check request headers against the configured key.

    With no key configured every request passes.
    """
    if not api_key:
        return AuthResult(success=True)

    candidate = extract_api_key(headers)
    if not candidate:
        return AuthResult(
            success=False,
            error=MISSING_KEY_MESSAGE,
            reason=FailureReason.MISSING_KEY,
        )

    if not secure_compare(candidate, api_key):
        return AuthResult(
            success=False,
            error=INVALID_KEY_MESSAGE,
            reason=FailureReason.INVALID_KEY,
        )

    return AuthResult(success=True)
