"""Gateway error taxonomy; each error maps to one HTTP status."""

from __future__ import annotations


class GatewayError(Exception):
    """Base for failures that end a request with an error envelope."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailure(GatewayError):
    status_code = 400


class AuthFailure(GatewayError):
    status_code = 401


class VerificationFailure(GatewayError):
    status_code = 403


class NotFound(GatewayError):
    status_code = 404


class MethodNotAllowed(GatewayError):
    status_code = 405


class DeliveryFailure(GatewayError):
    status_code = 500


class InternalError(GatewayError):
    status_code = 500
