"""
Error Taxonomy

Stable error codes and client-facing messages shared by the dispatch
gateway, the challenge lifecycle and the business handlers.
"""

from typing import List, Optional

from src.core.result import Error

INVALID_PARAMETERS = "INVALID_PARAMETERS"
NOT_FOUND = "NOT_FOUND"
INVALID_TOKEN = "INVALID_TOKEN"
EXPIRED_TOKEN = "EXPIRED_TOKEN"
TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
UNAUTHORIZED = "UNAUTHORIZED"
ALREADY_REGISTERED = "ALREADY_REGISTERED"
EMAIL_NOT_VERIFIED = "EMAIL_NOT_VERIFIED"
INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
LOGIN_REQUIRED = "LOGIN_REQUIRED"
SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
UNKNOWN_ERROR = "UNKNOWN_ERROR"


class Errors:
    """Factory for taxonomy errors. Messages never include internal detail."""

    @staticmethod
    def invalid_parameters(alerts: Optional[List[str]] = None) -> Error:
        return Error(INVALID_PARAMETERS, "Invalid parameters", list(alerts or []))

    @staticmethod
    def not_found(message: str = "Resource not found") -> Error:
        return Error(NOT_FOUND, message)

    @staticmethod
    def invalid_token() -> Error:
        return Error(INVALID_TOKEN, "Invalid or already used token")

    @staticmethod
    def expired_token() -> Error:
        return Error(EXPIRED_TOKEN, "Token has expired")

    @staticmethod
    def too_many_requests() -> Error:
        return Error(TOO_MANY_REQUESTS, "Too many attempts, request a new code")

    @staticmethod
    def rate_limited() -> Error:
        return Error(TOO_MANY_REQUESTS, "Too many requests, try again later")

    @staticmethod
    def unauthorized() -> Error:
        return Error(UNAUTHORIZED, "Permission denied")

    @staticmethod
    def already_registered() -> Error:
        return Error(ALREADY_REGISTERED, "Account already registered")

    @staticmethod
    def email_not_verified() -> Error:
        return Error(EMAIL_NOT_VERIFIED, "Email address has not been verified")

    @staticmethod
    def invalid_credentials() -> Error:
        return Error(INVALID_CREDENTIALS, "Invalid username or password")

    @staticmethod
    def login_required() -> Error:
        return Error(LOGIN_REQUIRED, "Login required")

    @staticmethod
    def service_unavailable() -> Error:
        return Error(SERVICE_UNAVAILABLE, "Service is not ready")

    @staticmethod
    def unknown_error() -> Error:
        return Error(UNKNOWN_ERROR, "Unexpected error")
