"""Errors raised by the gateway and the HTTP status each one maps to."""

from typing import Optional


class ConfigurationError(Exception):
    """Missing or invalid environment configuration."""


class GatewayError(Exception):
    """Base class for failures that are reported back to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GatewayError):
    """Required input is missing or malformed."""

    status_code = 400


class NotFoundError(GatewayError):
    """The Storefront API returned null for a by-ID lookup."""

    status_code = 404


class UpstreamError(GatewayError):
    """The Storefront API call failed or returned an unusable payload."""

    status_code = 500

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.body = body
