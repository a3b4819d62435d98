"""Authentication Errors

Purpose: Define the error hierarchy raised by authentication backends and
the cascading provider.

Every error carries a machine-readable reason so callers can tell a rejected
login apart from an unsupported operation or a broken backend without
parsing messages.

Key Components:
- AuthFailureReason: Enum of failure reasons
- AuthError: Base class for all authentication errors
- BadLoginError: Credentials were rejected
- UnsupportedOperationError: No backend provides the requested capability
- BackendFailureError: Backends failed for reasons other than bad credentials
- ConfigurationError: Invalid provider configuration
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from cascade_auth.domain.models.dispatch import DispatchReport


class AuthFailureReason(Enum):
    """Reason attached to an authentication error"""
    BADLOGIN = "badlogin"
    FAILED = "failed"
    UNSUPPORTED = "unsupported"
    CONFIGURATION = "configuration"
    MESSAGE = "message"


class AuthError(Exception):
    """Authentication operation failed.

    Attributes:
        reason: Why the operation failed
    """

    default_reason = AuthFailureReason.MESSAGE

    def __init__(self, message: str = "", reason: Optional[AuthFailureReason] = None):
        super().__init__(message)
        self.reason = reason or self.default_reason


class BadLoginError(AuthError):
    """Credentials were not accepted by any backend."""
    default_reason = AuthFailureReason.BADLOGIN


class UnsupportedOperationError(AuthError):
    """Operation requested for a capability nobody provides."""

    default_reason = AuthFailureReason.UNSUPPORTED

    def __init__(self, capability: str, message: Optional[str] = None):
        super().__init__(message or f"Unsupported: {capability}")
        self.capability = capability


class BackendFailureError(AuthError):
    """No backend accepted the request and at least one of them broke."""

    default_reason = AuthFailureReason.FAILED

    def __init__(self, message: str, report: "DispatchReport"):
        super().__init__(message)
        self.report = report


class ConfigurationError(AuthError, ValueError):
    """Provider configuration is missing or invalid."""
    default_reason = AuthFailureReason.CONFIGURATION
