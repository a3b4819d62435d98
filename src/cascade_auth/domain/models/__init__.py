"""Domain models for cascade-auth"""

from cascade_auth.domain.models.dispatch import (
    BackendResult,
    DispatchReport,
    PasswordResetResult,
)
from cascade_auth.domain.models.errors import (
    AuthError,
    AuthFailureReason,
    BackendFailureError,
    BadLoginError,
    ConfigurationError,
    UnsupportedOperationError,
)

__all__ = [
    # Dispatch models
    "BackendResult",
    "DispatchReport",
    "PasswordResetResult",
    # Errors
    "AuthError",
    "AuthFailureReason",
    "BackendFailureError",
    "BadLoginError",
    "ConfigurationError",
    "UnsupportedOperationError",
]
