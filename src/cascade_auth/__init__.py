"""cascade-auth: one authentication provider over many backends"""

from cascade_auth.core.auth import (
    AuthBackend,
    Capability,
    CapabilityMap,
    CascadingAuthProvider,
    create_cascading_provider,
    generate_random_password,
    get_auth_provider,
    load_backend,
)
from cascade_auth.domain.models import (
    AuthError,
    AuthFailureReason,
    BackendFailureError,
    BadLoginError,
    ConfigurationError,
    DispatchReport,
    UnsupportedOperationError,
)

__all__ = [
    "AuthBackend",
    "Capability",
    "CapabilityMap",
    "CascadingAuthProvider",
    "create_cascading_provider",
    "generate_random_password",
    "get_auth_provider",
    "load_backend",
    "AuthError",
    "AuthFailureReason",
    "BackendFailureError",
    "BadLoginError",
    "ConfigurationError",
    "DispatchReport",
    "UnsupportedOperationError",
]
