"""Cascading authentication provider.

Combines multiple authentication backends behind a single provider:
- provider: AuthBackend contract and Capability names
- capabilities: capability -> backend routing table
- cascading: the aggregating provider
- factory: construction from environment configuration
"""

from .provider import AuthBackend, Capability
from .capabilities import CapabilityMap
from .cascading import CascadingAuthProvider
from .password import generate_random_password
from .factory import create_cascading_provider, get_auth_provider, load_backend

__all__ = [
    "AuthBackend",
    "Capability",
    "CapabilityMap",
    "CascadingAuthProvider",
    "generate_random_password",
    "create_cascading_provider",
    "get_auth_provider",
    "load_backend",
]
