"""Cascading provider factory.

Builds backends and the cascading provider from environment configuration.
"""

import importlib
import logging
from typing import Any, Mapping, Optional, Sequence

from cascade_auth.config.settings import Settings, get_settings
from cascade_auth.domain.models.errors import ConfigurationError

from .cascading import CascadingAuthProvider
from .password import password_generator_from_settings
from .provider import AuthBackend, CapabilityName, capability_name

logger = logging.getLogger(__name__)

# Global provider instance (initialized on first call)
_provider_instance: Optional[CascadingAuthProvider] = None


def load_backend(path: str, options: Optional[Mapping[str, Any]] = None) -> AuthBackend:
    """Import and instantiate a backend class.

    Args:
        path: "module.path:ClassName"
        options: Keyword arguments for the class constructor

    Returns:
        Backend instance

    Raises:
        ConfigurationError: If the path is malformed, cannot be imported,
            or does not produce an AuthBackend
    """
    module_name, sep, class_name = path.partition(":")
    if not sep or not module_name or not class_name:
        raise ConfigurationError(
            f"Invalid backend path: {path!r}. Expected 'module.path:ClassName'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import backend module {module_name!r}: {e}") from e

    backend_cls = getattr(module, class_name, None)
    if backend_cls is None:
        raise ConfigurationError(f"Module {module_name!r} has no attribute {class_name!r}")

    try:
        backend = backend_cls(**dict(options or {}))
    except TypeError as e:
        raise ConfigurationError(f"Cannot instantiate {path}: {e}") from e

    if not isinstance(backend, AuthBackend):
        raise ConfigurationError(f"{path} is not an AuthBackend")

    logger.debug(f"Loaded backend {path}")
    return backend


def create_cascading_provider(
    drivers: Optional[Mapping[str, AuthBackend]] = None,
    capabilities: Optional[Mapping[CapabilityName, Sequence[str]]] = None,
    settings: Optional[Settings] = None,
) -> CascadingAuthProvider:
    """Create a cascading provider from explicit backends and/or settings.

    Args:
        drivers: Backend instances; loaded from settings.auth_drivers if None
        capabilities: Capability overrides; applied over settings.auth_capabilities
        settings: Settings to use (defaults to get_settings())

    Returns:
        Configured CascadingAuthProvider

    Raises:
        ConfigurationError: If no backends are configured
    """
    settings = settings or get_settings()

    if drivers is None:
        if not settings.auth_drivers:
            raise ConfigurationError(
                "No authentication backends configured. Set AUTH_DRIVERS, e.g. "
                "'{\"local\": \"myapp.auth:LocalBackend\"}'"
            )
        drivers = {
            backend_id: load_backend(path, settings.auth_driver_options.get(backend_id))
            for backend_id, path in settings.auth_drivers.items()
        }

    overrides = dict(settings.auth_capabilities)
    overrides.update(
        (capability_name(name), list(ids)) for name, ids in (capabilities or {}).items()
    )

    return CascadingAuthProvider(
        drivers=drivers,
        capabilities=overrides,
        password_generator=password_generator_from_settings(settings),
    )


def get_auth_provider() -> CascadingAuthProvider:
    """Get the configured cascading provider instance.

    Built from settings on first call and cached for the process.

    Returns:
        Configured CascadingAuthProvider

    Raises:
        ConfigurationError: If the backend configuration is invalid
    """
    global _provider_instance

    # Return cached instance
    if _provider_instance is not None:
        return _provider_instance

    settings = get_settings()
    logger.info(f"Initializing cascading auth provider: {list(settings.auth_drivers)}")
    _provider_instance = create_cascading_provider(settings=settings)
    logger.info(f"Auth provider initialized: {_provider_instance!r}")
    return _provider_instance


def reset_provider() -> None:
    """Reset the global provider instance (for testing)."""
    global _provider_instance
    _provider_instance = None
