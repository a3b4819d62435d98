"""Cascading authentication provider.

Presents several authentication backends as one AuthBackend. Each operation
is routed to the backends that advertise the matching capability, in
configured order.

Dispatch policies:
- authenticate, transparent: first success wins
- add, update, remove: every backend, failures tolerated
- resetpassword: direct resets, then a generated password pushed through
  update on backends that also support update
- list: every backend, merged and deduplicated
- exists: exists backends first, then membership in listings
"""

import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cascade_auth.domain.models.dispatch import (
    BackendResult,
    DispatchReport,
    PasswordResetResult,
)
from cascade_auth.domain.models.errors import (
    AuthFailureReason,
    BackendFailureError,
    BadLoginError,
    ConfigurationError,
    UnsupportedOperationError,
)

from .capabilities import CapabilityMap
from .password import generate_random_password
from .provider import AuthBackend, Capability, CapabilityName, capability_name

logger = logging.getLogger(__name__)


def _is_rejection(error: Optional[BaseException]) -> bool:
    """True if a backend error means the credentials were rejected"""
    return getattr(error, "reason", None) == AuthFailureReason.BADLOGIN


class CascadingConfig(BaseModel):
    """Validated construction parameters of a CascadingAuthProvider"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    drivers: Dict[str, AuthBackend]
    capabilities: Dict[str, List[str]] = Field(default_factory=dict)


class CascadingAuthProvider(AuthBackend):
    """Authentication provider that cascades over multiple backends.

    The provider is immutable after construction: the backend mapping and the
    capability map are fixed for its lifetime. Backends are called one at a
    time, in capability-list order.

    Example:
        provider = CascadingAuthProvider(
            drivers={"local": LocalOverrides(), "ldap": DirectoryBackend()},
            capabilities={"add": ["local"]},
        )
        provider.authenticate("alice", {"password": "secret"})
    """

    def __init__(
        self,
        drivers: Optional[Mapping[str, AuthBackend]] = None,
        capabilities: Optional[Mapping[CapabilityName, Sequence[str]]] = None,
        password_generator: Optional[Callable[[], str]] = None,
    ):
        """Initialize the cascading provider.

        Args:
            drivers: Backend id -> backend; iteration order is fallback order
            capabilities: Capability -> backend ids overriding the computed
                routing for that capability
            password_generator: Produces passwords for reset-via-update
                (defaults to generate_random_password)

        Raises:
            ConfigurationError: If drivers are missing or not AuthBackends
        """
        if drivers is None:
            raise ConfigurationError("Missing 'drivers' parameter.")

        try:
            config = CascadingConfig(
                drivers=dict(drivers),
                capabilities={
                    capability_name(name): list(ids)
                    for name, ids in (capabilities or {}).items()
                },
            )
        except (ValidationError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid cascading configuration: {e}") from e

        self._drivers: Mapping[str, AuthBackend] = MappingProxyType(config.drivers)
        self._capabilities = CapabilityMap.build(self._drivers, config.capabilities)
        self._password_generator = password_generator or generate_random_password

        logger.info(
            f"Cascading auth provider initialized with backends "
            f"{list(self._drivers)}; routes: {self._capabilities.to_dict()}"
        )

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        password_generator: Optional[Callable[[], str]] = None,
    ) -> "CascadingAuthProvider":
        """Create a provider from a {"drivers": ..., "capabilities": ...} mapping.

        Raises:
            ConfigurationError: If the drivers entry is missing
        """
        if "drivers" not in config:
            raise ConfigurationError("Missing 'drivers' parameter.")
        return cls(
            drivers=config["drivers"],
            capabilities=config.get("capabilities"),
            password_generator=password_generator,
        )

    @property
    def drivers(self) -> Mapping[str, AuthBackend]:
        """Read-only view of the configured backends"""
        return self._drivers

    @property
    def capability_map(self) -> CapabilityMap:
        return self._capabilities

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        """Recognized capabilities routed to at least one backend"""
        return frozenset(c for c in Capability if self._capabilities.supports(c))

    def has_capability(self, capability: CapabilityName) -> bool:
        """Check if any backend is routed for a capability.

        Args:
            capability: Capability or its name

        Returns:
            True if the capability map has a non-empty entry
        """
        return self._capabilities.supports(capability)

    def supports(self, capability: CapabilityName) -> bool:
        return self.has_capability(capability)

    def authenticate(self, user_id: str, credentials: Mapping[str, Any]) -> bool:
        """Authenticate against the first backend that accepts the credentials.

        Args:
            user_id: User to authenticate
            credentials: Credentials passed to each backend

        Returns:
            True once a backend accepts

        Raises:
            BadLoginError: If no backend accepts the credentials
            BackendFailureError: If no backend accepts and some backend failed
                for a reason other than bad credentials
        """
        report = DispatchReport(Capability.AUTHENTICATE.value)
        for backend_id in self._capabilities.backends_for(Capability.AUTHENTICATE):
            result = self._call(report, backend_id, "authenticate", user_id, credentials)
            if result.ok and result.value:
                logger.info(f"User authenticated: {user_id} (backend: {backend_id})")
                return True

        broken = [
            r.backend_id for r in report.results
            if not r.ok and not _is_rejection(r.error)
        ]
        if broken:
            logger.warning(f"Login failed: backends unavailable {broken} (user: {user_id})")
            raise BackendFailureError(
                f"Authentication failed, backends unavailable: {', '.join(broken)}",
                report,
            )

        logger.warning(f"Login failed: credentials rejected (user: {user_id})")
        raise BadLoginError("Invalid username or password")

    def transparent(self) -> bool:
        """Try automatic authentication on each transparent backend.

        Returns:
            True on the first backend that allows the client, False otherwise

        Raises:
            UnsupportedOperationError: If no backend supports transparent login
        """
        self._require(Capability.TRANSPARENT)
        report = DispatchReport(Capability.TRANSPARENT.value)
        for backend_id in self._capabilities.backends_for(Capability.TRANSPARENT):
            result = self._call(report, backend_id, "transparent")
            if result.ok and result.value:
                return True
        return False

    def add_user(self, user_id: str, credentials: Mapping[str, Any]) -> DispatchReport:
        """Add a user to every backend supporting add.

        Failures on individual backends are logged and recorded but do not
        stop the remaining backends, and are not raised.

        Returns:
            Per-backend outcomes

        Raises:
            UnsupportedOperationError: If no backend supports add
        """
        return self._fan_out(Capability.ADD, "add_user", user_id, credentials)

    def update_user(
        self, old_id: str, new_id: str, credentials: Mapping[str, Any]
    ) -> DispatchReport:
        """Update a user on every backend supporting update.

        Returns:
            Per-backend outcomes

        Raises:
            UnsupportedOperationError: If no backend supports update
        """
        return self._fan_out(Capability.UPDATE, "update_user", old_id, new_id, credentials)

    def remove_user(self, user_id: str) -> DispatchReport:
        """Remove a user from every backend supporting remove.

        Returns:
            Per-backend outcomes

        Raises:
            UnsupportedOperationError: If no backend supports remove
        """
        return self._fan_out(Capability.REMOVE, "remove_user", user_id)

    def reset_password(self, user_id: str) -> str:
        """Reset a user's password.

        Returns:
            The new password, "" if no backend produced one

        Raises:
            UnsupportedOperationError: If no backend supports resetpassword
        """
        return self.reset_password_with_report(user_id).password

    def reset_password_with_report(self, user_id: str) -> PasswordResetResult:
        """Reset a user's password and report what each backend did.

        Backends routed for resetpassword that are also routed for update get
        the new password through update_user; the others reset directly. The
        password of the last successful direct reset is used for the updates;
        if there is none, a random password is generated.

        Raises:
            UnsupportedOperationError: If no backend supports resetpassword
        """
        self._require(Capability.RESET_PASSWORD)
        report = DispatchReport(Capability.RESET_PASSWORD.value)

        update_ids = set(self._capabilities.backends_for(Capability.UPDATE))
        via_update = []
        direct = []
        for backend_id in self._capabilities.backends_for(Capability.RESET_PASSWORD):
            if backend_id in update_ids:
                via_update.append(backend_id)
            else:
                direct.append(backend_id)

        password = ""
        for backend_id in direct:
            result = self._call(report, backend_id, "reset_password", user_id)
            if result.ok and result.value:
                password = str(result.value)

        generated = False
        if via_update:
            if not password:
                password = self._password_generator()
                generated = True
            for backend_id in via_update:
                self._call(
                    report, backend_id, "update_user",
                    user_id, user_id, {"password": password},
                )

        logger.info(
            f"Password reset for {user_id}: succeeded on {report.succeeded}, "
            f"failed on {report.failed}"
        )
        return PasswordResetResult(password=password, report=report, generated=generated)

    def list_users(self, sort: bool = False) -> List[str]:
        """List users of every backend supporting list.

        Args:
            sort: Passed through to each backend

        Returns:
            User ids, duplicates removed, first occurrence order kept

        Raises:
            UnsupportedOperationError: If no backend supports list
        """
        self._require(Capability.LIST)
        report = DispatchReport(Capability.LIST.value)
        users: List[str] = []
        for backend_id in self._capabilities.backends_for(Capability.LIST):
            result = self._call(report, backend_id, "list_users", sort)
            if result.ok and result.value:
                users.extend(result.value)
        return list(dict.fromkeys(users))

    def exists(self, user_id: str) -> bool:
        """Check if a user exists in any backend.

        Asks exists backends first, then falls back to the listings of
        list backends.

        Raises:
            UnsupportedOperationError: If neither exists nor list is supported
        """
        self._require(Capability.EXISTS, Capability.LIST)

        exists_report = DispatchReport(Capability.EXISTS.value)
        for backend_id in self._capabilities.backends_for(Capability.EXISTS):
            result = self._call(exists_report, backend_id, "exists", user_id)
            if result.ok and result.value:
                return True

        list_report = DispatchReport(Capability.LIST.value)
        for backend_id in self._capabilities.backends_for(Capability.LIST):
            result = self._call(list_report, backend_id, "list_users")
            if result.ok and result.value and user_id in result.value:
                return True

        return False

    def _require(self, *capabilities: Capability) -> None:
        """Raise UnsupportedOperationError unless one capability is routed"""
        if not any(self.has_capability(c) for c in capabilities):
            names = " or ".join(c.value for c in capabilities)
            raise UnsupportedOperationError(capabilities[0].value, f"Unsupported: {names}")

    def _fan_out(self, capability: Capability, method: str, *args: Any) -> DispatchReport:
        """Call ``method`` on every backend routed for ``capability``

        A nested aggregate whose own fan-out failed everywhere is recorded
        as a failed backend.
        """
        self._require(capability)
        report = DispatchReport(capability.value)
        for backend_id in self._capabilities.backends_for(capability):
            self._call(report, backend_id, method, *args)

        if report.all_failed:
            logger.warning(f"{method} failed on every backend: {report.failed}")
        else:
            logger.debug(f"{method} succeeded on {report.succeeded}, failed on {report.failed}")
        return report

    def _call(
        self, report: DispatchReport, backend_id: str, method: str, *args: Any
    ) -> BackendResult:
        """Invoke one backend and record the outcome instead of raising"""
        backend = self._drivers.get(backend_id)
        if backend is None:
            logger.warning(f"No backend configured for id '{backend_id}' ({report.capability})")
            return report.record(
                BackendResult.failure(
                    backend_id, ConfigurationError(f"Unknown backend '{backend_id}'")
                )
            )

        try:
            value = getattr(backend, method)(*args)
        except Exception as e:
            if _is_rejection(e):
                logger.debug(f"Backend '{backend_id}' rejected {report.capability}: {e}")
                return report.record(BackendResult.failure(backend_id, e))
            logger.warning(
                f"Backend '{backend_id}' failed during {report.capability}: {e}",
                exc_info=True,
            )
            return report.record(BackendResult.failure(backend_id, e))

        # Nested aggregates report their own fan-out instead of raising
        if isinstance(value, DispatchReport) and value.all_failed:
            logger.warning(
                f"Backend '{backend_id}' failed during {report.capability} "
                f"on every inner backend: {value.failed}"
            )
            return report.record(
                BackendResult.failure(
                    backend_id,
                    BackendFailureError(
                        f"{method} failed on every backend of '{backend_id}'", value
                    ),
                )
            )

        return report.record(BackendResult.success(backend_id, value))

    def __repr__(self) -> str:
        return f"CascadingAuthProvider(drivers={list(self._drivers)})"
