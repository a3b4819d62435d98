"""Abstract authentication backend interface.

This module defines the contract that all authentication backends must implement.
A backend advertises the capabilities it supports; the cascading provider only
routes an operation to backends that advertise the matching capability.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, FrozenSet, List, Mapping, Union

from cascade_auth.domain.models.errors import UnsupportedOperationError


class Capability(str, Enum):
    """Operation categories a backend may support.

    Declaration order is the order in which the default capability map
    is built.
    """
    AUTHENTICATE = "authenticate"
    TRANSPARENT = "transparent"
    ADD = "add"
    UPDATE = "update"
    REMOVE = "remove"
    RESET_PASSWORD = "resetpassword"
    LIST = "list"
    EXISTS = "exists"


CapabilityName = Union[Capability, str]


def capability_name(capability: CapabilityName) -> str:
    """Normalize a Capability or plain string to its canonical name."""
    if isinstance(capability, Capability):
        return capability.value
    return str(capability)


class AuthBackend(ABC):
    """Abstract interface for authentication backends.

    Subclasses declare what they can do in ``capabilities`` and override the
    matching methods. Operations a backend does not override raise
    UnsupportedOperationError.

    Example:
        class DirectoryBackend(AuthBackend):
            capabilities = frozenset({Capability.AUTHENTICATE, Capability.LIST})

            def authenticate(self, user_id, credentials):
                return self.directory.bind(user_id, credentials["password"])

            def list_users(self, sort=False):
                return self.directory.search_uids(sort=sort)
    """

    capabilities: FrozenSet[Capability] = frozenset()

    def supports(self, capability: CapabilityName) -> bool:
        """Check if this backend supports a capability.

        Args:
            capability: Capability or its name (extensions are plain strings)

        Returns:
            True if the capability is declared in ``capabilities``
        """
        name = capability_name(capability)
        return any(capability_name(c) == name for c in self.capabilities)

    @abstractmethod
    def authenticate(self, user_id: str, credentials: Mapping[str, Any]) -> bool:
        """Check a set of login credentials.

        Args:
            user_id: User to authenticate
            credentials: Backend specific credentials (usually {"password": ...})

        Returns:
            True if the credentials are accepted, False if rejected

        Raises:
            BadLoginError: May be raised instead of returning False
            AuthError: If the backend itself failed
        """
        pass

    def transparent(self) -> bool:
        """Attempt automatic authentication from the ambient environment.

        Returns:
            True if the client is allowed without interactive login
        """
        return False

    def add_user(self, user_id: str, credentials: Mapping[str, Any]) -> None:
        raise UnsupportedOperationError(Capability.ADD.value)

    def update_user(self, old_id: str, new_id: str, credentials: Mapping[str, Any]) -> None:
        raise UnsupportedOperationError(Capability.UPDATE.value)

    def reset_password(self, user_id: str) -> str:
        """Reset a user's password.

        Returns:
            The new password
        """
        raise UnsupportedOperationError(Capability.RESET_PASSWORD.value)

    def remove_user(self, user_id: str) -> None:
        raise UnsupportedOperationError(Capability.REMOVE.value)

    def list_users(self, sort: bool = False) -> List[str]:
        raise UnsupportedOperationError(Capability.LIST.value)

    def exists(self, user_id: str) -> bool:
        raise UnsupportedOperationError(Capability.EXISTS.value)

    def __repr__(self) -> str:
        caps = ",".join(sorted(capability_name(c) for c in self.capabilities))
        return f"{self.__class__.__name__}({caps})"
