"""
Pytest configuration and fixtures for cascading authentication tests.

Provides fixtures for:
- In-memory recording backends with configurable capabilities
- Isolated settings and provider cache
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

import pytest

from cascade_auth.config.settings import get_settings
from cascade_auth.core.auth.factory import reset_provider
from cascade_auth.core.auth.provider import AuthBackend, Capability
from cascade_auth.domain.models.errors import AuthError


class MemoryBackend(AuthBackend):
    """In-memory backend that records every call it receives.

    Users are stored as user_id -> credentials. Operations listed in
    ``fail_on`` raise AuthError instead of running.
    """

    def __init__(
        self,
        capabilities: Iterable[Capability] = (),
        users: Optional[Mapping[str, Mapping[str, Any]]] = None,
        fail_on: Iterable[str] = (),
        transparent_result: bool = False,
        reset_to: Optional[str] = None,
    ):
        self.capabilities = frozenset(capabilities)
        self.users: Dict[str, Dict[str, Any]] = {
            user_id: dict(creds) for user_id, creds in (users or {}).items()
        }
        self.fail_on = set(fail_on)
        self.transparent_result = transparent_result
        self.reset_to = reset_to
        self.calls: List[tuple] = []

    def _enter(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, *args))
        if operation in self.fail_on:
            raise AuthError(f"{operation} failed")

    def called(self, operation: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == operation]

    def authenticate(self, user_id, credentials):
        self._enter("authenticate", user_id, credentials)
        user = self.users.get(user_id)
        return user is not None and user.get("password") == credentials.get("password")

    def transparent(self):
        self._enter("transparent")
        return self.transparent_result

    def add_user(self, user_id, credentials):
        self._enter("add_user", user_id, credentials)
        self.users[user_id] = dict(credentials)

    def update_user(self, old_id, new_id, credentials):
        self._enter("update_user", old_id, new_id, credentials)
        user = self.users.pop(old_id, {})
        user.update(credentials)
        self.users[new_id] = user

    def reset_password(self, user_id):
        self._enter("reset_password", user_id)
        self.users.setdefault(user_id, {})["password"] = self.reset_to
        return self.reset_to

    def remove_user(self, user_id):
        self._enter("remove_user", user_id)
        self.users.pop(user_id, None)

    def list_users(self, sort=False):
        self._enter("list_users", sort)
        user_ids = list(self.users)
        return sorted(user_ids) if sort else user_ids

    def exists(self, user_id):
        self._enter("exists", user_id)
        return user_id in self.users


@pytest.fixture
def make_backend():
    """Factory for MemoryBackend instances"""
    def _make(*capabilities: Capability, **kwargs) -> MemoryBackend:
        return MemoryBackend(capabilities=capabilities, **kwargs)
    return _make


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate tests from ambient AUTH_* variables and cached singletons"""
    for name in ("AUTH_DRIVERS", "AUTH_DRIVER_OPTIONS", "AUTH_CAPABILITIES"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    reset_provider()
    yield
    get_settings.cache_clear()
    reset_provider()
