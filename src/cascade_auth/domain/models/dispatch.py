"""Dispatch Result Models

Purpose: Record what happened on each backend during a fan-out.

The cascading provider wraps every backend call into a BackendResult instead
of letting exceptions steer the dispatch loop. A DispatchReport collects the
results of one operation in the order the backends were called.

Key Components:
- BackendResult: Outcome of a single backend call
- DispatchReport: Ordered outcomes of one multi-backend operation
- PasswordResetResult: New password plus the report of the reset
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass(frozen=True)
class BackendResult:
    """Outcome of one backend call

    Attributes:
        backend_id: Identifier of the backend that was called
        ok: True if the call returned normally
        value: Return value of the call (None on failure)
        error: Exception raised by the call (None on success)
    """
    backend_id: str
    ok: bool
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, backend_id: str, value: Any = None) -> 'BackendResult':
        return cls(backend_id=backend_id, ok=True, value=value)

    @classmethod
    def failure(cls, backend_id: str, error: BaseException) -> 'BackendResult':
        return cls(backend_id=backend_id, ok=False, error=error)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "backend_id": self.backend_id,
            "ok": self.ok,
            "error": str(self.error) if self.error is not None else None,
        }


@dataclass
class DispatchReport:
    """Per-backend outcomes of one operation

    Attributes:
        capability: Capability the operation was routed by
        results: Backend results in call order
    """
    capability: str
    results: List[BackendResult] = field(default_factory=list)

    def record(self, result: BackendResult) -> BackendResult:
        """Append a result and hand it back to the caller"""
        self.results.append(result)
        return result

    @property
    def succeeded(self) -> List[str]:
        """Ids of backends whose call returned normally"""
        return [r.backend_id for r in self.results if r.ok]

    @property
    def failed(self) -> List[str]:
        """Ids of backends whose call raised"""
        return [r.backend_id for r in self.results if not r.ok]

    @property
    def any_succeeded(self) -> bool:
        return any(r.ok for r in self.results)

    @property
    def all_failed(self) -> bool:
        """True if at least one backend was called and every call failed"""
        return bool(self.results) and not self.any_succeeded

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "capability": self.capability,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class PasswordResetResult:
    """Result of a password reset

    Attributes:
        password: The new password ("" if nothing succeeded)
        report: Per-backend outcomes, direct resets first, then updates
        generated: True if the password came from the random generator
    """
    password: str
    report: DispatchReport
    generated: bool = False
