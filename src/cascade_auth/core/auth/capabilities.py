"""Capability routing table.

Maps each capability name to the ordered backend ids that serve it. The
default table is derived from what every backend reports through
``supports()``; caller overrides replace whole entries.
"""

import logging
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple

from .provider import AuthBackend, Capability, CapabilityName, capability_name

logger = logging.getLogger(__name__)


class CapabilityMap(Mapping[str, Tuple[str, ...]]):
    """Read-only mapping of capability name -> ordered backend ids.

    Build it with ``CapabilityMap.build()``. Order of the ids is the
    fallback precedence used by the cascading provider.
    """

    def __init__(self, routes: Mapping[str, Sequence[str]]):
        self._routes: Mapping[str, Tuple[str, ...]] = MappingProxyType(
            {capability_name(name): tuple(ids) for name, ids in routes.items()}
        )

    @classmethod
    def build(
        cls,
        drivers: Mapping[str, AuthBackend],
        overrides: Optional[Mapping[CapabilityName, Sequence[str]]] = None,
    ) -> "CapabilityMap":
        """Derive the routing table from the drivers, then apply overrides.

        Args:
            drivers: Backend id -> backend, in fallback order
            overrides: Capability -> backend ids; a present key replaces the
                computed entry entirely (an empty list disables it)

        Returns:
            New CapabilityMap
        """
        routes: Dict[str, list] = {}
        for capability in Capability:
            for backend_id, backend in drivers.items():
                if backend.supports(capability):
                    routes.setdefault(capability.value, []).append(backend_id)

        for name, ids in (overrides or {}).items():
            key = capability_name(name)
            ids = list(ids)
            unknown = [backend_id for backend_id in ids if backend_id not in drivers]
            if unknown:
                logger.warning(
                    f"Capability override '{key}' references unknown backends: {unknown}"
                )
            routes[key] = ids

        return cls(routes)

    def backends_for(self, capability: CapabilityName) -> Tuple[str, ...]:
        """Ordered backend ids for a capability (empty if none)"""
        return self._routes.get(capability_name(capability), ())

    def supports(self, capability: CapabilityName) -> bool:
        """True if at least one backend is routed for the capability"""
        return bool(self.backends_for(capability))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {name: list(ids) for name, ids in self._routes.items()}

    def __getitem__(self, key: CapabilityName) -> Tuple[str, ...]:
        return self._routes[capability_name(key)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"CapabilityMap({self.to_dict()!r})"
