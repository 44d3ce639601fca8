from __future__ import annotations

from typing import Any, Dict, List

import structlog

from deploywire.backends.base import InitializerCall
from deploywire.catalog.identity import (
    DEFAULT_DEPLOYER,
    ResourceLocation,
    location_for,
    normalize_location,
)
from deploywire.core.errors import ProviderError

logger = structlog.get_logger()


class InMemoryBackend:
    """Process-local backend for dry runs and tests."""

    def __init__(self, deployer: str = DEFAULT_DEPLOYER) -> None:
        self.deployer = normalize_location(deployer)
        self._resources: Dict[str, bytes] = {}
        self.materialize_count = 0
        self.calls: List[InitializerCall] = []

    def materialize(self, payload: bytes, salt: bytes) -> ResourceLocation:
        location = location_for(self.deployer, salt, payload)
        if location in self._resources:
            raise ProviderError(
                f"A resource already lives at {location}",
                {"location": location},
            )
        self._resources[location] = bytes(payload)
        self.materialize_count += 1
        logger.debug("resource_materialized", location=location, size=len(payload))
        return location

    def code_at(self, location: str) -> bytes:
        return self._resources.get(normalize_location(location), b"")

    def is_live(self, location: str) -> bool:
        return bool(self.code_at(location))

    def initialize(self, location: str, entrypoint: str, arguments: Dict[str, Any]) -> None:
        location = normalize_location(location)
        if location not in self._resources:
            raise ProviderError(
                f"Cannot call {entrypoint}: nothing lives at {location}",
                {"location": location, "entrypoint": entrypoint},
            )
        self.calls.append(InitializerCall(location, entrypoint, dict(arguments)))

    def place(self, location: str, payload: bytes) -> None:
        """Put a resource at an arbitrary location, bypassing derivation."""
        self._resources[normalize_location(location)] = bytes(payload)

    def remove(self, location: str) -> None:
        self._resources.pop(normalize_location(location), None)

    def calls_to(self, location: str) -> List[InitializerCall]:
        location = normalize_location(location)
        return [call for call in self.calls if call.location == location]

    def __len__(self) -> int:
        return len(self._resources)
