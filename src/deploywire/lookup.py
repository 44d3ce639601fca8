"""
Read-only lookups over the active environment.

Lookup answers "where does this live?" and never "make this exist"; a
missing entry is an error, not an invitation to provision.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import structlog

from deploywire.catalog.identity import ResourceLocation, coerce_location
from deploywire.catalog.keys import is_setup_marker, parse_key, setup_marker, wiring_key
from deploywire.catalog.kinds import ResourceKind
from deploywire.core.errors import CorruptEnvironmentFile, DeploywireError, UnresolvedResource
from deploywire.environment.store import EnvironmentStore
from deploywire.logging import describe_target

logger = structlog.get_logger()

WiredEntry = Tuple[ResourceKind, Optional[str], ResourceLocation]


class Lookup:
    """Typed accessor for wired resource locations."""

    def __init__(self, store: EnvironmentStore) -> None:
        self._store = store

    @property
    def environment(self) -> Optional[str]:
        return self._store.environment

    def resolve(self, kind: ResourceKind, namespace: Optional[str] = None) -> ResourceLocation:
        """Location of a wired resource.

        Raises:
            ConfigurationNotSelected: If no environment is active
            UnresolvedResource: If the pair has no non-empty entry
        """
        kind = ResourceKind.parse(kind)
        key = wiring_key(kind, namespace)
        location = self._read(key)
        target = describe_target(kind.key_name, namespace)
        logger.info(
            "resolve",
            msg=f"resolve {target} -> {location}",
            target=target,
            location=location,
            environment=self._store.environment,
        )
        return location

    def resolve_wrapped(self, outer: ResourceKind, inner: ResourceKind) -> ResourceLocation:
        """Location of the outer resource wrapping a Plain inner one."""
        inner = ResourceKind.parse(inner)
        return self.resolve(outer, inner.key_name)

    def has(self, kind: ResourceKind, namespace: Optional[str] = None) -> bool:
        try:
            self._read(wiring_key(kind, namespace))
        except UnresolvedResource:
            return False
        return True

    def setup_pending(self, kind: ResourceKind, namespace: Optional[str] = None) -> bool:
        """True when the resource was materialized but its initializers have not all run."""
        return self._store.get(setup_marker(wiring_key(kind, namespace))) is not None

    def entries(self) -> Dict[str, str]:
        """Raw key/value pairs of the active environment."""
        return {key: str(value) for key, value in self._store.entries().items()}

    def wired(self) -> List[WiredEntry]:
        """Entries parsed back into kind, namespace and location.

        Setup markers and keys that do not follow the catalog's convention
        are skipped.
        """
        wired: List[WiredEntry] = []
        for key in sorted(self._store.entries()):
            if is_setup_marker(key):
                continue
            try:
                kind, namespace = parse_key(key)
                location = self._read(key)
            except DeploywireError:
                logger.debug("lookup_skipped_key", key=key)
                continue
            wired.append((kind, namespace, location))
        return wired

    def _read(self, key: str) -> ResourceLocation:
        value = self._store.get(key)
        if value is None or value == "":
            raise UnresolvedResource(key, self._store.environment)
        try:
            return coerce_location(value)
        except ValueError as e:
            raise CorruptEnvironmentFile(
                str(self._store.path), f"value of '{key}' is not a location"
            ) from e
