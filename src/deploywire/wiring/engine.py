"""Wiring engine: resolve-or-provision dispatch over wiring requests."""

from __future__ import annotations

from typing import Any, Optional

import structlog

from deploywire.backends.base import Backend
from deploywire.catalog.identity import (
    ResourceLocation,
    coerce_location,
    derive,
    derive_salt,
    normalize_location,
)
from deploywire.catalog.keys import setup_marker, wiring_key
from deploywire.catalog.kinds import ResourceKind, construction_payload
from deploywire.core.errors import (
    CorruptEnvironmentFile,
    UnsupportedWiringShape,
    VerificationFailed,
)
from deploywire.environment.store import EnvironmentStore
from deploywire.wiring.requests import (
    Composite,
    Nicknamed,
    Plain,
    Wrapped,
    decode_composite,
)
from deploywire.wiring.results import WiringOutcome, WiringReport
from deploywire.wiring.units import CompositeProvisioningUnit, unit_for

logger = structlog.get_logger()


class WiringEngine:
    """Dispatches wiring requests to the Plain, Nicknamed and Composite strategies.

    The engine never retries. Re-running a routine after a failure is safe
    because every resolved key is persisted as soon as it is known, and a
    persisted key is never provisioned again.
    """

    def __init__(self, store: EnvironmentStore, backend: Backend) -> None:
        self.store = store
        self.backend = backend
        self.deployer = normalize_location(backend.deployer)
        self.report = WiringReport(environment=store.environment)

    def location_of(self, kind: ResourceKind, namespace: Optional[str] = None) -> ResourceLocation:
        """Derived location of a kind/namespace pair for this engine's deployer."""
        return derive(kind, namespace, deployer=self.deployer)

    def wire(self, request: Any) -> Optional[ResourceLocation]:
        """Resolve one request, provisioning whatever is missing.

        Returns the resource location, or None for bare composite units.
        """
        if isinstance(request, Plain):
            return self.plain(request.kind)
        if isinstance(request, Nicknamed):
            return self.nicknamed(request.kind, request.namespace)
        if isinstance(request, Composite):
            return self.composite(request.unit)
        if isinstance(request, Wrapped):
            return self.wrapped(request.payload)
        raise UnsupportedWiringShape(
            f"Unsupported wiring request: {type(request).__name__}",
            {"request": repr(request)},
        )

    def plain(self, kind: ResourceKind) -> ResourceLocation:
        return ResourceLocation(self.ensure(kind).location)

    def nicknamed(self, kind: ResourceKind, namespace: str) -> ResourceLocation:
        return ResourceLocation(self.ensure(kind, namespace).location)

    def composite(self, unit: CompositeProvisioningUnit) -> None:
        """Run a caller-built unit; it does its own wiring and persistence."""
        if not callable(getattr(unit, "provision", None)):
            raise UnsupportedWiringShape(
                "Composite units must define provision(engine)",
                {"unit": type(unit).__name__},
            )
        logger.debug("composite_started", unit=getattr(unit, "name", type(unit).__name__))
        unit.provision(self)
        return None

    def wrapped(self, payload: Any) -> ResourceLocation:
        """Decode a composite payload, wire its inner resource, then build the outer one."""
        shape = decode_composite(payload)
        unit = unit_for(shape)
        inner_location = self.plain(shape.inner)
        return ResourceLocation(unit.provision(self, inner_location))

    def recorded(self, kind: ResourceKind, namespace: Optional[str] = None) -> Optional[ResourceLocation]:
        """Location recorded for a kind/namespace pair, or None if it has no entry."""
        return self._recorded(wiring_key(kind, namespace))

    def ensure(
        self,
        kind: ResourceKind,
        namespace: Optional[str] = None,
        *,
        setup: bool = False,
    ) -> WiringOutcome:
        """Resolve a kind/namespace pair, materializing it when the environment lacks it.

        Pass setup=True when the caller runs post-construction steps on the
        resource. A setup marker is then persisted before materializing and
        the outcome comes back with pending=True until finish_setup() clears
        the marker, including on later runs after a failed setup.
        """
        kind = ResourceKind.parse(kind)
        key = wiring_key(kind, namespace)
        location = self.location_of(kind, namespace)
        marker = setup_marker(key)
        pending = setup and self.store.get(marker) is not None

        existing = self._recorded(key)
        if existing is not None:
            if existing != location:
                logger.warning(
                    "wiring_location_mismatch",
                    key=key,
                    recorded=existing,
                    derived=location,
                )
            return self.report.record(key, existing, "existing", pending=pending)

        if self.backend.is_live(location):
            action = "adopted"
        else:
            if setup and not pending:
                self.store.set(marker, location)
                pending = True
            actual = self.backend.materialize(construction_payload(kind), derive_salt(kind, namespace))
            if normalize_location(actual) != location:
                raise VerificationFailed(
                    kind.key_name,
                    namespace,
                    location,
                    found=str(actual),
                    message=f"{key} was materialized at {actual}, expected {location}",
                )
            action = "provisioned"

        self.store.set(key, location)
        logger.info(
            "resource_" + action,
            key=key,
            location=location,
            environment=self.store.environment,
            pending_setup=pending,
        )
        return self.report.record(key, location, action, pending=pending)

    def finish_setup(self, outcome: WiringOutcome) -> None:
        """Clear the setup marker of a resource whose post-construction steps all ran."""
        self.store.delete(setup_marker(outcome.key))
        logger.debug("resource_setup_finished", key=outcome.key, location=outcome.location)

    def _recorded(self, key: str) -> Optional[ResourceLocation]:
        value = self.store.get(key)
        if value is None or value == "":
            return None
        try:
            return coerce_location(value)
        except ValueError as e:
            raise CorruptEnvironmentFile(
                str(self.store.path), f"value of '{key}' is not a location"
            ) from e
