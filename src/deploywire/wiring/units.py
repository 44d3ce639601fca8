"""Composite provisioning units built into the engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

import structlog

from deploywire.catalog.identity import normalize_location
from deploywire.catalog.kinds import ResourceKind
from deploywire.core.errors import UnsupportedWiringShape, WrapTargetNotLive
from deploywire.wiring.requests import CompositeShape, NamedCompound, WrapBehind

if TYPE_CHECKING:
    from deploywire.wiring.engine import WiringEngine

logger = structlog.get_logger()

SET_TARGET = "set_target"


@runtime_checkable
class CompositeProvisioningUnit(Protocol):
    """A multi-step routine that wires several related resources."""

    @property
    def name(self) -> str:
        ...

    def provision(self, engine: WiringEngine) -> Any:
        """Run the unit's wiring steps through the engine."""
        ...


class _LayerUnit:
    """Shared steps for putting an outer resource in front of an inner one.

    Order is fixed: the inner resource must already be live, then the outer
    is wired, then (while its setup is pending) it is pointed at the inner
    and the inner's initializer is forwarded through it. The inner location
    is the one the engine resolved, falling back to the recorded entry and
    then the derived location when the unit runs on its own.
    """

    def __init__(self, outer: ResourceKind, inner: ResourceKind, namespace: str) -> None:
        self.outer = ResourceKind.parse(outer)
        self.inner = ResourceKind.parse(inner)
        self.namespace = namespace
        if self.outer is self.inner:
            raise UnsupportedWiringShape(
                f"A {self.outer.key_name} cannot wrap itself", {"kind": self.outer.key_name}
            )

    @property
    def name(self) -> str:
        return f"{self.outer.key_name}_{self.namespace}"

    def provision(self, engine: WiringEngine, inner_location: Optional[str] = None) -> str:
        if inner_location is None:
            inner_location = engine.recorded(self.inner) or engine.location_of(self.inner)
        inner_location = normalize_location(inner_location)
        if not engine.backend.is_live(inner_location):
            raise WrapTargetNotLive(
                self.inner.key_name,
                inner_location,
                recorded=engine.recorded(self.inner),
            )

        outcome = engine.ensure(self.outer, self.namespace, setup=True)
        if outcome.pending:
            engine.backend.initialize(outcome.location, SET_TARGET, {"target": inner_location})
            initializer = self.inner.recipe.initializer
            if initializer:
                engine.backend.initialize(outcome.location, initializer, {})
            engine.finish_setup(outcome)
            logger.info(
                "resource_wrapped",
                outer=outcome.key,
                inner=self.inner.key_name,
                location=outcome.location,
                target=inner_location,
            )
        return outcome.location


class WrapUnit(_LayerUnit):
    """Wrap an inner resource behind an indirection layer, keyed "<outer>_<inner>"."""

    def __init__(self, outer: ResourceKind, inner: ResourceKind) -> None:
        inner = ResourceKind.parse(inner)
        super().__init__(outer, inner, inner.key_name)


class NamedCompoundUnit(_LayerUnit):
    """Create a named compound instance around an inner resource, keyed "<outer>_<name>"."""

    def __init__(self, outer: ResourceKind, inner: ResourceKind, name: str) -> None:
        super().__init__(outer, inner, name)


def unit_for(shape: CompositeShape) -> _LayerUnit:
    """Build the unit that realizes a decoded composite shape."""
    if isinstance(shape, WrapBehind):
        return WrapUnit(shape.outer, shape.inner)
    if isinstance(shape, NamedCompound):
        return NamedCompoundUnit(shape.outer, shape.inner, shape.name)
    raise UnsupportedWiringShape(f"No unit for composite shape {type(shape).__name__}")
