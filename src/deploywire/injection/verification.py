"""
Post-condition checks for wiring routines.

An expectation names a kind/namespace pair that must have a live resource
at its derived location once a routine finishes. The check looks only at
the derived location and the backend; it does not trust the environment
store, so it catches routines whose manual steps drifted from the
addressing scheme.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from deploywire.backends.base import Backend
from deploywire.catalog.identity import ResourceLocation, derive
from deploywire.catalog.keys import validate_namespace, wiring_key
from deploywire.catalog.kinds import ResourceKind
from deploywire.core.errors import UnsupportedWiringShape, VerificationFailed
from deploywire.environment.store import EnvironmentStore
from deploywire.logging import describe_target
from deploywire.wiring.requests import Composite, Nicknamed, Plain, Wrapped


@dataclass(frozen=True)
class Expect:
    """A kind/namespace pair that must be live after a routine runs."""

    kind: ResourceKind
    namespace: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", ResourceKind.parse(self.kind))
        if self.namespace is not None:
            validate_namespace(self.namespace)

    @property
    def key(self) -> str:
        return wiring_key(self.kind, self.namespace)

    def describe(self) -> str:
        return describe_target(self.kind.key_name, self.namespace)


@dataclass(frozen=True)
class ExpectedLocation:
    expectation: Expect
    location: ResourceLocation


def as_expectation(item: Any) -> Expect:
    if isinstance(item, Expect):
        return item
    if isinstance(item, Plain):
        return Expect(item.kind)
    if isinstance(item, Nicknamed):
        return Expect(item.kind, item.namespace)
    raise UnsupportedWiringShape(
        f"Cannot verify {type(item).__name__}; declare Expect(kind, namespace)",
        {"expectation": repr(item)},
    )


def expectations_for(request: Any) -> List[Expect]:
    """Expectations implied by a wiring request.

    Bare composite units declare nothing; a wrapped request implies both
    the inner resource and the outer one.
    """
    if isinstance(request, (Plain, Nicknamed, Expect)):
        return [as_expectation(request)]
    if isinstance(request, Wrapped):
        shape = request.shape()
        return [Expect(shape.inner), Expect(shape.outer, shape.namespace)]
    if isinstance(request, Composite):
        return []
    raise UnsupportedWiringShape(
        f"Unsupported wiring request: {type(request).__name__}",
        {"request": repr(request)},
    )


def expected_locations(expectations: Iterable[Expect], deployer: str) -> List[ExpectedLocation]:
    return [
        ExpectedLocation(expectation=e, location=derive(e.kind, e.namespace, deployer=deployer))
        for e in expectations
    ]


def find_failures(
    expected: Iterable[ExpectedLocation],
    backend: Backend,
    store: EnvironmentStore,
) -> List[VerificationFailed]:
    """Every expected location with nothing live at it, in declared order."""
    failures: List[VerificationFailed] = []
    for item in expected:
        found = backend.code_at(item.location)
        if found:
            continue
        recorded = store.get(item.expectation.key)
        failures.append(
            VerificationFailed(
                item.expectation.kind.key_name,
                item.expectation.namespace,
                item.location,
                found=found.hex(),
                recorded=None if recorded is None else str(recorded),
            )
        )
    return failures
