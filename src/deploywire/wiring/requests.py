"""
Wiring requests.

A request names one resource (or one composite step) a routine needs.
The engine picks its provisioning strategy from the request type:

- Plain(kind): the single global instance of a kind
- Nicknamed(kind, namespace): one of many named instances of a kind
- Composite(unit): a multi-step unit that does its own wiring
- Wrapped(payload): an encoded composite shape the engine builds itself

Wrapped payloads are bytes: a one-byte discriminator followed by a UTF-8
JSON array of strings.

    0x00 ["Proxy", "FeeCollector"]             wrap FeeCollector behind Proxy
    0x01 ["Compound", "FungibleToken", "gold"] compound instance named "gold"
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Any, List, Optional, Union

from deploywire.catalog.keys import validate_namespace, wiring_key
from deploywire.catalog.kinds import ResourceKind
from deploywire.core.errors import UnknownResourceKind, UnsupportedWiringShape
from deploywire.logging import describe_target

if TYPE_CHECKING:
    from deploywire.wiring.units import CompositeProvisioningUnit


class CompositeFlag(IntEnum):
    """Discriminator byte of a wrapped composite payload."""

    WRAP = 0x00
    COMPOUND = 0x01


@dataclass(frozen=True)
class WrapBehind:
    """Put an inner resource behind an outer indirection layer."""

    outer: ResourceKind
    inner: ResourceKind

    @property
    def namespace(self) -> str:
        return self.inner.key_name

    @property
    def key(self) -> str:
        return wiring_key(self.outer, self.namespace)


@dataclass(frozen=True)
class NamedCompound:
    """Create a named compound instance around an inner resource."""

    outer: ResourceKind
    inner: ResourceKind
    name: str

    @property
    def namespace(self) -> str:
        return self.name

    @property
    def key(self) -> str:
        return wiring_key(self.outer, self.namespace)


CompositeShape = Union[WrapBehind, NamedCompound]

_ARITY = {CompositeFlag.WRAP: 2, CompositeFlag.COMPOUND: 3}


def encode_composite(shape: CompositeShape) -> bytes:
    """Serialize a composite shape to its wire payload."""
    if isinstance(shape, WrapBehind):
        flag = CompositeFlag.WRAP
        fields = [shape.outer.key_name, shape.inner.key_name]
    elif isinstance(shape, NamedCompound):
        flag = CompositeFlag.COMPOUND
        fields = [shape.outer.key_name, shape.inner.key_name, shape.name]
    else:
        raise UnsupportedWiringShape(f"Cannot encode {type(shape).__name__} as a composite payload")
    return bytes([flag]) + json.dumps(fields, separators=(",", ":")).encode("utf-8")


def decode_composite(payload: Any) -> CompositeShape:
    """Decode a wire payload into a composite shape.

    Raises:
        UnsupportedWiringShape: For any payload that is not a well-formed shape
    """
    if isinstance(payload, (WrapBehind, NamedCompound)):
        return _checked(payload)
    if not isinstance(payload, (bytes, bytearray)) or len(payload) < 2:
        raise UnsupportedWiringShape(
            "Composite payload must be at least two bytes", {"payload": repr(payload)}
        )

    try:
        flag = CompositeFlag(payload[0])
    except ValueError as e:
        raise UnsupportedWiringShape(
            f"Unknown composite discriminator 0x{payload[0]:02x}", {"flag": payload[0]}
        ) from e

    try:
        fields = json.loads(bytes(payload[1:]).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise UnsupportedWiringShape(
            "Composite payload body is not a JSON array", {"flag": flag.name}
        ) from e

    if not isinstance(fields, list) or not all(isinstance(f, str) for f in fields):
        raise UnsupportedWiringShape(
            "Composite payload body must be an array of strings", {"flag": flag.name}
        )
    if len(fields) != _ARITY[flag]:
        raise UnsupportedWiringShape(
            f"{flag.name} payload takes {_ARITY[flag]} fields, got {len(fields)}",
            {"flag": flag.name},
        )

    try:
        outer = ResourceKind.parse(fields[0])
        inner = ResourceKind.parse(fields[1])
    except UnknownResourceKind as e:
        raise UnsupportedWiringShape(
            f"Composite payload names an unknown kind: {e.kind}", {"flag": flag.name}
        ) from e

    if flag is CompositeFlag.WRAP:
        return _checked(WrapBehind(outer=outer, inner=inner))
    return _checked(NamedCompound(outer=outer, inner=inner, name=fields[2]))


def _checked(shape: CompositeShape) -> CompositeShape:
    if shape.outer is shape.inner:
        raise UnsupportedWiringShape(
            f"A {shape.outer.key_name} cannot wrap itself", {"kind": shape.outer.key_name}
        )
    validate_namespace(shape.namespace)
    return shape


@dataclass(frozen=True)
class Plain:
    """The single global instance of a kind."""

    kind: ResourceKind

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", ResourceKind.parse(self.kind))

    @property
    def namespace(self) -> Optional[str]:
        return None

    @property
    def key(self) -> str:
        return wiring_key(self.kind)

    def describe(self) -> str:
        return describe_target(self.kind.key_name)


@dataclass(frozen=True)
class Nicknamed:
    """A named instance of a kind."""

    kind: ResourceKind
    namespace: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", ResourceKind.parse(self.kind))
        validate_namespace(self.namespace)

    @property
    def key(self) -> str:
        return wiring_key(self.kind, self.namespace)

    def describe(self) -> str:
        return describe_target(self.kind.key_name, self.namespace)


@dataclass(frozen=True)
class Composite:
    """A caller-built composite unit; the engine only invokes it."""

    unit: CompositeProvisioningUnit

    def describe(self) -> str:
        return f"composite:{getattr(self.unit, 'name', type(self.unit).__name__)}"


@dataclass(frozen=True)
class Wrapped:
    """An encoded composite shape the engine decodes and builds."""

    payload: Union[bytes, CompositeShape]

    @classmethod
    def behind(cls, outer: ResourceKind, inner: ResourceKind) -> Wrapped:
        return cls(encode_composite(WrapBehind(ResourceKind.parse(outer), ResourceKind.parse(inner))))

    @classmethod
    def compound(cls, outer: ResourceKind, inner: ResourceKind, name: str) -> Wrapped:
        shape = NamedCompound(ResourceKind.parse(outer), ResourceKind.parse(inner), name)
        return cls(encode_composite(shape))

    def shape(self) -> CompositeShape:
        return decode_composite(self.payload)

    def describe(self) -> str:
        try:
            shape = self.shape()
        except UnsupportedWiringShape:
            return "wrapped:<undecodable>"
        return describe_target(shape.outer.key_name, shape.namespace)


WiringRequest = Union[Plain, Nicknamed, Composite, Wrapped]

REQUEST_TYPES = (Plain, Nicknamed, Composite, Wrapped)


def validate_request(request: Any) -> WiringRequest:
    """Check a request is one the engine can dispatch, decoding wrapped payloads eagerly."""
    if not isinstance(request, REQUEST_TYPES):
        raise UnsupportedWiringShape(
            f"Unsupported wiring request: {type(request).__name__}",
            {"request": repr(request)},
        )
    if isinstance(request, Wrapped):
        request.shape()
    if isinstance(request, Composite) and not callable(getattr(request.unit, "provision", None)):
        raise UnsupportedWiringShape(
            "Composite units must define provision(engine)",
            {"unit": type(request.unit).__name__},
        )
    return request


def validate_requests(requests: List[Any]) -> List[WiringRequest]:
    return [validate_request(request) for request in requests]
