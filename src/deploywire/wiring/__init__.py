"""Resolve-or-provision wiring strategies."""

from deploywire.wiring.engine import WiringEngine
from deploywire.wiring.requests import (
    Composite,
    CompositeFlag,
    NamedCompound,
    Nicknamed,
    Plain,
    WiringRequest,
    WrapBehind,
    Wrapped,
    decode_composite,
    encode_composite,
    validate_request,
)
from deploywire.wiring.results import WiringOutcome, WiringReport
from deploywire.wiring.units import (
    CompositeProvisioningUnit,
    NamedCompoundUnit,
    WrapUnit,
    unit_for,
)

__all__ = [
    "Composite",
    "CompositeFlag",
    "CompositeProvisioningUnit",
    "NamedCompound",
    "NamedCompoundUnit",
    "Nicknamed",
    "Plain",
    "WiringEngine",
    "WiringOutcome",
    "WiringReport",
    "WiringRequest",
    "WrapBehind",
    "WrapUnit",
    "Wrapped",
    "decode_composite",
    "encode_composite",
    "unit_for",
    "validate_request",
]
