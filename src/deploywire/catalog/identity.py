"""
Deterministic identity derivation.

A resource's location depends only on the deployer, its kind and its
optional namespace. The layout follows the CREATE2 address scheme:

    location = digest(0xff || deployer || salt || digest(payload))[-20:]

with SHA-256 as the digest, and the salt being the digest of the wiring
key. Nothing here performs I/O or reads mutable state, so the same inputs
give the same location in every run and every process.
"""

from __future__ import annotations

import hashlib
import re
from typing import NewType, Optional

from deploywire.catalog.keys import wiring_key
from deploywire.catalog.kinds import ResourceKind, construction_payload

ResourceLocation = NewType("ResourceLocation", str)

# Well-known deterministic deployment proxy address
DEFAULT_DEPLOYER = "0x4e59b44847b379578588920ca78fbf26c0b4956c"

LOCATION_BYTES = 20
SALT_BYTES = 32

_LOCATION_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_location(value: object) -> bool:
    """True if value is a 0x-prefixed 20-byte hex string."""
    return isinstance(value, str) and bool(_LOCATION_PATTERN.match(value))


def normalize_location(value: str) -> ResourceLocation:
    """Lowercase a location, rejecting anything that is not 0x + 40 hex digits."""
    if not is_location(value):
        raise ValueError(f"Not a resource location: {value!r}")
    return ResourceLocation(value.lower())


def coerce_location(value: object) -> ResourceLocation:
    """Read a location as stored in an environment file.

    Hand-edited YAML may carry an unquoted 0x... literal, which the parser
    turns into an int; those are rendered back to the fixed-width form.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a resource location: {value!r}")
    if isinstance(value, int):
        if not 0 <= value < 2 ** (8 * LOCATION_BYTES):
            raise ValueError(f"Not a resource location: {value!r}")
        return ResourceLocation(f"0x{value:0{2 * LOCATION_BYTES}x}")
    if isinstance(value, str):
        return normalize_location(value)
    raise ValueError(f"Not a resource location: {value!r}")


def location_bytes(location: str) -> bytes:
    return bytes.fromhex(normalize_location(location)[2:])


def derive_salt(kind: ResourceKind, namespace: Optional[str] = None) -> bytes:
    """32-byte salt for a kind/namespace pair."""
    return hashlib.sha256(wiring_key(kind, namespace).encode("utf-8")).digest()


def location_for(deployer: str, salt: bytes, payload: bytes) -> ResourceLocation:
    """Compute where a payload deployed with a salt by a deployer will live."""
    if len(salt) != SALT_BYTES:
        raise ValueError(f"Salt must be {SALT_BYTES} bytes, got {len(salt)}")
    payload_digest = hashlib.sha256(payload).digest()
    preimage = b"\xff" + location_bytes(deployer) + salt + payload_digest
    digest = hashlib.sha256(preimage).digest()
    return ResourceLocation("0x" + digest[-LOCATION_BYTES:].hex())


def derive(
    kind: ResourceKind,
    namespace: Optional[str] = None,
    *,
    deployer: str = DEFAULT_DEPLOYER,
) -> ResourceLocation:
    """Derive the location of a kind's (optionally namespaced) instance.

    Raises:
        UnknownResourceKind: If kind is not a catalog member
        UnsupportedWiringShape: If namespace is not usable in a key
    """
    kind = ResourceKind.parse(kind)
    return location_for(deployer, derive_salt(kind, namespace), construction_payload(kind))
