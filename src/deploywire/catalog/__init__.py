"""Resource catalog, wiring keys and deterministic identity derivation."""

from deploywire.catalog.identity import (
    DEFAULT_DEPLOYER,
    ResourceLocation,
    coerce_location,
    derive,
    derive_salt,
    is_location,
    location_for,
    normalize_location,
)
from deploywire.catalog.keys import (
    is_setup_marker,
    parse_key,
    setup_marker,
    validate_namespace,
    wiring_key,
)
from deploywire.catalog.kinds import Recipe, ResourceKind, construction_payload, recipe_for

__all__ = [
    "DEFAULT_DEPLOYER",
    "Recipe",
    "ResourceKind",
    "ResourceLocation",
    "coerce_location",
    "construction_payload",
    "derive",
    "derive_salt",
    "is_setup_marker",
    "is_location",
    "location_for",
    "normalize_location",
    "parse_key",
    "recipe_for",
    "setup_marker",
    "validate_namespace",
    "wiring_key",
]
