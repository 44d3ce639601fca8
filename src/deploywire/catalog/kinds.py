"""
Resource catalog.

The catalog is a closed enumeration of provisionable resource kinds. Each
kind has a stable name and exactly one construction recipe; the recipe's
canonical serialization is the construction payload handed to a backend.
Adding a kind means adding both an enum member and a recipe entry.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from deploywire.core.errors import UnknownResourceKind


class ResourceKind(Enum):
    """Provisionable resource kinds.

    Member values are the stable names used in wiring keys and must not
    contain an underscore, which separates kind from namespace.
    """

    FUNGIBLE_TOKEN = "FungibleToken"
    NON_FUNGIBLE_TOKEN = "NonFungibleToken"
    CLAIM = "Claim"
    FAUCET = "Faucet"
    FEE_COLLECTOR = "FeeCollector"
    GUARDIAN_RECOVERY = "GuardianRecovery"
    ADDRESS_REPORT = "AddressReport"
    PROXY = "Proxy"
    COMPOUND = "Compound"

    @property
    def key_name(self) -> str:
        """Name used in wiring keys and diagnostics."""
        return self.value

    @property
    def recipe(self) -> Recipe:
        return recipe_for(self)

    @classmethod
    def parse(cls, name: Any) -> ResourceKind:
        """Return the kind for a stable name, raising UnknownResourceKind otherwise."""
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            for kind in cls:
                if kind.value == name:
                    return kind
        raise UnknownResourceKind(name)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Recipe:
    """Immutable build recipe for a resource kind."""

    template: str
    version: str
    initializer: Optional[str] = None  # post-construction entrypoint, if any

    def to_payload(self, kind: ResourceKind) -> bytes:
        """Canonical serialization; identical recipes always yield identical bytes."""
        document = {
            "kind": kind.value,
            "template": self.template,
            "version": self.version,
            "initializer": self.initializer,
        }
        return json.dumps(document, sort_keys=True, separators=(",", ":")).encode("utf-8")


_RECIPES: Dict[ResourceKind, Recipe] = {
    ResourceKind.FUNGIBLE_TOKEN: Recipe(template="fungible-token", version="1.2.0"),
    ResourceKind.NON_FUNGIBLE_TOKEN: Recipe(
        template="non-fungible-token", version="1.1.0", initializer="set_royalty_receiver"
    ),
    ResourceKind.CLAIM: Recipe(template="claim", version="1.0.0", initializer="initialize"),
    ResourceKind.FAUCET: Recipe(template="faucet", version="1.0.1", initializer="initialize"),
    ResourceKind.FEE_COLLECTOR: Recipe(
        template="fee-collector", version="2.0.0", initializer="initialize"
    ),
    ResourceKind.GUARDIAN_RECOVERY: Recipe(template="guardian-recovery", version="1.0.0"),
    ResourceKind.ADDRESS_REPORT: Recipe(
        template="address-report", version="1.0.0", initializer="set_recovery"
    ),
    ResourceKind.PROXY: Recipe(template="transparent-proxy", version="5.0.0"),
    ResourceKind.COMPOUND: Recipe(template="compound-shell", version="1.0.0"),
}


def recipe_for(kind: Any) -> Recipe:
    """Return the recipe for a catalog kind."""
    if not isinstance(kind, ResourceKind):
        raise UnknownResourceKind(kind)
    recipe = _RECIPES.get(kind)
    if recipe is None:
        raise UnknownResourceKind(kind.value, "no construction recipe registered")
    return recipe


def construction_payload(kind: Any) -> bytes:
    """Return the immutable construction payload for a catalog kind."""
    return recipe_for(kind).to_payload(kind)


def _check_catalog() -> None:
    missing = [kind.value for kind in ResourceKind if kind not in _RECIPES]
    if missing:
        raise UnknownResourceKind(", ".join(missing), "no construction recipe registered")
    malformed = [kind.value for kind in ResourceKind if "_" in kind.value]
    if malformed:
        raise UnknownResourceKind(", ".join(malformed), "kind names must not contain '_'")


_check_catalog()
