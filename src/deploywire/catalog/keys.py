"""
Wiring key convention.

Plain entries are keyed by the kind name ("Faucet"); nicknamed entries,
including the outer entry of a wrapped resource, by kind name and
namespace joined with an underscore ("Faucet_usdc", "Proxy_FeeCollector").
Kind names never contain an underscore, so a key splits unambiguously
on its first one.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from deploywire.catalog.kinds import ResourceKind
from deploywire.core.errors import UnsupportedWiringShape

KEY_SEPARATOR = "_"
MAX_NAMESPACE_LENGTH = 64
SETUP_MARKER_SUFFIX = ":setup"

_NAMESPACE_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")


def validate_namespace(namespace: str) -> str:
    """Return the namespace unchanged if it is usable in a key."""
    if not isinstance(namespace, str) or not namespace:
        raise UnsupportedWiringShape(
            "Namespace must be a non-empty string", {"namespace": repr(namespace)}
        )
    if len(namespace) > MAX_NAMESPACE_LENGTH:
        raise UnsupportedWiringShape(
            f"Namespace longer than {MAX_NAMESPACE_LENGTH} characters",
            {"namespace": namespace},
        )
    if not _NAMESPACE_PATTERN.match(namespace):
        raise UnsupportedWiringShape(
            "Namespace may only contain letters, digits, '_', '.' and '-'",
            {"namespace": namespace},
        )
    return namespace


def wiring_key(kind: ResourceKind, namespace: Optional[str] = None) -> str:
    """Build the persisted key for a kind and optional namespace."""
    kind = ResourceKind.parse(kind)
    if namespace is None:
        return kind.key_name
    return f"{kind.key_name}{KEY_SEPARATOR}{validate_namespace(namespace)}"


def parse_key(key: str) -> Tuple[ResourceKind, Optional[str]]:
    """Split a persisted key back into its kind and namespace.

    Raises:
        UnknownResourceKind: If the kind part is not in the catalog
        UnsupportedWiringShape: If the namespace part is empty
    """
    kind_name, separator, namespace = key.partition(KEY_SEPARATOR)
    kind = ResourceKind.parse(kind_name)
    if not separator:
        return kind, None
    return kind, validate_namespace(namespace)


def setup_marker(key: str) -> str:
    """Store key flagging a resource whose post-construction setup has not finished.

    The suffix is not valid in a namespace, so a marker never parses as a key.
    """
    return f"{key}{SETUP_MARKER_SUFFIX}"


def is_setup_marker(key: str) -> bool:
    return key.endswith(SETUP_MARKER_SUFFIX)
