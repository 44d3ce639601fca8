"""
deploywire: deterministic resource wiring for deployment routines.

Routines declare the resources they need; the engine derives where each
one lives, provisions what is missing, records locations per environment
and checks afterwards that everything declared is actually live.
"""

from deploywire.backends import Backend, HttpBackend, InMemoryBackend
from deploywire.catalog import ResourceKind, ResourceLocation, derive, wiring_key
from deploywire.context import WiringContext
from deploywire.core.errors import (
    ConfigurationNotSelected,
    DeploywireError,
    UnknownResourceKind,
    UnresolvedResource,
    UnsupportedWiringShape,
    VerificationFailed,
)
from deploywire.environment import EnvironmentStore
from deploywire.injection import Expect, provisions, requires, verifies
from deploywire.lookup import Lookup
from deploywire.wiring import Composite, Nicknamed, Plain, WiringEngine, Wrapped

__version__ = "0.3.0"

__all__ = [
    "Backend",
    "Composite",
    "ConfigurationNotSelected",
    "DeploywireError",
    "EnvironmentStore",
    "Expect",
    "HttpBackend",
    "InMemoryBackend",
    "Lookup",
    "Nicknamed",
    "Plain",
    "ResourceKind",
    "ResourceLocation",
    "UnknownResourceKind",
    "UnresolvedResource",
    "UnsupportedWiringShape",
    "VerificationFailed",
    "WiringContext",
    "WiringEngine",
    "Wrapped",
    "derive",
    "provisions",
    "requires",
    "verifies",
    "wiring_key",
]
