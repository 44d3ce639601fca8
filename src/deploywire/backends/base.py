from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Protocol, runtime_checkable

from deploywire.catalog.identity import ResourceLocation


@dataclass(frozen=True)
class InitializerCall:
    """A post-construction entrypoint invocation."""

    location: str
    entrypoint: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class Backend(Protocol):
    """Contract between the wiring engine and whatever actually builds resources."""

    deployer: str

    def materialize(self, payload: bytes, salt: bytes) -> ResourceLocation:
        """Build a resource from its payload and return where it now lives."""
        ...

    def code_at(self, location: str) -> bytes:
        """Payload of the resource at location, or b"" if nothing lives there."""
        ...

    def is_live(self, location: str) -> bool:
        ...

    def initialize(self, location: str, entrypoint: str, arguments: Dict[str, Any]) -> None:
        """Run a post-construction initializer on an existing resource."""
        ...
