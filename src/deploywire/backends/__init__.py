"""Backends that materialize resources on behalf of the wiring engine."""

from deploywire.backends.base import Backend, InitializerCall
from deploywire.backends.http import HttpBackend
from deploywire.backends.memory import InMemoryBackend

__all__ = [
    "Backend",
    "HttpBackend",
    "InMemoryBackend",
    "InitializerCall",
]
