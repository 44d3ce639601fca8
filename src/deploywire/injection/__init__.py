"""Decorators that wire and verify resources around deployment routines."""

from deploywire.injection.decorators import provisions, requires, verifies
from deploywire.injection.verification import Expect, ExpectedLocation, find_failures

__all__ = [
    "Expect",
    "ExpectedLocation",
    "find_failures",
    "provisions",
    "requires",
    "verifies",
]
