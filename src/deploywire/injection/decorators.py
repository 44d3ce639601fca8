"""
Decorators that wire resources around a routine.

A routine is any callable taking the WiringContext as its first argument:

    @requires(Plain(ResourceKind.FEE_COLLECTOR), Nicknamed(ResourceKind.FAUCET, "usdc"))
    @verifies(Expect(ResourceKind.CLAIM, "spring"))
    def launch(ctx: WiringContext) -> None:
        ...

requires() wires every declared request, in order, before the body runs.
verifies() derives the expected locations before the body runs and checks
after it returns that each one holds a live resource. provisions() is both
over the same requests. Any number of requests may be declared.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any, Callable, List, TypeVar

import structlog

from deploywire.injection.verification import (
    Expect,
    as_expectation,
    expectations_for,
    expected_locations,
    find_failures,
)
from deploywire.logging import describe_target
from deploywire.wiring.requests import WiringRequest, validate_requests

if TYPE_CHECKING:
    from deploywire.context import WiringContext

logger = structlog.get_logger()

F = TypeVar("F", bound=Callable[..., Any])


def requires(*requests: WiringRequest) -> Callable[[F], F]:
    """Wire each request before the routine body runs."""
    declared = validate_requests(list(requests))

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(ctx: WiringContext, *args: Any, **kwargs: Any) -> Any:
            for request in declared:
                location = ctx.engine.wire(request)
                target = request.describe()
                logger.info(
                    "resolved",
                    msg=f"resolved {target} -> {location}",
                    target=target,
                    location=location,
                    environment=ctx.store.environment,
                    routine=func.__name__,
                )
            return func(ctx, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def verifies(*expectations: Any) -> Callable[[F], F]:
    """Check after the routine body that every expectation has a live resource.

    Raises:
        VerificationFailed: For the first failing expectation in declared
            order; details carry the total number of failures
    """
    declared: List[Expect] = [as_expectation(e) for e in expectations]

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(ctx: WiringContext, *args: Any, **kwargs: Any) -> Any:
            expected = expected_locations(declared, ctx.engine.deployer)
            result = func(ctx, *args, **kwargs)

            failures = find_failures(expected, ctx.backend, ctx.store)
            if failures:
                first = failures[0]
                first.details["failures"] = len(failures)
                first.details["routine"] = func.__name__
                logger.error(
                    "verification_failed",
                    routine=func.__name__,
                    failed=[describe_target(f.kind, f.namespace) for f in failures],
                    environment=ctx.store.environment,
                )
                raise first

            logger.debug("verified", routine=func.__name__, count=len(expected))
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


def provisions(*requests: WiringRequest) -> Callable[[F], F]:
    """Wire each request before the body and verify each is live after it."""
    declared = validate_requests(list(requests))
    expectations: List[Expect] = []
    for request in declared:
        expectations.extend(expectations_for(request))

    def decorator(func: F) -> F:
        return verifies(*expectations)(requires(*declared)(func))

    return decorator
