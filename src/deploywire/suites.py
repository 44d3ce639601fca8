"""
Provisioning suites.

Each suite wires a group of related resources as one logical step, always
in the same order: plain and nicknamed dependencies first, then wrapping
steps, then initializers. Resources that take an initializer are wired with
a setup marker, and the initializer runs while that marker is present. A run
that failed after materializing therefore initializes on the next run, and
re-running a finished suite is a no-op.
"""

from __future__ import annotations

from typing import Any, Dict

import structlog

from deploywire.catalog.keys import validate_namespace
from deploywire.catalog.kinds import ResourceKind
from deploywire.wiring.engine import WiringEngine
from deploywire.wiring.requests import Wrapped
from deploywire.wiring.results import WiringOutcome

logger = structlog.get_logger()


def _finish_setup(
    engine: WiringEngine,
    outcome: WiringOutcome,
    kind: ResourceKind,
    arguments: Dict[str, Any],
) -> None:
    if not outcome.pending:
        return
    initializer = kind.recipe.initializer
    if initializer is not None:
        engine.backend.initialize(outcome.location, initializer, arguments)
        logger.info("resource_initialized", key=outcome.key, entrypoint=initializer)
    engine.finish_setup(outcome)


class TokenFaucetSuite:
    """A fungible token and a faucet dispensing it, both named after the token symbol."""

    def __init__(self, symbol: str) -> None:
        self.symbol = validate_namespace(symbol)

    @property
    def name(self) -> str:
        return f"token-faucet:{self.symbol}"

    def provision(self, engine: WiringEngine) -> None:
        token = engine.ensure(ResourceKind.FUNGIBLE_TOKEN, self.symbol)
        faucet = engine.ensure(ResourceKind.FAUCET, self.symbol, setup=True)
        _finish_setup(engine, faucet, ResourceKind.FAUCET, {"token": token.location})


class ClaimCampaignSuite:
    """A claim contract paying fees into the shared, proxied fee collector."""

    def __init__(self, campaign: str) -> None:
        self.campaign = validate_namespace(campaign)

    @property
    def name(self) -> str:
        return f"claim-campaign:{self.campaign}"

    def provision(self, engine: WiringEngine) -> None:
        claim = engine.ensure(ResourceKind.CLAIM, self.campaign, setup=True)
        collector = engine.wire(Wrapped.behind(ResourceKind.PROXY, ResourceKind.FEE_COLLECTOR))
        _finish_setup(engine, claim, ResourceKind.CLAIM, {"fee_collector": collector})


class CollectionSuite:
    """A non-fungible token collection paying royalties to the proxied fee collector."""

    def __init__(self, collection: str) -> None:
        self.collection = validate_namespace(collection)

    @property
    def name(self) -> str:
        return f"collection:{self.collection}"

    def provision(self, engine: WiringEngine) -> None:
        nft = engine.ensure(ResourceKind.NON_FUNGIBLE_TOKEN, self.collection, setup=True)
        collector = engine.wire(Wrapped.behind(ResourceKind.PROXY, ResourceKind.FEE_COLLECTOR))
        _finish_setup(engine, nft, ResourceKind.NON_FUNGIBLE_TOKEN, {"receiver": collector})


class RecoverySuite:
    """Guardian recovery plus the address report that points at it."""

    name = "recovery"

    def provision(self, engine: WiringEngine) -> None:
        recovery = engine.ensure(ResourceKind.GUARDIAN_RECOVERY)
        report = engine.ensure(ResourceKind.ADDRESS_REPORT, setup=True)
        _finish_setup(engine, report, ResourceKind.ADDRESS_REPORT, {"recovery": recovery.location})
