"""Tests for suites.py."""

import pytest

from deploywire.backends.memory import InMemoryBackend
from deploywire.catalog.identity import derive
from deploywire.catalog.kinds import ResourceKind
from deploywire.context import WiringContext
from deploywire.core.errors import ProviderError, UnsupportedWiringShape
from deploywire.injection import requires
from deploywire.suites import ClaimCampaignSuite, CollectionSuite, RecoverySuite, TokenFaucetSuite
from deploywire.wiring.requests import Composite
from deploywire.wiring.units import SET_TARGET

PROXY = derive(ResourceKind.PROXY, "FeeCollector")


class _FailingOnceBackend(InMemoryBackend):
    """Backend whose first call to one entrypoint fails."""

    def __init__(self, entrypoint):
        super().__init__()
        self.failing = entrypoint

    def initialize(self, location, entrypoint, arguments):
        if entrypoint == self.failing:
            self.failing = None
            raise ProviderError(f"{entrypoint} reverted")
        super().initialize(location, entrypoint, arguments)


class TestTokenFaucetSuite:
    """Tests for TokenFaucetSuite."""

    def test_provisions_token_and_faucet(self, ctx):
        ctx.wire(Composite(TokenFaucetSuite("usdc")))

        token = ctx.resolve(ResourceKind.FUNGIBLE_TOKEN, "usdc")
        faucet = ctx.resolve(ResourceKind.FAUCET, "usdc")
        calls = ctx.backend.calls_to(faucet)
        assert [c.entrypoint for c in calls] == ["initialize"]
        assert calls[0].arguments == {"token": token}

    def test_rerun_is_a_no_op(self, ctx):
        suite = TokenFaucetSuite("usdc")
        ctx.wire(Composite(suite))
        ctx.wire(Composite(suite))

        assert ctx.backend.materialize_count == 2
        assert len(ctx.backend.calls) == 1

    def test_rejects_bad_symbol(self):
        with pytest.raises(UnsupportedWiringShape):
            TokenFaucetSuite("us dc")

    def test_name(self):
        assert TokenFaucetSuite("usdc").name == "token-faucet:usdc"


class TestClaimCampaignSuite:
    """Tests for ClaimCampaignSuite."""

    def test_claim_points_at_proxy(self, ctx):
        ctx.wire(Composite(ClaimCampaignSuite("spring")))

        claim = ctx.resolve(ResourceKind.CLAIM, "spring")
        assert ctx.lookup.resolve_wrapped(ResourceKind.PROXY, ResourceKind.FEE_COLLECTOR) == PROXY
        assert ctx.backend.calls_to(claim)[0].arguments == {"fee_collector": PROXY}
        assert [c.entrypoint for c in ctx.backend.calls_to(PROXY)] == [SET_TARGET, "initialize"]

    def test_campaigns_share_the_fee_collector(self, ctx):
        ctx.wire(Composite(ClaimCampaignSuite("spring")))
        ctx.wire(Composite(ClaimCampaignSuite("autumn")))

        # two claims, one fee collector, one proxy
        assert ctx.backend.materialize_count == 4
        assert len(ctx.backend.calls_to(PROXY)) == 2

    def test_claim_initialized_after_failed_wrap(self, deployments_file, settings):
        failing = _FailingOnceBackend(SET_TARGET)
        ctx = WiringContext.open("debug", path=deployments_file, backend=failing, settings=settings)
        with pytest.raises(ProviderError):
            ctx.wire(Composite(ClaimCampaignSuite("spring")))

        ctx.wire(Composite(ClaimCampaignSuite("spring")))

        claim = ctx.resolve(ResourceKind.CLAIM, "spring")
        assert failing.calls_to(claim)[0].arguments == {"fee_collector": PROXY}
        assert [c.entrypoint for c in failing.calls_to(PROXY)] == [SET_TARGET, "initialize"]


class TestCollectionSuite:
    """Tests for CollectionSuite."""

    def test_royalties_go_to_proxy(self, ctx):
        ctx.wire(Composite(CollectionSuite("genesis")))

        nft = ctx.resolve(ResourceKind.NON_FUNGIBLE_TOKEN, "genesis")
        call = ctx.backend.calls_to(nft)[0]
        assert call.entrypoint == "set_royalty_receiver"
        assert call.arguments == {"receiver": PROXY}


class TestRecoverySuite:
    """Tests for RecoverySuite."""

    def test_report_points_at_recovery(self, ctx):
        @requires(Composite(RecoverySuite()))
        def routine(ctx):
            return ctx.resolve(ResourceKind.ADDRESS_REPORT)

        report = routine(ctx)
        recovery = ctx.resolve(ResourceKind.GUARDIAN_RECOVERY)
        assert ctx.backend.calls_to(report)[0].arguments == {"recovery": recovery}
        assert ctx.backend.calls_to(recovery) == []

    def test_adopted_report_is_not_initialized(self, ctx):
        report = derive(ResourceKind.ADDRESS_REPORT)
        ctx.backend.place(report, b"already there")

        ctx.wire(Composite(RecoverySuite()))

        assert ctx.backend.calls_to(report) == []
        assert [o.key for o in ctx.engine.report.adopted] == ["AddressReport"]

    def test_failed_initializer_runs_on_rerun(self, deployments_file, settings):
        backend = _FailingOnceBackend("set_recovery")

        first = WiringContext.open("debug", path=deployments_file, backend=backend, settings=settings)
        with pytest.raises(ProviderError):
            first.wire(Composite(RecoverySuite()))
        report = first.store.get("AddressReport")
        assert first.lookup.setup_pending(ResourceKind.ADDRESS_REPORT)

        second = WiringContext.open("debug", path=deployments_file, backend=backend, settings=settings)
        second.wire(Composite(RecoverySuite()))

        recovery = second.resolve(ResourceKind.GUARDIAN_RECOVERY)
        calls = backend.calls_to(report)
        assert [c.entrypoint for c in calls] == ["set_recovery"]
        assert calls[0].arguments == {"recovery": recovery}
        assert not second.lookup.setup_pending(ResourceKind.ADDRESS_REPORT)
        assert backend.materialize_count == 2
