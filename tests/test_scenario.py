"""End-to-end runs of decorated routines against a deployments file."""

import pytest
import yaml

from deploywire.backends.memory import InMemoryBackend
from deploywire.catalog.identity import derive
from deploywire.catalog.kinds import ResourceKind
from deploywire.context import WiringContext
from deploywire.core.errors import UnresolvedResource
from deploywire.injection import Expect, provisions, requires, verifies
from deploywire.suites import ClaimCampaignSuite, TokenFaucetSuite
from deploywire.wiring.requests import Composite, Nicknamed, Plain, Wrapped


@provisions(
    Plain(ResourceKind.GUARDIAN_RECOVERY),
    Nicknamed(ResourceKind.FAUCET, "usdc"),
    Wrapped.behind(ResourceKind.PROXY, ResourceKind.FEE_COLLECTOR),
)
def bootstrap(ctx):
    return ctx.lookup.resolve_wrapped(ResourceKind.PROXY, ResourceKind.FEE_COLLECTOR)


@requires(Composite(TokenFaucetSuite("gold")), Composite(ClaimCampaignSuite("spring")))
@verifies(
    Expect(ResourceKind.FUNGIBLE_TOKEN, "gold"),
    Expect(ResourceKind.FAUCET, "gold"),
    Expect(ResourceKind.CLAIM, "spring"),
)
def launch(ctx):
    return ctx.resolve(ResourceKind.CLAIM, "spring")


class TestScenario:
    """Two runs over the same file share one live backend."""

    @pytest.fixture
    def backend(self):
        return InMemoryBackend()

    def _open(self, deployments_file, backend, settings):
        return WiringContext.open("debug", path=deployments_file, backend=backend, settings=settings)

    def test_plain_resource_across_runs(self, deployments_file, backend, settings):
        """Test a fresh store on the same file skips provisioning on the second run."""

        @requires(Plain(ResourceKind.FUNGIBLE_TOKEN))
        def run(ctx):
            return ctx.resolve(ResourceKind.FUNGIBLE_TOKEN)

        first = run(self._open(deployments_file, backend, settings))
        data = yaml.safe_load(deployments_file.read_text())
        assert data == {"debug": {"FungibleToken": first}}

        second_ctx = self._open(deployments_file, backend, settings)
        assert run(second_ctx) == first
        assert backend.materialize_count == 1
        assert [o.action for o in second_ctx.engine.report.outcomes] == ["existing"]

        with pytest.raises(UnresolvedResource) as exc_info:
            second_ctx.resolve(ResourceKind.FUNGIBLE_TOKEN, "x")
        assert exc_info.value.key == "FungibleToken_x"

    def test_second_run_reuses_everything(self, deployments_file, backend, settings):
        first = self._open(deployments_file, backend, settings)
        proxy = bootstrap(first)
        launch(first)
        materialized = backend.materialize_count
        calls = len(backend.calls)

        second = self._open(deployments_file, backend, settings)
        assert bootstrap(second) == proxy
        launch(second)

        assert backend.materialize_count == materialized
        assert len(backend.calls) == calls
        assert second.engine.report.provisioned == []

    def test_file_holds_every_key(self, deployments_file, backend, settings):
        ctx = self._open(deployments_file, backend, settings)
        bootstrap(ctx)
        launch(ctx)

        data = yaml.safe_load(deployments_file.read_text())
        assert sorted(data["debug"]) == [
            "Claim_spring",
            "Faucet_gold",
            "Faucet_usdc",
            "FeeCollector",
            "FungibleToken_gold",
            "GuardianRecovery",
            "Proxy_FeeCollector",
        ]
        assert data["debug"]["Claim_spring"] == derive(ResourceKind.CLAIM, "spring")

    def test_unwired_resource_is_unresolved(self, deployments_file, backend, settings):
        ctx = self._open(deployments_file, backend, settings)
        bootstrap(ctx)

        with pytest.raises(UnresolvedResource) as exc_info:
            ctx.resolve(ResourceKind.FUNGIBLE_TOKEN, "x")
        assert exc_info.value.key == "FungibleToken_x"

    def test_environments_are_separate(self, deployments_file, backend, settings):
        bootstrap(self._open(deployments_file, backend, settings))

        staging = WiringContext.open(
            "staging", path=deployments_file, backend=backend, settings=settings
        )
        bootstrap(staging)

        # everything was already live, so staging adopts instead of provisioning
        assert staging.engine.report.provisioned == []
        assert len(staging.engine.report.adopted) == 4

        data = yaml.safe_load(deployments_file.read_text())
        assert data["staging"] == data["debug"]
