"""Tests for the in-memory and HTTP backends."""

import json

import httpx
import pytest
import respx

from deploywire.backends import Backend, HttpBackend, InMemoryBackend
from deploywire.catalog.identity import derive, derive_salt
from deploywire.catalog.kinds import ResourceKind, construction_payload
from deploywire.core.errors import ProviderError

BASE_URL = "http://provisioner.test"


class TestInMemoryBackend:
    """Tests for InMemoryBackend."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryBackend(), Backend)

    def test_materialize_at_derived_location(self):
        backend = InMemoryBackend()
        location = backend.materialize(
            construction_payload(ResourceKind.FAUCET), derive_salt(ResourceKind.FAUCET, "usdc")
        )

        assert location == derive(ResourceKind.FAUCET, "usdc")
        assert backend.is_live(location)
        assert backend.code_at(location) == construction_payload(ResourceKind.FAUCET)
        assert backend.materialize_count == 1

    def test_materialize_twice_fails(self):
        backend = InMemoryBackend()
        payload = construction_payload(ResourceKind.CLAIM)
        salt = derive_salt(ResourceKind.CLAIM)
        backend.materialize(payload, salt)

        with pytest.raises(ProviderError):
            backend.materialize(payload, salt)
        assert backend.materialize_count == 1

    def test_code_at_empty_location(self):
        assert InMemoryBackend().code_at("0x" + "00" * 20) == b""

    def test_initialize_records_call(self):
        backend = InMemoryBackend()
        location = "0x" + "aa" * 20
        backend.place(location, b"code")
        backend.initialize(location, "initialize", {"token": "x"})

        assert [c.entrypoint for c in backend.calls_to(location)] == ["initialize"]
        assert backend.calls[0].arguments == {"token": "x"}

    def test_initialize_requires_live_resource(self):
        with pytest.raises(ProviderError):
            InMemoryBackend().initialize("0x" + "aa" * 20, "initialize", {})

    def test_place_and_remove(self):
        backend = InMemoryBackend()
        location = "0x" + "AB" * 20
        backend.place(location, b"code")
        assert backend.is_live(location.lower())
        assert len(backend) == 1

        backend.remove(location)
        assert not backend.is_live(location)

    def test_custom_deployer_changes_locations(self):
        backend = InMemoryBackend(deployer="0x" + "11" * 20)
        location = backend.materialize(
            construction_payload(ResourceKind.CLAIM), derive_salt(ResourceKind.CLAIM)
        )
        assert location == derive(ResourceKind.CLAIM, deployer="0x" + "11" * 20)
        assert location != derive(ResourceKind.CLAIM)


class TestHttpBackend:
    """Tests for HttpBackend against a mocked provisioning service."""

    @pytest.fixture
    def backend(self):
        return HttpBackend(BASE_URL, token="secret", timeout=5.0)

    def test_satisfies_protocol(self, backend):
        assert isinstance(backend, Backend)

    @respx.mock
    def test_materialize(self, backend):
        location = derive(ResourceKind.FAUCET)
        route = respx.post(f"{BASE_URL}/resources").mock(
            return_value=httpx.Response(201, json={"location": location.upper().replace("0X", "0x")})
        )

        result = backend.materialize(b"\x01\x02", b"\x00" * 32)

        assert result == location
        body = json.loads(route.calls.last.request.content)
        assert body == {
            "payload": "0x0102",
            "salt": "0x" + "00" * 32,
            "deployer": backend.deployer,
        }
        assert route.calls.last.request.headers["Authorization"] == "Bearer secret"

    @respx.mock
    def test_materialize_without_location(self, backend):
        respx.post(f"{BASE_URL}/resources").mock(return_value=httpx.Response(200, json={}))
        with pytest.raises(ProviderError):
            backend.materialize(b"\x01", b"\x00" * 32)

    @respx.mock
    def test_materialize_server_error(self, backend):
        respx.post(f"{BASE_URL}/resources").mock(return_value=httpx.Response(500))
        with pytest.raises(ProviderError) as exc_info:
            backend.materialize(b"\x01", b"\x00" * 32)
        assert exc_info.value.details["status"] == 500

    @respx.mock
    def test_timeout(self, backend):
        respx.post(f"{BASE_URL}/resources").mock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(ProviderError, match="Timeout"):
            backend.materialize(b"\x01", b"\x00" * 32)

    @respx.mock
    def test_connection_error(self, backend):
        respx.post(f"{BASE_URL}/resources").mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(ProviderError, match="Cannot reach"):
            backend.materialize(b"\x01", b"\x00" * 32)

    @respx.mock
    def test_code_at(self, backend):
        location = "0x" + "ab" * 20
        respx.get(f"{BASE_URL}/resources/{location}").mock(
            return_value=httpx.Response(200, json={"location": location, "payload": "0xdeadbeef"})
        )

        assert backend.code_at(location) == b"\xde\xad\xbe\xef"
        assert backend.is_live(location)

    @respx.mock
    def test_code_at_missing(self, backend):
        location = "0x" + "ab" * 20
        respx.get(f"{BASE_URL}/resources/{location}").mock(return_value=httpx.Response(404))

        assert backend.code_at(location) == b""
        assert not backend.is_live(location)

    @respx.mock
    def test_code_at_malformed_payload(self, backend):
        location = "0x" + "ab" * 20
        respx.get(f"{BASE_URL}/resources/{location}").mock(
            return_value=httpx.Response(200, json={"payload": "0xnothex"})
        )
        with pytest.raises(ProviderError):
            backend.code_at(location)

    @respx.mock
    def test_initialize(self, backend):
        location = "0x" + "ab" * 20
        route = respx.post(f"{BASE_URL}/resources/{location}/calls").mock(
            return_value=httpx.Response(204)
        )

        backend.initialize(location, "initialize", {"token": "0x" + "cd" * 20})

        body = json.loads(route.calls.last.request.content)
        assert body == {"entrypoint": "initialize", "arguments": {"token": "0x" + "cd" * 20}}

    def test_base_url_trailing_slash(self):
        assert HttpBackend(BASE_URL + "/").base_url == BASE_URL

    def test_no_token_no_auth_header(self):
        assert "Authorization" not in HttpBackend(BASE_URL)._headers()
