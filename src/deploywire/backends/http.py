"""
Remote provisioning backend.

Talks to a provisioning service that builds resources at the location the
engine derives:

    POST /resources                     {"payload", "salt", "deployer"} -> {"location"}
    GET  /resources/{location}          -> {"location", "payload"}, 404 if absent
    POST /resources/{location}/calls    {"entrypoint", "arguments"}

Byte fields travel as 0x-prefixed hex. Failures are reported as
ProviderError; the engine does not retry, so neither does this client.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import structlog

from deploywire.catalog.identity import (
    DEFAULT_DEPLOYER,
    ResourceLocation,
    is_location,
    normalize_location,
)
from deploywire.core.errors import ProviderError

logger = structlog.get_logger()


class HttpBackend:
    """Backend delegating construction to a remote provisioning service."""

    def __init__(
        self,
        base_url: str,
        *,
        deployer: str = DEFAULT_DEPLOYER,
        token: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize backend.

        Args:
            base_url: Provisioning service URL
            deployer: Deployer address the service builds from
            token: Optional bearer token
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.deployer = normalize_location(deployer)
        self.token = token
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        allow_missing: bool = False,
    ) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.request(method, url, json=json, headers=self._headers())
                if allow_missing and response.status_code == 404:
                    return None
                response.raise_for_status()
                return response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            logger.error(
                "backend_http_error",
                status=e.response.status_code,
                method=method,
                url=url,
            )
            raise ProviderError(
                f"Provisioning service returned HTTP {e.response.status_code}",
                {"method": method, "url": url, "status": e.response.status_code},
            ) from e
        except httpx.TimeoutException as e:
            raise ProviderError(f"Timeout talking to {self.base_url}", {"url": url}) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Cannot reach provisioning service at {self.base_url}", {"url": url}) from e

    def materialize(self, payload: bytes, salt: bytes) -> ResourceLocation:
        body = {
            "payload": "0x" + payload.hex(),
            "salt": "0x" + salt.hex(),
            "deployer": self.deployer,
        }
        data = self._request("POST", "/resources", json=body) or {}
        location = data.get("location")
        if not is_location(location):
            raise ProviderError(
                "Provisioning service did not return a location",
                {"response": repr(data)},
            )
        logger.debug("resource_materialized", location=location, backend=self.base_url)
        return normalize_location(location)

    def code_at(self, location: str) -> bytes:
        location = normalize_location(location)
        data = self._request("GET", f"/resources/{location}", allow_missing=True)
        if not data:
            return b""
        payload = data.get("payload") or ""
        try:
            return bytes.fromhex(payload[2:] if payload.startswith("0x") else payload)
        except ValueError as e:
            raise ProviderError(
                "Provisioning service returned a malformed payload",
                {"location": location},
            ) from e

    def is_live(self, location: str) -> bool:
        return bool(self.code_at(location))

    def initialize(self, location: str, entrypoint: str, arguments: Dict[str, Any]) -> None:
        location = normalize_location(location)
        self._request(
            "POST",
            f"/resources/{location}/calls",
            json={"entrypoint": entrypoint, "arguments": arguments},
        )
