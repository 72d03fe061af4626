"""
Pytest fixtures for SEI credit score tests.

Providers are replaced by an httpx.MockTransport routed through FakeProviders,
so no test touches the network. Each canned response can be swapped per test
and every request is recorded by route name.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from seiscore.config.settings import Settings

BECH32_WALLET = "sei1xmw9dr7nqgq8j6cv0y8gms0t4swhfu7m3kt0ae"
EVM_WALLET = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"
COUNTERPARTY = "sei1q2w3e4r5t6y7u8i9o0pasdfghjklzxcvbnm1234"

EXPLORER_URL = "https://explorer.test/api/v2/addresses"
REST_URL = "https://rest.test"
EVM_RPC_URL = "https://evm.test"


def explorer_tx(
    tx_hash: str,
    height: int,
    *,
    timestamp: str | None = "2024-03-01T10:00:00.000000Z",
    method: str | None = None,
    sender: str | None = None,
    to: str | None = None,
) -> dict[str, Any]:
    """Explorer address-transactions item (from/to as {"hash": ...} objects)."""
    return {
        "hash": tx_hash,
        "block_number": height,
        "timestamp": timestamp,
        "method": method,
        "from": {"hash": sender} if sender else None,
        "to": {"hash": to} if to else None,
    }


def cosmos_tx(
    tx_hash: str,
    height: int,
    *,
    timestamp: str = "2024-03-01T10:00:00Z",
    message: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Cosmos tx_responses entry with a single message."""
    message = message or {
        "@type": "/cosmos.bank.v1beta1.MsgSend",
        "from_address": BECH32_WALLET,
        "to_address": COUNTERPARTY,
    }
    return {
        "txhash": tx_hash,
        "height": str(height),
        "timestamp": timestamp,
        "tx": {"body": {"messages": [message]}},
    }


class FakeProviders:
    """
    Canned explorer / Cosmos REST / EVM RPC responses keyed by route name.

    Routes: first_tx, explorer_txs, counters, bank, staking, tx_search, evm.
    Put a route in `fail` for HTTP 500, in `timeouts` for a connect timeout.
    tx_search responses are keyed by event prefix (e.g. "message.sender").
    """

    def __init__(self) -> None:
        self.requests: list[tuple[str, httpx.Request]] = []
        self.first_tx: list[dict[str, Any]] = []
        self.explorer_txs: list[dict[str, Any]] = []
        self.counters: Any = {"transactions_count": "0"}
        self.bank: Any = {"balances": []}
        self.staking: Any = {"delegation_responses": []}
        self.evm: Any = {"jsonrpc": "2.0", "id": 1, "result": "0x0"}
        self.tx_search: dict[str, Any] = {}
        self.fail: set[str] = set()
        self.timeouts: set[str] = set()
        self.malformed: set[str] = set()

    def _route(self, request: httpx.Request) -> str:
        host = request.url.host
        path = request.url.path
        if host == "evm.test":
            return "evm"
        if host == "explorer.test":
            if path.endswith("/counters"):
                return "counters"
            if request.url.params.get("sort") == "asc":
                return "first_tx"
            return "explorer_txs"
        if "/cosmos/bank/" in path:
            return "bank"
        if "/cosmos/staking/" in path:
            return "staking"
        if path.endswith("/cosmos/tx/v1beta1/txs"):
            return "tx_search"
        return "unknown"

    def _payload(self, route: str, request: httpx.Request) -> Any:
        if route == "first_tx":
            return {"items": self.first_tx}
        if route == "explorer_txs":
            return {"items": self.explorer_txs}
        if route == "tx_search":
            key = request.url.params.get("events", "").split("=", 1)[0]
            return self.tx_search.get(key, {"tx_responses": []})
        return getattr(self, route)

    def handler(self, request: httpx.Request) -> httpx.Response:
        route = self._route(request)
        self.requests.append((route, request))
        if route in self.timeouts:
            raise httpx.ConnectTimeout("timed out", request=request)
        if route in self.fail:
            return httpx.Response(500, text="internal error")
        if route in self.malformed:
            return httpx.Response(200, text="<html>not json</html>")
        payload = self._payload(route, request)
        if isinstance(payload, int):
            return httpx.Response(payload, text="error")
        return httpx.Response(200, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, route: str) -> list[httpx.Request]:
        return [req for name, req in self.requests if name == route]


class ConcurrencyGate:
    """
    Async transport that holds each request until `expected` are in flight.

    Sequential callers never reach the threshold; every held request then
    gives up after `timeout` seconds and `peak` stays low.
    """

    def __init__(self, providers: FakeProviders, expected: int, timeout: float = 1.0) -> None:
        self.providers = providers
        self.expected = expected
        self.timeout = timeout
        self.in_flight = 0
        self.peak = 0
        self._ready: asyncio.Event | None = None

    async def handler(self, request: httpx.Request) -> httpx.Response:
        if self._ready is None:
            self._ready = asyncio.Event()
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        if self.in_flight >= self.expected:
            self._ready.set()
        try:
            await asyncio.wait_for(self._ready.wait(), timeout=self.timeout)
        except asyncio.TimeoutError:
            pass
        finally:
            self.in_flight -= 1
        return self.providers.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        explorer_api_url=EXPLORER_URL,
        rest_url=REST_URL,
        evm_rpc_url=EVM_RPC_URL,
        request_timeout_sec=2.0,
        tx_limit=10,
    )


@pytest.fixture
def providers() -> FakeProviders:
    return FakeProviders()
