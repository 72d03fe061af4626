"""
SEI data fetchers: read-only queries against explorer, Cosmos REST and EVM RPC.

Responsibilities:
- One coroutine per wallet fact (first transaction, counters, balance,
  delegations, transaction list).
- Bounded per-request timeout on every call.
- Absorb provider failures at each fetcher boundary: non-2xx status, transport
  errors, timeouts, malformed JSON and bodies of an unexpected shape are
  logged and turned into the fact's empty default.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Callable, TypeVar

import httpx

from seiscore.config.settings import EVM_DECIMALS, NATIVE_DECIMALS, Settings
from seiscore.core.exceptions import ProviderUnavailable
from seiscore.seiscore_logging import get_logger
from seiscore.sei_client.models import Delegation, Transaction, WalletAddress, WalletCounters
from seiscore.sei_client.parser import (
    explorer_items,
    parse_counters,
    parse_cosmos_txs,
    parse_delegations,
    parse_explorer_transaction,
    parse_explorer_transactions,
    parse_native_balance,
    parse_wei,
)

logger = get_logger(__name__)

T = TypeVar("T")

PROVIDER_EXPLORER = "explorer"
PROVIDER_REST = "cosmos_rest"
PROVIDER_EVM = "evm_rpc"

# Raised by parsers on a 200 response whose JSON has an unexpected shape
PARSE_ERRORS = (TypeError, ValueError, OverflowError, AttributeError, KeyError)

# Cosmos tx search filters tried when the explorer has no history for the wallet
TX_SEARCH_FILTERS = (
    "message.sender='{address}'",
    "transfer.recipient='{address}'",
    "transfer.sender='{address}'",
    "coin_received.receiver='{address}'",
    "coin_spent.spender='{address}'",
)


def _build_balance_body(address: str) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "method": "eth_getBalance",
        "params": [address, "latest"],
        "id": 1,
    }


def merge_transactions(batches: list[list[Transaction]], limit: int) -> list[Transaction]:
    """Deduplicate by hash (first occurrence wins), sort by height descending, truncate."""
    seen: set[str] = set()
    merged: list[Transaction] = []
    for batch in batches:
        for tx in batch:
            if tx.hash in seen:
                continue
            seen.add(tx.hash)
            merged.append(tx)
    merged.sort(key=lambda tx: tx.height, reverse=True)
    return merged[:limit]


class SeiDataClient:
    """
    Async reader for one scoring run.

    Owns an httpx.AsyncClient unless one is passed in. Use as an async context
    manager so the connection pool is closed when the scan is done:

        async with SeiDataClient(settings) as client:
            balance = await client.fetch_balance(wallet)
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout_sec),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "SeiDataClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Transport helpers: raise ProviderUnavailable, never anything else
    # ------------------------------------------------------------------

    async def _get_json(
        self, provider: str, url: str, params: dict[str, Any] | None = None
    ) -> Any:
        try:
            resp = await self._client.get(url, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise ProviderUnavailable(provider, f"status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderUnavailable(provider, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise ProviderUnavailable(provider, "malformed JSON body") from e

    async def _post_json(self, provider: str, url: str, body: dict[str, Any]) -> Any:
        try:
            resp = await self._client.post(url, json=body)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise ProviderUnavailable(provider, f"status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderUnavailable(provider, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise ProviderUnavailable(provider, "malformed JSON body") from e

    @staticmethod
    def _parse(provider: str, parse: Callable[..., T], *args: Any) -> T:
        """Run a payload parser, reporting shape errors as ProviderUnavailable."""
        try:
            return parse(*args)
        except PARSE_ERRORS as e:
            raise ProviderUnavailable(provider, f"unexpected response shape: {type(e).__name__}") from e

    @staticmethod
    def _log_unavailable(fetcher: str, address: str, error: ProviderUnavailable) -> None:
        logger.warning(
            "provider_unavailable",
            fetcher=fetcher,
            provider=error.provider,
            wallet=address,
            error=error.reason,
        )

    def _explorer_url(self, address: str, resource: str) -> str:
        return f"{self._settings.explorer_api_url}/{address}/{resource}"

    # ------------------------------------------------------------------
    # Fetchers
    # ------------------------------------------------------------------

    async def fetch_first_transaction(self, address: str) -> tuple[datetime | None, int | None]:
        """Timestamp and height of the earliest transaction; (None, None) when there is none."""
        try:
            payload = await self._get_json(
                PROVIDER_EXPLORER,
                self._explorer_url(address, "transactions"),
                params={"limit": 1, "sort": "asc"},
            )
            items = self._parse(PROVIDER_EXPLORER, explorer_items, payload)
            if not items:
                return None, None
            tx = self._parse(PROVIDER_EXPLORER, parse_explorer_transaction, items[0], address)
        except ProviderUnavailable as e:
            self._log_unavailable("first_transaction", address, e)
            return None, None
        if tx is None:
            return None, None
        return tx.timestamp, tx.height

    async def fetch_wallet_counters(self, address: str) -> WalletCounters:
        try:
            payload = await self._get_json(
                PROVIDER_EXPLORER, self._explorer_url(address, "counters")
            )
            return self._parse(PROVIDER_EXPLORER, parse_counters, payload)
        except ProviderUnavailable as e:
            self._log_unavailable("wallet_counters", address, e)
            return WalletCounters()

    async def fetch_native_balance(self, address: str) -> float:
        """Native-denom bank balance in whole SEI; 0.0 on failure."""
        url = f"{self._settings.rest_url}/cosmos/bank/v1beta1/balances/{address}"
        try:
            payload = await self._get_json(PROVIDER_REST, url)
            return self._parse(
                PROVIDER_REST,
                parse_native_balance,
                payload,
                self._settings.native_denom,
                NATIVE_DECIMALS,
            )
        except ProviderUnavailable as e:
            self._log_unavailable("native_balance", address, e)
            return 0.0

    async def fetch_evm_balance(self, address: str) -> float:
        """eth_getBalance in whole SEI; 0.0 on failure or JSON-RPC error."""
        try:
            data = await self._post_json(
                PROVIDER_EVM, self._settings.evm_rpc_url, _build_balance_body(address)
            )
            if not isinstance(data, dict):
                raise ProviderUnavailable(PROVIDER_EVM, "unexpected response shape")
            if data.get("error"):
                err = data["error"]
                message = err.get("message", err) if isinstance(err, dict) else err
                raise ProviderUnavailable(PROVIDER_EVM, f"EVM RPC error: {message}")
            return self._parse(PROVIDER_EVM, parse_wei, data.get("result"), EVM_DECIMALS)
        except ProviderUnavailable as e:
            self._log_unavailable("evm_balance", address, e)
            return 0.0

    async def fetch_balance(self, wallet: WalletAddress) -> float:
        """
        EVM addresses try eth_getBalance first and fall back to the bank
        balance when that is zero or failed; Bech32 addresses only use the bank.
        """
        if wallet.is_evm:
            evm_balance = await self.fetch_evm_balance(wallet.value)
            if evm_balance > 0:
                return evm_balance
            logger.debug("evm_balance_fallback_native", wallet=wallet.value)
        return await self.fetch_native_balance(wallet.value)

    async def fetch_delegations(self, address: str) -> list[Delegation]:
        url = f"{self._settings.rest_url}/cosmos/staking/v1beta1/delegations/{address}"
        try:
            payload = await self._get_json(PROVIDER_REST, url)
            return self._parse(PROVIDER_REST, parse_delegations, payload, NATIVE_DECIMALS)
        except ProviderUnavailable as e:
            self._log_unavailable("delegations", address, e)
            return []

    async def fetch_explorer_transactions(self, address: str, limit: int) -> list[Transaction]:
        """Tier 1: newest-first transactions straight from the explorer."""
        try:
            payload = await self._get_json(
                PROVIDER_EXPLORER,
                self._explorer_url(address, "transactions"),
                params={"limit": limit, "sort": "desc"},
            )
            txs = self._parse(PROVIDER_EXPLORER, parse_explorer_transactions, payload, address)
        except ProviderUnavailable as e:
            self._log_unavailable("explorer_transactions", address, e)
            return []
        return txs[:limit]

    async def _search_events(self, query: str, address: str, limit: int) -> list[Transaction]:
        url = f"{self._settings.rest_url}/cosmos/tx/v1beta1/txs"
        params = {
            "events": query,
            "pagination.limit": limit,
            "order_by": "ORDER_BY_DESC",
        }
        try:
            payload = await self._get_json(PROVIDER_REST, url, params=params)
            txs = self._parse(PROVIDER_REST, parse_cosmos_txs, payload, address)
        except ProviderUnavailable as e:
            self._log_unavailable("tx_search", address, e)
            return []
        logger.debug("tx_search_result", query=query.split("=", 1)[0], tx_count=len(txs))
        return txs

    async def search_transactions(self, address: str, limit: int) -> list[Transaction]:
        """
        Tier 2: run every event filter concurrently, then merge.

        Each filter fails independently; the merged list has unique hashes and
        is ordered by height, newest first.
        """
        batches = await asyncio.gather(
            *(
                self._search_events(template.format(address=address), address, limit)
                for template in TX_SEARCH_FILTERS
            )
        )
        merged = merge_transactions(list(batches), limit)
        logger.debug(
            "tx_search_merged",
            wallet=address,
            raw_count=sum(len(b) for b in batches),
            unique_count=len(merged),
        )
        return merged

    async def fetch_transactions(self, address: str, limit: int | None = None) -> list[Transaction]:
        """Explorer first; Cosmos event search only when the explorer returned nothing."""
        limit = limit or self._settings.tx_limit
        txs = await self.fetch_explorer_transactions(address, limit)
        if txs:
            return txs
        return await self.search_transactions(address, limit)
