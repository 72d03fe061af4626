"""
Pytest tests for SeiDataClient fetchers against a mocked transport.

Covers default values on provider failure, the EVM-then-native balance
fallback and the two-tier transaction fetch (explorer first, Cosmos event
search merge second).
"""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from conftest import BECH32_WALLET, COUNTERPARTY, EVM_WALLET, ConcurrencyGate, cosmos_tx, explorer_tx
from seiscore.sei_client.address import classify_address
from seiscore.sei_client.client import TX_SEARCH_FILTERS, SeiDataClient, merge_transactions
from seiscore.sei_client.models import Transaction, WalletCounters


def _run(settings, providers, fetch):
    """Open a client on the fake transport and run one fetch coroutine."""

    async def go():
        async with SeiDataClient(settings, transport=providers.transport) as client:
            return await fetch(client)

    return asyncio.run(go())


# --- First transaction / counters ---


def test_first_transaction(settings, providers):
    providers.first_tx = [explorer_tx("0xfirst", 42, timestamp="2023-01-15T00:00:00Z")]
    timestamp, height = _run(settings, providers, lambda c: c.fetch_first_transaction(BECH32_WALLET))
    assert height == 42
    assert timestamp.isoformat() == "2023-01-15T00:00:00+00:00"
    request = providers.calls("first_tx")[0]
    assert request.url.params["limit"] == "1"
    assert request.url.params["sort"] == "asc"
    assert request.url.path == f"/api/v2/addresses/{BECH32_WALLET}/transactions"


def test_first_transaction_none_when_empty_or_failing(settings, providers):
    assert _run(settings, providers, lambda c: c.fetch_first_transaction(BECH32_WALLET)) == (None, None)
    providers.fail.add("first_tx")
    assert _run(settings, providers, lambda c: c.fetch_first_transaction(BECH32_WALLET)) == (None, None)


def test_wallet_counters(settings, providers):
    providers.counters = {"transactions_count": "57", "counterparties": [COUNTERPARTY]}
    counters = _run(settings, providers, lambda c: c.fetch_wallet_counters(BECH32_WALLET))
    assert counters == WalletCounters(transaction_count=57, counterparties=frozenset({COUNTERPARTY}))


@pytest.mark.parametrize("failure", ["fail", "timeouts", "malformed"])
def test_wallet_counters_default_on_failure(settings, providers, failure):
    getattr(providers, failure).add("counters")
    counters = _run(settings, providers, lambda c: c.fetch_wallet_counters(BECH32_WALLET))
    assert counters == WalletCounters()


# --- Balances and staking ---


def test_native_balance(settings, providers):
    providers.bank = {"balances": [{"denom": "usei", "amount": "12345678"}]}
    balance = _run(settings, providers, lambda c: c.fetch_native_balance(BECH32_WALLET))
    assert balance == pytest.approx(12.345678)


def test_bech32_balance_skips_evm(settings, providers):
    providers.bank = {"balances": [{"denom": "usei", "amount": "2000000"}]}
    wallet = classify_address(BECH32_WALLET)
    balance = _run(settings, providers, lambda c: c.fetch_balance(wallet))
    assert balance == pytest.approx(2.0)
    assert providers.calls("evm") == []


def test_evm_balance_used_when_positive(settings, providers):
    providers.evm = {"jsonrpc": "2.0", "id": 1, "result": hex(3 * 10**18)}
    wallet = classify_address(EVM_WALLET)
    balance = _run(settings, providers, lambda c: c.fetch_balance(wallet))
    assert balance == pytest.approx(3.0)
    assert providers.calls("bank") == []
    body = providers.calls("evm")[0].read()
    assert b'"eth_getBalance"' in body
    assert EVM_WALLET.encode() in body


def test_evm_zero_balance_falls_back_to_native(settings, providers):
    providers.bank = {"balances": [{"denom": "usei", "amount": "7000000"}]}
    wallet = classify_address(EVM_WALLET)
    balance = _run(settings, providers, lambda c: c.fetch_balance(wallet))
    assert balance == pytest.approx(7.0)
    assert len(providers.calls("evm")) == 1
    assert len(providers.calls("bank")) == 1


def test_evm_rpc_error_falls_back_to_native(settings, providers):
    providers.evm = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "unknown account"}}
    providers.bank = {"balances": [{"denom": "usei", "amount": "1000000"}]}
    wallet = classify_address(EVM_WALLET)
    assert _run(settings, providers, lambda c: c.fetch_balance(wallet)) == pytest.approx(1.0)


def test_evm_and_native_both_failing_is_zero(settings, providers):
    providers.fail.update({"evm", "bank"})
    wallet = classify_address(EVM_WALLET)
    assert _run(settings, providers, lambda c: c.fetch_balance(wallet)) == 0.0


def test_delegations(settings, providers):
    providers.staking = {
        "delegation_responses": [
            {"delegation": {"validator_address": "seivaloper1a"}, "balance": {"denom": "usei", "amount": "5000000"}},
            {"delegation": {"validator_address": "seivaloper1b"}, "balance": {"denom": "usei", "amount": "1500000"}},
        ]
    }
    delegations = _run(settings, providers, lambda c: c.fetch_delegations(BECH32_WALLET))
    assert [d.validator_address for d in delegations] == ["seivaloper1a", "seivaloper1b"]
    assert sum(d.amount for d in delegations) == pytest.approx(6.5)


def test_delegations_empty_on_failure(settings, providers):
    providers.timeouts.add("staking")
    assert _run(settings, providers, lambda c: c.fetch_delegations(BECH32_WALLET)) == []


# --- Transaction list ---


def test_explorer_hit_skips_event_search(settings, providers):
    """Tier 1 returned items, so no tx search query is issued."""
    providers.explorer_txs = [explorer_tx("0x2", 20, method="repay"), explorer_tx("0x1", 10, method="borrow")]
    txs = _run(settings, providers, lambda c: c.fetch_transactions(BECH32_WALLET))
    assert [tx.hash for tx in txs] == ["0x2", "0x1"]
    assert providers.calls("tx_search") == []
    request = providers.calls("explorer_txs")[0]
    assert request.url.params["limit"] == str(settings.tx_limit)
    assert request.url.params["sort"] == "desc"


def test_event_search_used_when_explorer_empty(settings, providers):
    providers.tx_search = {
        "message.sender": {"tx_responses": [cosmos_tx("A", 5), cosmos_tx("B", 9)]},
        "transfer.recipient": {"tx_responses": [cosmos_tx("B", 9), cosmos_tx("C", 7)]},
        "coin_spent.spender": {"tx_responses": [cosmos_tx("A", 5), cosmos_tx("D", 11)]},
    }
    txs = _run(settings, providers, lambda c: c.fetch_transactions(BECH32_WALLET))
    assert [tx.hash for tx in txs] == ["D", "B", "C", "A"]
    assert len({tx.hash for tx in txs}) == len(txs)
    assert [tx.height for tx in txs] == sorted((tx.height for tx in txs), reverse=True)

    search_calls = providers.calls("tx_search")
    assert len(search_calls) == len(TX_SEARCH_FILTERS)
    events = {req.url.params["events"] for req in search_calls}
    assert events == {template.format(address=BECH32_WALLET) for template in TX_SEARCH_FILTERS}
    for req in search_calls:
        assert req.url.params["order_by"] == "ORDER_BY_DESC"
        assert req.url.params["pagination.limit"] == str(settings.tx_limit)


def test_event_search_used_when_explorer_fails(settings, providers):
    providers.fail.add("explorer_txs")
    providers.tx_search = {"transfer.sender": {"tx_responses": [cosmos_tx("X", 3)]}}
    txs = _run(settings, providers, lambda c: c.fetch_transactions(BECH32_WALLET))
    assert [tx.hash for tx in txs] == ["X"]


def test_event_search_queries_fail_independently(settings, providers):
    providers.tx_search = {
        "message.sender": 500,
        "transfer.recipient": 502,
        "coin_received.receiver": {"tx_responses": [cosmos_tx("R", 4)]},
    }
    txs = _run(settings, providers, lambda c: c.fetch_transactions(BECH32_WALLET))
    assert [tx.hash for tx in txs] == ["R"]
    assert len(providers.calls("tx_search")) == 5


def test_event_search_truncates_to_limit(settings, providers):
    providers.tx_search = {
        "message.sender": {"tx_responses": [cosmos_tx(f"S{i}", i) for i in range(8)]},
        "transfer.sender": {"tx_responses": [cosmos_tx(f"T{i}", 100 + i) for i in range(8)]},
    }
    txs = _run(settings, providers, lambda c: c.fetch_transactions(BECH32_WALLET, limit=5))
    assert [tx.height for tx in txs] == [107, 106, 105, 104, 103]


def test_everything_failing_yields_empty_list(settings, providers):
    providers.fail.update({"explorer_txs", "tx_search"})
    assert _run(settings, providers, lambda c: c.fetch_transactions(BECH32_WALLET)) == []


def test_merge_transactions_dedups_and_sorts():
    a = [Transaction("h1", 1), Transaction("h3", 3)]
    b = [Transaction("h3", 3, method="dup"), Transaction("h2", 2)]
    merged = merge_transactions([a, b], limit=10)
    assert [tx.hash for tx in merged] == ["h3", "h2", "h1"]
    assert merged[0].method is None
    assert merge_transactions([a, b], limit=2) == merged[:2]


# --- Unexpected response shapes ---


def test_out_of_range_timestamp_keeps_height(settings, providers):
    providers.first_tx = [explorer_tx("0xfirst", 42, timestamp=1_700_000_000_000_000_000)]
    assert _run(settings, providers, lambda c: c.fetch_first_transaction(BECH32_WALLET)) == (None, 42)


@pytest.mark.parametrize("payload", [{"balances": 5}, {"balances": "usei"}, ["usei"], None])
def test_native_balance_zero_on_unexpected_shape(settings, providers, payload):
    providers.bank = payload
    assert _run(settings, providers, lambda c: c.fetch_native_balance(BECH32_WALLET)) == 0.0


@pytest.mark.parametrize("payload", [{"delegation_responses": 1}, {"delegation_responses": {"a": 1}}, "x"])
def test_delegations_empty_on_unexpected_shape(settings, providers, payload):
    providers.staking = payload
    assert _run(settings, providers, lambda c: c.fetch_delegations(BECH32_WALLET)) == []


def test_counters_default_on_unexpected_shape(settings, providers):
    providers.counters = {"transactions_count": [1, 2], "counterparties": 7}
    assert _run(settings, providers, lambda c: c.fetch_wallet_counters(BECH32_WALLET)) == WalletCounters()


def test_event_search_skips_unexpected_shape(settings, providers):
    providers.tx_search = {
        "message.sender": {"txs": 1},
        "transfer.recipient": {"tx_responses": [cosmos_tx("AA", 5)]},
    }
    txs = _run(settings, providers, lambda c: c.fetch_transactions(BECH32_WALLET))
    assert [tx.hash for tx in txs] == ["AA"]


def test_evm_balance_bad_hex_falls_back_to_native(settings, providers):
    providers.evm = {"jsonrpc": "2.0", "id": 1, "result": "0xnothex"}
    providers.bank = {"balances": [{"denom": "usei", "amount": "2000000"}]}
    wallet = classify_address(EVM_WALLET)
    assert _run(settings, providers, lambda c: c.fetch_balance(wallet)) == pytest.approx(2.0)


def test_parser_error_is_contained_by_fetcher(settings, providers):
    with patch("seiscore.sei_client.client.parse_delegations", side_effect=AttributeError("no get")):
        assert _run(settings, providers, lambda c: c.fetch_delegations(BECH32_WALLET)) == []
    with patch("seiscore.sei_client.client.parse_explorer_transactions", side_effect=TypeError("bad item")):
        assert _run(settings, providers, lambda c: c.fetch_explorer_transactions(BECH32_WALLET, 10)) == []


# --- Concurrency ---


def test_event_search_queries_run_concurrently(settings, providers):
    gate = ConcurrencyGate(providers, expected=len(TX_SEARCH_FILTERS))

    async def go():
        async with SeiDataClient(settings, transport=gate.transport) as client:
            return await client.search_transactions(BECH32_WALLET, 10)

    assert asyncio.run(go()) == []
    assert gate.peak == len(TX_SEARCH_FILTERS)
    assert len(providers.calls("tx_search")) == len(TX_SEARCH_FILTERS)
