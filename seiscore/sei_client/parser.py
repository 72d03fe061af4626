"""
SEI provider payload parser: raw JSON bodies to canonical records.

Handles the explorer address API (transactions, counters), Cosmos REST
(bank balances, staking delegations, tx search) and EVM JSON-RPC balance
results. Purely structural; no scoring logic. Malformed items are skipped
rather than failing the whole payload.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Iterable

from seiscore.seiscore_logging import get_logger
from seiscore.sei_client.models import Delegation, Transaction, WalletCounters

logger = get_logger(__name__)

# Message fields that name the other side of a Cosmos message
COUNTERPARTY_FIELDS = (
    "from_address",
    "to_address",
    "sender",
    "receiver",
    "recipient",
    "contract",
    "validator_address",
    "validator_src_address",
    "validator_dst_address",
)
WASM_EXECUTE_SUFFIX = "MsgExecuteContract"

_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a provider timestamp into an aware UTC datetime.

    Accepts unix seconds (int, float or numeric string; millisecond values are
    detected by magnitude) and ISO 8601 strings with a trailing Z or offset.
    Fractions finer than microseconds are truncated. Returns None when unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = float(value)
        if seconds > 1e12:
            seconds /= 1000.0
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.lstrip("-").replace(".", "", 1).isdigit():
        return parse_timestamp(float(raw))
    raw = _FRACTION_RE.sub(r".\1", raw)
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _address_of(value: Any) -> str | None:
    """Explorer address fields are either a plain string or an object with a hash."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        inner = value.get("hash") or value.get("address")
        return inner if isinstance(inner, str) and inner else None
    return None


def _same_address(a: str, b: str) -> bool:
    if a.startswith("0x") and b.startswith("0x"):
        return a.lower() == b.lower()
    return a == b


def _unique_counterparties(candidates: Iterable[str | None], wallet: str) -> tuple[str, ...]:
    out: list[str] = []
    for addr in candidates:
        if not addr or _same_address(addr, wallet) or addr in out:
            continue
        out.append(addr)
    return tuple(out)


def explorer_items(payload: Any) -> list[dict[str, Any]]:
    """Return the item list from an explorer response (bare list or wrapped in items/result)."""
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        items = payload.get("items")
        if items is None:
            items = payload.get("transactions")
        if items is None:
            items = payload.get("result")
    else:
        items = None
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def parse_explorer_transaction(item: dict[str, Any], wallet: str) -> Transaction | None:
    """Map one explorer transaction item to a Transaction; None if hash or height is missing."""
    tx_hash = item.get("hash") or item.get("txhash") or item.get("tx_hash")
    height = _to_int(item.get("block_number"))
    if height is None:
        height = _to_int(item.get("block"))
    if height is None:
        height = _to_int(item.get("height"))
    if not isinstance(tx_hash, str) or not tx_hash or height is None:
        return None
    method = item.get("method") or item.get("method_name")
    if not isinstance(method, str) or not method:
        method = None
    counterparties = _unique_counterparties(
        (_address_of(item.get("from")), _address_of(item.get("to"))),
        wallet,
    )
    return Transaction(
        hash=tx_hash,
        height=height,
        timestamp=parse_timestamp(item.get("timestamp")),
        method=method,
        counterparties=counterparties,
    )


def parse_explorer_transactions(payload: Any, wallet: str) -> list[Transaction]:
    txs: list[Transaction] = []
    for item in explorer_items(payload):
        tx = parse_explorer_transaction(item, wallet)
        if tx is None:
            logger.debug("explorer_tx_skipped", keys=sorted(item.keys()))
            continue
        txs.append(tx)
    return txs


def parse_counters(payload: Any) -> WalletCounters:
    """
    Explorer counters: transactions_count plus the counterparties list when reported.
    Counts arrive as strings or ints; unparseable counts become 0.
    """
    if not isinstance(payload, dict):
        return WalletCounters()
    count = _to_int(payload.get("transactions_count"))
    if count is None:
        count = _to_int(payload.get("transaction_count"))
    raw_counterparties = payload.get("counterparties")
    if raw_counterparties is None:
        raw_counterparties = payload.get("unique_addresses")
    counterparties: set[str] = set()
    if isinstance(raw_counterparties, list):
        for entry in raw_counterparties:
            addr = _address_of(entry)
            if addr:
                counterparties.add(addr)
    return WalletCounters(
        transaction_count=max(0, count or 0),
        counterparties=frozenset(counterparties),
    )


def message_method(message: dict[str, Any]) -> str | None:
    """
    Method name for a Cosmos message.

    CosmWasm execute messages report the first key of the contract msg
    (e.g. "borrow", "repay"); everything else reports the @type suffix
    (e.g. "MsgSend").
    """
    type_url = message.get("@type")
    if not isinstance(type_url, str) or not type_url:
        return None
    suffix = type_url.rsplit(".", 1)[-1]
    if suffix == WASM_EXECUTE_SUFFIX:
        msg = message.get("msg")
        if isinstance(msg, dict) and msg:
            return str(next(iter(msg)))
    return suffix


def _tx_messages(tx_response: dict[str, Any]) -> list[dict[str, Any]]:
    tx = tx_response.get("tx")
    body = tx.get("body") if isinstance(tx, dict) else None
    messages = body.get("messages") if isinstance(body, dict) else None
    if not isinstance(messages, list):
        return []
    return [m for m in messages if isinstance(m, dict)]


def parse_cosmos_tx(tx_response: dict[str, Any], wallet: str) -> Transaction | None:
    """Map one Cosmos tx_response to a Transaction; None if txhash or height is missing."""
    tx_hash = tx_response.get("txhash")
    height = _to_int(tx_response.get("height"))
    if not isinstance(tx_hash, str) or not tx_hash or height is None:
        return None
    messages = _tx_messages(tx_response)
    method = message_method(messages[0]) if messages else None
    candidates: list[str | None] = []
    for message in messages:
        for key in COUNTERPARTY_FIELDS:
            value = message.get(key)
            candidates.append(value if isinstance(value, str) else None)
    return Transaction(
        hash=tx_hash,
        height=height,
        timestamp=parse_timestamp(tx_response.get("timestamp")),
        method=method,
        counterparties=_unique_counterparties(candidates, wallet),
    )


def parse_cosmos_txs(payload: Any, wallet: str) -> list[Transaction]:
    """
    Transactions from a /cosmos/tx/v1beta1/txs response.

    Reads tx_responses (the REST shape); falls back to txs entries that carry
    a txhash, which some gateways return instead.
    """
    if not isinstance(payload, dict):
        return []
    entries = payload.get("tx_responses")
    if not isinstance(entries, list):
        raw_txs = payload.get("txs")
        if not isinstance(raw_txs, list):
            return []
        entries = [t for t in raw_txs if isinstance(t, dict) and "txhash" in t]
    txs: list[Transaction] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        tx = parse_cosmos_tx(entry, wallet)
        if tx is not None:
            txs.append(tx)
    return txs


def parse_native_balance(payload: Any, denom: str, decimals: int) -> float:
    """Amount of denom from a bank balances response, in whole tokens."""
    if not isinstance(payload, dict):
        return 0.0
    balances = payload.get("balances")
    if not isinstance(balances, list):
        return 0.0
    total = 0.0
    for balance in balances:
        if not isinstance(balance, dict) or balance.get("denom") != denom:
            continue
        amount = _to_int(balance.get("amount"))
        if amount is not None:
            total += amount / 10**decimals
    return total


def parse_delegations(payload: Any, decimals: int) -> list[Delegation]:
    """Delegations from a staking delegations response; amounts in whole tokens."""
    if not isinstance(payload, dict):
        return []
    entries = payload.get("delegation_responses")
    if not isinstance(entries, list):
        return []
    out: list[Delegation] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        delegation = entry.get("delegation") or {}
        balance = entry.get("balance") or {}
        validator = delegation.get("validator_address") if isinstance(delegation, dict) else None
        amount = _to_int(balance.get("amount")) if isinstance(balance, dict) else None
        if not validator or amount is None:
            continue
        out.append(Delegation(validator_address=validator, amount=amount / 10**decimals))
    return out


def parse_wei(result: Any, decimals: int) -> float:
    """Hex-encoded wei (eth_getBalance result) to whole tokens. Raises ValueError if malformed."""
    if not isinstance(result, str):
        raise ValueError(f"expected hex string, got {type(result).__name__}")
    return int(result, 16) / 10**decimals
