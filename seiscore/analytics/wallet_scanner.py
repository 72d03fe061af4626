"""
Wallet scanner: gather every wallet fact for one address concurrently.

Fans out first-transaction, counters, balance, delegations and transaction
list fetches with asyncio.gather on a single request-scoped client, then
joins them into WalletFacts. Fetchers absorb their own provider failures, so
the join always completes with whatever data was available.
"""

from __future__ import annotations

import asyncio

import httpx

from seiscore.config.settings import Settings
from seiscore.seiscore_logging import get_logger
from seiscore.sei_client.client import SeiDataClient
from seiscore.sei_client.models import WalletAddress, WalletFacts

logger = get_logger(__name__)


async def scan_wallet(
    wallet: WalletAddress,
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> WalletFacts:
    """
    Collect WalletFacts for a validated address.

    Unique counterparties are the explorer's set plus every counterparty seen
    in the fetched transactions.
    """
    address = wallet.value
    async with SeiDataClient(settings, transport=transport) as client:
        first_tx, counters, balance, delegations, transactions = await asyncio.gather(
            client.fetch_first_transaction(address),
            client.fetch_wallet_counters(address),
            client.fetch_balance(wallet),
            client.fetch_delegations(address),
            client.fetch_transactions(address, settings.tx_limit),
        )

    first_tx_timestamp, first_tx_height = first_tx
    counterparties = set(counters.counterparties)
    for tx in transactions:
        counterparties.update(tx.counterparties)

    facts = WalletFacts(
        first_tx_timestamp=first_tx_timestamp,
        first_tx_height=first_tx_height,
        transaction_count=counters.transaction_count,
        unique_counterparties=frozenset(counterparties),
        native_balance=balance,
        delegations=tuple(delegations),
        transactions=tuple(transactions),
    )
    logger.info(
        "wallet_scan_done",
        wallet=address,
        address_kind=wallet.kind.value,
        first_tx_height=first_tx_height,
        tx_count=counters.transaction_count,
        tx_fetched=len(transactions),
        balance=balance,
        delegation_count=len(delegations),
        counterparty_count=len(counterparties),
    )
    return facts
