"""
Application settings: provider endpoints and fetch limits.

Settings are built from environment variables (see config.env) by
get_settings(); tests and callers can construct Settings directly to point
the data fetchers at mock endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass

from seiscore.config.env import (
    DEFAULT_EVM_RPC_URL,
    DEFAULT_EXPLORER_API_URL,
    DEFAULT_REQUEST_TIMEOUT_SEC,
    DEFAULT_REST_URL,
    DEFAULT_TX_LIMIT,
    get_evm_rpc_url,
    get_explorer_api_url,
    get_request_timeout_sec,
    get_rest_url,
    get_tx_limit,
)

# Native staking/fee denomination and unit exponents
NATIVE_DENOM = "usei"
NATIVE_DECIMALS = 6
EVM_DECIMALS = 18


@dataclass(frozen=True)
class Settings:
    """Immutable configuration for one scoring run."""

    explorer_api_url: str = DEFAULT_EXPLORER_API_URL
    rest_url: str = DEFAULT_REST_URL
    evm_rpc_url: str = DEFAULT_EVM_RPC_URL
    request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC
    tx_limit: int = DEFAULT_TX_LIMIT
    native_denom: str = NATIVE_DENOM


def get_settings() -> Settings:
    """Return settings resolved from the environment (.env included)."""
    return Settings(
        explorer_api_url=get_explorer_api_url(),
        rest_url=get_rest_url(),
        evm_rpc_url=get_evm_rpc_url(),
        request_timeout_sec=get_request_timeout_sec(),
        tx_limit=get_tx_limit(),
    )
