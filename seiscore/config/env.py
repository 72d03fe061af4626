"""
Environment variable loading for SEI credit scoring.

- SEI_EXPLORER_API_URL: block explorer address API (transactions, counters)
- SEI_REST_URL: Cosmos REST endpoint (bank balances, staking, tx search)
- SEI_EVM_RPC_URL: EVM JSON-RPC endpoint (eth_getBalance for 0x addresses)
- SEISCORE_REQUEST_TIMEOUT_SEC: per-request HTTP timeout
- SEISCORE_TX_LIMIT: transactions fetched per wallet
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is seiscore/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_EXPLORER_API_URL = "https://seitrace.com/insights/api/v2/addresses"
DEFAULT_REST_URL = "https://rest.sei-apis.com"
DEFAULT_EVM_RPC_URL = "https://evm-rpc.sei-apis.com"
DEFAULT_REQUEST_TIMEOUT_SEC = 10.0
DEFAULT_TX_LIMIT = 100
DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_API_PORT = 8000


def load_seiscore_env() -> None:
    """Load .env from project root. Safe to call multiple times."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH)


def _url_from_env(name: str, default: str) -> str:
    load_seiscore_env()
    url = (os.getenv(name) or "").strip()
    return (url or default).rstrip("/")


def get_explorer_api_url() -> str:
    return _url_from_env("SEI_EXPLORER_API_URL", DEFAULT_EXPLORER_API_URL)


def get_rest_url() -> str:
    return _url_from_env("SEI_REST_URL", DEFAULT_REST_URL)


def get_evm_rpc_url() -> str:
    return _url_from_env("SEI_EVM_RPC_URL", DEFAULT_EVM_RPC_URL)


def get_request_timeout_sec() -> float:
    """
    Return SEISCORE_REQUEST_TIMEOUT_SEC as a positive float.
    Falls back to the default on missing, malformed or non-positive values.
    """
    load_seiscore_env()
    raw = (os.getenv("SEISCORE_REQUEST_TIMEOUT_SEC") or "").strip()
    try:
        value = float(raw) if raw else DEFAULT_REQUEST_TIMEOUT_SEC
    except ValueError:
        return DEFAULT_REQUEST_TIMEOUT_SEC
    return value if value > 0 else DEFAULT_REQUEST_TIMEOUT_SEC


def get_tx_limit() -> int:
    """Return SEISCORE_TX_LIMIT clamped to 1..1000."""
    load_seiscore_env()
    raw = (os.getenv("SEISCORE_TX_LIMIT") or "").strip()
    try:
        value = int(raw) if raw else DEFAULT_TX_LIMIT
    except ValueError:
        return DEFAULT_TX_LIMIT
    return max(1, min(1000, value))


def get_api_bind() -> tuple[str, int]:
    """Return (API_HOST, API_PORT); a malformed or out-of-range port falls back to the default."""
    load_seiscore_env()
    host = (os.getenv("API_HOST") or "").strip() or DEFAULT_API_HOST
    raw = (os.getenv("API_PORT") or "").strip()
    try:
        port = int(raw) if raw else DEFAULT_API_PORT
    except ValueError:
        return host, DEFAULT_API_PORT
    if not 0 < port < 65536:
        return host, DEFAULT_API_PORT
    return host, port
