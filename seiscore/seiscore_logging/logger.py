"""
Structured JSON logging for scoring runs: timestamp, wallet, event_type, provider.

Every module logs through get_logger(__name__) with a snake_case event name
and keyword context. Any `wallet` key is rendered in its short display form
(sei1ab...wxyz), so call sites pass the full address and full addresses never
reach the log stream.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

# JSON output for production (LOG_FORMAT=json); human-readable for local
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

WALLET_KEY = "wallet"


def _shorten_wallet(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Replace a full wallet address with its display form."""
    wallet = event_dict.get(WALLET_KEY)
    if isinstance(wallet, str):
        # sei_client imports this package at load time
        from seiscore.sei_client.address import shorten_address

        event_dict[WALLET_KEY] = shorten_address(wallet)
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Rename structlog 'event' to event_type; keep message if present."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def build_processors(render_json: bool = True) -> list[Any]:
    """Processor chain shared by the configured loggers and by tests."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        _shorten_wallet,
        _normalize_event,
    ]
    if render_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_structlog() -> None:
    structlog.configure(
        processors=build_processors(render_json=LOG_FORMAT == "json"),
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("credit_score_done", wallet=address, score=573, grade="C")

    renders as {"event_type": "credit_score_done", "wallet": "sei1xm...t0ae", ...}.
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_wallet(wallet: str) -> structlog.BoundLogger:
    """Logger with the wallet bound to every subsequent call."""
    return get_logger("seiscore").bind(**{WALLET_KEY: wallet})
