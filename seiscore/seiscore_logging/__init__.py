"""
Structured logging for SEI credit scoring.

JSON logs with timestamp, wallet, event_type and provider.
"""

from seiscore.seiscore_logging.logger import bind_wallet, get_logger

__all__ = ["bind_wallet", "get_logger"]
