"""
SEI address validation: Bech32 (sei...) and EVM (0x...) formats.
"""

from __future__ import annotations

import re

from seiscore.sei_client.models import AddressKind, WalletAddress

BECH32_PATTERN = re.compile(r"^sei[a-z0-9]{39,59}$")
EVM_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


def classify_address(address: object) -> WalletAddress | None:
    """
    Return the tagged WalletAddress, or None when the string matches neither format.

    No trimming or case folding: "sei1..." must already be lowercase and
    surrounding whitespace makes the address invalid.
    """
    if not isinstance(address, str):
        return None
    if BECH32_PATTERN.fullmatch(address):
        return WalletAddress(address, AddressKind.BECH32)
    if EVM_PATTERN.fullmatch(address):
        return WalletAddress(address, AddressKind.EVM)
    return None


def is_valid_address(address: object) -> bool:
    return classify_address(address) is not None


def shorten_address(address: str, head: int = 6, tail: int = 4) -> str:
    """Display form for logs and messages: sei1ab...wxyz."""
    if len(address) <= head + tail + 3:
        return address
    return f"{address[:head]}...{address[-tail:]}"
