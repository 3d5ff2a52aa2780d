"""Address normalisation helpers."""
from __future__ import annotations

import re

_EVM_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")
_BASE58_ADDRESS = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def canonical_address(address: str) -> str:
    """Return the lookup key for an address.

    Keys are compared case-insensitively, so the canonical form is the stripped,
    lower-cased string.
    """
    return address.strip().lower()


def is_evm_address(address: str) -> bool:
    """Return True for a 20-byte hex address with a 0x prefix."""
    return bool(_EVM_ADDRESS.match(address.strip()))


def is_base58_address(address: str) -> bool:
    """Return True for a plausible base58-encoded Solana public key."""
    return bool(_BASE58_ADDRESS.match(address.strip()))
