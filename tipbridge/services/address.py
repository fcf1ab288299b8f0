"""Address-format validators for each supported chain family."""

from __future__ import annotations

import re
from functools import lru_cache

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_SOLANA_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
# Legacy (1...), P2SH (3...) and bech32/bech32m (bc1...)
_BITCOIN_ADDRESS_RE = re.compile(r"^(1|3|bc1)[a-zA-Z0-9]{25,39}$")
# Sui addresses are 32 bytes of hex; leading zeros may be omitted.
_SUI_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{1,64}$")


def is_valid_evm_address(address: str) -> bool:
    if not address:
        return False
    return bool(_EVM_ADDRESS_RE.fullmatch(address))


@lru_cache(maxsize=128)
def is_valid_solana_address(address: str) -> bool:
    if not address:
        return False
    return bool(_SOLANA_ADDRESS_RE.fullmatch(address))


def is_valid_bitcoin_address(address: str) -> bool:
    if not address:
        return False
    return bool(_BITCOIN_ADDRESS_RE.fullmatch(address))


def is_valid_sui_address(address: str) -> bool:
    if not address:
        return False
    return bool(_SUI_ADDRESS_RE.fullmatch(address))


def shorten_address(address: str) -> str:
    """``0x1234...abcd`` style display form."""

    if len(address) > 10:
        return f"{address[:6]}...{address[-4:]}"
    return address


__all__ = [
    "is_valid_evm_address",
    "is_valid_solana_address",
    "is_valid_bitcoin_address",
    "is_valid_sui_address",
    "shorten_address",
]
