"""Service layer helpers"""

from .address import (
    is_valid_bitcoin_address,
    is_valid_evm_address,
    is_valid_solana_address,
    is_valid_sui_address,
    shorten_address,
)

__all__ = [
    "is_valid_bitcoin_address",
    "is_valid_evm_address",
    "is_valid_solana_address",
    "is_valid_sui_address",
    "shorten_address",
]
