"""Wallet adapters, one per chain family."""

from .base import ALL_CAPABILITIES, WalletAdapter, WalletCapability
from .bitcoin import (
    BitcoinWalletAdapter,
    PhantomBitcoinWalletAdapter,
    SatsConnectWalletAdapter,
    UnisatWalletAdapter,
)
from .evm import EvmWalletAdapter
from .solana import SolanaWalletAdapter
from .sui import SuiWalletAdapter

__all__ = [
    "ALL_CAPABILITIES",
    "WalletAdapter",
    "WalletCapability",
    "BitcoinWalletAdapter",
    "PhantomBitcoinWalletAdapter",
    "SatsConnectWalletAdapter",
    "UnisatWalletAdapter",
    "EvmWalletAdapter",
    "SolanaWalletAdapter",
    "SuiWalletAdapter",
]
