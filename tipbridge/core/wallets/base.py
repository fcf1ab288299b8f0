"""
Wallet adapter contract.

One adapter per chain family (and per concrete Bitcoin wallet). Each adapter
declares the capabilities it actually supports; calling an undeclared one
fails fast with ``UnsupportedWalletOperation`` instead of being attempted.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, FrozenSet, Optional

from ..chains import ChainFamily
from ..errors import (
    SettlementError,
    UnsupportedWalletOperation,
    WalletNotConnected,
    classify_wallet_error,
)


logger = logging.getLogger(__name__)


class WalletCapability(str, Enum):
    SIGN_IDENTITY = "sign_identity"
    SIGN_AND_SEND = "sign_and_send"


ALL_CAPABILITIES: FrozenSet[WalletCapability] = frozenset(WalletCapability)


class WalletAdapter(ABC):
    """Base wallet interface"""

    family: ChainFamily
    name: str = "wallet"
    capabilities: FrozenSet[WalletCapability] = ALL_CAPABILITIES

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the wallet currently exposes an account"""
        pass

    @property
    @abstractmethod
    def current_address(self) -> Optional[str]:
        """Address of the connected account, or None"""
        pass

    @abstractmethod
    async def _sign_identity(self, payload: str) -> str:
        pass

    @abstractmethod
    async def _sign_and_send(self, payload: Any) -> str:
        pass

    def supports(self, capability: WalletCapability) -> bool:
        return capability in self.capabilities

    def require(self, capability: WalletCapability) -> str:
        """Check connection and capability; return the connected address."""

        address = self.current_address
        if not self.is_connected or not address:
            raise WalletNotConnected(f"{self.name} wallet is not connected")
        if not self.supports(capability):
            raise UnsupportedWalletOperation(
                f"{self.name} does not support {capability.value} on {self.family.value}",
                user_message=f"{self.name} cannot send {self.family.value} tips yet. Please use another wallet.",
            )
        return address

    async def sign_identity_message(self, payload: str) -> str:
        """Sign the canonical identity JSON; returns the encoded signature."""

        self.require(WalletCapability.SIGN_IDENTITY)
        try:
            return await self._sign_identity(payload)
        except SettlementError:
            raise
        except Exception as exc:
            raise classify_wallet_error(exc) from exc

    async def sign_and_send(self, payload: Any) -> str:
        """Sign and broadcast an executable payload; returns the transaction id."""

        self.require(WalletCapability.SIGN_AND_SEND)
        try:
            tx_id = await self._sign_and_send(payload)
        except SettlementError:
            raise
        except Exception as exc:
            error = classify_wallet_error(exc)
            logger.warning(f"{self.name} sign-and-send failed ({error.kind.value}): {exc}")
            raise error from exc
        if not tx_id:
            raise classify_wallet_error(RuntimeError(f"{self.name} returned no transaction id"))
        return tx_id


__all__ = ["ALL_CAPABILITIES", "WalletAdapter", "WalletCapability"]
