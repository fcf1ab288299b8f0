"""EVM wallet adapter over an injected EIP-1193 provider."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from eth_utils import encode_hex, to_checksum_address

from ..chains import ChainFamily
from ..errors import SettlementError, classify_wallet_error
from ..models import TransactionPayload
from .base import WalletAdapter


logger = logging.getLogger(__name__)


class EvmWalletAdapter(WalletAdapter):
    """
    Wraps a provider exposing ``async request(method, params)``.

    Used calls: ``eth_requestAccounts``, ``eth_accounts``, ``eth_chainId``,
    ``personal_sign``, ``wallet_switchEthereumChain`` and
    ``eth_sendTransaction``. Provider errors carrying ``code == 4001`` (or a
    rejection message) surface as ``UserRejected``.
    """

    family = ChainFamily.EVM

    def __init__(self, provider: Any, *, name: str = "Injected", address: Optional[str] = None):
        self._provider = provider
        self.name = name
        self._address = to_checksum_address(address) if address else None

    @property
    def is_connected(self) -> bool:
        return self._address is not None

    @property
    def current_address(self) -> Optional[str]:
        return self._address

    async def connect(self) -> str:
        accounts: List[str] = await self._provider.request("eth_requestAccounts", [])
        if not accounts:
            raise classify_wallet_error(RuntimeError(f"{self.name} returned no accounts"))
        self._address = to_checksum_address(accounts[0])
        return self._address

    def disconnect(self) -> None:
        self._address = None

    async def get_chain_id(self) -> int:
        chain_id = await self._provider.request("eth_chainId", [])
        return int(chain_id, 16) if isinstance(chain_id, str) else int(chain_id)

    async def ensure_chain(
        self,
        chain_id: int,
        on_switch: Optional[Callable[[int], None]] = None,
    ) -> bool:
        """Switch the wallet to ``chain_id`` if needed. Returns True if it switched."""

        try:
            if await self.get_chain_id() == chain_id:
                return False
            if on_switch is not None:
                on_switch(chain_id)
            await self._provider.request(
                "wallet_switchEthereumChain",
                [{"chainId": hex(chain_id)}],
            )
        except SettlementError:
            raise
        except Exception as exc:
            raise classify_wallet_error(exc, chain_id=chain_id) from exc
        logger.info(f"{self.name} switched to chain {chain_id}")
        return True

    async def _sign_identity(self, payload: str) -> str:
        return await self._provider.request(
            "personal_sign",
            [encode_hex(payload.encode("utf-8")), self._address],
        )

    async def _sign_and_send(self, payload: TransactionPayload) -> str:
        tx = payload.to_evm_transaction(self._address)
        return await self._provider.request("eth_sendTransaction", [tx])


__all__ = ["EvmWalletAdapter"]
