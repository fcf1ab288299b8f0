"""Solana wallet adapter.

The connected wallet only signs; submission goes through our own RPC client
so confirmation can be polled with the same node.
"""

from __future__ import annotations

import base64
from typing import Any, Optional

from solders.signature import Signature
from solders.transaction import VersionedTransaction

from ...providers.solana_rpc import SolanaRpcClient
from ..chains import SOLANA_CHAIN_ID, ChainFamily
from ..errors import BroadcastFailed
from ..models import TransactionPayload
from .base import WalletAdapter


class SolanaWalletAdapter(WalletAdapter):
    """
    Wraps a Solana wallet exposing ``public_key``, ``async sign_message(bytes)``
    (raw 64-byte signature) and ``async sign_transaction(VersionedTransaction)``.
    """

    family = ChainFamily.SOLANA

    def __init__(self, wallet: Any, rpc: SolanaRpcClient, *, name: str = "Phantom"):
        self._wallet = wallet
        self._rpc = rpc
        self.name = name

    @property
    def is_connected(self) -> bool:
        return getattr(self._wallet, "public_key", None) is not None

    @property
    def current_address(self) -> Optional[str]:
        public_key = getattr(self._wallet, "public_key", None)
        return str(public_key) if public_key is not None else None

    async def _sign_identity(self, payload: str) -> str:
        raw = await self._wallet.sign_message(payload.encode("utf-8"))
        return str(Signature.from_bytes(bytes(raw)))

    async def _sign_and_send(self, payload: TransactionPayload) -> str:
        try:
            tx = VersionedTransaction.from_bytes(base64.b64decode(payload.data))
        except Exception as exc:
            raise BroadcastFailed(
                f"Invalid versioned transaction payload: {exc}",
                user_message="Received an invalid Solana transaction",
                chain_id=SOLANA_CHAIN_ID,
            ) from exc

        signed = await self._wallet.sign_transaction(tx)
        encoded = base64.b64encode(bytes(signed)).decode("ascii")
        return await self._rpc.send_transaction(encoded)


__all__ = ["SolanaWalletAdapter"]
