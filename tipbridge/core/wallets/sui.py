"""Sui wallet adapter (wallet-standard ``signPersonalMessage`` / ``signAndExecuteTransaction``)."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ...config import settings
from ..chains import SUI_CHAIN_ID, ChainFamily
from ..errors import OnChainFailure
from ..models import SuiTransactionBlock
from .base import WalletAdapter


class SuiWalletAdapter(WalletAdapter):
    """
    Wraps a Sui wallet exposing ``address``, ``async sign_personal_message(bytes)``
    and ``async sign_and_execute_transaction(transaction, chain)``.
    """

    family = ChainFamily.SUI

    def __init__(self, wallet: Any, *, name: str = "Sui Wallet", network: Optional[str] = None):
        self._wallet = wallet
        self.name = name
        self.network = network or settings.sui_network

    @property
    def is_connected(self) -> bool:
        return bool(getattr(self._wallet, "address", None))

    @property
    def current_address(self) -> Optional[str]:
        return getattr(self._wallet, "address", None) or None

    async def _sign_identity(self, payload: str) -> str:
        result = await self._wallet.sign_personal_message(payload.encode("utf-8"))
        return result["signature"] if isinstance(result, dict) else result

    async def _sign_and_send(self, payload: SuiTransactionBlock) -> str:
        result: Dict[str, Any] = await self._wallet.sign_and_execute_transaction(
            transaction=json.dumps(payload.to_json()),
            chain=payload.network or self.network,
        )
        digest = result.get("digest")
        status = ((result.get("effects") or {}).get("status") or {})
        if status and status.get("status") != "success":
            raise OnChainFailure(
                f"Sui transaction {digest} failed: {status.get('error')}",
                reason=status.get("error"),
                tx_id=digest,
                chain_id=SUI_CHAIN_ID,
            )
        return digest


__all__ = ["SuiWalletAdapter"]
