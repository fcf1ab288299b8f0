"""
Sui executor.

Sui tips are not routed through the aggregator: the amount is split off the
sender's gas coin and transferred to a fixed settlement address on Sui.
"""

from __future__ import annotations

import logging
from typing import Optional

from ....config import settings
from ...chains import SUI_CHAIN_ID, ChainFamily, validate_address
from ...errors import UnsupportedWalletOperation
from ...models import ExecutionResult, Quote, SuiTransactionBlock, TipRequest
from ..state import SettlementState
from .base import ChainTipExecutor, SigningContext


logger = logging.getLogger(__name__)


class SuiTipExecutor(ChainTipExecutor):
    family = ChainFamily.SUI
    requires_quote = False

    def __init__(self, *, settlement_address: Optional[str] = None, network: Optional[str] = None):
        self.settlement_address = settlement_address or settings.sui_settlement_address
        self.network = network or settings.sui_network

    def build_block(self, request: TipRequest, sender: str) -> SuiTransactionBlock:
        if not request.is_native_asset:
            raise UnsupportedWalletOperation(
                f"Only native SUI can be tipped, got {request.asset.symbol}",
                user_message="Only SUI can be tipped from Sui",
                chain_id=SUI_CHAIN_ID,
            )
        if not self.settlement_address or not validate_address(SUI_CHAIN_ID, self.settlement_address):
            raise UnsupportedWalletOperation(
                "Sui settlement address is not configured",
                user_message="Sui tips are not available right now",
                chain_id=SUI_CHAIN_ID,
            )
        return SuiTransactionBlock(
            sender=sender,
            recipient=self.settlement_address,
            amount=request.amount_in_smallest_units,
            network=self.network,
        )

    async def execute(
        self,
        quote: Optional[Quote],
        request: TipRequest,
        context: SigningContext,
    ) -> ExecutionResult:
        block = self.build_block(request, context.address)

        context.enter(SettlementState.SIGNING, "Initiating Transaction...")
        digest = await context.wallet.sign_and_send(block)

        context.broadcast(digest)
        logger.info(f"Sui transfer executed: {digest} ({block.amount} MIST -> {block.recipient})")

        # sign-and-execute returns effects; a failed status was already raised
        context.enter(SettlementState.CONFIRMING)
        return self._result(
            digest,
            request,
            context,
            destination_chain_id=SUI_CHAIN_ID,
            destination_address=self.settlement_address,
        )


__all__ = ["SuiTipExecutor"]
