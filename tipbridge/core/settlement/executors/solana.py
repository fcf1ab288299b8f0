"""Solana executor: the route payload is a base64 versioned transaction."""

from __future__ import annotations

import logging
from typing import Optional

from ....config import settings
from ....providers.solana_rpc import SolanaRpcClient, SolanaRpcError, SolanaTransactionStatus
from ...chains import SOLANA_CHAIN_ID, ChainFamily
from ...errors import ConfirmationTimeout, OnChainFailure
from ...models import ExecutionResult, Quote, TipRequest
from ..state import SettlementState
from .base import ChainTipExecutor, SigningContext


logger = logging.getLogger(__name__)


class SolanaTipExecutor(ChainTipExecutor):
    family = ChainFamily.SOLANA

    def __init__(self, rpc: SolanaRpcClient, *, confirmation_timeout_s: Optional[float] = None):
        self.rpc = rpc
        self.confirmation_timeout_s = (
            confirmation_timeout_s
            if confirmation_timeout_s is not None
            else settings.solana_confirmation_timeout_seconds
        )

    async def execute(
        self,
        quote: Optional[Quote],
        request: TipRequest,
        context: SigningContext,
    ) -> ExecutionResult:
        context.enter(SettlementState.SIGNING, "Initiating Transaction...")
        signature = await context.wallet.sign_and_send(quote.payload)

        context.broadcast(signature)
        logger.info(f"Solana transaction submitted: {signature}")

        context.enter(SettlementState.CONFIRMING)
        try:
            result = await self.rpc.wait_for_confirmation(signature, timeout_s=self.confirmation_timeout_s)
        except SolanaRpcError as exc:
            # Already broadcast: report the signature, never a plain failure
            raise ConfirmationTimeout(
                f"Could not confirm {signature}: {exc}",
                tx_id=signature,
                chain_id=SOLANA_CHAIN_ID,
            ) from exc

        if result.status == SolanaTransactionStatus.FAILED:
            raise OnChainFailure(
                f"Solana transaction {signature} failed: {result.error}",
                reason=str(result.error),
                tx_id=signature,
                chain_id=SOLANA_CHAIN_ID,
            )
        if result.status == SolanaTransactionStatus.EXPIRED:
            raise ConfirmationTimeout(
                f"Solana transaction {signature} not confirmed within {self.confirmation_timeout_s}s",
                tx_id=signature,
                chain_id=SOLANA_CHAIN_ID,
            )

        return self._routed_result(signature, quote, request, context)


__all__ = ["SolanaTipExecutor"]
