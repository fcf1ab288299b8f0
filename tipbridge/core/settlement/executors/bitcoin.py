"""Bitcoin executor: the route payload is a PSBT in hex."""

from __future__ import annotations

import logging
from typing import Optional

from ...chains import ChainFamily
from ...models import ExecutionResult, Quote, TipRequest
from ..state import SettlementState
from .base import ChainTipExecutor, SigningContext


logger = logging.getLogger(__name__)


class BitcoinTipExecutor(ChainTipExecutor):
    """
    Signing and broadcast are wallet specific (see ``wallets.bitcoin``). The
    engine has already checked the wallet declares sign-and-send. Acceptance
    by the wallet's push call counts as confirmation; no Bitcoin node is
    polled.
    """

    family = ChainFamily.BITCOIN

    async def execute(
        self,
        quote: Optional[Quote],
        request: TipRequest,
        context: SigningContext,
    ) -> ExecutionResult:
        context.enter(SettlementState.SIGNING, "Initiating Transaction...")
        txid = await context.wallet.sign_and_send(quote.payload)

        context.broadcast(txid)
        logger.info(f"PSBT pushed by {context.wallet.name}: {txid}")

        context.enter(SettlementState.CONFIRMING)
        return self._routed_result(txid, quote, request, context)


__all__ = ["BitcoinTipExecutor"]
