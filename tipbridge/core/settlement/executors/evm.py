"""
EVM executor.

Switch network, raise the token allowance when spending an ERC20, apply the
gas tier, send the route transaction and wait for its receipt.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from ....config import settings
from ....providers.evm_rpc import EvmRpcClient, EvmRpcError, ReceiptTimeoutError
from ...chains import ChainFamily, chain_name
from ...errors import (
    ApprovalFailed,
    BroadcastFailed,
    ConfirmationTimeout,
    OnChainFailure,
    UnsupportedWalletOperation,
)
from ...models import ExecutionResult, GasTier, Quote, TipRequest
from ...wallets.evm import EvmWalletAdapter
from ..approval import ApprovalManager
from ..gas import resolve_gas_price
from ..state import SettlementState
from .base import ChainTipExecutor, SigningContext


logger = logging.getLogger(__name__)


class EvmTipExecutor(ChainTipExecutor):
    family = ChainFamily.EVM

    def __init__(
        self,
        rpc: EvmRpcClient,
        approvals: Optional[ApprovalManager] = None,
        *,
        receipt_timeout_s: Optional[float] = None,
    ):
        self.rpc = rpc
        self.approvals = approvals or ApprovalManager(rpc)
        self.receipt_timeout_s = (
            receipt_timeout_s
            if receipt_timeout_s is not None
            else settings.tx_receipt_timeout_seconds
        )

    async def execute(
        self,
        quote: Optional[Quote],
        request: TipRequest,
        context: SigningContext,
    ) -> ExecutionResult:
        wallet = context.wallet
        if not isinstance(wallet, EvmWalletAdapter):
            raise UnsupportedWalletOperation(f"{wallet.name} is not an EVM wallet")
        chain_id = request.sender_chain_id

        # 1. Network
        await wallet.ensure_chain(
            chain_id,
            on_switch=lambda cid: context.status(f"Switching to {chain_name(cid)}..."),
        )

        # 2. Allowance (tokens only)
        if not request.is_native_asset:
            if not quote.approval_address:
                raise ApprovalFailed("Quote has no approval address", chain_id=chain_id)
            context.enter(SettlementState.APPROVING)
            await self.approvals.ensure_allowance(
                wallet,
                owner=context.address,
                spender=quote.approval_address,
                token=request.asset.address,
                required=quote.from_amount,
                chain_id=chain_id,
                symbol=request.asset.symbol,
                on_status=context.status,
            )

        # 3. Gas tier
        gas_price = None
        if request.gas_tier != GasTier.AUTO:
            try:
                base_gas_price = await self.rpc.get_gas_price(chain_id)
            except EvmRpcError as exc:
                raise BroadcastFailed(
                    f"Could not read gas price: {exc}",
                    user_message="Could not read the network gas price",
                    chain_id=chain_id,
                ) from exc
            gas_price = resolve_gas_price(request.gas_tier, base_gas_price)
            logger.info(f"Gas tier {request.gas_tier.value}: {base_gas_price} -> {gas_price} wei")

        # 4. Sign and send
        context.enter(SettlementState.SIGNING, "Initiating Transaction...")
        payload = dataclasses.replace(quote.payload, gas_price=gas_price, chain_id=chain_id)
        tx_hash = await wallet.sign_and_send(payload)

        context.broadcast(tx_hash)
        logger.info(f"Tip transaction submitted: {tx_hash} on chain {chain_id}")

        # 5. Receipt
        context.enter(SettlementState.CONFIRMING)
        try:
            receipt = await self.rpc.wait_for_receipt(chain_id, tx_hash, timeout_s=self.receipt_timeout_s)
        except ReceiptTimeoutError as exc:
            raise ConfirmationTimeout(
                f"No receipt for {tx_hash} within {self.receipt_timeout_s}s",
                tx_id=tx_hash,
                chain_id=chain_id,
            ) from exc

        if not receipt.succeeded:
            raise OnChainFailure(
                f"Transaction {tx_hash} reverted",
                reason="reverted",
                tx_id=tx_hash,
                chain_id=chain_id,
            )

        return self._routed_result(tx_hash, quote, request, context)


__all__ = ["EvmTipExecutor"]
