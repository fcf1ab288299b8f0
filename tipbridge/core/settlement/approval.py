"""
ERC20 allowance handling for EVM sources.

The route's spender must be allowed to pull ``required`` tokens before the
swap transaction is sent. If it is not, one ``approve(spender, required)``
is submitted through the wallet and its receipt is awaited before returning.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ...config import settings
from ...providers.evm_rpc import EvmRpcClient, EvmRpcError, ReceiptTimeoutError, encode_approve_call
from ..chains import is_native_asset
from ..errors import ApprovalFailed, SettlementError, UserRejected
from ..models import ApprovalState, TransactionPayload
from ..wallets.base import WalletAdapter


logger = logging.getLogger(__name__)

StatusCallback = Callable[[str], None]


def _noop(_: str) -> None:
    return None


class ApprovalManager:
    def __init__(self, rpc: EvmRpcClient, *, receipt_timeout_s: Optional[float] = None):
        self.rpc = rpc
        self.receipt_timeout_s = (
            receipt_timeout_s
            if receipt_timeout_s is not None
            else settings.approval_receipt_timeout_seconds
        )

    async def read_allowance(
        self,
        *,
        token: str,
        owner: str,
        spender: str,
        required: int,
        chain_id: int,
    ) -> ApprovalState:
        try:
            allowance = await self.rpc.get_allowance(chain_id, token, owner, spender)
        except (EvmRpcError, ValueError) as exc:
            raise ApprovalFailed(
                f"Could not read allowance for {token}: {exc}",
                user_message="Could not check token allowance",
                chain_id=chain_id,
            ) from exc
        return ApprovalState(
            token_address=token,
            owner=owner,
            spender=spender,
            allowance=allowance,
            required=required,
        )

    async def ensure_allowance(
        self,
        wallet: WalletAdapter,
        *,
        owner: str,
        spender: str,
        token: str,
        required: int,
        chain_id: int,
        symbol: str = "token",
        on_status: StatusCallback = _noop,
    ) -> Optional[str]:
        """Raise the allowance to ``required`` if needed.

        Returns the approval transaction hash, or None when nothing was sent.

        Raises:
            ApprovalFailed: rejected, reverted, or no receipt in time.
        """
        if is_native_asset(chain_id, token):
            return None

        state = await self.read_allowance(
            token=token, owner=owner, spender=spender, required=required, chain_id=chain_id
        )
        if state.is_sufficient:
            logger.info(f"Allowance {state.allowance} >= {required} for {symbol}; no approval needed")
            return None

        on_status(f"Approving {symbol}...")
        payload = TransactionPayload(
            data=encode_approve_call(spender, required),
            to=token,
            value=0,
            chain_id=chain_id,
        )
        try:
            approve_hash = await wallet.sign_and_send(payload)
        except UserRejected as exc:
            raise ApprovalFailed(
                f"Approval rejected: {exc}",
                user_message="Request rejected",
                rejected=True,
                chain_id=chain_id,
            ) from exc
        except SettlementError as exc:
            raise ApprovalFailed(
                f"Approval could not be sent: {exc}",
                chain_id=chain_id,
            ) from exc

        logger.info(f"Approval submitted: {approve_hash} ({symbol} -> {spender})")
        on_status("Waiting for Approval Confirmation...")

        try:
            receipt = await self.rpc.wait_for_receipt(
                chain_id, approve_hash, timeout_s=self.receipt_timeout_s
            )
        except ReceiptTimeoutError as exc:
            raise ApprovalFailed(
                f"Approval {approve_hash} not confirmed in {self.receipt_timeout_s}s",
                user_message="Approval is taking too long to confirm",
                tx_id=approve_hash,
                chain_id=chain_id,
            ) from exc

        if not receipt.succeeded:
            raise ApprovalFailed(
                f"Approval {approve_hash} reverted",
                user_message="Token approval failed",
                tx_id=approve_hash,
                chain_id=chain_id,
            )

        on_status("Approved! Initiating Bridge Transaction...")
        return approve_hash


__all__ = ["ApprovalManager"]
