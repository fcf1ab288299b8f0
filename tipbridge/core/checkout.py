"""
Tip checkout.

Caller-side boundary around the engine: owns the busy flag and the transient
form fields, turns settlement errors into user-facing text, and hands a
settled tip to the success callback and the ledger.
"""

from __future__ import annotations

import inspect
import logging
from decimal import Decimal
from typing import Any, Callable, Optional

from ..config import settings
from ..providers.backend import LedgerClient
from .errors import ApprovalFailed, InvalidTipRequest, SettlementError, UserRejected
from .models import Asset, ExecutionResult, GasTier, TipRequest
from .settlement.engine import SettlementEngine
from .wallets.base import WalletAdapter


logger = logging.getLogger(__name__)

REJECTED_STATUS = "Request rejected"
FAILED_MESSAGE = "Transaction failed"


class TipCheckout:
    """One tip form bound to a wallet and a recipient."""

    def __init__(
        self,
        engine: SettlementEngine,
        wallet: WalletAdapter,
        *,
        recipient_address: str,
        recipient_chain_id: Optional[int] = None,
        streamer_id: Optional[str] = None,
        ledger: Optional[LedgerClient] = None,
        on_success: Optional[Callable[[ExecutionResult], Any]] = None,
        on_status: Optional[Callable[[str], None]] = None,
    ):
        self.engine = engine
        self.wallet = wallet
        self.recipient_address = recipient_address
        self.recipient_chain_id = recipient_chain_id or settings.settlement_chain_id
        self.streamer_id = streamer_id or settings.streamer_id
        self.ledger = ledger or LedgerClient()
        self._on_success = on_success
        self._on_status = on_status

        self.busy = False
        self.amount = ""
        self.message = ""
        self.display_name = ""
        self.status = ""
        self.error = ""

    def _set_status(self, status: str) -> None:
        self.status = status
        if self._on_status is not None:
            self._on_status(status)

    async def submit(
        self,
        *,
        sender_chain_id: int,
        asset: Asset,
        amount: Optional[str] = None,
        message: Optional[str] = None,
        display_name: Optional[str] = None,
        gas_tier: GasTier = GasTier.AUTO,
        slippage: Optional[Decimal] = None,
    ) -> Optional[ExecutionResult]:
        """Run one attempt from the form fields. Returns None unless it settled."""

        if self.busy:
            logger.info("Tip already in progress; ignoring submit")
            return None

        if amount is not None:
            self.amount = amount
        if message is not None:
            self.message = message
        if display_name is not None:
            self.display_name = display_name

        self.error = ""
        self.busy = True
        try:
            try:
                request = TipRequest(
                    sender_chain_id=sender_chain_id,
                    sender_address=self.wallet.current_address or "",
                    asset=asset,
                    amount=self.amount,
                    recipient_address=self.recipient_address,
                    recipient_chain_id=self.recipient_chain_id,
                    message=self.message,
                    display_name=self.display_name or None,
                    gas_tier=gas_tier,
                    slippage=slippage,
                )
            except InvalidTipRequest as exc:
                self.error = str(exc)
                return None

            try:
                result = await self.engine.settle(request, self.wallet, on_status=self._set_status)
            except UserRejected:
                self._set_status(REJECTED_STATUS)
                return None
            except ApprovalFailed as exc:
                if exc.rejected:
                    self._set_status(REJECTED_STATUS)
                else:
                    self._set_status("")
                    self.error = exc.user_message
                return None
            except SettlementError as exc:
                self._set_status("")
                self.error = exc.user_message
                return None
            except Exception:
                logger.exception("Tip submit failed unexpectedly")
                self._set_status("")
                self.error = FAILED_MESSAGE
                return None

            if self._on_success is not None:
                try:
                    outcome = self._on_success(result)
                    if inspect.isawaitable(outcome):
                        await outcome
                except Exception:
                    # Already settled: ledger and field reset still run
                    logger.exception(f"Success callback failed for {result.tx_id}")

            # Ledger failures are logged inside notify and never reach the result
            await self.ledger.notify(
                result,
                self.streamer_id,
                session=self.engine.identity.cached(self.wallet),
            )

            self.amount = ""
            self.message = ""
            return result
        finally:
            self.busy = False


__all__ = ["FAILED_MESSAGE", "REJECTED_STATUS", "TipCheckout"]
