"""
Settlement engine.

Drives one tip from a connected wallet to a confirmed transaction:

    IDLE -> PROVING_IDENTITY -> QUOTING -> (APPROVING) -> SIGNING
         -> BROADCASTING -> CONFIRMING -> SUCCEEDED

Any stage may end in FAILED. Nothing is retried; a failed attempt is
resubmitted from scratch with a fresh quote.
"""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Callable, Optional

from ...logging_config import bind_attempt, get_event_logger
from ...services.address import shorten_address
from ..chains import chain_name
from ..errors import (
    BroadcastFailed,
    ConfirmationTimeout,
    SettlementError,
    UnsupportedWalletOperation,
    WalletNotConnected,
)
from ..identity import IdentityProver, WalletSession
from ..models import ExecutionResult, TipRequest
from ..wallets.base import WalletAdapter, WalletCapability
from .executors import ExecutorRegistry, SigningContext, default_registry
from .quote import QuoteClient, ensure_destination
from .state import SettlementState, SettlementStateMachine


logger = logging.getLogger(__name__)
_slog = get_event_logger("settlement")

StatusCallback = Callable[[str], None]


def _noop(_: str) -> None:
    return None


def _fee_percent(fee: Decimal) -> str:
    return format((fee * 100).normalize(), "f")


class SettlementEngine:
    """
    Usage:
        engine = SettlementEngine()
        result = await engine.settle(request, wallet, on_status=print)
    """

    def __init__(
        self,
        quotes: Optional[QuoteClient] = None,
        executors: Optional[ExecutorRegistry] = None,
        identity: Optional[IdentityProver] = None,
    ):
        self.quotes = quotes or QuoteClient()
        self.executors = executors or default_registry()
        self.identity = identity or IdentityProver()

    def check_wallet(self, request: TipRequest, wallet: WalletAdapter) -> None:
        """Refuse to start unless the wallet can carry this tip.

        Raises:
            WalletNotConnected: no connected account.
            UnsupportedWalletOperation: wrong family or no sign-and-send.
        """
        if not wallet.is_connected or not wallet.current_address:
            raise WalletNotConnected(
                f"{wallet.name} is not connected",
                chain_id=request.sender_chain_id,
            )
        if wallet.family != request.family:
            raise UnsupportedWalletOperation(
                f"{wallet.name} is a {wallet.family.value} wallet, "
                f"tip is from {request.family.value}",
                user_message=f"Connect a {request.family.value} wallet to tip from {chain_name(request.sender_chain_id)}",
                chain_id=request.sender_chain_id,
            )
        wallet.require(WalletCapability.SIGN_AND_SEND)

    async def prove_identity(self, wallet: WalletAdapter) -> Optional[WalletSession]:
        """Best-effort session; a failure here never stops the tip."""
        try:
            return await self.identity.ensure_session(wallet)
        except Exception as exc:
            logger.warning(f"Identity proof failed for {wallet.name}, continuing anonymously: {exc}")
            return None

    async def settle(
        self,
        request: TipRequest,
        wallet: WalletAdapter,
        on_status: StatusCallback = _noop,
    ) -> ExecutionResult:
        """
        Run one settlement attempt.

        Returns:
            ExecutionResult once success has been observed on-chain.

        Raises:
            SettlementError: the attempt failed; ``kind`` says how. Any other
                exception is converted, so callers need handle only this.
        """
        attempt_id = uuid.uuid4().hex[:12]
        machine = SettlementStateMachine(attempt_id, logger)
        context: Optional[SigningContext] = None

        with bind_attempt(attempt_id, source_chain=request.sender_chain_id, family=request.family.value):
            try:
                self.check_wallet(request, wallet)
                executor = self.executors.for_family(request.family)

                _slog.info(
                    "settlement_started",
                    amount=request.amount,
                    asset=request.asset.symbol,
                    sender=shorten_address(wallet.current_address),
                    recipient=shorten_address(request.recipient_address),
                )

                machine.transition_to(SettlementState.PROVING_IDENTITY)
                await self.prove_identity(wallet)

                quote = None
                if executor.requires_quote:
                    machine.transition_to(SettlementState.QUOTING)
                    on_status(f"Fetching quote from LI.FI (with {_fee_percent(self.quotes.fee)}% fee)...")
                    quote = await self.quotes.get_quote(request)
                    # Must hold before any signing prompt is shown
                    ensure_destination(quote, request)

                context = SigningContext(wallet=wallet, machine=machine, on_status=on_status)
                result = await executor.execute(quote, request, context)

                machine.transition_to(SettlementState.SUCCEEDED)
                on_status("Success! Tip sent.")
                _slog.info("settlement_succeeded", tx_id=result.tx_id)
                return result

            except SettlementError as exc:
                self._record_failure(machine, exc)
                raise
            except Exception as exc:
                logger.exception(f"Settlement {attempt_id} crashed in {machine.current_state.value}")
                error = self._wrap_unexpected(exc, request, context)
                self._record_failure(machine, error)
                raise error from exc

    @staticmethod
    def _wrap_unexpected(
        exc: Exception,
        request: TipRequest,
        context: Optional[SigningContext],
    ) -> SettlementError:
        """Fold an unexpected exception into the settlement taxonomy.

        Once a transaction has been submitted the failure keeps its id, so
        the viewer looks it up instead of sending a second tip.
        """
        tx_id = context.tx_id if context is not None else None
        if tx_id is not None:
            return ConfirmationTimeout(
                f"Confirmation of {tx_id} failed: {exc}",
                user_message=ConfirmationTimeout.default_user_message,
                tx_id=tx_id,
                chain_id=request.sender_chain_id,
            )
        return BroadcastFailed(
            f"Settlement failed before broadcast: {exc}",
            user_message="Transaction failed",
            chain_id=request.sender_chain_id,
        )

    @staticmethod
    def _record_failure(machine: SettlementStateMachine, exc: SettlementError) -> None:
        failed_in = machine.current_state
        machine.fail(exc.message, exc.kind.value)
        _slog.warning(
            "settlement_failed",
            kind=exc.kind.value,
            error=exc.message,
            tx_id=exc.tx_id,
            state=failed_in.value,
        )


__all__ = ["SettlementEngine"]
