"""
Transaction executor contract.

One executor per chain family, selected once per attempt by registry lookup.
Executors drive the attempt from SIGNING through CONFIRMING and return the
``ExecutionResult`` only after success has been observed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from ...chains import ChainFamily
from ...models import ExecutionResult, Quote, TipRequest
from ...wallets.base import WalletAdapter
from ..state import SettlementState, SettlementStateMachine


StatusCallback = Callable[[str], None]


@dataclass
class SigningContext:
    """What an executor needs from the running attempt."""

    wallet: WalletAdapter
    machine: SettlementStateMachine
    on_status: StatusCallback
    tx_id: Optional[str] = None

    @property
    def address(self) -> str:
        return self.wallet.current_address or ""

    def status(self, message: str) -> None:
        self.on_status(message)

    def enter(self, state: SettlementState, status: Optional[str] = None) -> None:
        self.machine.transition_to(state)
        if status:
            self.on_status(status)

    def broadcast(self, tx_id: str) -> None:
        """Record the submitted transaction; from here on failures carry ``tx_id``."""
        self.tx_id = tx_id
        self.enter(SettlementState.BROADCASTING, "Transaction Sent! Waiting for confirmation...")


class ChainTipExecutor(ABC):
    """Base executor interface"""

    family: ChainFamily
    requires_quote: bool = True

    @abstractmethod
    async def execute(
        self,
        quote: Optional[Quote],
        request: TipRequest,
        context: SigningContext,
    ) -> ExecutionResult:
        """Sign, broadcast and confirm; return the settled result"""
        pass

    def _result(
        self,
        tx_id: str,
        request: TipRequest,
        context: SigningContext,
        *,
        destination_chain_id: int,
        destination_address: str,
    ) -> ExecutionResult:
        return ExecutionResult(
            tx_id=tx_id,
            source_chain_id=request.sender_chain_id,
            destination_chain_id=destination_chain_id,
            source_address=context.address or request.sender_address,
            destination_address=destination_address,
            asset_symbol=request.asset.symbol,
            amount=request.amount,
            message=request.message,
            display_name=request.display_name,
        )

    def _routed_result(self, tx_id: str, quote: Quote, request: TipRequest, context: SigningContext) -> ExecutionResult:
        return self._result(
            tx_id,
            request,
            context,
            destination_chain_id=quote.to_chain_id,
            destination_address=quote.destination_address,
        )


__all__ = ["ChainTipExecutor", "SigningContext", "StatusCallback"]
