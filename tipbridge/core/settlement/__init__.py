"""Tip settlement: quoting, approvals, gas, executors and the engine."""

from .approval import ApprovalManager
from .engine import SettlementEngine
from .executors import ExecutorRegistry, default_registry
from .gas import resolve_gas_price
from .quote import QuoteClient, ensure_destination
from .state import InvalidTransitionError, SettlementState, SettlementStateMachine

__all__ = [
    "ApprovalManager",
    "ExecutorRegistry",
    "InvalidTransitionError",
    "QuoteClient",
    "SettlementEngine",
    "SettlementState",
    "SettlementStateMachine",
    "default_registry",
    "ensure_destination",
    "resolve_gas_price",
]
