"""
Settlement State Machine

Tracks one settlement attempt through its stages and rejects transitions
that skip or reverse them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Set


class SettlementState(str, Enum):
    IDLE = "idle"
    PROVING_IDENTITY = "proving_identity"
    QUOTING = "quoting"
    APPROVING = "approving"
    SIGNING = "signing"
    BROADCASTING = "broadcasting"
    CONFIRMING = "confirming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES: Set[SettlementState] = {SettlementState.SUCCEEDED, SettlementState.FAILED}


@dataclass
class StateTransition:
    """Record of a state transition."""

    from_state: SettlementState
    to_state: SettlementState
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    reason: Optional[str] = None
    error_kind: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fromState": self.from_state.value,
            "toState": self.to_state.value,
            "timestamp": self.timestamp.isoformat(),
            "reason": self.reason,
            "errorKind": self.error_kind,
        }


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        from_state: SettlementState,
        to_state: SettlementState,
        message: Optional[str] = None,
    ):
        self.from_state = from_state
        self.to_state = to_state
        self.message = message or f"Cannot transition from {from_state.value} to {to_state.value}"
        super().__init__(self.message)


class SettlementStateMachine:
    """
    Linear progression with optional quoting (Sui) and approval (EVM tokens).
    Every non-terminal state may fail; terminal states accept nothing.
    """

    TRANSITIONS: Dict[SettlementState, Set[SettlementState]] = {
        SettlementState.IDLE: {
            SettlementState.PROVING_IDENTITY,
            SettlementState.FAILED,
        },
        SettlementState.PROVING_IDENTITY: {
            SettlementState.QUOTING,
            SettlementState.SIGNING,  # Executors that need no route
            SettlementState.FAILED,
        },
        SettlementState.QUOTING: {
            SettlementState.APPROVING,
            SettlementState.SIGNING,
            SettlementState.FAILED,
        },
        SettlementState.APPROVING: {
            SettlementState.SIGNING,
            SettlementState.FAILED,
        },
        SettlementState.SIGNING: {
            SettlementState.BROADCASTING,
            SettlementState.FAILED,
        },
        SettlementState.BROADCASTING: {
            SettlementState.CONFIRMING,
            SettlementState.FAILED,
        },
        SettlementState.CONFIRMING: {
            SettlementState.SUCCEEDED,
            SettlementState.FAILED,
        },
        SettlementState.SUCCEEDED: set(),
        SettlementState.FAILED: set(),
    }

    def __init__(self, attempt_id: str, logger: Optional[logging.Logger] = None):
        self.attempt_id = attempt_id
        self.logger = logger or logging.getLogger(__name__)
        self.current_state = SettlementState.IDLE
        self.history: List[StateTransition] = []

    @property
    def is_terminal(self) -> bool:
        return self.current_state in TERMINAL_STATES

    def can_transition_to(self, to_state: SettlementState) -> bool:
        return to_state in self.TRANSITIONS.get(self.current_state, set())

    def transition_to(
        self,
        to_state: SettlementState,
        reason: Optional[str] = None,
        error_kind: Optional[str] = None,
    ) -> StateTransition:
        """
        Move to ``to_state``.

        Raises:
            InvalidTransitionError: If transition is not allowed
        """
        from_state = self.current_state
        if not self.can_transition_to(to_state):
            allowed = sorted(s.value for s in self.TRANSITIONS.get(from_state, set()))
            raise InvalidTransitionError(
                from_state=from_state,
                to_state=to_state,
                message=f"Invalid transition from {from_state.value} to {to_state.value}. "
                        f"Allowed: {allowed}",
            )

        transition = StateTransition(
            from_state=from_state,
            to_state=to_state,
            reason=reason,
            error_kind=error_kind,
        )
        self.current_state = to_state
        self.history.append(transition)

        self.logger.info(
            f"Settlement {self.attempt_id}: {from_state.value} -> {to_state.value}"
            f"{f' ({reason})' if reason else ''}"
        )

        return transition

    def fail(self, reason: str, error_kind: Optional[str] = None) -> Optional[StateTransition]:
        """Move to FAILED unless already terminal."""
        if self.is_terminal:
            return None
        return self.transition_to(SettlementState.FAILED, reason=reason, error_kind=error_kind)


__all__ = [
    "InvalidTransitionError",
    "SettlementState",
    "SettlementStateMachine",
    "StateTransition",
    "TERMINAL_STATES",
]
