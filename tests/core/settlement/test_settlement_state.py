"""
Tests for the Settlement State Machine
"""

import pytest

from tipbridge.core.settlement.state import (
    InvalidTransitionError,
    SettlementState,
    SettlementStateMachine,
)


@pytest.fixture
def state_machine() -> SettlementStateMachine:
    return SettlementStateMachine("attempt-1")


def test_starts_idle(state_machine):
    assert state_machine.current_state == SettlementState.IDLE
    assert not state_machine.is_terminal
    assert state_machine.history == []


def test_full_evm_token_path(state_machine):
    for state in (
        SettlementState.PROVING_IDENTITY,
        SettlementState.QUOTING,
        SettlementState.APPROVING,
        SettlementState.SIGNING,
        SettlementState.BROADCASTING,
        SettlementState.CONFIRMING,
        SettlementState.SUCCEEDED,
    ):
        state_machine.transition_to(state)

    assert state_machine.is_terminal
    assert len(state_machine.history) == 7
    assert state_machine.history[0].to_dict()["fromState"] == "idle"


def test_unquoted_path_skips_quoting(state_machine):
    state_machine.transition_to(SettlementState.PROVING_IDENTITY)
    state_machine.transition_to(SettlementState.SIGNING)
    assert state_machine.current_state == SettlementState.SIGNING


def test_cannot_skip_to_signing_from_idle(state_machine):
    with pytest.raises(InvalidTransitionError) as exc_info:
        state_machine.transition_to(SettlementState.SIGNING)
    assert exc_info.value.from_state == SettlementState.IDLE
    assert state_machine.current_state == SettlementState.IDLE


def test_no_back_edges(state_machine):
    state_machine.transition_to(SettlementState.PROVING_IDENTITY)
    state_machine.transition_to(SettlementState.QUOTING)
    with pytest.raises(InvalidTransitionError):
        state_machine.transition_to(SettlementState.PROVING_IDENTITY)


def test_fail_from_any_active_state(state_machine):
    state_machine.transition_to(SettlementState.PROVING_IDENTITY)
    state_machine.transition_to(SettlementState.QUOTING)
    transition = state_machine.fail("no route", "quote_failed")

    assert transition.error_kind == "quote_failed"
    assert state_machine.current_state == SettlementState.FAILED
    # Terminal: a second failure is a no-op, further progress is rejected
    assert state_machine.fail("again") is None
    with pytest.raises(InvalidTransitionError):
        state_machine.transition_to(SettlementState.SIGNING)
