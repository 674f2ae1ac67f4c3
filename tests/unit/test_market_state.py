# tests/unit/test_market_state.py
"""Unit tests for the market lifecycle transition table."""
import pytest

from src.pm_common.errors import InvalidTransitionError
from src.pm_market.domain.state_machine import can_transition, validate_transition

ALL = ["PENDING", "OPEN", "CLOSED", "RESOLVED"]
ALLOWED = {("PENDING", "OPEN"), ("OPEN", "CLOSED"), ("CLOSED", "RESOLVED")}


@pytest.mark.parametrize("current", ALL)
@pytest.mark.parametrize("requested", ALL)
def test_only_forward_single_steps_allowed(current: str, requested: str) -> None:
    assert can_transition(current, requested) is ((current, requested) in ALLOWED)


def test_validate_passes_for_allowed_move() -> None:
    validate_transition("PENDING", "OPEN")


def test_self_transition_rejected() -> None:
    with pytest.raises(InvalidTransitionError) as exc_info:
        validate_transition("OPEN", "OPEN")
    assert exc_info.value.current == "OPEN"
    assert exc_info.value.requested == "OPEN"


def test_skip_rejected_with_both_states_in_message() -> None:
    with pytest.raises(InvalidTransitionError) as exc_info:
        validate_transition("PENDING", "CLOSED")
    assert exc_info.value.code == 2001
    assert "PENDING" in exc_info.value.message
    assert "CLOSED" in exc_info.value.message


def test_resolved_is_terminal() -> None:
    for target in ALL:
        assert can_transition("RESOLVED", target) is False
