"""Market lifecycle: PENDING -> OPEN -> CLOSED -> RESOLVED (terminal).

Transitions are one-directional; self-transitions and skips are rejected.
"""

from src.pm_common.enums import MarketStatus
from src.pm_common.errors import InvalidTransitionError

VALID_TRANSITIONS: dict[MarketStatus, tuple[MarketStatus, ...]] = {
    MarketStatus.PENDING: (MarketStatus.OPEN,),
    MarketStatus.OPEN: (MarketStatus.CLOSED,),
    MarketStatus.CLOSED: (MarketStatus.RESOLVED,),
    MarketStatus.RESOLVED: (),
}


def can_transition(current: str, requested: str) -> bool:
    return MarketStatus(requested) in VALID_TRANSITIONS[MarketStatus(current)]


def validate_transition(current: str, requested: str) -> None:
    """Raise InvalidTransitionError naming both states if the move is illegal."""
    if not can_transition(current, requested):
        raise InvalidTransitionError(current, requested)
