"""Settlement scoring rule.

A winning share redeems at exactly 1; a losing share is worth nothing.
"""

from datetime import datetime

from src.pm_common.enums import SettlementResult
from src.pm_common.units import ZERO
from src.pm_settlement.domain.models import Position, Settlement


def classify_position(
    position: Position, resolved_outcome: str, settled_at: datetime
) -> Settlement:
    won = position.outcome == resolved_outcome
    payout = position.shares if won else ZERO
    return Settlement(
        market_id=position.market_id,
        address=position.address,
        outcome=position.outcome,
        result=(SettlementResult.WIN if won else SettlementResult.LOSS).value,
        shares=position.shares,
        cost_paid=position.cost_paid,
        payout=payout,
        profit=payout - position.cost_paid,
        app_session_id=position.app_session_id,
        settled_at=settled_at,
    )
