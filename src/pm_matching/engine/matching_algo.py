"""Price-time priority matching with price improvement for binary P2P markets.

Two bettors on opposite outcomes match when their max-cost-per-share values
sum to at least 1. The surplus above 1 is split evenly, so each side pays
less than its limit and the two prices always sum to exactly 1.
"""
import logging
from collections.abc import Iterable
from decimal import Decimal

from src.pm_common.units import ONE, ZERO
from src.pm_matching.domain.models import MatchFill, MatchResult, RestingOrder

logger = logging.getLogger(__name__)

_TWO = Decimal(2)


def match_order(
    incoming_mcps: Decimal,
    incoming_shares: Decimal,
    resting_orders: Iterable[RestingOrder],
) -> MatchResult:
    """Match an incoming order against resting orders.

    resting_orders must already be sorted by mcps descending, then creation
    time ascending. Scanning stops at the first order that cannot cross.
    """
    result = MatchResult(remaining_shares=incoming_shares)
    for resting in resting_orders:
        if result.remaining_shares <= ZERO:
            break
        combined = incoming_mcps + resting.mcps
        if combined < ONE:
            # sorted by price: nothing further down can cross either
            logger.debug(
                "Match stop at %s: combined %s < 1", resting.order_id, combined
            )
            break
        if resting.unfilled_shares <= ZERO:
            continue

        improvement = (combined - ONE) / _TWO
        fill = MatchFill(
            resting_order_id=resting.order_id,
            shares=min(result.remaining_shares, resting.unfilled_shares),
            incoming_price=incoming_mcps - improvement,
            resting_price=resting.mcps - improvement,
        )
        result.fills.append(fill)
        result.remaining_shares -= fill.shares
        logger.debug(
            "Matched %s shares vs %s at %s/%s",
            fill.shares,
            resting.order_id,
            fill.incoming_price,
            fill.resting_price,
        )
    return result
