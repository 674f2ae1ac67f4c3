"""NAV share pricing and the withdrawal gate: pure functions."""

from decimal import Decimal

from src.pm_common.units import ONE, ZERO
from src.pm_liquidity.domain.models import WithdrawalGate

OPEN_MARKETS_REASON = "Withdrawals locked while markets are OPEN"
UNSETTLED_POSITIONS_REASON = "Withdrawals locked while positions are unsettled"


def share_price(pool_value: Decimal, total_shares: Decimal) -> Decimal:
    """Pool value per outstanding share; an empty pool mints at 1."""
    if total_shares == ZERO:
        return ONE
    return pool_value / total_shares


def can_withdraw(has_open_markets: bool, has_unsettled_positions: bool) -> WithdrawalGate:
    # Only the first blocking reason is reported
    if has_open_markets:
        return WithdrawalGate(allowed=False, reason=OPEN_MARKETS_REASON)
    if has_unsettled_positions:
        return WithdrawalGate(allowed=False, reason=UNSETTLED_POSITIONS_REASON)
    return WithdrawalGate(allowed=True)
