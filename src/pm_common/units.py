"""Decimal arithmetic helpers for prices, amounts and share counts.

All money, prices and shares are Decimal. No float reaches the ledger:
floats are converted through their shortest repr, so 0.6 -> Decimal("0.6").
Order share counts are truncated to micro-units (1 share = 1_000_000 units).
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation

from src.pm_common.errors import InvalidNumberError

MICRO = 1_000_000
SHARE_QUANTUM = Decimal(1) / MICRO  # 0.000001

ZERO = Decimal(0)
ONE = Decimal(1)


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce an int/float/str/Decimal into an exact, finite Decimal.

    NaN, infinities and unparseable strings raise InvalidNumberError.
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a numeric amount")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise InvalidNumberError(value) from exc
    if not result.is_finite():
        raise InvalidNumberError(value)
    return result


def quantize_shares(shares: Decimal) -> Decimal:
    """Truncate a share count to micro-units (never rounds up)."""
    return shares.quantize(SHARE_QUANTUM, rounding=ROUND_DOWN)


def is_dust(value: Decimal, threshold: Decimal) -> bool:
    """True when a non-negative balance is indistinguishable from zero."""
    return value < threshold
