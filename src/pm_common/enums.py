"""Global enums: must match DB CHECK constraints exactly (see alembic/versions)."""

from enum import Enum


class MarketStatus(str, Enum):
    PENDING = "PENDING"
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    RESOLVED = "RESOLVED"


class OrderStatus(str, Enum):
    OPEN = "OPEN"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    SETTLED = "SETTLED"


# Orders that still sit on the book and can be matched against
RESTING_ORDER_STATUSES: tuple[str, ...] = (
    OrderStatus.OPEN.value,
    OrderStatus.PARTIALLY_FILLED.value,
)


class LPEventType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"


class SessionStatus(str, Enum):
    OPEN = "open"
    SETTLING = "settling"
    SETTLED = "settled"


class SettlementResult(str, Enum):
    WIN = "WIN"
    LOSS = "LOSS"
