"""P2P order book domain models: pure dataclasses, no SQLAlchemy dependency."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.pm_common.enums import RESTING_ORDER_STATUSES, OrderStatus

_SETTLEABLE_STATUSES = (
    OrderStatus.FILLED.value,
    OrderStatus.PARTIALLY_FILLED.value,
    OrderStatus.CANCELLED.value,
    OrderStatus.EXPIRED.value,
)


@dataclass
class Order:
    id: str
    market_id: str
    game_id: str
    user_address: str
    outcome: str
    mcps: Decimal  # max cost per share, 0 < mcps < 1
    amount: Decimal  # capital committed
    max_shares: Decimal  # amount / mcps, truncated to micro-units
    app_session_id: str
    app_session_version: int
    status: str = OrderStatus.OPEN.value
    # Fill tracking: filled + unfilled == amount / max_shares at all times
    filled_amount: Decimal = Decimal(0)
    filled_shares: Decimal = Decimal(0)
    unfilled_amount: Decimal = field(init=False)
    unfilled_shares: Decimal = field(init=False)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.unfilled_amount = self.amount - self.filled_amount
        self.unfilled_shares = self.max_shares - self.filled_shares

    def apply_fill(self, shares: Decimal, cost: Decimal) -> None:
        self.filled_shares += shares
        self.filled_amount += cost
        self.unfilled_shares -= shares
        self.unfilled_amount -= cost
        if self.unfilled_shares <= 0:
            self.status = OrderStatus.FILLED.value
        else:
            self.status = OrderStatus.PARTIALLY_FILLED.value

    @property
    def is_cancellable(self) -> bool:
        return self.status in RESTING_ORDER_STATUSES

    @property
    def is_settleable(self) -> bool:
        return self.status in _SETTLEABLE_STATUSES and self.filled_shares > 0


@dataclass
class Fill:
    """One side of a match. Every match writes two rows referencing each other."""

    id: str
    order_id: str
    counterparty_order_id: str
    counterparty_address: str
    shares: Decimal
    effective_price: Decimal  # price per share paid by this side
    cost: Decimal  # shares * effective_price
    filled_at: datetime


@dataclass
class OrderRequest:
    market_id: str
    game_id: str
    user_address: str
    outcome: str
    mcps: Decimal
    amount: Decimal
    app_session_id: str
    app_session_version: int = 1


@dataclass
class DepthLevel:
    price: Decimal
    shares: Decimal
    order_count: int


@dataclass
class OrderBookDepth:
    market_id: str
    outcomes: dict[str, list[DepthLevel]]
    updated_at: datetime


@dataclass
class PlaceOrderResult:
    order_id: str
    fills: list[Fill]  # incoming-side fills only
    order: Order
    # resting side of each fill, and the resting orders they belong to by id
    counterparty_fills: list[Fill] = field(default_factory=list)
    counterparties: dict[str, Order] = field(default_factory=dict)


def opposite_outcome(outcome: str, outcomes: list[str]) -> str:
    """The other side of a binary market."""
    return outcomes[1] if outcome == outcomes[0] else outcomes[0]
