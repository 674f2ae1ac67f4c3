from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class RestingOrder:
    """Opposite-outcome order waiting in the book, as the matcher sees it."""

    order_id: str
    mcps: Decimal
    unfilled_shares: Decimal


@dataclass
class MatchFill:
    """Single fill between the incoming order and one resting order."""

    resting_order_id: str
    shares: Decimal
    incoming_price: Decimal  # price per share paid by the incoming side
    resting_price: Decimal  # incoming_price + resting_price == 1


@dataclass
class MatchResult:
    fills: list[MatchFill] = field(default_factory=list)
    remaining_shares: Decimal = Decimal(0)

    @property
    def matched_shares(self) -> Decimal:
        return sum((f.shares for f in self.fills), Decimal(0))
