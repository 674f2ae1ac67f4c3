"""Domain models for pm_market: pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Protocol


@dataclass
class Market:
    id: str
    game_id: str
    category_id: str
    sequence_num: int
    status: str
    quantities: list[Decimal]
    b: Decimal
    volume: Decimal
    outcome: str | None
    created_at: datetime
    opened_at: datetime | None = None
    closed_at: datetime | None = None
    resolved_at: datetime | None = None


class ResolvablePosition(Protocol):
    """The slice of a bettor's position that resolution needs."""

    address: str
    outcome: str
    shares: Decimal
    cost_paid: Decimal
    app_session_id: str


@dataclass
class Winner:
    address: str
    payout: Decimal
    app_session_id: str


@dataclass
class Loser:
    address: str
    loss: Decimal
    app_session_id: str


@dataclass
class ResolutionResult:
    winners: list[Winner] = field(default_factory=list)
    losers: list[Loser] = field(default_factory=list)
    total_payout: Decimal = Decimal(0)


def build_market_id(game_id: str, category_id: str, sequence_num: int) -> str:
    """Deterministic market id: one per (game, category, sequence)."""
    return f"{game_id}-{category_id}-{sequence_num}"
