"""Domain models for pm_settlement: positions and the settlement archive."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.pm_common.enums import SessionStatus


@dataclass
class Position:
    address: str
    market_id: str
    outcome: str
    shares: Decimal
    cost_paid: Decimal
    app_session_id: str
    app_session_version: int
    created_at: datetime
    fee: Decimal = Decimal(0)
    session_status: str = SessionStatus.OPEN.value
    session_data: str | None = None  # opaque payment-channel state
    id: int | None = None  # assigned by the store


@dataclass
class Settlement:
    """Write-once record of how one position was scored at resolution."""

    market_id: str
    address: str
    outcome: str
    result: str  # WIN / LOSS
    shares: Decimal
    cost_paid: Decimal
    payout: Decimal
    profit: Decimal  # payout - cost_paid
    app_session_id: str
    settled_at: datetime
    id: int | None = None
