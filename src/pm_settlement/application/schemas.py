"""Pydantic models for pm_settlement."""

from decimal import Decimal

from pydantic import BaseModel

from src.pm_common.datetime_utils import to_epoch_ms
from src.pm_settlement.domain.models import Position, Settlement


class PositionResponse(BaseModel):
    id: int | None
    address: str
    market_id: str
    outcome: str
    shares: Decimal
    cost_paid: Decimal
    fee: Decimal
    app_session_id: str
    app_session_version: int
    session_status: str
    session_data: str | None
    created_at: int

    @classmethod
    def from_domain(cls, p: Position) -> "PositionResponse":
        return cls(
            id=p.id,
            address=p.address,
            market_id=p.market_id,
            outcome=p.outcome,
            shares=p.shares,
            cost_paid=p.cost_paid,
            fee=p.fee,
            app_session_id=p.app_session_id,
            app_session_version=p.app_session_version,
            session_status=p.session_status,
            session_data=p.session_data,
            created_at=to_epoch_ms(p.created_at),  # type: ignore[arg-type]
        )


class SettlementResponse(BaseModel):
    id: int | None
    market_id: str
    address: str
    outcome: str
    result: str
    shares: Decimal
    cost_paid: Decimal
    payout: Decimal
    profit: Decimal
    app_session_id: str
    settled_at: int

    @classmethod
    def from_domain(cls, s: Settlement) -> "SettlementResponse":
        return cls(
            id=s.id,
            market_id=s.market_id,
            address=s.address,
            outcome=s.outcome,
            result=s.result,
            shares=s.shares,
            cost_paid=s.cost_paid,
            payout=s.payout,
            profit=s.profit,
            app_session_id=s.app_session_id,
            settled_at=to_epoch_ms(s.settled_at),  # type: ignore[arg-type]
        )
