"""Pydantic response models for pm_market.

Decimals are serialized as strings so no precision is lost; timestamps are
epoch milliseconds.
"""

from decimal import Decimal

from pydantic import BaseModel

from src.pm_common.datetime_utils import to_epoch_ms
from src.pm_market.domain.models import Loser, Market, Winner


class MarketResponse(BaseModel):
    id: str
    game_id: str
    category_id: str
    sequence_num: int
    status: str
    quantities: list[Decimal]
    b: Decimal
    volume: Decimal
    outcome: str | None
    created_at: int
    opened_at: int | None
    closed_at: int | None
    resolved_at: int | None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketResponse":
        return cls(
            id=m.id,
            game_id=m.game_id,
            category_id=m.category_id,
            sequence_num=m.sequence_num,
            status=m.status,
            quantities=list(m.quantities),
            b=m.b,
            volume=m.volume,
            outcome=m.outcome,
            created_at=to_epoch_ms(m.created_at),  # type: ignore[arg-type]
            opened_at=to_epoch_ms(m.opened_at),
            closed_at=to_epoch_ms(m.closed_at),
            resolved_at=to_epoch_ms(m.resolved_at),
        )


class WinnerOut(BaseModel):
    address: str
    payout: Decimal
    app_session_id: str

    @classmethod
    def from_domain(cls, w: Winner) -> "WinnerOut":
        return cls(address=w.address, payout=w.payout, app_session_id=w.app_session_id)


class LoserOut(BaseModel):
    address: str
    loss: Decimal
    app_session_id: str

    @classmethod
    def from_domain(cls, lo: Loser) -> "LoserOut":
        return cls(address=lo.address, loss=lo.loss, app_session_id=lo.app_session_id)
