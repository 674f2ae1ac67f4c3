# src/pm_order/application/schemas.py
from decimal import Decimal

from pydantic import BaseModel, Field

from src.pm_common.datetime_utils import to_epoch_ms
from src.pm_order.domain.models import (
    DepthLevel,
    Fill,
    Order,
    OrderBookDepth,
    OrderRequest,
    PlaceOrderResult,
)


class PlaceOrderRequest(BaseModel):
    market_id: str
    game_id: str
    user_address: str
    outcome: str
    mcps: Decimal
    amount: Decimal
    app_session_id: str
    app_session_version: int = Field(default=1, ge=1)

    def to_domain(self) -> OrderRequest:
        return OrderRequest(
            market_id=self.market_id,
            game_id=self.game_id,
            user_address=self.user_address,
            outcome=self.outcome,
            mcps=self.mcps,
            amount=self.amount,
            app_session_id=self.app_session_id,
            app_session_version=self.app_session_version,
        )


class FillResponse(BaseModel):
    fill_id: str
    order_id: str
    counterparty_order_id: str
    counterparty_address: str
    shares: Decimal
    effective_price: Decimal
    cost: Decimal
    filled_at: int

    @classmethod
    def from_domain(cls, f: Fill) -> "FillResponse":
        return cls(
            fill_id=f.id,
            order_id=f.order_id,
            counterparty_order_id=f.counterparty_order_id,
            counterparty_address=f.counterparty_address,
            shares=f.shares,
            effective_price=f.effective_price,
            cost=f.cost,
            filled_at=to_epoch_ms(f.filled_at),  # type: ignore[arg-type]
        )


class OrderResponse(BaseModel):
    order_id: str
    market_id: str
    game_id: str
    user_address: str
    outcome: str
    mcps: Decimal
    amount: Decimal
    filled_amount: Decimal
    unfilled_amount: Decimal
    max_shares: Decimal
    filled_shares: Decimal
    unfilled_shares: Decimal
    app_session_id: str
    app_session_version: int
    status: str
    created_at: int | None = None
    updated_at: int | None = None

    @classmethod
    def from_domain(cls, o: Order) -> "OrderResponse":
        return cls(
            order_id=o.id,
            market_id=o.market_id,
            game_id=o.game_id,
            user_address=o.user_address,
            outcome=o.outcome,
            mcps=o.mcps,
            amount=o.amount,
            filled_amount=o.filled_amount,
            unfilled_amount=o.unfilled_amount,
            max_shares=o.max_shares,
            filled_shares=o.filled_shares,
            unfilled_shares=o.unfilled_shares,
            app_session_id=o.app_session_id,
            app_session_version=o.app_session_version,
            status=o.status,
            created_at=to_epoch_ms(o.created_at),
            updated_at=to_epoch_ms(o.updated_at),
        )


class PlaceOrderResponse(BaseModel):
    order_id: str
    fills: list[FillResponse]
    order: OrderResponse

    @classmethod
    def from_domain(cls, r: PlaceOrderResult) -> "PlaceOrderResponse":
        return cls(
            order_id=r.order_id,
            fills=[FillResponse.from_domain(f) for f in r.fills],
            order=OrderResponse.from_domain(r.order),
        )


class DepthLevelOut(BaseModel):
    price: Decimal
    shares: Decimal
    order_count: int

    @classmethod
    def from_domain(cls, lv: DepthLevel) -> "DepthLevelOut":
        return cls(price=lv.price, shares=lv.shares, order_count=lv.order_count)


class DepthResponse(BaseModel):
    market_id: str
    outcomes: dict[str, list[DepthLevelOut]]
    updated_at: int

    @classmethod
    def from_domain(cls, d: OrderBookDepth) -> "DepthResponse":
        return cls(
            market_id=d.market_id,
            outcomes={
                outcome: [DepthLevelOut.from_domain(lv) for lv in levels]
                for outcome, levels in d.outcomes.items()
            },
            updated_at=to_epoch_ms(d.updated_at),  # type: ignore[arg-type]
        )
