"""Pydantic responses for operations that span several components."""

from decimal import Decimal

from pydantic import BaseModel

from src.pm_market.application.schemas import LoserOut, MarketResponse, WinnerOut
from src.pm_market.domain.models import Market, ResolutionResult
from src.pm_order.application.schemas import OrderResponse
from src.pm_order.domain.models import Order
from src.pm_settlement.application.schemas import SettlementResponse
from src.pm_settlement.domain.models import Settlement


class CloseMarketResponse(BaseModel):
    market: MarketResponse
    expired_orders: list[OrderResponse]

    @classmethod
    def from_domain(cls, market: Market, expired: list[Order]) -> "CloseMarketResponse":
        return cls(
            market=MarketResponse.from_domain(market),
            expired_orders=[OrderResponse.from_domain(o) for o in expired],
        )


class ResolutionResponse(BaseModel):
    market_id: str
    outcome: str
    winners: list[WinnerOut]
    losers: list[LoserOut]
    total_payout: Decimal
    settlements: list[SettlementResponse]

    @classmethod
    def from_domain(
        cls,
        market_id: str,
        outcome: str,
        result: ResolutionResult,
        settlements: list[Settlement],
    ) -> "ResolutionResponse":
        return cls(
            market_id=market_id,
            outcome=outcome,
            winners=[WinnerOut.from_domain(w) for w in result.winners],
            losers=[LoserOut.from_domain(lo) for lo in result.losers],
            total_payout=result.total_payout,
            settlements=[SettlementResponse.from_domain(s) for s in settlements],
        )
