"""ExchangeService: inbound operations of the exchange core.

Each public method opens its own session and runs in exactly one transaction
(session_scope): everything it touches commits together or rolls back
together. Component services below only open savepoints.
"""

import logging
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import SessionFactory, async_session_factory, session_scope
from src.pm_common.enums import MarketStatus
from src.pm_common.errors import MarketNotOpenError, NonBinaryMarketError
from src.pm_common.units import ZERO
from src.pm_exchange.application.schemas import CloseMarketResponse, ResolutionResponse
from src.pm_liquidity.application.schemas import (
    DepositResponse,
    PoolStatsResponse,
    WithdrawalResponse,
)
from src.pm_liquidity.application.service import LiquidityPoolService
from src.pm_market.application.schemas import MarketResponse
from src.pm_market.application.service import MarketLifecycleService
from src.pm_market.domain.models import Market
from src.pm_order.application.schemas import (
    DepthResponse,
    OrderResponse,
    PlaceOrderResponse,
)
from src.pm_order.application.service import OrderBookService
from src.pm_order.domain.models import OrderRequest, PlaceOrderResult
from src.pm_settlement.application.schemas import PositionResponse
from src.pm_settlement.application.service import SettlementService
from src.pm_settlement.domain.models import Position

logger = logging.getLogger(__name__)


class ExchangeService:
    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        markets: MarketLifecycleService | None = None,
        orders: OrderBookService | None = None,
        liquidity: LiquidityPoolService | None = None,
        settlement: SettlementService | None = None,
    ) -> None:
        self._session_factory: SessionFactory = session_factory or async_session_factory
        self._markets = markets or MarketLifecycleService()
        self._orders = orders or OrderBookService()
        self._liquidity = liquidity or LiquidityPoolService()
        self._settlement = settlement or SettlementService()

    # ------------------------------------------------------------------
    # Market lifecycle
    # ------------------------------------------------------------------

    async def create_market(self, game_id: str, category_id: str) -> MarketResponse:
        async with session_scope(self._session_factory) as db:
            market = await self._markets.create_market(db, game_id, category_id)
        return MarketResponse.from_domain(market)

    async def open_market(self, market_id: str) -> MarketResponse:
        async with session_scope(self._session_factory) as db:
            market = await self._markets.open_market(db, market_id)
        return MarketResponse.from_domain(market)

    async def close_market(self, market_id: str) -> CloseMarketResponse:
        """Close trading and expire whatever is still resting on the book."""
        async with session_scope(self._session_factory) as db:
            market = await self._markets.close_market(db, market_id)
            expired = await self._orders.expire_unfilled_orders(db, market_id)
        return CloseMarketResponse.from_domain(market, expired)

    async def resolve_market(self, market_id: str, outcome: str) -> ResolutionResponse:
        """Resolve the market, then archive and clear its stored positions.

        The same stored positions are scored and settled.
        """
        async with session_scope(self._session_factory) as db:
            positions = await self._settlement.get_positions_by_market(
                db, market_id, for_update=True
            )
            result = await self._markets.resolve_market(db, market_id, outcome, positions)
            settlements = await self._settlement.settle_market(db, market_id, outcome)
        return ResolutionResponse.from_domain(market_id, outcome, result, settlements)

    # ------------------------------------------------------------------
    # Order book
    # ------------------------------------------------------------------

    async def place_order(
        self, req: OrderRequest, outcomes: Sequence[str] | None = None
    ) -> PlaceOrderResponse:
        async with session_scope(self._session_factory) as db:
            market = await self._markets.get_market(db, req.market_id, for_update=True)
            if market.status != MarketStatus.OPEN.value:
                raise MarketNotOpenError(market.id, market.status)
            if outcomes is None:
                outcomes = await self._outcomes_for(db, market)

            result = await self._orders.place_order(db, req, outcomes)
            for position in _matched_positions(result):
                await self._settlement.add_position(db, position)

            # One unit of matched capital per matched share (both sides together)
            matched = sum((f.shares for f in result.fills), ZERO)
            if matched > ZERO:
                await self._markets.add_volume(db, market.id, matched)
        return PlaceOrderResponse.from_domain(result)

    async def cancel_order(self, order_id: str) -> OrderResponse:
        async with session_scope(self._session_factory) as db:
            order = await self._orders.cancel_order(db, order_id)
        return OrderResponse.from_domain(order)

    async def settle_order(self, order_id: str) -> OrderResponse:
        async with session_scope(self._session_factory) as db:
            order = await self._orders.settle_order(db, order_id)
        return OrderResponse.from_domain(order)

    async def get_depth(
        self, market_id: str, outcomes: Sequence[str] | None = None
    ) -> DepthResponse:
        async with session_scope(self._session_factory) as db:
            if outcomes is None:
                market = await self._markets.get_market(db, market_id)
                outcomes = await self._outcomes_for(db, market)
            depth = await self._orders.get_depth(db, market_id, outcomes)
        return DepthResponse.from_domain(depth)

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    async def add_position(self, position: Position) -> PositionResponse:
        async with session_scope(self._session_factory) as db:
            await self._settlement.add_position(db, position)
        return PositionResponse.from_domain(position)

    # ------------------------------------------------------------------
    # Liquidity pool
    # ------------------------------------------------------------------

    async def record_deposit(
        self, address: str, amount: Decimal, pool_value: Decimal
    ) -> DepositResponse:
        async with session_scope(self._session_factory) as db:
            result = await self._liquidity.record_deposit(db, address, amount, pool_value)
        return DepositResponse.from_domain(result)

    async def record_withdrawal(
        self, address: str, shares: Decimal, pool_value: Decimal
    ) -> WithdrawalResponse:
        async with session_scope(self._session_factory) as db:
            result = await self._liquidity.record_withdrawal(db, address, shares, pool_value)
        return WithdrawalResponse.from_domain(result)

    async def get_pool_stats(
        self,
        pool_value: Decimal,
        has_open_markets: bool,
        has_unsettled_positions: bool,
    ) -> PoolStatsResponse:
        async with session_scope(self._session_factory) as db:
            stats = await self._liquidity.get_pool_stats(
                db, pool_value, has_open_markets, has_unsettled_positions
            )
        return PoolStatsResponse.from_domain(stats)

    async def _outcomes_for(self, db: AsyncSession, market: Market) -> list[str]:
        outcomes = await self._markets.get_category_outcomes(db, market.category_id)
        if not outcomes:
            # Unknown category: outcome names cannot be inferred
            raise NonBinaryMarketError(0)
        return outcomes


def _matched_positions(result: PlaceOrderResult) -> list[Position]:
    """Positions for matched shares: one for the incoming order, one per resting fill."""
    order = result.order
    positions = []
    if order.filled_shares > ZERO:
        positions.append(
            Position(
                address=order.user_address,
                market_id=order.market_id,
                outcome=order.outcome,
                shares=order.filled_shares,
                cost_paid=order.filled_amount,
                app_session_id=order.app_session_id,
                app_session_version=order.app_session_version,
                created_at=result.fills[0].filled_at,
            )
        )
    for fill in result.counterparty_fills:
        counter = result.counterparties[fill.order_id]
        positions.append(
            Position(
                address=counter.user_address,
                market_id=counter.market_id,
                outcome=counter.outcome,
                shares=fill.shares,
                cost_paid=fill.cost,
                app_session_id=counter.app_session_id,
                app_session_version=counter.app_session_version,
                created_at=fill.filled_at,
            )
        )
    return positions
