# src/pm_order/application/service.py
"""OrderBookService: P2P order placement, cancellation and book queries.

place_order runs validation, matching and all row writes inside one savepoint:
either the incoming order, both fill rows per match and every touched resting
order are persisted together, or nothing is.
"""
import logging
from collections.abc import Sequence
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import OrderStatus
from src.pm_common.errors import (
    InvalidNumberError,
    InvalidOutcomeError,
    McpsOutOfRangeError,
    NonBinaryMarketError,
    NonPositiveAmountError,
    OrderNotCancellableError,
    OrderNotFoundError,
    OrderNotSettleableError,
)
from src.pm_common.id_generator import generate_id
from src.pm_common.units import ONE, ZERO, quantize_shares, to_decimal
from src.pm_matching.domain.models import RestingOrder
from src.pm_matching.engine.matching_algo import match_order
from src.pm_order.domain.models import (
    DepthLevel,
    Fill,
    Order,
    OrderBookDepth,
    OrderRequest,
    PlaceOrderResult,
    opposite_outcome,
)
from src.pm_order.domain.repository import OrderRepositoryProtocol
from src.pm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


class OrderBookService:
    def __init__(self, repo: OrderRepositoryProtocol | None = None) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()

    async def place_order(
        self, db: AsyncSession, req: OrderRequest, outcomes: Sequence[str]
    ) -> PlaceOrderResult:
        outcomes = list(outcomes)
        if len(outcomes) != 2:
            raise NonBinaryMarketError(len(outcomes))
        if req.outcome not in outcomes:
            raise InvalidOutcomeError(req.outcome, outcomes)
        try:
            mcps = to_decimal(req.mcps)
        except InvalidNumberError as exc:
            raise McpsOutOfRangeError(req.mcps) from exc
        if not (ZERO < mcps < ONE):
            raise McpsOutOfRangeError(req.mcps)
        try:
            amount = to_decimal(req.amount)
        except InvalidNumberError as exc:
            raise NonPositiveAmountError(req.amount) from exc
        if amount <= ZERO:
            raise NonPositiveAmountError(req.amount)
        try:
            max_shares = quantize_shares(amount / mcps)
        except ArithmeticError as exc:
            # more digits than micro-unit precision can hold
            raise InvalidNumberError(req.amount) from exc
        if max_shares <= ZERO:
            raise NonPositiveAmountError(req.amount, what="Order size in shares")

        async with db.begin_nested():
            return await self._place_order_inner(db, req, outcomes, mcps, amount, max_shares)

    async def _place_order_inner(
        self,
        db: AsyncSession,
        req: OrderRequest,
        outcomes: list[str],
        mcps: Decimal,
        amount: Decimal,
        max_shares: Decimal,
    ) -> PlaceOrderResult:
        # Serialize placements on this market before reading the book
        await self._repo.lock_market(req.market_id, db)
        resting = await self._repo.list_resting(
            req.market_id, opposite_outcome(req.outcome, outcomes), db, for_update=True
        )
        resting_by_id = {o.id: o for o in resting}

        now = utc_now()
        order = Order(
            id=generate_id(),
            market_id=req.market_id,
            game_id=req.game_id,
            user_address=req.user_address,
            outcome=req.outcome,
            mcps=mcps,
            amount=amount,
            max_shares=max_shares,
            app_session_id=req.app_session_id,
            app_session_version=req.app_session_version,
            status=OrderStatus.OPEN.value,
            created_at=now,
            updated_at=now,
        )
        # Insert first: fill rows reference it
        await self._repo.save(order, db)

        result = match_order(
            mcps,
            max_shares,
            [RestingOrder(o.id, o.mcps, o.unfilled_shares) for o in resting],
        )

        fills: list[Fill] = []
        counterparty_fills: list[Fill] = []
        counterparties: dict[str, Order] = {}
        for mf in result.fills:
            counter = resting_by_id[mf.resting_order_id]
            incoming_cost = mf.shares * mf.incoming_price
            resting_cost = mf.shares * mf.resting_price

            incoming_fill = Fill(
                id=generate_id(),
                order_id=order.id,
                counterparty_order_id=counter.id,
                counterparty_address=counter.user_address,
                shares=mf.shares,
                effective_price=mf.incoming_price,
                cost=incoming_cost,
                filled_at=now,
            )
            await self._repo.save_fill(incoming_fill, db)
            resting_fill = Fill(
                id=generate_id(),
                order_id=counter.id,
                counterparty_order_id=order.id,
                counterparty_address=order.user_address,
                shares=mf.shares,
                effective_price=mf.resting_price,
                cost=resting_cost,
                filled_at=now,
            )
            await self._repo.save_fill(resting_fill, db)

            counter.apply_fill(mf.shares, resting_cost)
            await self._repo.update_fill_state(counter, db)
            order.apply_fill(mf.shares, incoming_cost)
            fills.append(incoming_fill)
            counterparty_fills.append(resting_fill)
            counterparties[counter.id] = counter

        if result.matched_shares > ZERO:
            await self._repo.update_fill_state(order, db)

        logger.info(
            "Order placed: id=%s market=%s outcome=%s mcps=%s shares=%s filled=%s status=%s",
            order.id,
            order.market_id,
            order.outcome,
            order.mcps,
            order.max_shares,
            order.filled_shares,
            order.status,
        )
        return PlaceOrderResult(
            order_id=order.id,
            fills=fills,
            order=order,
            counterparty_fills=counterparty_fills,
            counterparties=counterparties,
        )

    async def cancel_order(self, db: AsyncSession, order_id: str) -> Order:
        async with db.begin_nested():
            order = await self._repo.get_by_id(order_id, db, for_update=True)
            if order is None:
                raise OrderNotFoundError(order_id)
            if not order.is_cancellable:
                raise OrderNotCancellableError(order_id, order.status)
            # filled portion stays on the order for resolution
            order.status = OrderStatus.CANCELLED.value
            await self._repo.update_status(order, db)
        logger.info(
            "Order cancelled: id=%s filled=%s unfilled=%s",
            order_id,
            order.filled_shares,
            order.unfilled_shares,
        )
        return order

    async def expire_unfilled_orders(self, db: AsyncSession, market_id: str) -> list[Order]:
        """Expire every resting order on the market; returned for refund processing."""
        async with db.begin_nested():
            orders = await self._repo.list_resting(market_id, None, db, for_update=True)
            for order in orders:
                order.status = OrderStatus.EXPIRED.value
                await self._repo.update_status(order, db)
        logger.info("Expired %d resting orders on market %s", len(orders), market_id)
        return orders

    async def settle_order(self, db: AsyncSession, order_id: str) -> Order:
        async with db.begin_nested():
            order = await self._repo.get_by_id(order_id, db, for_update=True)
            if order is None:
                raise OrderNotFoundError(order_id)
            if not order.is_settleable:
                raise OrderNotSettleableError(order_id, order.status)
            order.status = OrderStatus.SETTLED.value
            await self._repo.update_status(order, db)
        logger.info("Order settled: id=%s", order_id)
        return order

    async def get_depth(
        self, db: AsyncSession, market_id: str, outcomes: Sequence[str]
    ) -> OrderBookDepth:
        depth: dict[str, list[DepthLevel]] = {}
        for outcome in outcomes:
            levels: dict[Decimal, DepthLevel] = {}
            for order in await self._repo.list_resting(market_id, outcome, db):
                level = levels.get(order.mcps)
                if level is None:
                    levels[order.mcps] = DepthLevel(
                        price=order.mcps, shares=order.unfilled_shares, order_count=1
                    )
                else:
                    level.shares += order.unfilled_shares
                    level.order_count += 1
            # best price first
            depth[outcome] = sorted(levels.values(), key=lambda lv: lv.price, reverse=True)
        return OrderBookDepth(market_id=market_id, outcomes=depth, updated_at=utc_now())

    async def get_filled_orders_for_resolution(
        self, db: AsyncSession, market_id: str
    ) -> list[Order]:
        return await self._repo.list_with_fills(market_id, db)

    async def get_order(self, db: AsyncSession, order_id: str) -> Order:
        order = await self._repo.get_by_id(order_id, db)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def get_orders_by_user(
        self, db: AsyncSession, user_address: str, market_id: str | None = None
    ) -> list[Order]:
        return await self._repo.list_by_user(user_address, market_id, db)

    async def get_orders_by_market(self, db: AsyncSession, market_id: str) -> list[Order]:
        return await self._repo.list_by_market(market_id, db)

    async def get_fills(self, db: AsyncSession, order_id: str) -> list[Fill]:
        return await self._repo.list_fills(order_id, db)
