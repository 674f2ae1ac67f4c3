# src/pm_order/infrastructure/persistence.py
"""OrderRepository: raw SQL persistence over p2p_orders / p2p_fills."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_order.domain.models import Fill, Order

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_LOCK_MARKET_SQL = text("""
    SELECT id FROM markets WHERE id = :market_id FOR UPDATE
""")

_INSERT_ORDER_SQL = text("""
    INSERT INTO p2p_orders (id, market_id, game_id, user_address, outcome,
        mcps, amount, filled_amount, unfilled_amount,
        max_shares, filled_shares, unfilled_shares,
        app_session_id, app_session_version, status, created_at, updated_at)
    VALUES (:id, :market_id, :game_id, :user_address, :outcome,
        :mcps, :amount, :filled_amount, :unfilled_amount,
        :max_shares, :filled_shares, :unfilled_shares,
        :app_session_id, :app_session_version, :status, :created_at, :updated_at)
""")

_UPDATE_FILL_STATE_SQL = text("""
    UPDATE p2p_orders
    SET status = :status,
        filled_amount = :filled_amount, unfilled_amount = :unfilled_amount,
        filled_shares = :filled_shares, unfilled_shares = :unfilled_shares,
        updated_at = NOW()
    WHERE id = :id
""")

_UPDATE_STATUS_SQL = text("""
    UPDATE p2p_orders SET status = :status, updated_at = NOW() WHERE id = :id
""")

_INSERT_FILL_SQL = text("""
    INSERT INTO p2p_fills (id, order_id, counterparty_order_id, counterparty_address,
        shares, effective_price, cost, filled_at)
    VALUES (:id, :order_id, :counterparty_order_id, :counterparty_address,
        :shares, :effective_price, :cost, :filled_at)
""")

_SELECT_COLUMNS = """
    id, market_id, game_id, user_address, outcome,
    mcps, amount, filled_amount, max_shares, filled_shares,
    app_session_id, app_session_version, status, created_at, updated_at
"""

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM p2p_orders WHERE id = :id
""")

_GET_ORDER_BY_ID_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM p2p_orders WHERE id = :id
    FOR UPDATE
""")

# Price-time priority: best mcps first, then oldest; id breaks exact ties.
_LIST_RESTING_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM p2p_orders
    WHERE market_id = :market_id
      AND (CAST(:outcome AS TEXT) IS NULL OR outcome = :outcome)
      AND status IN ('OPEN', 'PARTIALLY_FILLED')
    ORDER BY mcps DESC, created_at ASC, id ASC
""")

_LIST_RESTING_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM p2p_orders
    WHERE market_id = :market_id
      AND (CAST(:outcome AS TEXT) IS NULL OR outcome = :outcome)
      AND status IN ('OPEN', 'PARTIALLY_FILLED')
    ORDER BY mcps DESC, created_at ASC, id ASC
    FOR UPDATE
""")

_LIST_BY_USER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM p2p_orders
    WHERE user_address = :user_address
      AND (CAST(:market_id AS TEXT) IS NULL OR market_id = :market_id)
    ORDER BY created_at DESC, id DESC
""")

_LIST_BY_MARKET_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM p2p_orders
    WHERE market_id = :market_id
    ORDER BY created_at DESC, id DESC
""")

_LIST_WITH_FILLS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM p2p_orders
    WHERE market_id = :market_id
      AND status IN ('FILLED', 'PARTIALLY_FILLED', 'CANCELLED', 'EXPIRED')
      AND filled_shares > 0
    ORDER BY created_at ASC, id ASC
""")

_LIST_FILLS_SQL = text("""
    SELECT id, order_id, counterparty_order_id, counterparty_address,
           shares, effective_price, cost, filled_at
    FROM p2p_fills
    WHERE order_id = :order_id
    ORDER BY filled_at ASC, id ASC
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object.

    unfilled_* columns are derived in Order.__post_init__.
    """
    return Order(
        id=row.id,
        market_id=row.market_id,
        game_id=row.game_id,
        user_address=row.user_address,
        outcome=row.outcome,
        mcps=row.mcps,
        amount=row.amount,
        max_shares=row.max_shares,
        app_session_id=row.app_session_id,
        app_session_version=row.app_session_version,
        status=row.status,
        filled_amount=row.filled_amount,
        filled_shares=row.filled_shares,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_fill(row: Any) -> Fill:
    return Fill(
        id=row.id,
        order_id=row.order_id,
        counterparty_order_id=row.counterparty_order_id,
        counterparty_address=row.counterparty_address,
        shares=row.shares,
        effective_price=row.effective_price,
        cost=row.cost,
        filled_at=row.filled_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def lock_market(self, market_id: str, db: AsyncSession) -> None:
        await db.execute(_LOCK_MARKET_SQL, {"market_id": market_id})

    async def save(self, order: Order, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "market_id": order.market_id,
                "game_id": order.game_id,
                "user_address": order.user_address,
                "outcome": order.outcome,
                "mcps": order.mcps,
                "amount": order.amount,
                "filled_amount": order.filled_amount,
                "unfilled_amount": order.unfilled_amount,
                "max_shares": order.max_shares,
                "filled_shares": order.filled_shares,
                "unfilled_shares": order.unfilled_shares,
                "app_session_id": order.app_session_id,
                "app_session_version": order.app_session_version,
                "status": order.status,
                "created_at": order.created_at,
                "updated_at": order.updated_at,
            },
        )

    async def save_fill(self, fill: Fill, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_FILL_SQL,
            {
                "id": fill.id,
                "order_id": fill.order_id,
                "counterparty_order_id": fill.counterparty_order_id,
                "counterparty_address": fill.counterparty_address,
                "shares": fill.shares,
                "effective_price": fill.effective_price,
                "cost": fill.cost,
                "filled_at": fill.filled_at,
            },
        )

    async def get_by_id(
        self, order_id: str, db: AsyncSession, for_update: bool = False
    ) -> Order | None:
        sql = _GET_ORDER_BY_ID_FOR_UPDATE_SQL if for_update else _GET_ORDER_BY_ID_SQL
        result = await db.execute(sql, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def update_fill_state(self, order: Order, db: AsyncSession) -> None:
        await db.execute(
            _UPDATE_FILL_STATE_SQL,
            {
                "id": order.id,
                "status": order.status,
                "filled_amount": order.filled_amount,
                "unfilled_amount": order.unfilled_amount,
                "filled_shares": order.filled_shares,
                "unfilled_shares": order.unfilled_shares,
            },
        )

    async def update_status(self, order: Order, db: AsyncSession) -> None:
        await db.execute(_UPDATE_STATUS_SQL, {"id": order.id, "status": order.status})

    async def list_resting(
        self,
        market_id: str,
        outcome: str | None,
        db: AsyncSession,
        for_update: bool = False,
    ) -> list[Order]:
        sql = _LIST_RESTING_FOR_UPDATE_SQL if for_update else _LIST_RESTING_SQL
        result = await db.execute(sql, {"market_id": market_id, "outcome": outcome})
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_by_user(
        self, user_address: str, market_id: str | None, db: AsyncSession
    ) -> list[Order]:
        result = await db.execute(
            _LIST_BY_USER_SQL, {"user_address": user_address, "market_id": market_id}
        )
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_by_market(self, market_id: str, db: AsyncSession) -> list[Order]:
        result = await db.execute(_LIST_BY_MARKET_SQL, {"market_id": market_id})
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_with_fills(self, market_id: str, db: AsyncSession) -> list[Order]:
        result = await db.execute(_LIST_WITH_FILLS_SQL, {"market_id": market_id})
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_fills(self, order_id: str, db: AsyncSession) -> list[Fill]:
        result = await db.execute(_LIST_FILLS_SQL, {"order_id": order_id})
        return [_row_to_fill(row) for row in result.fetchall()]
