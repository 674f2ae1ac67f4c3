"""LiquidityRepository: raw SQL over lp_shares / lp_events."""

from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_liquidity.domain.models import LPEvent, LPShare

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

# Share price depends on every row, so mutations lock the whole ledger.
# Plain reads (ACCESS SHARE) are not blocked.
_LOCK_LEDGER_SQL = text("LOCK TABLE lp_shares IN SHARE ROW EXCLUSIVE MODE")

_SHARE_COLUMNS = """
    address, shares, total_deposited, total_withdrawn, first_deposit_at, last_action_at
"""

_GET_SHARE_SQL = text(f"""
    SELECT {_SHARE_COLUMNS} FROM lp_shares WHERE address = :address
""")

_LIST_SHARES_SQL = text(f"""
    SELECT {_SHARE_COLUMNS} FROM lp_shares ORDER BY first_deposit_at ASC, address ASC
""")

_TOTAL_SHARES_SQL = text("SELECT COALESCE(SUM(shares), 0) FROM lp_shares")

_COUNT_PROVIDERS_SQL = text("SELECT COUNT(*) FROM lp_shares")

_INSERT_SHARE_SQL = text("""
    INSERT INTO lp_shares (address, shares, total_deposited, total_withdrawn,
        first_deposit_at, last_action_at)
    VALUES (:address, :shares, :total_deposited, :total_withdrawn,
        :first_deposit_at, :last_action_at)
""")

_UPDATE_SHARE_SQL = text("""
    UPDATE lp_shares
    SET shares = :shares, total_deposited = :total_deposited,
        total_withdrawn = :total_withdrawn, last_action_at = :last_action_at
    WHERE address = :address
""")

_DELETE_SHARE_SQL = text("DELETE FROM lp_shares WHERE address = :address")

_INSERT_EVENT_SQL = text("""
    INSERT INTO lp_events (address, type, amount, shares, share_price,
        pool_value_before, pool_value_after, created_at)
    VALUES (:address, :type, :amount, :shares, :share_price,
        :pool_value_before, :pool_value_after, :created_at)
    RETURNING id
""")

_EVENT_COLUMNS = """
    id, address, type, amount, shares, share_price,
    pool_value_before, pool_value_after, created_at
"""

_LIST_EVENTS_SQL = text(f"""
    SELECT {_EVENT_COLUMNS}
    FROM lp_events
    WHERE (CAST(:address AS TEXT) IS NULL OR address = :address)
    ORDER BY id DESC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_share(row: Any) -> LPShare:
    return LPShare(
        address=row.address,
        shares=row.shares,
        total_deposited=row.total_deposited,
        total_withdrawn=row.total_withdrawn,
        first_deposit_at=row.first_deposit_at,
        last_action_at=row.last_action_at,
    )


def _row_to_event(row: Any) -> LPEvent:
    return LPEvent(
        id=row.id,
        address=row.address,
        type=row.type,
        amount=row.amount,
        shares=row.shares,
        share_price=row.share_price,
        pool_value_before=row.pool_value_before,
        pool_value_after=row.pool_value_after,
        created_at=row.created_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class LiquidityRepository:
    async def lock_ledger(self, db: AsyncSession) -> None:
        await db.execute(_LOCK_LEDGER_SQL)

    async def get_share(self, db: AsyncSession, address: str) -> LPShare | None:
        result = await db.execute(_GET_SHARE_SQL, {"address": address})
        row = result.fetchone()
        return _row_to_share(row) if row else None

    async def list_shares(self, db: AsyncSession) -> list[LPShare]:
        result = await db.execute(_LIST_SHARES_SQL)
        return [_row_to_share(row) for row in result.fetchall()]

    async def get_total_shares(self, db: AsyncSession) -> Decimal:
        result = await db.execute(_TOTAL_SHARES_SQL)
        return Decimal(result.scalar_one())

    async def count_providers(self, db: AsyncSession) -> int:
        result = await db.execute(_COUNT_PROVIDERS_SQL)
        return int(result.scalar_one())

    async def insert_share(self, db: AsyncSession, share: LPShare) -> None:
        await db.execute(
            _INSERT_SHARE_SQL,
            {
                "address": share.address,
                "shares": share.shares,
                "total_deposited": share.total_deposited,
                "total_withdrawn": share.total_withdrawn,
                "first_deposit_at": share.first_deposit_at,
                "last_action_at": share.last_action_at,
            },
        )

    async def update_share(self, db: AsyncSession, share: LPShare) -> None:
        await db.execute(
            _UPDATE_SHARE_SQL,
            {
                "address": share.address,
                "shares": share.shares,
                "total_deposited": share.total_deposited,
                "total_withdrawn": share.total_withdrawn,
                "last_action_at": share.last_action_at,
            },
        )

    async def delete_share(self, db: AsyncSession, address: str) -> None:
        await db.execute(_DELETE_SHARE_SQL, {"address": address})

    async def insert_event(self, db: AsyncSession, event: LPEvent) -> None:
        result = await db.execute(
            _INSERT_EVENT_SQL,
            {
                "address": event.address,
                "type": event.type,
                "amount": event.amount,
                "shares": event.shares,
                "share_price": event.share_price,
                "pool_value_before": event.pool_value_before,
                "pool_value_after": event.pool_value_after,
                "created_at": event.created_at,
            },
        )
        event.id = result.scalar_one()

    async def list_events(
        self, db: AsyncSession, address: str | None, limit: int
    ) -> list[LPEvent]:
        result = await db.execute(_LIST_EVENTS_SQL, {"address": address, "limit": limit})
        return [_row_to_event(row) for row in result.fetchall()]
