"""Position / Settlement repositories: raw SQL over positions and settlements."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_settlement.domain.models import Position, Settlement

# ---------------------------------------------------------------------------
# SQL: positions
# ---------------------------------------------------------------------------

_POSITION_COLUMNS = """
    id, address, market_id, outcome, shares, cost_paid, fee,
    app_session_id, app_session_version, session_status, session_data, created_at
"""

_INSERT_POSITION_SQL = text("""
    INSERT INTO positions (address, market_id, outcome, shares, cost_paid, fee,
        app_session_id, app_session_version, session_status, session_data, created_at)
    VALUES (:address, :market_id, :outcome, :shares, :cost_paid, :fee,
        :app_session_id, :app_session_version, :session_status, :session_data, :created_at)
    RETURNING id
""")

_UPDATE_SESSION_STATUS_SQL = text("""
    UPDATE positions SET session_status = :value WHERE app_session_id = :app_session_id
""")

_UPDATE_SESSION_VERSION_SQL = text("""
    UPDATE positions SET app_session_version = :value WHERE app_session_id = :app_session_id
""")

_UPDATE_SESSION_DATA_SQL = text("""
    UPDATE positions SET session_data = :value WHERE app_session_id = :app_session_id
""")

_LIST_POSITIONS_BY_MARKET_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions WHERE market_id = :market_id
    ORDER BY id ASC
""")

_LIST_POSITIONS_BY_MARKET_FOR_UPDATE_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions WHERE market_id = :market_id
    ORDER BY id ASC
    FOR UPDATE
""")

_LIST_POSITIONS_BY_USER_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions WHERE address = :address
    ORDER BY id ASC
""")

_GET_POSITION_SQL = text(f"""
    SELECT {_POSITION_COLUMNS}
    FROM positions WHERE address = :address AND market_id = :market_id
    ORDER BY id ASC
    LIMIT 1
""")

_DELETE_POSITIONS_BY_MARKET_SQL = text("""
    DELETE FROM positions WHERE market_id = :market_id
""")

# ---------------------------------------------------------------------------
# SQL: settlements
# ---------------------------------------------------------------------------

_SETTLEMENT_COLUMNS = """
    id, market_id, address, outcome, result, shares, cost_paid,
    payout, profit, app_session_id, settled_at
"""

_INSERT_SETTLEMENT_SQL = text("""
    INSERT INTO settlements (market_id, address, outcome, result, shares, cost_paid,
        payout, profit, app_session_id, settled_at)
    VALUES (:market_id, :address, :outcome, :result, :shares, :cost_paid,
        :payout, :profit, :app_session_id, :settled_at)
    RETURNING id
""")

_LIST_SETTLEMENTS_BY_MARKET_SQL = text(f"""
    SELECT {_SETTLEMENT_COLUMNS}
    FROM settlements WHERE market_id = :market_id
    ORDER BY id ASC
""")

_LIST_SETTLEMENTS_BY_USER_SQL = text(f"""
    SELECT {_SETTLEMENT_COLUMNS}
    FROM settlements WHERE address = :address
    ORDER BY id ASC
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_position(row: Any) -> Position:
    return Position(
        id=row.id,
        address=row.address,
        market_id=row.market_id,
        outcome=row.outcome,
        shares=row.shares,
        cost_paid=row.cost_paid,
        fee=row.fee,
        app_session_id=row.app_session_id,
        app_session_version=row.app_session_version,
        session_status=row.session_status,
        session_data=row.session_data,
        created_at=row.created_at,
    )


def _row_to_settlement(row: Any) -> Settlement:
    return Settlement(
        id=row.id,
        market_id=row.market_id,
        address=row.address,
        outcome=row.outcome,
        result=row.result,
        shares=row.shares,
        cost_paid=row.cost_paid,
        payout=row.payout,
        profit=row.profit,
        app_session_id=row.app_session_id,
        settled_at=row.settled_at,
    )


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class PositionRepository:
    async def insert(self, position: Position, db: AsyncSession) -> None:
        result = await db.execute(
            _INSERT_POSITION_SQL,
            {
                "address": position.address,
                "market_id": position.market_id,
                "outcome": position.outcome,
                "shares": position.shares,
                "cost_paid": position.cost_paid,
                "fee": position.fee,
                "app_session_id": position.app_session_id,
                "app_session_version": position.app_session_version,
                "session_status": position.session_status,
                "session_data": position.session_data,
                "created_at": position.created_at,
            },
        )
        position.id = result.scalar_one()

    async def update_session_status(
        self, app_session_id: str, status: str, db: AsyncSession
    ) -> int:
        result = await db.execute(
            _UPDATE_SESSION_STATUS_SQL, {"app_session_id": app_session_id, "value": status}
        )
        return result.rowcount

    async def update_session_version(
        self, app_session_id: str, version: int, db: AsyncSession
    ) -> int:
        result = await db.execute(
            _UPDATE_SESSION_VERSION_SQL, {"app_session_id": app_session_id, "value": version}
        )
        return result.rowcount

    async def update_session_data(
        self, app_session_id: str, data: str, db: AsyncSession
    ) -> int:
        result = await db.execute(
            _UPDATE_SESSION_DATA_SQL, {"app_session_id": app_session_id, "value": data}
        )
        return result.rowcount

    async def list_by_market(
        self, market_id: str, db: AsyncSession, for_update: bool = False
    ) -> list[Position]:
        sql = (
            _LIST_POSITIONS_BY_MARKET_FOR_UPDATE_SQL
            if for_update
            else _LIST_POSITIONS_BY_MARKET_SQL
        )
        result = await db.execute(sql, {"market_id": market_id})
        return [_row_to_position(row) for row in result.fetchall()]

    async def list_by_user(self, address: str, db: AsyncSession) -> list[Position]:
        result = await db.execute(_LIST_POSITIONS_BY_USER_SQL, {"address": address})
        return [_row_to_position(row) for row in result.fetchall()]

    async def get(self, address: str, market_id: str, db: AsyncSession) -> Position | None:
        result = await db.execute(
            _GET_POSITION_SQL, {"address": address, "market_id": market_id}
        )
        row = result.fetchone()
        return _row_to_position(row) if row else None

    async def delete_by_market(self, market_id: str, db: AsyncSession) -> int:
        result = await db.execute(_DELETE_POSITIONS_BY_MARKET_SQL, {"market_id": market_id})
        return result.rowcount


class SettlementRepository:
    async def insert(self, settlement: Settlement, db: AsyncSession) -> None:
        result = await db.execute(
            _INSERT_SETTLEMENT_SQL,
            {
                "market_id": settlement.market_id,
                "address": settlement.address,
                "outcome": settlement.outcome,
                "result": settlement.result,
                "shares": settlement.shares,
                "cost_paid": settlement.cost_paid,
                "payout": settlement.payout,
                "profit": settlement.profit,
                "app_session_id": settlement.app_session_id,
                "settled_at": settlement.settled_at,
            },
        )
        settlement.id = result.scalar_one()

    async def list_by_market(self, market_id: str, db: AsyncSession) -> list[Settlement]:
        result = await db.execute(_LIST_SETTLEMENTS_BY_MARKET_SQL, {"market_id": market_id})
        return [_row_to_settlement(row) for row in result.fetchall()]

    async def list_by_user(self, address: str, db: AsyncSession) -> list[Settlement]:
        result = await db.execute(_LIST_SETTLEMENTS_BY_USER_SQL, {"address": address})
        return [_row_to_settlement(row) for row in result.fetchall()]
