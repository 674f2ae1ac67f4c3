"""MarketRepository: concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import Market

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, game_id, category_id, sequence_num, status,
    quantities, b, volume, outcome,
    created_at, opened_at, closed_at, resolved_at
"""

_GET_MARKET_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM markets
    WHERE id = :market_id
""")

_GET_MARKET_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM markets
    WHERE id = :market_id
    FOR UPDATE
""")

_GET_CATEGORY_OUTCOMES_SQL = text("""
    SELECT outcomes FROM market_categories WHERE id = :category_id
""")

_MAX_SEQUENCE_SQL = text("""
    SELECT COALESCE(MAX(sequence_num), 0)
    FROM markets
    WHERE game_id = :game_id AND category_id = :category_id
""")

_INSERT_MARKET_SQL = text("""
    INSERT INTO markets (id, game_id, category_id, sequence_num, status,
        quantities, b, volume, outcome, created_at)
    VALUES (:id, :game_id, :category_id, :sequence_num, :status,
        :quantities, :b, :volume, NULL, :created_at)
""")

_SAVE_TRANSITION_SQL = text("""
    UPDATE markets
    SET status = :status, outcome = :outcome,
        opened_at = :opened_at, closed_at = :closed_at, resolved_at = :resolved_at
    WHERE id = :id
""")

_UPDATE_QUANTITIES_SQL = text("""
    UPDATE markets SET quantities = :quantities WHERE id = :id
""")

_ADD_VOLUME_SQL = text("""
    UPDATE markets SET volume = volume + :amount WHERE id = :id
""")

_CURRENT_MARKET_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM markets
    WHERE game_id = :game_id
      AND category_id = :category_id
      AND status <> 'RESOLVED'
    ORDER BY sequence_num DESC
    LIMIT 1
""")

_CURRENT_MARKET_ANY_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM markets
    WHERE status <> 'RESOLVED'
    ORDER BY created_at DESC, sequence_num DESC
    LIMIT 1
""")

_HISTORY_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM markets
    WHERE game_id = :game_id AND category_id = :category_id
    ORDER BY sequence_num DESC
    LIMIT :limit OFFSET :offset
""")

_BY_GAME_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM markets
    WHERE game_id = :game_id
    ORDER BY created_at DESC, sequence_num DESC
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: Any) -> Market:
    return Market(
        id=row.id,
        game_id=row.game_id,
        category_id=row.category_id,
        sequence_num=row.sequence_num,
        status=row.status,
        quantities=[Decimal(q) for q in row.quantities],
        b=row.b,
        volume=row.volume,
        outcome=row.outcome,
        created_at=row.created_at,
        opened_at=row.opened_at,
        closed_at=row.closed_at,
        resolved_at=row.resolved_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    """Concrete repository over the markets / market_categories tables."""

    async def get_market_by_id(
        self, db: AsyncSession, market_id: str, for_update: bool = False
    ) -> Market | None:
        sql = _GET_MARKET_FOR_UPDATE_SQL if for_update else _GET_MARKET_SQL
        result = await db.execute(sql, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def get_category_outcomes(
        self, db: AsyncSession, category_id: str
    ) -> list[str] | None:
        result = await db.execute(_GET_CATEGORY_OUTCOMES_SQL, {"category_id": category_id})
        outcomes = result.scalar_one_or_none()
        # outcomes is TEXT[]; asyncpg returns it as a list
        return list(outcomes) if outcomes is not None else None

    async def get_max_sequence(
        self, db: AsyncSession, game_id: str, category_id: str
    ) -> int:
        result = await db.execute(
            _MAX_SEQUENCE_SQL, {"game_id": game_id, "category_id": category_id}
        )
        return int(result.scalar_one())

    async def insert_market(self, db: AsyncSession, market: Market) -> None:
        await db.execute(
            _INSERT_MARKET_SQL,
            {
                "id": market.id,
                "game_id": market.game_id,
                "category_id": market.category_id,
                "sequence_num": market.sequence_num,
                "status": market.status,
                "quantities": market.quantities,
                "b": market.b,
                "volume": market.volume,
                "created_at": market.created_at,
            },
        )

    async def save_transition(self, db: AsyncSession, market: Market) -> None:
        await db.execute(
            _SAVE_TRANSITION_SQL,
            {
                "id": market.id,
                "status": market.status,
                "outcome": market.outcome,
                "opened_at": market.opened_at,
                "closed_at": market.closed_at,
                "resolved_at": market.resolved_at,
            },
        )

    async def update_quantities(
        self, db: AsyncSession, market_id: str, quantities: list[Decimal]
    ) -> None:
        await db.execute(_UPDATE_QUANTITIES_SQL, {"id": market_id, "quantities": quantities})

    async def add_volume(self, db: AsyncSession, market_id: str, amount: Decimal) -> None:
        await db.execute(_ADD_VOLUME_SQL, {"id": market_id, "amount": amount})

    async def get_current_market(
        self, db: AsyncSession, game_id: str | None, category_id: str | None
    ) -> Market | None:
        if game_id is None or category_id is None:
            result = await db.execute(_CURRENT_MARKET_ANY_SQL)
        else:
            result = await db.execute(
                _CURRENT_MARKET_SQL, {"game_id": game_id, "category_id": category_id}
            )
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def list_history(
        self,
        db: AsyncSession,
        game_id: str,
        category_id: str,
        limit: int,
        offset: int,
    ) -> list[Market]:
        result = await db.execute(
            _HISTORY_SQL,
            {
                "game_id": game_id,
                "category_id": category_id,
                "limit": limit,
                "offset": offset,
            },
        )
        return [_row_to_market(row) for row in result.fetchall()]

    async def list_by_game(self, db: AsyncSession, game_id: str) -> list[Market]:
        result = await db.execute(_BY_GAME_SQL, {"game_id": game_id})
        return [_row_to_market(row) for row in result.fetchall()]
