"""SettlementService: active position tracking and market settlement.

settle_market archives every position on a resolved market as a WIN/LOSS
settlement row and then clears the market's positions, all in one savepoint.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import MarketStatus, SessionStatus
from src.pm_common.errors import (
    InvalidOutcomeError,
    MarketNotFoundError,
    MarketNotResolvedError,
)
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_settlement.domain.models import Position, Settlement
from src.pm_settlement.domain.repository import (
    PositionRepositoryProtocol,
    SettlementRepositoryProtocol,
)
from src.pm_settlement.domain.settlement import classify_position
from src.pm_settlement.infrastructure.persistence import (
    PositionRepository,
    SettlementRepository,
)

logger = logging.getLogger(__name__)


class SettlementService:
    def __init__(
        self,
        positions: PositionRepositoryProtocol | None = None,
        settlements: SettlementRepositoryProtocol | None = None,
        markets: MarketRepositoryProtocol | None = None,
    ) -> None:
        self._positions: PositionRepositoryProtocol = positions or PositionRepository()
        self._settlements: SettlementRepositoryProtocol = settlements or SettlementRepository()
        self._markets: MarketRepositoryProtocol = markets or MarketRepository()

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    async def settle_market(
        self, db: AsyncSession, market_id: str, resolved_outcome: str | None = None
    ) -> list[Settlement]:
        """Score and archive every position on a RESOLVED market.

        Raises MarketNotResolvedError rather than scoring against a missing
        outcome. resolved_outcome, when given, must equal the recorded one.
        """
        async with db.begin_nested():
            market = await self._markets.get_market_by_id(db, market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            if market.status != MarketStatus.RESOLVED.value or market.outcome is None:
                raise MarketNotResolvedError(market_id, market.status)
            if resolved_outcome is not None and resolved_outcome != market.outcome:
                raise InvalidOutcomeError(resolved_outcome, [market.outcome])

            positions = await self._positions.list_by_market(market_id, db, for_update=True)
            now = utc_now()
            settlements = [classify_position(p, market.outcome, now) for p in positions]
            for s in settlements:
                await self._settlements.insert(s, db)
            await self._positions.delete_by_market(market_id, db)

        logger.info(
            "Market %s settled: %d positions archived (outcome=%s)",
            market_id,
            len(settlements),
            market.outcome,
        )
        return settlements

    # ------------------------------------------------------------------
    # Position tracking
    # ------------------------------------------------------------------

    async def add_position(self, db: AsyncSession, position: Position) -> Position:
        await self._positions.insert(position, db)
        logger.info(
            "Position added: address=%s market=%s outcome=%s shares=%s session=%s",
            position.address,
            position.market_id,
            position.outcome,
            position.shares,
            position.app_session_id,
        )
        return position

    async def update_session_status(
        self, db: AsyncSession, app_session_id: str, status: SessionStatus | str
    ) -> int:
        value = SessionStatus(status).value
        return await self._positions.update_session_status(app_session_id, value, db)

    async def update_session_version(
        self, db: AsyncSession, app_session_id: str, version: int
    ) -> int:
        return await self._positions.update_session_version(app_session_id, version, db)

    async def update_session_data(
        self, db: AsyncSession, app_session_id: str, data: str
    ) -> int:
        return await self._positions.update_session_data(app_session_id, data, db)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_positions_by_market(
        self, db: AsyncSession, market_id: str, for_update: bool = False
    ) -> list[Position]:
        return await self._positions.list_by_market(market_id, db, for_update=for_update)

    async def get_positions_by_user(self, db: AsyncSession, address: str) -> list[Position]:
        return await self._positions.list_by_user(address, db)

    async def get_position(
        self, db: AsyncSession, address: str, market_id: str
    ) -> Position | None:
        return await self._positions.get(address, market_id, db)

    async def get_settlements_by_market(
        self, db: AsyncSession, market_id: str
    ) -> list[Settlement]:
        return await self._settlements.list_by_market(market_id, db)

    async def get_settlements_by_user(self, db: AsyncSession, address: str) -> list[Settlement]:
        return await self._settlements.list_by_user(address, db)
