"""MarketLifecycleService: market state machine over the markets table.

Every mutation runs inside a savepoint on the caller's session; the caller
(ExchangeService) owns the outer transaction and the commit.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import MarketStatus
from src.pm_common.errors import (
    InvalidOutcomeError,
    MarketNotFoundError,
    QuantityLengthMismatchError,
)
from src.pm_common.units import ZERO, to_decimal
from src.pm_market.domain.models import (
    Loser,
    Market,
    ResolutionResult,
    ResolvablePosition,
    Winner,
    build_market_id,
)
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.domain.state_machine import validate_transition
from src.pm_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)

# Categories missing from the catalog are treated as binary markets
DEFAULT_OUTCOME_COUNT = 2


class MarketLifecycleService:
    def __init__(
        self,
        repo: MarketRepositoryProtocol | None = None,
        default_b: Decimal | None = None,
    ) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._default_b = default_b if default_b is not None else settings.DEFAULT_LIQUIDITY_B

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    async def create_market(
        self, db: AsyncSession, game_id: str, category_id: str
    ) -> Market:
        outcomes = await self._repo.get_category_outcomes(db, category_id)
        outcome_count = len(outcomes) if outcomes else DEFAULT_OUTCOME_COUNT

        async with db.begin_nested():
            sequence_num = await self._repo.get_max_sequence(db, game_id, category_id) + 1
            market = Market(
                id=build_market_id(game_id, category_id, sequence_num),
                game_id=game_id,
                category_id=category_id,
                sequence_num=sequence_num,
                status=MarketStatus.PENDING.value,
                quantities=[ZERO] * outcome_count,
                b=self._default_b,
                volume=ZERO,
                outcome=None,
                created_at=utc_now(),
            )
            await self._repo.insert_market(db, market)

        logger.info(
            "Market created: id=%s outcomes=%d b=%s", market.id, outcome_count, market.b
        )
        return market

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def open_market(self, db: AsyncSession, market_id: str) -> Market:
        async with db.begin_nested():
            market = await self._get_or_raise(db, market_id, for_update=True)
            validate_transition(market.status, MarketStatus.OPEN.value)
            market.status = MarketStatus.OPEN.value
            market.opened_at = utc_now()
            await self._repo.save_transition(db, market)
        logger.info("Market %s OPEN", market_id)
        return market

    async def close_market(self, db: AsyncSession, market_id: str) -> Market:
        async with db.begin_nested():
            market = await self._get_or_raise(db, market_id, for_update=True)
            validate_transition(market.status, MarketStatus.CLOSED.value)
            market.status = MarketStatus.CLOSED.value
            market.closed_at = utc_now()
            await self._repo.save_transition(db, market)
        logger.info("Market %s CLOSED", market_id)
        return market

    async def resolve_market(
        self,
        db: AsyncSession,
        market_id: str,
        outcome: str,
        positions: Iterable[ResolvablePosition] = (),
    ) -> ResolutionResult:
        """Move CLOSED -> RESOLVED and classify the supplied positions.

        Winners are paid their share count (a winning share redeems at 1);
        losers forfeit what they paid.
        """
        async with db.begin_nested():
            market = await self._get_or_raise(db, market_id, for_update=True)
            validate_transition(market.status, MarketStatus.RESOLVED.value)

            outcomes = await self._repo.get_category_outcomes(db, market.category_id)
            if outcomes and outcome not in outcomes:
                raise InvalidOutcomeError(outcome, outcomes)

            market.status = MarketStatus.RESOLVED.value
            market.outcome = outcome
            market.resolved_at = utc_now()
            await self._repo.save_transition(db, market)

        result = classify_resolution(outcome, positions)
        logger.info(
            "Market %s RESOLVED -> %s: winners=%d losers=%d payout=%s",
            market_id,
            outcome,
            len(result.winners),
            len(result.losers),
            result.total_payout,
        )
        return result

    # ------------------------------------------------------------------
    # Counters / snapshots
    # ------------------------------------------------------------------

    async def update_quantities(
        self, db: AsyncSession, market_id: str, quantities: list[Decimal]
    ) -> Market:
        market = await self._get_or_raise(db, market_id)
        if len(quantities) != len(market.quantities):
            raise QuantityLengthMismatchError(len(market.quantities), len(quantities))
        market.quantities = [to_decimal(q) for q in quantities]
        await self._repo.update_quantities(db, market_id, market.quantities)
        return market

    async def add_volume(self, db: AsyncSession, market_id: str, amount: Decimal) -> None:
        await self._repo.add_volume(db, market_id, to_decimal(amount))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_market(
        self, db: AsyncSession, market_id: str, for_update: bool = False
    ) -> Market:
        return await self._get_or_raise(db, market_id, for_update=for_update)

    async def get_category_outcomes(
        self, db: AsyncSession, category_id: str
    ) -> list[str] | None:
        return await self._repo.get_category_outcomes(db, category_id)

    async def get_current_market(
        self,
        db: AsyncSession,
        game_id: str | None = None,
        category_id: str | None = None,
    ) -> Market | None:
        return await self._repo.get_current_market(db, game_id, category_id)

    async def get_market_history(
        self,
        db: AsyncSession,
        game_id: str,
        category_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Market]:
        return await self._repo.list_history(db, game_id, category_id, limit, offset)

    async def get_markets_by_game(self, db: AsyncSession, game_id: str) -> list[Market]:
        return await self._repo.list_by_game(db, game_id)

    async def _get_or_raise(
        self, db: AsyncSession, market_id: str, for_update: bool = False
    ) -> Market:
        market = await self._repo.get_market_by_id(db, market_id, for_update=for_update)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market


def classify_resolution(
    outcome: str, positions: Iterable[ResolvablePosition]
) -> ResolutionResult:
    result = ResolutionResult()
    for pos in positions:
        if pos.outcome == outcome:
            result.winners.append(
                Winner(address=pos.address, payout=pos.shares, app_session_id=pos.app_session_id)
            )
        else:
            result.losers.append(
                Loser(address=pos.address, loss=pos.cost_paid, app_session_id=pos.app_session_id)
            )
    result.total_payout = sum((w.payout for w in result.winners), ZERO)
    return result
