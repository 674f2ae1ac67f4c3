# src/pm_market/domain/repository.py
"""Repository Protocol: dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import Market


class MarketRepositoryProtocol(Protocol):
    async def get_market_by_id(
        self,
        db: AsyncSession,
        market_id: str,
        for_update: bool = False,
    ) -> Market | None: ...

    async def get_category_outcomes(
        self,
        db: AsyncSession,
        category_id: str,
    ) -> list[str] | None: ...

    async def get_max_sequence(
        self,
        db: AsyncSession,
        game_id: str,
        category_id: str,
    ) -> int: ...

    async def insert_market(self, db: AsyncSession, market: Market) -> None: ...

    async def save_transition(self, db: AsyncSession, market: Market) -> None: ...

    async def update_quantities(
        self,
        db: AsyncSession,
        market_id: str,
        quantities: list[Decimal],
    ) -> None: ...

    async def add_volume(
        self,
        db: AsyncSession,
        market_id: str,
        amount: Decimal,
    ) -> None: ...

    async def get_current_market(
        self,
        db: AsyncSession,
        game_id: str | None,
        category_id: str | None,
    ) -> Market | None: ...

    async def list_history(
        self,
        db: AsyncSession,
        game_id: str,
        category_id: str,
        limit: int,
        offset: int,
    ) -> list[Market]: ...

    async def list_by_game(self, db: AsyncSession, game_id: str) -> list[Market]: ...
