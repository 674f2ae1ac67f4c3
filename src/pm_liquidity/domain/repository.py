"""LiquidityRepository Protocol: interface contract for the LP ledger."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_liquidity.domain.models import LPEvent, LPShare


class LiquidityRepositoryProtocol(Protocol):
    async def lock_ledger(self, db: AsyncSession) -> None: ...

    async def get_share(self, db: AsyncSession, address: str) -> LPShare | None: ...

    async def list_shares(self, db: AsyncSession) -> list[LPShare]: ...

    async def get_total_shares(self, db: AsyncSession) -> Decimal: ...

    async def count_providers(self, db: AsyncSession) -> int: ...

    async def insert_share(self, db: AsyncSession, share: LPShare) -> None: ...

    async def update_share(self, db: AsyncSession, share: LPShare) -> None: ...

    async def delete_share(self, db: AsyncSession, address: str) -> None: ...

    async def insert_event(self, db: AsyncSession, event: LPEvent) -> None: ...

    async def list_events(
        self, db: AsyncSession, address: str | None, limit: int
    ) -> list[LPEvent]: ...
