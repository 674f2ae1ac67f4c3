"""OrderRepository Protocol: interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_order.domain.models import Fill, Order


class OrderRepositoryProtocol(Protocol):
    async def lock_market(self, market_id: str, db: AsyncSession) -> None: ...

    async def save(self, order: Order, db: AsyncSession) -> None: ...

    async def save_fill(self, fill: Fill, db: AsyncSession) -> None: ...

    async def get_by_id(
        self, order_id: str, db: AsyncSession, for_update: bool = False
    ) -> Order | None: ...

    async def update_fill_state(self, order: Order, db: AsyncSession) -> None: ...

    async def update_status(self, order: Order, db: AsyncSession) -> None: ...

    async def list_resting(
        self,
        market_id: str,
        outcome: str | None,
        db: AsyncSession,
        for_update: bool = False,
    ) -> list[Order]: ...

    async def list_by_user(
        self, user_address: str, market_id: str | None, db: AsyncSession
    ) -> list[Order]: ...

    async def list_by_market(self, market_id: str, db: AsyncSession) -> list[Order]: ...

    async def list_with_fills(self, market_id: str, db: AsyncSession) -> list[Order]: ...

    async def list_fills(self, order_id: str, db: AsyncSession) -> list[Fill]: ...
