"""Repository Protocols for positions and settlements."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_settlement.domain.models import Position, Settlement


class PositionRepositoryProtocol(Protocol):
    async def insert(self, position: Position, db: AsyncSession) -> None: ...

    async def update_session_status(
        self, app_session_id: str, status: str, db: AsyncSession
    ) -> int: ...

    async def update_session_version(
        self, app_session_id: str, version: int, db: AsyncSession
    ) -> int: ...

    async def update_session_data(
        self, app_session_id: str, data: str, db: AsyncSession
    ) -> int: ...

    async def list_by_market(
        self, market_id: str, db: AsyncSession, for_update: bool = False
    ) -> list[Position]: ...

    async def list_by_user(self, address: str, db: AsyncSession) -> list[Position]: ...

    async def get(self, address: str, market_id: str, db: AsyncSession) -> Position | None: ...

    async def delete_by_market(self, market_id: str, db: AsyncSession) -> int: ...


class SettlementRepositoryProtocol(Protocol):
    async def insert(self, settlement: Settlement, db: AsyncSession) -> None: ...

    async def list_by_market(self, market_id: str, db: AsyncSession) -> list[Settlement]: ...

    async def list_by_user(self, address: str, db: AsyncSession) -> list[Settlement]: ...
