# tests/unit/test_positions.py
"""Position tracking: SettlementService position methods and PositionRepository."""
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_settlement.domain.models import Position
from src.pm_settlement.infrastructure.persistence import PositionRepository

_NOW = datetime(2026, 1, 1, tzinfo=UTC)


def _pos(address: str = "0xa", session_id: str = "s1", market_id: str = "m1") -> Position:
    return Position(
        address=address,
        market_id=market_id,
        outcome="BALL",
        shares=Decimal("10"),
        cost_paid=Decimal("6"),
        app_session_id=session_id,
        app_session_version=1,
        created_at=_NOW,
    )


def _make_pos_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", 1)
    row.address = kwargs.get("address", "0xa")
    row.market_id = kwargs.get("market_id", "m1")
    row.outcome = "BALL"
    row.shares = Decimal("10")
    row.cost_paid = Decimal("6")
    row.fee = Decimal("0")
    row.app_session_id = "s1"
    row.app_session_version = 3
    row.session_status = "open"
    row.session_data = None
    row.created_at = _NOW
    return row


class TestPositionService:
    @pytest.mark.asyncio
    async def test_add_position_assigns_id(self, settlement_service, session) -> None:
        p = await settlement_service.add_position(session, _pos())
        assert p.id is not None
        assert p.session_status == "open"

    @pytest.mark.asyncio
    async def test_positions_by_market_and_user(self, settlement_service, session) -> None:
        await settlement_service.add_position(session, _pos("0xa"))
        await settlement_service.add_position(session, _pos("0xb"))
        await settlement_service.add_position(session, _pos("0xa", market_id="m2"))

        assert len(await settlement_service.get_positions_by_market(session, "m1")) == 2
        assert len(await settlement_service.get_positions_by_user(session, "0xa")) == 2
        found = await settlement_service.get_position(session, "0xb", "m1")
        assert found is not None and found.address == "0xb"
        assert await settlement_service.get_position(session, "0xb", "m2") is None

    @pytest.mark.asyncio
    async def test_session_status_update(self, settlement_service, session, store) -> None:
        await settlement_service.add_position(session, _pos(session_id="s1"))
        await settlement_service.add_position(session, _pos("0xb", session_id="s2"))

        count = await settlement_service.update_session_status(session, "s1", "settling")

        assert count == 1
        statuses = {p.app_session_id: p.session_status for p in store.positions}
        assert statuses == {"s1": "settling", "s2": "open"}

    @pytest.mark.asyncio
    async def test_unknown_session_status_rejected(self, settlement_service, session) -> None:
        with pytest.raises(ValueError):
            await settlement_service.update_session_status(session, "s1", "bogus")

    @pytest.mark.asyncio
    async def test_session_version_and_data(self, settlement_service, session, store) -> None:
        await settlement_service.add_position(session, _pos(session_id="s1"))

        assert await settlement_service.update_session_version(session, "s1", 4) == 1
        assert await settlement_service.update_session_data(session, "s1", '{"v":4}') == 1
        assert await settlement_service.update_session_data(session, "nope", "x") == 0

        stored = store.positions[0]
        assert stored.app_session_version == 4
        assert stored.session_data == '{"v":4}'


class TestPositionRepository:
    @pytest.mark.asyncio
    async def test_insert_sets_id(self) -> None:
        db = MagicMock()
        result_mock = MagicMock()
        result_mock.scalar_one.return_value = 7
        db.execute = AsyncMock(return_value=result_mock)
        p = _pos()

        await PositionRepository().insert(p, db)

        assert p.id == 7
        assert db.execute.call_args.args[1]["session_status"] == "open"

    @pytest.mark.asyncio
    async def test_list_by_market_maps_rows(self) -> None:
        db = MagicMock()
        result_mock = MagicMock()
        result_mock.fetchall.return_value = [_make_pos_row(), _make_pos_row(id=2, address="0xb")]
        db.execute = AsyncMock(return_value=result_mock)

        positions = await PositionRepository().list_by_market("m1", db, for_update=True)

        assert [p.address for p in positions] == ["0xa", "0xb"]
        assert positions[0].app_session_version == 3
        assert "FOR UPDATE" in str(db.execute.call_args.args[0])

    @pytest.mark.asyncio
    async def test_update_returns_rowcount(self) -> None:
        db = MagicMock()
        result_mock = MagicMock()
        result_mock.rowcount = 2
        db.execute = AsyncMock(return_value=result_mock)

        count = await PositionRepository().update_session_status("s1", "settling", db)

        assert count == 2
        assert db.execute.call_args.args[1] == {"app_session_id": "s1", "value": "settling"}

    @pytest.mark.asyncio
    async def test_delete_by_market(self) -> None:
        db = MagicMock()
        result_mock = MagicMock()
        result_mock.rowcount = 3
        db.execute = AsyncMock(return_value=result_mock)

        assert await PositionRepository().delete_by_market("m1", db) == 3
