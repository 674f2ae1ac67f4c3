"""LiquidityPoolService: NAV minting/burning over the in-memory ledger."""
from decimal import Decimal

import pytest

from src.pm_common.errors import (
    InsufficientSharesError,
    InvalidPoolValueError,
    NoLiquidityPositionError,
    NonPositiveAmountError,
    NonPositiveSharePriceError,
    NonPositiveSharesError,
)
from src.pm_liquidity.application.service import LiquidityPoolService
from src.pm_liquidity.domain.pricing import OPEN_MARKETS_REASON, UNSETTLED_POSITIONS_REASON
from tests.fakes import FakeLiquidityRepository

D = Decimal


class TestDeposit:
    @pytest.mark.asyncio
    async def test_first_deposit_mints_at_one(self, lp_service, session, store) -> None:
        r = await lp_service.record_deposit(session, "0xlp1", D(1000), D(0))

        assert r.shares == D(1000)
        assert r.share_price == D(1)
        assert r.pool_value_before == D(0)
        assert r.pool_value_after == D(1000)
        assert store.lp_shares["0xlp1"].total_deposited == D(1000)

    @pytest.mark.asyncio
    async def test_deposit_at_nav(self, lp_service, session, store) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(1000), D(0))
        r = await lp_service.record_deposit(session, "0xlp2", D(1000), D(2000))

        assert r.share_price == D(2)
        assert r.shares == D(500)
        assert await lp_service.get_total_shares(session) == D(1500)

    @pytest.mark.asyncio
    async def test_repeat_deposit_accumulates(self, lp_service, session, store) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(100), D(0))
        first_at = store.lp_shares["0xlp1"].first_deposit_at
        await lp_service.record_deposit(session, "0xlp1", D(50), D(100))

        share = await lp_service.get_share(session, "0xlp1")
        assert share.shares == D(150)
        assert share.total_deposited == D(150)
        assert share.first_deposit_at == first_at

    @pytest.mark.asyncio
    async def test_accepts_plain_numbers(self, lp_service, session) -> None:
        r = await lp_service.record_deposit(session, "0xlp1", 10, "0")
        assert r.shares == D(10)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [D(0), D(-1), float("nan"), float("inf"), "abc"])
    async def test_non_positive_amount(self, lp_service, session, store, amount) -> None:
        with pytest.raises(NonPositiveAmountError):
            await lp_service.record_deposit(session, "0xlp1", amount, D(0))
        assert store.lp_shares == {}
        assert store.lp_events == []

    @pytest.mark.asyncio
    async def test_wiped_out_pool_rejects_deposit(self, lp_service, session, store) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(100), D(0))
        with pytest.raises(NonPositiveSharePriceError):
            await lp_service.record_deposit(session, "0xlp2", D(50), D(0))
        assert store.lp_shares["0xlp1"].shares == D(100)
        assert "0xlp2" not in store.lp_shares
        assert len(store.lp_events) == 1
        assert session.rollbacks == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pool_value", [D(-100), D("-0.01"), float("nan"), "abc"])
    async def test_invalid_pool_value_rejected(
        self, lp_service, session, store, pool_value
    ) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(100), D(0))
        with pytest.raises(InvalidPoolValueError) as exc:
            await lp_service.record_deposit(session, "0xlp1", D(50), pool_value)
        assert exc.value.code == 1008
        assert store.lp_shares["0xlp1"].shares == D(100)
        assert len(store.lp_events) == 1

    @pytest.mark.asyncio
    async def test_ledger_locked_for_each_mutation(self, lp_service, lp_repo, session) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(10), D(0))
        await lp_service.record_withdrawal(session, "0xlp1", D(5), D(10))
        assert lp_repo.lock_count == 2


class TestWithdrawal:
    @pytest.mark.asyncio
    async def test_deposit_then_full_withdrawal_returns_deposit(
        self, lp_service, session, store
    ) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(1000), D(0))
        r = await lp_service.record_withdrawal(session, "0xlp1", D(1000), D(1000))

        assert r.amount == D(1000)
        assert r.pool_value_after == D(0)
        assert "0xlp1" not in store.lp_shares

    @pytest.mark.asyncio
    async def test_partial_withdrawal_at_nav(self, lp_service, session, store) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(1000), D(0))
        r = await lp_service.record_withdrawal(session, "0xlp1", D(250), D(1200))

        assert r.share_price == D("1.2")
        assert r.amount == D(300)
        share = store.lp_shares["0xlp1"]
        assert share.shares == D(750)
        assert share.total_withdrawn == D(300)

    @pytest.mark.asyncio
    async def test_dust_remainder_removes_row(self, lp_service, session, store) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(1), D(0))
        await lp_service.record_withdrawal(session, "0xlp1", D("0.99999999999"), D(1))
        assert "0xlp1" not in store.lp_shares

    @pytest.mark.asyncio
    async def test_custom_dust_threshold(self, lp_repo, session, store) -> None:
        service = LiquidityPoolService(repo=lp_repo, dust_threshold=D("0.01"))
        await service.record_deposit(session, "0xlp1", D(1), D(0))
        await service.record_withdrawal(session, "0xlp1", D("0.995"), D(1))
        assert "0xlp1" not in store.lp_shares

    @pytest.mark.asyncio
    async def test_no_position(self, lp_service, session) -> None:
        with pytest.raises(NoLiquidityPositionError):
            await lp_service.record_withdrawal(session, "0xnobody", D(1), D(0))

    @pytest.mark.asyncio
    async def test_insufficient_shares_leaves_ledger(self, lp_service, session, store) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(10), D(0))
        with pytest.raises(InsufficientSharesError):
            await lp_service.record_withdrawal(session, "0xlp1", D(11), D(10))
        assert store.lp_shares["0xlp1"].shares == D(10)
        assert len(store.lp_events) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("shares", [D(0), D(-1), float("nan"), float("inf"), "abc"])
    async def test_non_positive_shares(self, lp_service, session, shares) -> None:
        with pytest.raises(NonPositiveSharesError):
            await lp_service.record_withdrawal(session, "0xlp1", shares, D(0))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pool_value", [D(-1), float("-inf"), "abc"])
    async def test_invalid_pool_value_rejected(
        self, lp_service, session, store, pool_value
    ) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(10), D(0))
        with pytest.raises(InvalidPoolValueError):
            await lp_service.record_withdrawal(session, "0xlp1", D(5), pool_value)
        assert store.lp_shares["0xlp1"].shares == D(10)
        assert len(store.lp_events) == 1

    @pytest.mark.asyncio
    async def test_worthless_pool_burns_for_nothing(self, lp_service, session, store) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(10), D(0))
        r = await lp_service.record_withdrawal(session, "0xlp1", D(10), D(0))
        assert r.share_price == D(0)
        assert r.amount == D(0)
        assert "0xlp1" not in store.lp_shares


class _FailingEventRepository(FakeLiquidityRepository):
    async def insert_event(self, db, event):
        raise RuntimeError("event log unavailable")


class TestAtomicity:
    @pytest.mark.asyncio
    async def test_failed_event_write_rolls_back_share(self, session, store) -> None:
        service = LiquidityPoolService(repo=_FailingEventRepository(store))
        with pytest.raises(RuntimeError):
            await service.record_deposit(session, "0xlp1", D(10), D(0))
        assert store.lp_shares == {}
        assert session.rollbacks == 1


class TestEventsAndStats:
    @pytest.mark.asyncio
    async def test_events_newest_first(self, lp_service, session) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(100), D(0))
        await lp_service.record_deposit(session, "0xlp2", D(100), D(100))
        await lp_service.record_withdrawal(session, "0xlp1", D(50), D(200))

        events = await lp_service.get_events(session)
        assert [e.type for e in events] == ["WITHDRAWAL", "DEPOSIT", "DEPOSIT"]
        assert events[0].id > events[1].id

        mine = await lp_service.get_events(session, address="0xlp2")
        assert len(mine) == 1
        assert mine[0].pool_value_before == D(100)
        assert mine[0].pool_value_after == D(200)

        assert len(await lp_service.get_events(session, limit=1)) == 1

    @pytest.mark.asyncio
    async def test_pool_stats(self, lp_service, session) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(100), D(0))
        await lp_service.record_deposit(session, "0xlp2", D(100), D(100))

        stats = await lp_service.get_pool_stats(session, D(300), False, False)

        assert stats.total_shares == D(200)
        assert stats.share_price == D("1.5")
        assert stats.lp_count == 2
        assert stats.can_withdraw is True
        assert stats.lock_reason is None

    @pytest.mark.asyncio
    async def test_pool_stats_reports_lock(self, lp_service, session) -> None:
        stats = await lp_service.get_pool_stats(session, D(0), True, True)
        assert stats.can_withdraw is False
        assert stats.lock_reason == OPEN_MARKETS_REASON

    @pytest.mark.asyncio
    async def test_pool_stats_rejects_negative_pool_value(self, lp_service, session) -> None:
        with pytest.raises(InvalidPoolValueError):
            await lp_service.get_pool_stats(session, D(-1), False, False)
        with pytest.raises(InvalidPoolValueError):
            await lp_service.get_share_price(session, D(-1))

    @pytest.mark.asyncio
    async def test_share_price_of_empty_pool(self, lp_service, session) -> None:
        assert await lp_service.get_share_price(session, D(500)) == D(1)

    @pytest.mark.asyncio
    async def test_all_shares(self, lp_service, session) -> None:
        await lp_service.record_deposit(session, "0xlp1", D(1), D(0))
        await lp_service.record_deposit(session, "0xlp2", D(1), D(1))
        shares = await lp_service.get_all_shares(session)
        assert {s.address for s in shares} == {"0xlp1", "0xlp2"}

    def test_gate_delegates_to_pricing(self, lp_service) -> None:
        gate = lp_service.can_withdraw(False, True)
        assert gate.allowed is False
        assert gate.reason == UNSETTLED_POSITIONS_REASON
