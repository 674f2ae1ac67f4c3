"""LiquidityPoolService: mint/burn LP shares at net asset value.

The pool value itself is owned by the market maker's wallet and passed in by
the caller on every call; this service only keeps the share ledger.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import LPEventType
from src.pm_common.errors import (
    InsufficientSharesError,
    InvalidNumberError,
    InvalidPoolValueError,
    NoLiquidityPositionError,
    NonPositiveAmountError,
    NonPositiveSharePriceError,
    NonPositiveSharesError,
)
from src.pm_common.units import ZERO, is_dust, to_decimal
from src.pm_liquidity.domain.models import (
    DepositResult,
    LPEvent,
    LPShare,
    PoolStats,
    WithdrawalGate,
    WithdrawalResult,
)
from src.pm_liquidity.domain.pricing import can_withdraw, share_price
from src.pm_liquidity.domain.repository import LiquidityRepositoryProtocol
from src.pm_liquidity.infrastructure.persistence import LiquidityRepository

logger = logging.getLogger(__name__)


def _to_pool_value(value: Decimal) -> Decimal:
    try:
        pool_value = to_decimal(value)
    except InvalidNumberError as exc:
        raise InvalidPoolValueError(value) from exc
    if pool_value < ZERO:
        raise InvalidPoolValueError(value)
    return pool_value


class LiquidityPoolService:
    def __init__(
        self,
        repo: LiquidityRepositoryProtocol | None = None,
        dust_threshold: Decimal | None = None,
    ) -> None:
        self._repo: LiquidityRepositoryProtocol = repo or LiquidityRepository()
        self._dust_threshold = (
            dust_threshold if dust_threshold is not None else settings.LP_DUST_THRESHOLD
        )

    async def get_share_price(self, db: AsyncSession, pool_value: Decimal) -> Decimal:
        pool_value = _to_pool_value(pool_value)
        total = await self._repo.get_total_shares(db)
        return share_price(pool_value, total)

    async def record_deposit(
        self, db: AsyncSession, address: str, amount: Decimal, pool_value: Decimal
    ) -> DepositResult:
        try:
            amount = to_decimal(amount)
        except InvalidNumberError as exc:
            raise NonPositiveAmountError(amount, what="Deposit amount") from exc
        if amount <= ZERO:
            raise NonPositiveAmountError(amount, what="Deposit amount")
        pool_value = _to_pool_value(pool_value)

        async with db.begin_nested():
            await self._repo.lock_ledger(db)
            total = await self._repo.get_total_shares(db)
            price = share_price(pool_value, total)
            if price <= ZERO:
                # pool wiped out while shares are still outstanding
                raise NonPositiveSharePriceError(pool_value, total)
            minted = amount / price
            now = utc_now()

            existing = await self._repo.get_share(db, address)
            if existing is None:
                await self._repo.insert_share(
                    db,
                    LPShare(
                        address=address,
                        shares=minted,
                        total_deposited=amount,
                        total_withdrawn=ZERO,
                        first_deposit_at=now,
                        last_action_at=now,
                    ),
                )
            else:
                existing.shares += minted
                existing.total_deposited += amount
                existing.last_action_at = now
                await self._repo.update_share(db, existing)

            result = DepositResult(
                shares=minted,
                share_price=price,
                pool_value_before=pool_value,
                pool_value_after=pool_value + amount,
            )
            await self._repo.insert_event(
                db,
                LPEvent(
                    id=None,
                    address=address,
                    type=LPEventType.DEPOSIT.value,
                    amount=amount,
                    shares=minted,
                    share_price=price,
                    pool_value_before=result.pool_value_before,
                    pool_value_after=result.pool_value_after,
                    created_at=now,
                ),
            )

        logger.info(
            "LP deposit: address=%s amount=%s shares=%s price=%s",
            address,
            amount,
            minted,
            price,
        )
        return result

    async def record_withdrawal(
        self, db: AsyncSession, address: str, shares: Decimal, pool_value: Decimal
    ) -> WithdrawalResult:
        try:
            shares = to_decimal(shares)
        except InvalidNumberError as exc:
            raise NonPositiveSharesError(shares) from exc
        if shares <= ZERO:
            raise NonPositiveSharesError(shares)
        pool_value = _to_pool_value(pool_value)

        async with db.begin_nested():
            await self._repo.lock_ledger(db)
            existing = await self._repo.get_share(db, address)
            if existing is None:
                raise NoLiquidityPositionError(address)
            if existing.shares < shares:
                raise InsufficientSharesError(address, existing.shares, shares)

            price = share_price(pool_value, await self._repo.get_total_shares(db))
            amount = shares * price
            now = utc_now()

            remaining = existing.shares - shares
            if is_dust(remaining, self._dust_threshold):
                await self._repo.delete_share(db, address)
            else:
                existing.shares = remaining
                existing.total_withdrawn += amount
                existing.last_action_at = now
                await self._repo.update_share(db, existing)

            result = WithdrawalResult(
                amount=amount,
                share_price=price,
                pool_value_before=pool_value,
                pool_value_after=pool_value - amount,
            )
            await self._repo.insert_event(
                db,
                LPEvent(
                    id=None,
                    address=address,
                    type=LPEventType.WITHDRAWAL.value,
                    amount=amount,
                    shares=shares,
                    share_price=price,
                    pool_value_before=result.pool_value_before,
                    pool_value_after=result.pool_value_after,
                    created_at=now,
                ),
            )

        logger.info(
            "LP withdrawal: address=%s shares=%s amount=%s price=%s",
            address,
            shares,
            amount,
            price,
        )
        return result

    def can_withdraw(
        self, has_open_markets: bool, has_unsettled_positions: bool
    ) -> WithdrawalGate:
        return can_withdraw(has_open_markets, has_unsettled_positions)

    async def get_pool_stats(
        self,
        db: AsyncSession,
        pool_value: Decimal,
        has_open_markets: bool,
        has_unsettled_positions: bool,
    ) -> PoolStats:
        pool_value = _to_pool_value(pool_value)
        total = await self._repo.get_total_shares(db)
        gate = can_withdraw(has_open_markets, has_unsettled_positions)
        return PoolStats(
            pool_value=pool_value,
            total_shares=total,
            share_price=share_price(pool_value, total),
            lp_count=await self._repo.count_providers(db),
            can_withdraw=gate.allowed,
            lock_reason=gate.reason,
        )

    async def get_share(self, db: AsyncSession, address: str) -> LPShare | None:
        return await self._repo.get_share(db, address)

    async def get_all_shares(self, db: AsyncSession) -> list[LPShare]:
        return await self._repo.list_shares(db)

    async def get_total_shares(self, db: AsyncSession) -> Decimal:
        return await self._repo.get_total_shares(db)

    async def get_events(
        self, db: AsyncSession, address: str | None = None, limit: int = 50
    ) -> list[LPEvent]:
        return await self._repo.list_events(db, address, limit)
