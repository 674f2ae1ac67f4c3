"""Pydantic response models for pm_liquidity."""

from decimal import Decimal

from pydantic import BaseModel

from src.pm_common.datetime_utils import to_epoch_ms
from src.pm_liquidity.domain.models import (
    DepositResult,
    LPEvent,
    LPShare,
    PoolStats,
    WithdrawalResult,
)


class DepositResponse(BaseModel):
    shares: Decimal
    share_price: Decimal
    pool_value_before: Decimal
    pool_value_after: Decimal

    @classmethod
    def from_domain(cls, r: DepositResult) -> "DepositResponse":
        return cls(
            shares=r.shares,
            share_price=r.share_price,
            pool_value_before=r.pool_value_before,
            pool_value_after=r.pool_value_after,
        )


class WithdrawalResponse(BaseModel):
    amount: Decimal
    share_price: Decimal
    pool_value_before: Decimal
    pool_value_after: Decimal

    @classmethod
    def from_domain(cls, r: WithdrawalResult) -> "WithdrawalResponse":
        return cls(
            amount=r.amount,
            share_price=r.share_price,
            pool_value_before=r.pool_value_before,
            pool_value_after=r.pool_value_after,
        )


class PoolStatsResponse(BaseModel):
    pool_value: Decimal
    total_shares: Decimal
    share_price: Decimal
    lp_count: int
    can_withdraw: bool
    lock_reason: str | None = None

    @classmethod
    def from_domain(cls, s: PoolStats) -> "PoolStatsResponse":
        return cls(
            pool_value=s.pool_value,
            total_shares=s.total_shares,
            share_price=s.share_price,
            lp_count=s.lp_count,
            can_withdraw=s.can_withdraw,
            lock_reason=s.lock_reason,
        )


class LPShareResponse(BaseModel):
    address: str
    shares: Decimal
    total_deposited: Decimal
    total_withdrawn: Decimal
    first_deposit_at: int
    last_action_at: int

    @classmethod
    def from_domain(cls, s: LPShare) -> "LPShareResponse":
        return cls(
            address=s.address,
            shares=s.shares,
            total_deposited=s.total_deposited,
            total_withdrawn=s.total_withdrawn,
            first_deposit_at=to_epoch_ms(s.first_deposit_at),  # type: ignore[arg-type]
            last_action_at=to_epoch_ms(s.last_action_at),  # type: ignore[arg-type]
        )


class LPEventResponse(BaseModel):
    id: int | None
    address: str
    type: str
    amount: Decimal
    shares: Decimal
    share_price: Decimal
    pool_value_before: Decimal
    pool_value_after: Decimal
    created_at: int

    @classmethod
    def from_domain(cls, e: LPEvent) -> "LPEventResponse":
        return cls(
            id=e.id,
            address=e.address,
            type=e.type,
            amount=e.amount,
            shares=e.shares,
            share_price=e.share_price,
            pool_value_before=e.pool_value_before,
            pool_value_after=e.pool_value_after,
            created_at=to_epoch_ms(e.created_at),  # type: ignore[arg-type]
        )
