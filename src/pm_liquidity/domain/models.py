"""Domain models for pm_liquidity: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class LPShare:
    address: str
    shares: Decimal
    total_deposited: Decimal
    total_withdrawn: Decimal
    first_deposit_at: datetime
    last_action_at: datetime


@dataclass
class LPEvent:
    id: int | None  # assigned by the store (BIGSERIAL)
    address: str
    type: str  # DEPOSIT / WITHDRAWAL
    amount: Decimal
    shares: Decimal
    share_price: Decimal
    pool_value_before: Decimal
    pool_value_after: Decimal
    created_at: datetime


@dataclass
class DepositResult:
    shares: Decimal
    share_price: Decimal
    pool_value_before: Decimal
    pool_value_after: Decimal


@dataclass
class WithdrawalResult:
    amount: Decimal
    share_price: Decimal
    pool_value_before: Decimal
    pool_value_after: Decimal


@dataclass
class WithdrawalGate:
    allowed: bool
    reason: str | None = None


@dataclass
class PoolStats:
    pool_value: Decimal
    total_shares: Decimal
    share_price: Decimal
    lp_count: int
    can_withdraw: bool
    lock_reason: str | None = None
