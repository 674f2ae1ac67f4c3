"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Validation (bad input, never retried)
  2xxx: State (operation not allowed in the current state)
  3xxx: Not found
  9xxx: System

http_status is carried for the transport layer; the core never uses it.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Validation ---

class NonBinaryMarketError(AppError):
    def __init__(self, outcome_count: int) -> None:
        super().__init__(
            1001,
            "P2P order book only supports binary markets "
            f"(exactly 2 outcomes), got {outcome_count}",
            400,
        )


class InvalidOutcomeError(AppError):
    def __init__(self, outcome: str, outcomes: list[str]) -> None:
        super().__init__(
            1002,
            f'Invalid outcome "{outcome}". Must be one of: {", ".join(outcomes)}',
            400,
        )


class McpsOutOfRangeError(AppError):
    def __init__(self, mcps: object) -> None:
        super().__init__(1003, f"MCPS must be between 0 and 1 (exclusive), got {mcps}", 400)


class NonPositiveAmountError(AppError):
    def __init__(self, amount: object, what: str = "Amount") -> None:
        super().__init__(1004, f"{what} must be positive, got {amount}", 400)


class NonPositiveSharesError(AppError):
    def __init__(self, shares: object) -> None:
        super().__init__(1005, f"Shares to burn must be positive, got {shares}", 400)


class QuantityLengthMismatchError(AppError):
    def __init__(self, expected: int, got: int) -> None:
        super().__init__(
            1006, f"Quantities must have {expected} entries, got {got}", 400
        )


class InvalidNumberError(AppError):
    def __init__(self, value: object) -> None:
        super().__init__(1007, f"Expected a finite number, got {value!r}", 400)


class InvalidPoolValueError(AppError):
    def __init__(self, pool_value: object) -> None:
        super().__init__(
            1008, f"Pool value must be a non-negative number, got {pool_value}", 400
        )


# --- 2xxx: State ---

class InvalidTransitionError(AppError):
    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(2001, f"Invalid transition: {current} -> {requested}", 409)


class OrderNotCancellableError(AppError):
    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(2002, f"Order {order_id} in status {status} cannot be cancelled", 409)


class InsufficientSharesError(AppError):
    def __init__(self, address: str, owned: object, requested: object) -> None:
        super().__init__(
            2003,
            f"Insufficient shares for {address}: have {owned}, requested {requested}",
            422,
        )


class NoLiquidityPositionError(AppError):
    def __init__(self, address: str) -> None:
        super().__init__(2004, f"No LP position found for {address}", 404)


class MarketNotOpenError(AppError):
    def __init__(self, market_id: str, status: str) -> None:
        super().__init__(2005, f"Market {market_id} is {status}, not OPEN", 409)


class MarketNotResolvedError(AppError):
    def __init__(self, market_id: str, status: str) -> None:
        super().__init__(
            2006, f"Market {market_id} is {status}; settlement requires RESOLVED", 409
        )


class OrderNotSettleableError(AppError):
    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(
            2007, f"Order {order_id} in status {status} has no fills to settle", 409
        )


class NonPositiveSharePriceError(AppError):
    def __init__(self, pool_value: object, total_shares: object) -> None:
        super().__init__(
            2008,
            f"Cannot mint LP shares: pool value {pool_value} backs {total_shares} "
            "outstanding shares at a non-positive price",
            409,
        )


# --- 3xxx: Not found ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class OrderNotFoundError(AppError):
    def __init__(self, order_id: str) -> None:
        super().__init__(3002, f"Order not found: {order_id}", 404)

