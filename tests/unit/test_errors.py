"""Tests for pm_common.errors."""

import pytest

from src.pm_common.errors import (
    AppError,
    InsufficientSharesError,
    InvalidNumberError,
    InvalidOutcomeError,
    InvalidPoolValueError,
    InvalidTransitionError,
    MarketNotFoundError,
    MarketNotOpenError,
    MarketNotResolvedError,
    McpsOutOfRangeError,
    NoLiquidityPositionError,
    NonBinaryMarketError,
    NonPositiveAmountError,
    NonPositiveSharePriceError,
    NonPositiveSharesError,
    OrderNotCancellableError,
    OrderNotFoundError,
    OrderNotSettleableError,
    QuantityLengthMismatchError,
)


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=1001, message="bad", http_status=400)
        assert err.http_status == 400

    def test_is_exception(self) -> None:
        err = AppError(code=1001, message="test")
        assert isinstance(err, Exception)
        assert str(err) == "test"


@pytest.mark.parametrize(
    ("err", "code"),
    [
        (NonBinaryMarketError(3), 1001),
        (InvalidOutcomeError("X", ["BALL", "STRIKE"]), 1002),
        (McpsOutOfRangeError(1), 1003),
        (NonPositiveAmountError(0), 1004),
        (NonPositiveSharesError(0), 1005),
        (QuantityLengthMismatchError(2, 3), 1006),
        (InvalidNumberError("abc"), 1007),
        (InvalidPoolValueError(-1), 1008),
        (InvalidTransitionError("OPEN", "PENDING"), 2001),
        (OrderNotCancellableError("o1", "FILLED"), 2002),
        (InsufficientSharesError("0xabc", 1, 2), 2003),
        (NoLiquidityPositionError("0xabc"), 2004),
        (MarketNotOpenError("m1", "CLOSED"), 2005),
        (MarketNotResolvedError("m1", "CLOSED"), 2006),
        (OrderNotSettleableError("o1", "OPEN"), 2007),
        (NonPositiveSharePriceError(0, 100), 2008),
        (MarketNotFoundError("m1"), 3001),
        (OrderNotFoundError("o1"), 3002),
    ],
)
def test_error_codes(err: AppError, code: int) -> None:
    assert isinstance(err, AppError)
    assert err.code == code


class TestMessages:
    def test_non_binary(self) -> None:
        err = NonBinaryMarketError(3)
        assert "exactly 2 outcomes" in err.message
        assert "got 3" in err.message

    def test_invalid_outcome_lists_choices(self) -> None:
        err = InvalidOutcomeError("FOUL", ["BALL", "STRIKE"])
        assert err.message == 'Invalid outcome "FOUL". Must be one of: BALL, STRIKE'

    def test_invalid_transition_names_both_states(self) -> None:
        err = InvalidTransitionError("CLOSED", "OPEN")
        assert err.message == "Invalid transition: CLOSED -> OPEN"
        assert err.http_status == 409

    def test_insufficient_shares(self) -> None:
        err = InsufficientSharesError("0xabc", "5", "6")
        assert "0xabc" in err.message
        assert "have 5" in err.message
        assert "requested 6" in err.message

    def test_non_positive_amount_custom_label(self) -> None:
        err = NonPositiveAmountError(-1, what="Deposit amount")
        assert err.message == "Deposit amount must be positive, got -1"
