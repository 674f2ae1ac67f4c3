from decimal import Decimal

from src.pm_matching.domain.models import RestingOrder
from src.pm_matching.engine.matching_algo import match_order

D = Decimal


def _resting(order_id: str, mcps: str, shares: str) -> RestingOrder:
    return RestingOrder(order_id=order_id, mcps=D(mcps), unfilled_shares=D(shares))


class TestCrossing:
    def test_exact_complement_fills_at_limit_prices(self) -> None:
        # A: BALL @0.60 for $6 -> 10 shares resting; B: STRIKE @0.40 for $4 -> 10 shares
        result = match_order(D("0.40"), D("10"), [_resting("a", "0.60", "10")])
        assert len(result.fills) == 1
        fill = result.fills[0]
        assert fill.resting_order_id == "a"
        assert fill.shares == D("10")
        assert fill.incoming_price == D("0.40")
        assert fill.resting_price == D("0.60")
        assert result.remaining_shares == 0

    def test_surplus_split_evenly(self) -> None:
        # resting 0.70 vs incoming 0.50: surplus 0.20 -> each side improved by 0.10
        result = match_order(D("0.50"), D("5"), [_resting("r", "0.70", "5")])
        fill = result.fills[0]
        assert fill.incoming_price == D("0.40")
        assert fill.resting_price == D("0.60")

    def test_prices_sum_to_exactly_one(self) -> None:
        cases = [("0.51", "0.52"), ("0.333333", "0.777777"), ("0.99", "0.01"), ("0.5", "0.5")]
        for incoming, resting in cases:
            result = match_order(D(incoming), D("1"), [_resting("r", resting, "1")])
            fill = result.fills[0]
            assert fill.incoming_price + fill.resting_price == D(1)

    def test_no_match_when_combined_below_one(self) -> None:
        result = match_order(D("0.30"), D("10"), [_resting("r", "0.60", "10")])
        assert result.fills == []
        assert result.remaining_shares == D("10")


class TestPriority:
    def test_stops_at_first_non_crossing_order(self) -> None:
        resting = [
            _resting("best", "0.70", "2"),
            _resting("worse", "0.40", "5"),
            # never reached: scanning stops at "worse"
            _resting("unsorted", "0.90", "5"),
        ]
        result = match_order(D("0.50"), D("10"), resting)
        assert [f.resting_order_id for f in result.fills] == ["best"]
        assert result.remaining_shares == D("8")

    def test_fills_in_given_order_across_levels(self) -> None:
        resting = [
            _resting("p1", "0.80", "3"),
            _resting("p2", "0.70", "3"),
            _resting("p3", "0.60", "3"),
        ]
        result = match_order(D("0.45"), D("7"), resting)
        assert [(f.resting_order_id, f.shares) for f in result.fills] == [
            ("p1", D("3")),
            ("p2", D("3")),
            ("p3", D("1")),
        ]
        assert result.remaining_shares == 0
        assert result.matched_shares == D("7")

    def test_time_priority_within_price_level(self) -> None:
        resting = [_resting("older", "0.60", "4"), _resting("newer", "0.60", "4")]
        result = match_order(D("0.40"), D("4"), resting)
        assert [f.resting_order_id for f in result.fills] == ["older"]

    def test_skips_exhausted_resting_orders(self) -> None:
        resting = [_resting("empty", "0.70", "0"), _resting("full", "0.70", "2")]
        result = match_order(D("0.40"), D("2"), resting)
        assert [f.resting_order_id for f in result.fills] == ["full"]


class TestPartialFills:
    def test_incoming_larger_than_book(self) -> None:
        result = match_order(D("0.50"), D("10"), [_resting("r", "0.50", "4")])
        assert result.fills[0].shares == D("4")
        assert result.remaining_shares == D("6")

    def test_resting_larger_than_incoming(self) -> None:
        result = match_order(D("0.50"), D("3"), [_resting("r", "0.50", "10")])
        assert result.fills[0].shares == D("3")
        assert result.remaining_shares == 0

    def test_empty_book(self) -> None:
        result = match_order(D("0.50"), D("3"), [])
        assert result.fills == []
        assert result.remaining_shares == D("3")
        assert result.matched_shares == 0
