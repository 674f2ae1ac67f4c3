"""Tests for pm_common.id_generator and pm_common.datetime_utils."""

from datetime import UTC, datetime, timezone, timedelta

import pytest

from src.pm_common.datetime_utils import to_epoch_ms, utc_now
from src.pm_common.id_generator import SnowflakeIdGenerator, generate_id


class TestSnowflakeIdGenerator:
    def test_returns_str(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        result = gen.next_id()
        assert isinstance(result, str)

    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = {gen.next_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_monotonically_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        prev = int(gen.next_id())
        for _ in range(100):
            current = int(gen.next_id())
            assert current > prev
            prev = current

    def test_string_order_matches_numeric_order(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = [gen.next_id() for _ in range(50)]
        assert sorted(ids) == ids

    def test_clock_going_backwards_stays_monotonic(self, monkeypatch) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ticks = iter([1_800_000_000_000, 1_799_999_999_000, 1_799_999_999_500])
        monkeypatch.setattr(gen, "_clock_ms", lambda: next(ticks))
        first = int(gen.next_id())
        second = int(gen.next_id())
        third = int(gen.next_id())
        assert first < second < third

    def test_rejects_out_of_range_machine_id(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)

    def test_module_generator(self) -> None:
        assert int(generate_id()) < int(generate_id())


class TestUtcNow:
    def test_returns_aware_datetime(self) -> None:
        now = utc_now()
        assert isinstance(now, datetime)
        assert now.tzinfo is not None

    def test_is_utc(self) -> None:
        now = utc_now()
        assert now.tzinfo == UTC


class TestToEpochMs:
    def test_none_passes_through(self) -> None:
        assert to_epoch_ms(None) is None

    def test_aware_datetime(self) -> None:
        assert to_epoch_ms(datetime(1970, 1, 1, 0, 0, 1, tzinfo=UTC)) == 1000

    def test_naive_treated_as_utc(self) -> None:
        assert to_epoch_ms(datetime(1970, 1, 1, 0, 0, 2)) == 2000

    def test_offset_respected(self) -> None:
        plus_one = timezone(timedelta(hours=1))
        assert to_epoch_ms(datetime(1970, 1, 1, 1, 0, 0, tzinfo=plus_one)) == 0
