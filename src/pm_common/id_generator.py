"""Snowflake-style ID generator for order and fill ids.

Generates monotonically increasing, unique string IDs, so ids issued later
sort later (used as the final time-priority tiebreak on the book).
"""

import threading
import time

from config.settings import settings


class SnowflakeIdGenerator:
    """Simple snowflake ID generator.

    Layout (64 bits):
      - 41 bits: millisecond timestamp (since custom epoch)
      - 10 bits: machine_id (0-1023)
      - 12 bits: sequence (0-4095 per millisecond)
    """

    _EPOCH_MS = 1_700_000_000_000  # 2023-11-14 approx
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, machine_id: int = 0) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now_ms = self._clock_ms()
            if now_ms < self._last_ms:
                # Clock went backwards: keep issuing from the last timestamp
                now_ms = self._last_ms
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    now_ms = self._wait_until_after(self._last_ms)
            else:
                self._sequence = 0
            self._last_ms = now_ms
            return str(self._compose(now_ms))

    def _compose(self, ts_ms: int) -> int:
        return (
            ((ts_ms - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
            | (self._machine_id << self._SEQUENCE_BITS)
            | self._sequence
        )

    def _clock_ms(self) -> int:
        return time.time_ns() // 1_000_000

    def _wait_until_after(self, last_ms: int) -> int:
        ts = self._clock_ms()
        while ts <= last_ms:
            ts = self._clock_ms()
        return ts


_default_generator = SnowflakeIdGenerator(machine_id=settings.ID_MACHINE_ID)


def generate_id() -> str:
    """Next id from the process-wide generator (orders, fills)."""
    return _default_generator.next_id()
