"""Fake time provider for tests: fixed clock, recorded sleeps."""

from datetime import UTC, datetime

from arca.gateway.time.abc import Time

DEFAULT_FAKE_NOW = datetime(2024, 1, 15, 14, 30, 0, tzinfo=UTC)


class FakeTime(Time):
    def __init__(self, now: datetime = DEFAULT_FAKE_NOW) -> None:
        self._now = now
        self._sleep_calls: list[float] = []

    def now(self) -> datetime:
        return self._now

    def sleep(self, seconds: float) -> None:
        self._sleep_calls.append(seconds)

    @property
    def sleep_calls(self) -> list[float]:
        """Durations passed to sleep(), in call order."""
        return list(self._sleep_calls)
