"""Abstract time provider, so retries and timestamps are testable."""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current time as a timezone-aware UTC datetime."""
        ...

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Block for the given number of seconds."""
        ...
