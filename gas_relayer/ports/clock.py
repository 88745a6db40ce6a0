"""Clock port abstraction for time handling.

This module defines the clock abstraction to decouple staleness and expiry checks
from system time, making them easy to test with a fixed clock.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Abstract clock interface for time operations."""

    @abstractmethod
    def now(self) -> datetime:
        """Get the current time as a timezone-aware datetime.

        Note:
            Implementations MUST return timezone-aware datetimes.
        """
        ...

    def now_ms(self) -> int:
        """Milliseconds since the epoch."""
        return int(self.now().timestamp() * 1000)

    def now_seconds(self) -> int:
        """Whole seconds since the epoch."""
        return int(self.now().timestamp())
