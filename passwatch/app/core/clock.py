# passwatch/app/core/clock.py
"""Wall-clock source, injectable so timestamps can be pinned in tests."""
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Timezone-aware UTC wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


system_clock = SystemClock()
