"""
Canonical tick time periods.

Single source of truth for the bar intervals a stream can carry. The table
is immutable and built on first use.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType


@dataclass(frozen=True)
class TickTimePeriod:
    """A bar interval expressed in seconds (0 = individual ticks)."""
    name: str
    seconds: int

    @property
    def is_intraday(self) -> bool:
        return 0 < self.seconds < 86400


_PERIOD_SECONDS = (
    ("yearly", 365 * 86400),
    ("monthly", 30 * 86400),
    ("weekly", 7 * 86400),
    ("daily", 86400),
    ("hourly", 3600),
    ("30m", 1800),
    ("15m", 900),
    ("5m", 300),
    ("1m", 60),
    ("30s", 30),
    ("15s", 15),
    ("5s", 5),
    ("1s", 1),
    ("tick", 0),
)


@lru_cache(maxsize=1)
def tick_time_periods() -> MappingProxyType:
    """Read-only name -> TickTimePeriod table."""
    return MappingProxyType({name: TickTimePeriod(name, seconds) for name, seconds in _PERIOD_SECONDS})


def get_tick_time_period(name: str) -> TickTimePeriod:
    """
    Look up a tick time period by name.

    Args:
        name: Period name (e.g., "daily", "15m", "tick")

    Returns:
        The matching TickTimePeriod

    Raises:
        ValueError: If name is not a known period
    """
    periods = tick_time_periods()
    key = name.strip().lower()
    if key not in periods:
        raise ValueError(
            f"Invalid tick time period: '{name}'. "
            f"Must be one of: {list(periods)}"
        )
    return periods[key]
