"""
Bar value type and scalar projections.

A Bar is one OHLCV observation with its timestamp. Scalar indicators
consume a single projection of each bar (close by default).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class Bar:
    """Single OHLCV bar. Immutable once constructed."""
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


SelectFn = Callable[[Bar], float]


def use_open(bar: Bar) -> float:
    return bar.open


def use_high(bar: Bar) -> float:
    return bar.high


def use_low(bar: Bar) -> float:
    return bar.low


def use_close(bar: Bar) -> float:
    return bar.close


def use_volume(bar: Bar) -> float:
    return bar.volume


PROJECTIONS: MappingProxyType = MappingProxyType({
    "open": use_open,
    "high": use_high,
    "low": use_low,
    "close": use_close,
    "volume": use_volume,
})


def get_projection(name: str) -> SelectFn:
    """
    Resolve a projection by name ("open", "high", "low", "close", "volume").

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return PROJECTIONS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown bar projection: '{name}'. Must be one of: {sorted(PROJECTIONS)}"
        ) from None


@runtime_checkable
class BarReceiver(Protocol):
    """Anything the bar stream can fan a bar out to."""

    def receive_bar(self, bar: Bar, bar_index: int) -> None:
        ...


@runtime_checkable
class TickReceiver(Protocol):
    """Anything that consumes a scalar tick stream."""

    def receive_tick(self, value: float, bar_index: int) -> None:
        ...
