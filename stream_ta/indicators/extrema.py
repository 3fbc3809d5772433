"""
Window extremes using monotonic deques: HHV, LLV, HHVBars, LLVBars.

O(1) amortized technique:
    - The deque holds (value, tick) pairs, monotonic by value
    - New values evict every entry they dominate from the back
    - Entries older than the window are dropped from the front
    - The front is always the window extreme and its position

Ties resolve to the most recent tick (equal values are evicted too).
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from ..core.bar import SelectFn, use_high, use_low
from .base import IndicatorCore, ResultSink, ScalarIndicator, check_period, require_sink


@dataclass(eq=False)
class MonotonicWindow:
    """Sliding-window max (highest=True) or min (highest=False)."""

    time_period: int
    highest: bool
    _deque: deque = field(default_factory=deque, init=False, repr=False)
    _tick: int = field(default=0, init=False, repr=False)

    def push(self, value: float) -> None:
        current = self._tick
        self._tick += 1

        if self.highest:
            while self._deque and self._deque[-1][0] <= value:
                self._deque.pop()
        else:
            while self._deque and self._deque[-1][0] >= value:
                self._deque.pop()
        self._deque.append((value, current))

        window_start = current - self.time_period + 1
        while self._deque[0][1] < window_start:
            self._deque.popleft()

    @property
    def is_full(self) -> bool:
        return self._tick >= self.time_period

    @property
    def extreme(self) -> float:
        return self._deque[0][0]

    @property
    def bars_since(self) -> int:
        """Ticks since the extreme (0 = most recent tick)."""
        return self._tick - 1 - self._deque[0][1]


@dataclass(eq=False)
class HHV(ScalarIndicator):
    """
    Highest value over the last N ticks (defaults to highs).

    Lookback: N - 1
    """

    time_period: int = 14
    sink: ResultSink | None = None
    select: SelectFn = use_high
    _core: IndicatorCore = field(init=False, repr=False)
    _window: MonotonicWindow = field(init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "HHV")
        self.time_period = check_period("time_period", self.time_period, 1)
        self._window = MonotonicWindow(self.time_period, highest=True)
        self._core = IndicatorCore(self.time_period - 1, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        self._window.push(value)
        if self._window.is_full:
            self._core.update_with_new_value(self._window.extreme, bar_index)


@dataclass(eq=False)
class LLV(ScalarIndicator):
    """
    Lowest value over the last N ticks (defaults to lows).

    Lookback: N - 1
    """

    time_period: int = 14
    sink: ResultSink | None = None
    select: SelectFn = use_low
    _core: IndicatorCore = field(init=False, repr=False)
    _window: MonotonicWindow = field(init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "LLV")
        self.time_period = check_period("time_period", self.time_period, 1)
        self._window = MonotonicWindow(self.time_period, highest=False)
        self._core = IndicatorCore(self.time_period - 1, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        self._window.push(value)
        if self._window.is_full:
            self._core.update_with_new_value(self._window.extreme, bar_index)


@dataclass(eq=False)
class HHVBars(ScalarIndicator):
    """
    Bars since the highest value of the last N ticks.

    Lookback: N - 1
    """

    time_period: int = 14
    sink: ResultSink | None = None
    select: SelectFn = use_high
    _core: IndicatorCore = field(init=False, repr=False)
    _window: MonotonicWindow = field(init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "HHVBars")
        self.time_period = check_period("time_period", self.time_period, 1)
        self._window = MonotonicWindow(self.time_period, highest=True)
        self._core = IndicatorCore(self.time_period - 1, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        self._window.push(value)
        if self._window.is_full:
            self._core.update_with_new_value(float(self._window.bars_since), bar_index)


@dataclass(eq=False)
class LLVBars(ScalarIndicator):
    """
    Bars since the lowest value of the last N ticks.

    Lookback: N - 1
    """

    time_period: int = 14
    sink: ResultSink | None = None
    select: SelectFn = use_low
    _core: IndicatorCore = field(init=False, repr=False)
    _window: MonotonicWindow = field(init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "LLVBars")
        self.time_period = check_period("time_period", self.time_period, 1)
        self._window = MonotonicWindow(self.time_period, highest=False)
        self._core = IndicatorCore(self.time_period - 1, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        self._window.push(value)
        if self._window.is_full:
            self._core.update_with_new_value(float(self._window.bars_since), bar_index)
