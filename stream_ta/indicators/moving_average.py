"""
Moving averages: SMA, EMA and WMA.

All three keep O(1) state per tick: a ring buffer plus running sums for the
windowed averages, a single previous value for the EMA.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

import numpy as np

from ..core.bar import SelectFn, use_close
from .base import IndicatorCore, ResultSink, ScalarIndicator, check_period, require_sink


@dataclass(eq=False)
class SMA(ScalarIndicator):
    """
    Simple Moving Average with O(1) updates using a ring buffer.

    Formula:
        sma = sum(window) / time_period

    Running sum: sum = sum + new - oldest
    Lookback: time_period - 1
    """

    time_period: int = 20
    sink: ResultSink | None = None
    select: SelectFn = use_close
    _core: IndicatorCore = field(init=False, repr=False)
    _buffer: deque = field(default_factory=deque, init=False, repr=False)
    _running_sum: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "SMA")
        self.time_period = check_period("time_period", self.time_period, 1)
        self._core = IndicatorCore(self.time_period - 1, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        self._running_sum += value
        self._buffer.append(value)

        if len(self._buffer) > self.time_period:
            self._running_sum -= self._buffer.popleft()

        if len(self._buffer) == self.time_period:
            self._core.update_with_new_value(self._running_sum / self.time_period, bar_index)


@dataclass(eq=False)
class EMA(ScalarIndicator):
    """
    Exponential Moving Average.

    Formula:
        alpha = 2 / (time_period + 1)
        ema = (value - ema_prev) * alpha + ema_prev

    The first result is the SMA of the first time_period values.
    Lookback: time_period - 1
    """

    time_period: int = 20
    sink: ResultSink | None = None
    select: SelectFn = use_close
    _core: IndicatorCore = field(init=False, repr=False)
    _alpha: float = field(init=False, repr=False)
    _ema: float = field(default=np.nan, init=False, repr=False)
    _count: int = field(default=0, init=False, repr=False)
    _warmup_sum: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "EMA")
        self.time_period = check_period("time_period", self.time_period, 2)
        self._alpha = 2.0 / (self.time_period + 1)
        self._core = IndicatorCore(self.time_period - 1, sink)

    @property
    def alpha(self) -> float:
        return self._alpha

    def receive_tick(self, value: float, bar_index: int) -> None:
        self._count += 1

        if self._count < self.time_period:
            self._warmup_sum += value
            return

        if self._count == self.time_period:
            # Seed with the SMA of the warmup window
            self._ema = (self._warmup_sum + value) / self.time_period
        else:
            self._ema = (value - self._ema) * self._alpha + self._ema

        self._core.update_with_new_value(self._ema, bar_index)


@dataclass(eq=False)
class WMA(ScalarIndicator):
    """
    Weighted Moving Average with O(1) updates.

    Formula:
        wma = sum(weight[i] * value[i]) / (N * (N + 1) / 2)
        weight[i] = i + 1 (oldest 1, newest N)

    O(1) update once the window is full:
        weighted_sum = weighted_sum - buffer_sum + value * N
        buffer_sum = buffer_sum - oldest + value

    Lookback: time_period - 1
    """

    time_period: int = 20
    sink: ResultSink | None = None
    select: SelectFn = use_close
    _core: IndicatorCore = field(init=False, repr=False)
    _buffer: deque = field(default_factory=deque, init=False, repr=False)
    _weight_divisor: int = field(default=0, init=False, repr=False)
    _weighted_sum: float = field(default=0.0, init=False, repr=False)
    _buffer_sum: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "WMA")
        self.time_period = check_period("time_period", self.time_period, 2)
        self._weight_divisor = self.time_period * (self.time_period + 1) // 2
        self._core = IndicatorCore(self.time_period - 1, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        if len(self._buffer) < self.time_period:
            self._buffer.append(value)
            self._buffer_sum += value
            # New value weighs as much as its position in the filling window
            self._weighted_sum += value * len(self._buffer)
            if len(self._buffer) < self.time_period:
                return
        else:
            oldest = self._buffer.popleft()
            self._buffer.append(value)
            # Every kept value loses one weight step; the oldest (weight 1) drops out
            self._weighted_sum = self._weighted_sum - self._buffer_sum + value * self.time_period
            self._buffer_sum = self._buffer_sum - oldest + value

        self._core.update_with_new_value(self._weighted_sum / self._weight_divisor, bar_index)
