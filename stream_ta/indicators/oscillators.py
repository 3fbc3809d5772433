"""
Oscillators: RSI and Stochastic RSI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np

from ..core.bar import SelectFn, use_close
from .base import IndicatorCore, Listener, ResultSink, ScalarIndicator, check_period, require_sink
from .extrema import HHV, LLV
from .moving_average import SMA


@dataclass(eq=False)
class RSI(ScalarIndicator):
    """
    Relative Strength Index (Wilder).

    Formula:
        avg_gain, avg_loss = mean of the first N gains/losses
        avg = (avg_prev * (N - 1) + current) / N     thereafter
        rsi = 100 * avg_gain / (avg_gain + avg_loss)

    0.0 when both averages are zero. Lookback: N
    """

    time_period: int = 14
    sink: ResultSink | None = None
    select: SelectFn = use_close
    _core: IndicatorCore = field(init=False, repr=False)
    _prev_value: float = field(default=np.nan, init=False, repr=False)
    _avg_gain: float = field(default=0.0, init=False, repr=False)
    _avg_loss: float = field(default=0.0, init=False, repr=False)
    _changes: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "RSI")
        self.time_period = check_period("time_period", self.time_period, 2)
        self._core = IndicatorCore(self.time_period, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        prev_value = self._prev_value
        self._prev_value = value
        if np.isnan(prev_value):
            return

        change = value - prev_value
        gain = max(0.0, change)
        loss = max(0.0, -change)
        self._changes += 1

        if self._changes < self.time_period:
            self._avg_gain += gain
            self._avg_loss += loss
            return

        if self._changes == self.time_period:
            self._avg_gain = (self._avg_gain + gain) / self.time_period
            self._avg_loss = (self._avg_loss + loss) / self.time_period
        else:
            n = self.time_period
            self._avg_gain = (self._avg_gain * (n - 1) + gain) / n
            self._avg_loss = (self._avg_loss * (n - 1) + loss) / n

        total = self._avg_gain + self._avg_loss
        rsi = 100.0 * self._avg_gain / total if total != 0.0 else 0.0
        self._core.update_with_new_value(rsi, bar_index)


class StochRSIResult(NamedTuple):
    fast_k: float
    fast_d: float


@dataclass(eq=False)
class StochRSI(ScalarIndicator):
    """
    Stochastic RSI.

    Formula:
        rsi = rsi(value, time_period)
        fast_k = 100 * (rsi - llv(rsi, fast_k_period)) / (hhv - llv)
        fast_d = sma(fast_k, fast_d_period)

    fast_k is 0.0 when the RSI range is zero; fast_d is clamped to 0..100.
    Lookback: time_period + (fast_k_period - 1) + (fast_d_period - 1)
    """

    time_period: int = 14
    fast_k_period: int = 5
    fast_d_period: int = 3
    sink: ResultSink | None = None
    select: SelectFn = use_close
    _core: IndicatorCore = field(init=False, repr=False)
    _rsi: RSI = field(init=False, repr=False)
    _highest: HHV = field(init=False, repr=False)
    _lowest: LLV = field(init=False, repr=False)
    _fast_d: SMA = field(init=False, repr=False)
    _last_rsi: float = field(default=np.nan, init=False, repr=False)
    _last_high: float = field(default=np.nan, init=False, repr=False)
    _last_fast_k: float = field(default=np.nan, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "StochRSI")
        self.time_period = check_period("time_period", self.time_period, 2)
        self.fast_k_period = check_period("fast_k_period", self.fast_k_period, 1)
        self.fast_d_period = check_period("fast_d_period", self.fast_d_period, 1)

        self._rsi = RSI(self.time_period, sink=Listener(self._on_rsi))
        self._highest = HHV(self.fast_k_period, sink=Listener(self._on_highest))
        self._lowest = LLV(self.fast_k_period, sink=Listener(self._on_lowest))
        self._fast_d = SMA(self.fast_d_period, sink=Listener(self._on_fast_d))
        lookback = (
            self._rsi.lookback_period
            + self._highest.lookback_period
            + self._fast_d.lookback_period
        )
        self._core = IndicatorCore(lookback, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        self._rsi.receive_tick(value, bar_index)

    def _on_rsi(self, value: float, bar_index: int) -> None:
        self._last_rsi = value
        self._highest.receive_tick(value, bar_index)
        self._lowest.receive_tick(value, bar_index)

    def _on_highest(self, value: float, bar_index: int) -> None:
        self._last_high = value

    def _on_lowest(self, value: float, bar_index: int) -> None:
        spread = self._last_high - value
        self._last_fast_k = 100.0 * (self._last_rsi - value) / spread if spread != 0.0 else 0.0
        self._fast_d.receive_tick(self._last_fast_k, bar_index)

    def _on_fast_d(self, value: float, bar_index: int) -> None:
        # Running-sum drift can leave a flat %K window a hair outside 0..100
        fast_d = min(max(value, 0.0), 100.0)
        result = StochRSIResult(self._last_fast_k, fast_d)
        self._core.update_with_new_value(result, bar_index, extrema=result)
