"""
Variance-based indicators: Variance, StdDev and Bollinger Bands.

Variance uses Welford's update while the window is filling and Knuth's
moving-window update once it is full, so each tick is O(1) and never
re-sums the window.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np

from ..core.bar import SelectFn, use_close
from .base import IndicatorCore, Listener, ResultSink, ScalarIndicator, check_period, require_sink
from .moving_average import SMA


@dataclass(eq=False)
class Variance(ScalarIndicator):
    """
    Population variance over a sliding window.

    Filling (count n <= N), Welford:
        delta = x - mean
        mean += delta / n
        m2 += delta * (x - mean)

    Full window, evicting `old` for `x`:
        delta = x - old
        mean_new = mean_old + delta / N
        m2 += delta * ((x - mean_new) + (old - mean_old))

    Result: max(m2 / N, 0.0). Lookback: N - 1
    """

    time_period: int = 10
    sink: ResultSink | None = None
    select: SelectFn = use_close
    _core: IndicatorCore = field(init=False, repr=False)
    _window: deque = field(default_factory=deque, init=False, repr=False)
    _mean: float = field(default=0.0, init=False, repr=False)
    _m2: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "Variance")
        self.time_period = check_period("time_period", self.time_period, 1)
        self._core = IndicatorCore(self.time_period - 1, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        if len(self._window) < self.time_period:
            self._window.append(value)
            delta = value - self._mean
            self._mean += delta / len(self._window)
            self._m2 += delta * (value - self._mean)
            if len(self._window) < self.time_period:
                return
        else:
            oldest = self._window.popleft()
            self._window.append(value)
            delta = value - oldest
            old_mean = self._mean
            self._mean = old_mean + delta / self.time_period
            self._m2 += delta * ((value - self._mean) + (oldest - old_mean))

        # Floating-point drift can push m2 slightly below zero on flat windows
        variance = max(self._m2 / self.time_period, 0.0)
        self._core.update_with_new_value(variance, bar_index)


@dataclass(eq=False)
class StdDev(ScalarIndicator):
    """
    Population standard deviation: sqrt of a Variance child.

    Lookback: N - 1
    """

    time_period: int = 10
    sink: ResultSink | None = None
    select: SelectFn = use_close
    _core: IndicatorCore = field(init=False, repr=False)
    _variance: Variance = field(init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "StdDev")
        self.time_period = check_period("time_period", self.time_period, 2)
        self._variance = Variance(self.time_period, sink=Listener(self._on_variance))
        self._core = IndicatorCore(self._variance.lookback_period, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        self._variance.receive_tick(value, bar_index)

    def _on_variance(self, value: float, bar_index: int) -> None:
        self._core.update_with_new_value(math.sqrt(value), bar_index)


class BollingerResult(NamedTuple):
    upper: float
    middle: float
    lower: float


@dataclass(eq=False)
class BollingerBands(ScalarIndicator):
    """
    Bollinger Bands.

    Formula:
        middle = sma(value, N)
        upper = middle + deviations_up * stddev(value, N)
        lower = middle - deviations_down * stddev(value, N)

    Lookback: N - 1
    """

    time_period: int = 5
    deviations_up: float = 2.0
    deviations_down: float = 2.0
    sink: ResultSink | None = None
    select: SelectFn = use_close
    _core: IndicatorCore = field(init=False, repr=False)
    _sma: SMA = field(init=False, repr=False)
    _stddev: StdDev = field(init=False, repr=False)
    _last_middle: float = field(default=np.nan, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "BollingerBands")
        self.time_period = check_period("time_period", self.time_period, 2)
        self.deviations_up = float(self.deviations_up)
        self.deviations_down = float(self.deviations_down)
        self._sma = SMA(self.time_period, sink=Listener(self._on_sma))
        self._stddev = StdDev(self.time_period, sink=Listener(self._on_stddev))
        self._core = IndicatorCore(self.time_period - 1, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        # SMA first: the middle band must be current when the stddev lands
        self._sma.receive_tick(value, bar_index)
        self._stddev.receive_tick(value, bar_index)

    def _on_sma(self, value: float, bar_index: int) -> None:
        self._last_middle = value

    def _on_stddev(self, value: float, bar_index: int) -> None:
        middle = self._last_middle
        result = BollingerResult(
            upper=middle + self.deviations_up * value,
            middle=middle,
            lower=middle - self.deviations_down * value,
        )
        self._core.update_with_new_value(result, bar_index, extrema=result)
