"""
Directional movement family: TrueRange, ATR, +DM/-DM, +DI/-DI, DX, ADX, ADXR.

All of these consume whole bars. Wilder smoothing is used throughout:
    smoothed = prev - prev / N + current        (sums: DM, TR)
    smoothed = (prev * (N - 1) + current) / N   (averages: ATR, ADX)

Chain:
    TrueRange -> +DI/-DI -> DX -> ADX -> ADXR
"""

from __future__ import annotations

from abc import abstractmethod
from collections import deque
from dataclasses import dataclass, field

import numpy as np

from ..core.bar import Bar
from .base import Indicator, IndicatorCore, Listener, ResultSink, check_period, require_sink
from .moving_average import SMA


def directional_movement(bar: Bar, prev_high: float, prev_low: float) -> tuple[float, float]:
    """
    One-bar +DM and -DM.

        up = high - prev_high
        down = prev_low - low
        +DM = up   if up > 0 and up > down   else 0
        -DM = down if down > 0 and down > up else 0
    """
    up = bar.high - prev_high
    down = prev_low - bar.low
    plus_dm = up if up > 0 and up > down else 0.0
    minus_dm = down if down > 0 and down > up else 0.0
    return plus_dm, minus_dm


@dataclass(eq=False)
class TrueRange(Indicator):
    """
    True Range.

    Formula:
        tr = max(high, prev_close) - min(low, prev_close)

    Lookback: 1
    """

    sink: ResultSink | None = None
    _core: IndicatorCore = field(init=False, repr=False)
    _prev_close: float = field(default=np.nan, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "TrueRange")
        self._core = IndicatorCore(1, sink)

    def receive_bar(self, bar: Bar, bar_index: int) -> None:
        prev_close = self._prev_close
        self._prev_close = bar.close
        if np.isnan(prev_close):
            return

        true_range = max(bar.high, prev_close) - min(bar.low, prev_close)
        self._core.update_with_new_value(true_range, bar_index)


@dataclass(eq=False)
class ATR(Indicator):
    """
    Average True Range (Wilder).

    The first N true ranges are averaged by an SMA child; after that:
        atr = (atr_prev * (N - 1) + tr) / N

    Lookback: N
    """

    time_period: int = 14
    sink: ResultSink | None = None
    _core: IndicatorCore = field(init=False, repr=False)
    _true_range: TrueRange = field(init=False, repr=False)
    _seed: SMA = field(init=False, repr=False)
    _atr: float = field(default=np.nan, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "ATR")
        self.time_period = check_period("time_period", self.time_period, 1)
        self._true_range = TrueRange(sink=Listener(self._on_true_range))
        self._seed = SMA(self.time_period, sink=Listener(self._on_seed))
        self._core = IndicatorCore(self.time_period, sink)

    def receive_bar(self, bar: Bar, bar_index: int) -> None:
        self._true_range.receive_bar(bar, bar_index)

    def _on_true_range(self, value: float, bar_index: int) -> None:
        if np.isnan(self._atr):
            self._seed.receive_tick(value, bar_index)
            return

        self._atr = (self._atr * (self.time_period - 1) + value) / self.time_period
        self._core.update_with_new_value(self._atr, bar_index)

    def _on_seed(self, value: float, bar_index: int) -> None:
        self._atr = value
        self._core.update_with_new_value(value, bar_index)


@dataclass(eq=False)
class _DirectionalMovementBase(Indicator):
    """
    Shared +DM/-DM recurrence.

    N == 1: the raw one-bar value from bar 2 on (lookback 1).
    N > 1:  the first N - 1 values are summed and emitted on bar N, then
            dm_smoothed = prev - prev / N + dm (lookback N - 1).
    """

    time_period: int = 14
    sink: ResultSink | None = None
    _core: IndicatorCore = field(init=False, repr=False)
    _prev_high: float = field(default=np.nan, init=False, repr=False)
    _prev_low: float = field(default=np.nan, init=False, repr=False)
    _count: int = field(default=0, init=False, repr=False)
    _smoothed: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, type(self).__name__)
        self.time_period = check_period("time_period", self.time_period, 1)
        lookback = 1 if self.time_period == 1 else self.time_period - 1
        self._core = IndicatorCore(lookback, sink)

    @abstractmethod
    def _select_movement(self, plus_dm: float, minus_dm: float) -> float:
        ...

    def receive_bar(self, bar: Bar, bar_index: int) -> None:
        prev_high, prev_low = self._prev_high, self._prev_low
        self._prev_high, self._prev_low = bar.high, bar.low
        if np.isnan(prev_high):
            return

        dm = self._select_movement(*directional_movement(bar, prev_high, prev_low))
        self._count += 1

        if self.time_period == 1:
            self._core.update_with_new_value(dm, bar_index)
            return

        if self._count < self.time_period - 1:
            self._smoothed += dm
            return

        if self._count == self.time_period - 1:
            self._smoothed += dm
        else:
            self._smoothed = self._smoothed - self._smoothed / self.time_period + dm
        self._core.update_with_new_value(self._smoothed, bar_index)


@dataclass(eq=False)
class PlusDM(_DirectionalMovementBase):
    """Plus Directional Movement (+DM)."""

    def _select_movement(self, plus_dm: float, minus_dm: float) -> float:
        return plus_dm


@dataclass(eq=False)
class MinusDM(_DirectionalMovementBase):
    """Minus Directional Movement (-DM)."""

    def _select_movement(self, plus_dm: float, minus_dm: float) -> float:
        return minus_dm


@dataclass(eq=False)
class _DirectionalIndicatorBase(Indicator):
    """
    Shared +DI/-DI recurrence. Owns a TrueRange child.

    N == 1: 100 * dm / tr from bar 2 on (lookback 1).
    N > 1:  DM and TR are summed over the first N - 1 movements, then both
            are Wilder-smoothed and 100 * DM / TR is emitted from bar N + 1
            (lookback N).

    A zero true range yields 0.0.
    """

    time_period: int = 14
    sink: ResultSink | None = None
    _core: IndicatorCore = field(init=False, repr=False)
    _true_range: TrueRange = field(init=False, repr=False)
    _current_tr: float = field(default=np.nan, init=False, repr=False)
    _prev_high: float = field(default=np.nan, init=False, repr=False)
    _prev_low: float = field(default=np.nan, init=False, repr=False)
    _count: int = field(default=0, init=False, repr=False)
    _smoothed_dm: float = field(default=0.0, init=False, repr=False)
    _smoothed_tr: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, type(self).__name__)
        self.time_period = check_period("time_period", self.time_period, 1)
        self._true_range = TrueRange(sink=Listener(self._on_true_range))
        self._core = IndicatorCore(self.time_period, sink)

    @abstractmethod
    def _select_movement(self, plus_dm: float, minus_dm: float) -> float:
        ...

    def _on_true_range(self, value: float, bar_index: int) -> None:
        self._current_tr = value

    def receive_bar(self, bar: Bar, bar_index: int) -> None:
        self._true_range.receive_bar(bar, bar_index)

        prev_high, prev_low = self._prev_high, self._prev_low
        self._prev_high, self._prev_low = bar.high, bar.low
        if np.isnan(prev_high):
            return

        dm = self._select_movement(*directional_movement(bar, prev_high, prev_low))
        tr = self._current_tr
        self._count += 1

        if self.time_period == 1:
            self._emit(dm, tr, bar_index)
            return

        if self._count < self.time_period:
            self._smoothed_dm += dm
            self._smoothed_tr += tr
            return

        self._smoothed_dm = self._smoothed_dm - self._smoothed_dm / self.time_period + dm
        self._smoothed_tr = self._smoothed_tr - self._smoothed_tr / self.time_period + tr
        self._emit(self._smoothed_dm, self._smoothed_tr, bar_index)

    def _emit(self, dm: float, tr: float, bar_index: int) -> None:
        result = 100.0 * dm / tr if tr != 0.0 else 0.0
        self._core.update_with_new_value(result, bar_index)


@dataclass(eq=False)
class PlusDI(_DirectionalIndicatorBase):
    """Plus Directional Indicator (+DI)."""

    def _select_movement(self, plus_dm: float, minus_dm: float) -> float:
        return plus_dm


@dataclass(eq=False)
class MinusDI(_DirectionalIndicatorBase):
    """Minus Directional Indicator (-DI)."""

    def _select_movement(self, plus_dm: float, minus_dm: float) -> float:
        return minus_dm


@dataclass(eq=False)
class DX(Indicator):
    """
    Directional Movement Index.

    Formula:
        dx = 100 * |+DI - -DI| / (+DI + -DI)    (0.0 when the sum is 0)

    Lookback: N
    """

    time_period: int = 14
    sink: ResultSink | None = None
    _core: IndicatorCore = field(init=False, repr=False)
    _plus_di: PlusDI = field(init=False, repr=False)
    _minus_di: MinusDI = field(init=False, repr=False)
    _last_plus_di: float = field(default=np.nan, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "DX")
        self.time_period = check_period("time_period", self.time_period, 2)
        self._plus_di = PlusDI(self.time_period, sink=Listener(self._on_plus_di))
        self._minus_di = MinusDI(self.time_period, sink=Listener(self._on_minus_di))
        self._core = IndicatorCore(self.time_period, sink)

    def receive_bar(self, bar: Bar, bar_index: int) -> None:
        self._plus_di.receive_bar(bar, bar_index)
        self._minus_di.receive_bar(bar, bar_index)

    def _on_plus_di(self, value: float, bar_index: int) -> None:
        self._last_plus_di = value

    def _on_minus_di(self, value: float, bar_index: int) -> None:
        total = self._last_plus_di + value
        result = 100.0 * abs(self._last_plus_di - value) / total if total != 0.0 else 0.0
        self._core.update_with_new_value(result, bar_index)


@dataclass(eq=False)
class ADX(Indicator):
    """
    Average Directional Movement Index.

    The first value is the mean of the first N DX values; after that:
        adx = (adx_prev * (N - 1) + dx) / N

    Lookback: 2 * N - 1
    """

    time_period: int = 14
    sink: ResultSink | None = None
    _core: IndicatorCore = field(init=False, repr=False)
    _dx: DX = field(init=False, repr=False)
    _dx_count: int = field(default=0, init=False, repr=False)
    _dx_sum: float = field(default=0.0, init=False, repr=False)
    _adx: float = field(default=np.nan, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "ADX")
        self.time_period = check_period("time_period", self.time_period, 2)
        self._dx = DX(self.time_period, sink=Listener(self._on_dx))
        self._core = IndicatorCore(2 * self.time_period - 1, sink)

    def receive_bar(self, bar: Bar, bar_index: int) -> None:
        self._dx.receive_bar(bar, bar_index)

    def _on_dx(self, value: float, bar_index: int) -> None:
        self._dx_count += 1

        if self._dx_count < self.time_period:
            self._dx_sum += value
            return

        if self._dx_count == self.time_period:
            self._adx = (self._dx_sum + value) / self.time_period
        else:
            self._adx = (self._adx * (self.time_period - 1) + value) / self.time_period

        self._core.update_with_new_value(self._adx, bar_index)


@dataclass(eq=False)
class ADXR(Indicator):
    """
    Average Directional Movement Index Rating.

    Formula:
        adxr = (adx + adx[N - 1 bars ago]) / 2

    Lookback: 3 * N - 2
    """

    time_period: int = 14
    sink: ResultSink | None = None
    _core: IndicatorCore = field(init=False, repr=False)
    _adx: ADX = field(init=False, repr=False)
    _history: deque = field(init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "ADXR")
        self.time_period = check_period("time_period", self.time_period, 2)
        self._adx = ADX(self.time_period, sink=Listener(self._on_adx))
        self._history = deque(maxlen=self.time_period)
        self._core = IndicatorCore(3 * self.time_period - 2, sink)

    def receive_bar(self, bar: Bar, bar_index: int) -> None:
        self._adx.receive_bar(bar, bar_index)

    def _on_adx(self, value: float, bar_index: int) -> None:
        self._history.append(value)
        if len(self._history) == self.time_period:
            self._core.update_with_new_value((value + self._history[0]) / 2.0, bar_index)
