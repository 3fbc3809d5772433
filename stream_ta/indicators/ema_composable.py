"""
EMA-composable indicators: DEMA, TEMA and MACD.

Each is built from EMA children chained through Listener sinks; a child's
result is pushed into the parent's handler on the same tick.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np

from ..core.bar import SelectFn, use_close
from ..core.errors import ParameterRangeError
from .base import IndicatorCore, Listener, ResultSink, ScalarIndicator, check_period, require_sink
from .moving_average import EMA


@dataclass(eq=False)
class DEMA(ScalarIndicator):
    """
    Double Exponential Moving Average.

    Formula:
        ema1 = ema(value, N)
        ema2 = ema(ema1, N)
        dema = 2 * ema1 - ema2

    Lookback: 2 * (N - 1)
    """

    time_period: int = 20
    sink: ResultSink | None = None
    select: SelectFn = use_close
    _core: IndicatorCore = field(init=False, repr=False)
    _ema1: EMA = field(init=False, repr=False)
    _ema2: EMA = field(init=False, repr=False)
    _last_ema1: float = field(default=np.nan, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "DEMA")
        self.time_period = check_period("time_period", self.time_period, 2)
        self._ema1 = EMA(self.time_period, sink=Listener(self._on_ema1))
        self._ema2 = EMA(self.time_period, sink=Listener(self._on_ema2))
        self._core = IndicatorCore(self._ema1.lookback_period + self._ema2.lookback_period, sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        self._ema1.receive_tick(value, bar_index)

    def _on_ema1(self, value: float, bar_index: int) -> None:
        self._last_ema1 = value
        self._ema2.receive_tick(value, bar_index)

    def _on_ema2(self, value: float, bar_index: int) -> None:
        self._core.update_with_new_value(2.0 * self._last_ema1 - value, bar_index)


@dataclass(eq=False)
class TEMA(ScalarIndicator):
    """
    Triple Exponential Moving Average.

    Formula:
        tema = 3 * ema1 - 3 * ema2 + ema3

    Lookback: 3 * (N - 1)
    """

    time_period: int = 20
    sink: ResultSink | None = None
    select: SelectFn = use_close
    _core: IndicatorCore = field(init=False, repr=False)
    _ema1: EMA = field(init=False, repr=False)
    _ema2: EMA = field(init=False, repr=False)
    _ema3: EMA = field(init=False, repr=False)
    _last_ema1: float = field(default=np.nan, init=False, repr=False)
    _last_ema2: float = field(default=np.nan, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "TEMA")
        self.time_period = check_period("time_period", self.time_period, 2)
        self._ema1 = EMA(self.time_period, sink=Listener(self._on_ema1))
        self._ema2 = EMA(self.time_period, sink=Listener(self._on_ema2))
        self._ema3 = EMA(self.time_period, sink=Listener(self._on_ema3))
        self._core = IndicatorCore(3 * (self.time_period - 1), sink)

    def receive_tick(self, value: float, bar_index: int) -> None:
        self._ema1.receive_tick(value, bar_index)

    def _on_ema1(self, value: float, bar_index: int) -> None:
        self._last_ema1 = value
        self._ema2.receive_tick(value, bar_index)

    def _on_ema2(self, value: float, bar_index: int) -> None:
        self._last_ema2 = value
        self._ema3.receive_tick(value, bar_index)

    def _on_ema3(self, value: float, bar_index: int) -> None:
        tema = 3.0 * self._last_ema1 - 3.0 * self._last_ema2 + value
        self._core.update_with_new_value(tema, bar_index)


class MACDResult(NamedTuple):
    macd: float
    signal: float
    histogram: float


@dataclass(eq=False)
class MACD(ScalarIndicator):
    """
    Moving Average Convergence/Divergence.

    Formula:
        macd = ema(value, fast) - ema(value, slow)
        signal = ema(macd, signal_period)
        histogram = macd - signal

    The fast EMA skips the first (slow - fast) ticks so that both EMAs
    produce their first value on the same tick. Tick counting is internal,
    so the alignment also holds when MACD is chained behind another
    indicator instead of attached to a stream.

    Lookback: slow + signal - 2
    """

    fast_period: int = 12
    slow_period: int = 26
    signal_period: int = 9
    sink: ResultSink | None = None
    select: SelectFn = use_close
    _core: IndicatorCore = field(init=False, repr=False)
    _fast_ema: EMA = field(init=False, repr=False)
    _slow_ema: EMA = field(init=False, repr=False)
    _signal_ema: EMA = field(init=False, repr=False)
    _ticks: int = field(default=0, init=False, repr=False)
    _fast_skip: int = field(default=0, init=False, repr=False)
    _last_fast: float = field(default=np.nan, init=False, repr=False)
    _last_macd: float = field(default=np.nan, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "MACD")
        self.fast_period = check_period("fast_period", self.fast_period, 2)
        self.slow_period = check_period("slow_period", self.slow_period, 2)
        self.signal_period = check_period("signal_period", self.signal_period, 2)
        if self.fast_period >= self.slow_period:
            raise ParameterRangeError(
                "fast_period", self.fast_period,
                reason=f"must be less than slow_period ({self.slow_period})",
            )

        self._fast_skip = self.slow_period - self.fast_period
        self._fast_ema = EMA(self.fast_period, sink=Listener(self._on_fast_ema))
        self._slow_ema = EMA(self.slow_period, sink=Listener(self._on_slow_ema))
        self._signal_ema = EMA(self.signal_period, sink=Listener(self._on_signal_ema))
        self._core = IndicatorCore(
            self._slow_ema.lookback_period + self._signal_ema.lookback_period, sink
        )

    def receive_tick(self, value: float, bar_index: int) -> None:
        self._ticks += 1
        if self._ticks > self._fast_skip:
            self._fast_ema.receive_tick(value, bar_index)
        self._slow_ema.receive_tick(value, bar_index)

    def _on_fast_ema(self, value: float, bar_index: int) -> None:
        self._last_fast = value

    def _on_slow_ema(self, value: float, bar_index: int) -> None:
        self._last_macd = self._last_fast - value
        self._signal_ema.receive_tick(self._last_macd, bar_index)

    def _on_signal_ema(self, value: float, bar_index: int) -> None:
        result = MACDResult(self._last_macd, value, self._last_macd - value)
        self._core.update_with_new_value(result, bar_index, extrema=result)
