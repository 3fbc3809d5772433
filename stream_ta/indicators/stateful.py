"""
Stateful indicators with an explicit state machine: Parabolic SAR.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from ..config.constants import DEFAULT_SAR_ACCELERATION, DEFAULT_SAR_ACCELERATION_MAX
from ..core.bar import Bar
from ..core.errors import ParameterRangeError
from .base import Indicator, IndicatorCore, Listener, ResultSink, require_sink
from .directional import MinusDM


class TrendState(str, Enum):
    """Parabolic SAR position."""
    AWAITING_DIRECTION = "awaiting_direction"
    LONG = "long"
    SHORT = "short"


@dataclass(eq=False)
class SAR(Indicator):
    """
    Parabolic Stop and Reverse.

    State machine:
        AWAITING_DIRECTION -> LONG | SHORT on bar 2
            (-DM of bar 2 > 0 -> SHORT, otherwise LONG)
        LONG <-> SHORT on penetration of the SAR

    Seeding (bar 2):
        LONG:  ep = high, sar = previous low
        SHORT: ep = low,  sar = previous high
        The previous range is then taken from bar 2 itself.

    Each bar emits the current SAR, then:
        penetration: reverse, sar = ep clamped to the previous and current
                     range, emit it, reset af, ep = current extreme,
                     project and clamp again
        otherwise:   new extreme -> ep = extreme, af = min(af + step, max)
                     sar += af * (ep - sar), clamped
                     (LONG: <= both lows, SHORT: >= both highs)

    Lookback: 1
    """

    acceleration: float = DEFAULT_SAR_ACCELERATION
    acceleration_max: float = DEFAULT_SAR_ACCELERATION_MAX
    sink: ResultSink | None = None
    _core: IndicatorCore = field(init=False, repr=False)
    _minus_dm: MinusDM = field(init=False, repr=False)
    _state: TrendState = field(default=TrendState.AWAITING_DIRECTION, init=False)
    _last_minus_dm: float = field(default=np.nan, init=False, repr=False)
    _sar: float = field(default=np.nan, init=False, repr=False)
    _ep: float = field(default=np.nan, init=False, repr=False)
    _af: float = field(default=0.0, init=False, repr=False)
    _prev_high: float = field(default=np.nan, init=False, repr=False)
    _prev_low: float = field(default=np.nan, init=False, repr=False)

    def __post_init__(self) -> None:
        sink = require_sink(self.sink, "SAR")
        self.acceleration = float(self.acceleration)
        self.acceleration_max = float(self.acceleration_max)
        if not self.acceleration > 0.0:
            raise ParameterRangeError("acceleration", self.acceleration, reason="must be > 0")
        if self.acceleration > self.acceleration_max:
            raise ParameterRangeError(
                "acceleration", self.acceleration,
                reason=f"must be <= acceleration_max ({self.acceleration_max})",
            )

        self._af = self.acceleration
        self._minus_dm = MinusDM(1, sink=Listener(self._on_minus_dm))
        self._core = IndicatorCore(1, sink)

    @property
    def state(self) -> TrendState:
        return self._state

    @property
    def is_long(self) -> bool:
        return self._state is TrendState.LONG

    @property
    def current_acceleration(self) -> float:
        return self._af

    @property
    def extreme_point(self) -> float:
        return self._ep

    def _on_minus_dm(self, value: float, bar_index: int) -> None:
        self._last_minus_dm = value

    def receive_bar(self, bar: Bar, bar_index: int) -> None:
        if self._state is TrendState.AWAITING_DIRECTION:
            self._minus_dm.receive_bar(bar, bar_index)
            if np.isnan(self._prev_high):
                self._prev_high, self._prev_low = bar.high, bar.low
                return
            self._seed(bar)

        if self._state is TrendState.LONG:
            self._step_long(bar, bar_index)
        else:
            self._step_short(bar, bar_index)

        self._prev_high, self._prev_low = bar.high, bar.low

    def _seed(self, bar: Bar) -> None:
        if self._last_minus_dm > 0:
            self._state = TrendState.SHORT
            self._ep = bar.low
            self._sar = self._prev_high
        else:
            self._state = TrendState.LONG
            self._ep = bar.high
            self._sar = self._prev_low
        self._prev_high, self._prev_low = bar.high, bar.low

    def _step_long(self, bar: Bar, bar_index: int) -> None:
        if bar.low <= self._sar:
            # Penetration: switch to short
            self._state = TrendState.SHORT
            self._sar = max(self._ep, self._prev_high, bar.high)
            self._core.update_with_new_value(self._sar, bar_index)

            self._af = self.acceleration
            self._ep = bar.low
            self._sar += self._af * (self._ep - self._sar)
            self._sar = max(self._sar, self._prev_high, bar.high)
            return

        self._core.update_with_new_value(self._sar, bar_index)

        if bar.high > self._ep:
            self._ep = bar.high
            self._af = min(self._af + self.acceleration, self.acceleration_max)

        self._sar += self._af * (self._ep - self._sar)
        self._sar = min(self._sar, self._prev_low, bar.low)

    def _step_short(self, bar: Bar, bar_index: int) -> None:
        if bar.high >= self._sar:
            # Penetration: switch to long
            self._state = TrendState.LONG
            self._sar = min(self._ep, self._prev_low, bar.low)
            self._core.update_with_new_value(self._sar, bar_index)

            self._af = self.acceleration
            self._ep = bar.high
            self._sar += self._af * (self._ep - self._sar)
            self._sar = min(self._sar, self._prev_low, bar.low)
            return

        self._core.update_with_new_value(self._sar, bar_index)

        if bar.low < self._ep:
            self._ep = bar.low
            self._af = min(self._af + self.acceleration, self.acceleration_max)

        self._sar += self._af * (self._ep - self._sar)
        self._sar = max(self._sar, self._prev_high, bar.high)
