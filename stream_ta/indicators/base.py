"""
Base classes and shared bookkeeping for streaming indicators.

Every indicator owns an IndicatorCore that records how many results it has
produced, the first bar with a result, and the running min/max of results.
The core is also the only place results leave an indicator: each result is
handed to exactly one sink, supplied at construction.

Sinks:
- ResultSeries keeps results on the indicator (see Indicator.with_storage)
- Listener routes results into a handler method of a parent indicator
- Any object with accept(value, bar_index) can be used
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import numpy as np
import pandas as pd

from ..config.constants import MAXIMUM_TIME_PERIOD
from ..core.bar import Bar, SelectFn
from ..core.errors import MissingSinkError, ParameterRangeError, StorageNotConfiguredError


@runtime_checkable
class ResultSink(Protocol):
    """Receiver of an indicator's results."""

    def accept(self, value: Any, bar_index: int) -> None:
        ...


@dataclass(eq=False)
class ResultSeries:
    """
    Storage sink: appends every result in emission order.

    values[i] belongs to bar first_bar_index + i.
    """

    values: list = field(default_factory=list)
    first_bar_index: int = -1

    def accept(self, value: Any, bar_index: int) -> None:
        if not self.values:
            self.first_bar_index = bar_index
        self.values.append(value)

    def __len__(self) -> int:
        return len(self.values)

    def to_pandas(self, name: str | None = None) -> pd.Series | pd.DataFrame:
        """Series for scalar results, DataFrame for named-tuple results."""
        index = pd.RangeIndex(
            self.first_bar_index,
            self.first_bar_index + len(self.values),
            name="bar_index",
        )
        if self.values and hasattr(self.values[0], "_fields"):
            return pd.DataFrame(self.values, columns=list(self.values[0]._fields), index=index)
        return pd.Series(self.values, index=index, name=name, dtype=float)


@dataclass(frozen=True)
class Listener:
    """Routes a child indicator's results into a parent's handler method."""

    handler: Callable[[Any, int], None]

    def accept(self, value: Any, bar_index: int) -> None:
        self.handler(value, bar_index)


@dataclass(eq=False)
class IndicatorCore:
    """
    Result bookkeeping shared by all indicators.

    Invariants:
        result_count == 0  <=>  valid_from_bar == -1
        valid_from_bar never changes once set
        min_value <= every emitted value (or component) <= max_value
    """

    lookback_period: int
    sink: ResultSink
    result_count: int = field(default=0, init=False)
    valid_from_bar: int = field(default=-1, init=False)
    min_value: float = field(default=np.nan, init=False)
    max_value: float = field(default=np.nan, init=False)

    def update_with_new_value(
        self,
        value: Any,
        bar_index: int,
        extrema: Iterable[float] | None = None,
    ) -> None:
        """
        Record one result and forward it to the sink.

        Args:
            value: The result (float or a result tuple)
            bar_index: Bar the result belongs to
            extrema: Scalars to widen min/max with; defaults to (value,)
        """
        if self.result_count == 0:
            self.valid_from_bar = bar_index
        self.result_count += 1

        for component in (extrema if extrema is not None else (value,)):
            if np.isnan(self.min_value) or component < self.min_value:
                self.min_value = component
            if np.isnan(self.max_value) or component > self.max_value:
                self.max_value = component

        self.sink.accept(value, bar_index)


def require_sink(sink: ResultSink | None, indicator: str) -> ResultSink:
    """Return sink, or raise MissingSinkError when there is none."""
    if sink is None:
        raise MissingSinkError(indicator)
    if not isinstance(sink, ResultSink):
        raise TypeError(f"{indicator} sink must define accept(value, bar_index)")
    return sink


def check_period(name: str, value: int, minimum: int, maximum: int = MAXIMUM_TIME_PERIOD) -> int:
    """Validate an integer period parameter."""
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ParameterRangeError(name, value, minimum, maximum, reason="must be an integer")
    if value < minimum or value > maximum:
        raise ParameterRangeError(name, value, minimum, maximum)
    return int(value)


class Indicator(ABC):
    """
    Base class for streaming indicators.

    Subclasses are dataclasses that build their IndicatorCore in
    __post_init__ (after validating parameters) and call
    self._core.update_with_new_value() once per result.

    Equality is identity: a stream detaches exactly the instance it was given.
    """

    _core: IndicatorCore

    @classmethod
    def with_storage(cls, *args: Any, **kwargs: Any):
        """Build the indicator with a ResultSeries sink so results stay queryable."""
        return cls(*args, sink=ResultSeries(), **kwargs)

    @abstractmethod
    def receive_bar(self, bar: Bar, bar_index: int) -> None:
        """Consume one bar from the stream."""
        ...

    @property
    def lookback_period(self) -> int:
        """Bars consumed before the first result (first result on bar lookback + 1)."""
        return self._core.lookback_period

    @property
    def valid_from_bar(self) -> int:
        """Bar index of the first result, or -1 before any result."""
        return self._core.valid_from_bar

    @property
    def result_count(self) -> int:
        return self._core.result_count

    def __len__(self) -> int:
        return self._core.result_count

    @property
    def min_value(self) -> float:
        """Lowest result so far (NaN before the first result)."""
        return self._core.min_value

    @property
    def max_value(self) -> float:
        """Highest result so far (NaN before the first result)."""
        return self._core.max_value

    @property
    def has_storage(self) -> bool:
        return isinstance(self._core.sink, ResultSeries)

    @property
    def data(self) -> list:
        """Stored results; data[i] belongs to bar valid_from_bar + i."""
        if not self.has_storage:
            raise StorageNotConfiguredError(
                f"{type(self).__name__} was built with a custom sink; "
                f"use {type(self).__name__}.with_storage(...) to keep results"
            )
        return list(self._core.sink.values)

    def to_series(self) -> pd.Series | pd.DataFrame:
        """Stored results indexed by bar index."""
        if not self.has_storage:
            raise StorageNotConfiguredError(f"{type(self).__name__} has no stored results")
        return self._core.sink.to_pandas(name=type(self).__name__)


class ScalarIndicator(Indicator):
    """
    Indicator over a single scalar stream.

    Subclasses declare a `select` field (bar projection, close by default)
    and implement receive_tick(). Parent indicators chain into them by
    calling receive_tick() directly.
    """

    select: SelectFn

    @abstractmethod
    def receive_tick(self, value: float, bar_index: int) -> None:
        """Consume one scalar value."""
        ...

    def receive_bar(self, bar: Bar, bar_index: int) -> None:
        self.receive_tick(self.select(bar), bar_index)
