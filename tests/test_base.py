"""
Tests for indicator bookkeeping, sinks and parameter validation.

Validates that:
1. IndicatorCore keeps result_count / valid_from_bar / min / max consistent
2. Sinks are mandatory and receive every result in order
3. Stored results line up with bar indices
4. Period validation rejects out-of-range and non-integer values
"""

import math

import numpy as np
import pandas as pd
import pytest

from stream_ta.core.bar import BarReceiver, TickReceiver
from stream_ta.core.errors import MissingSinkError, ParameterRangeError, StorageNotConfiguredError
from stream_ta.indicators import (
    ATR,
    MACD,
    SMA,
    IndicatorCore,
    Listener,
    ResultSeries,
    ResultSink,
    check_period,
    require_sink,
)

from .fixtures import feed_ticks


class RecordingSink:
    def __init__(self):
        self.received = []

    def accept(self, value, bar_index):
        self.received.append((value, bar_index))


class TestIndicatorCore:
    """Result bookkeeping invariants."""

    def test_starts_empty_with_nan_bounds(self):
        core = IndicatorCore(4, RecordingSink())
        assert core.result_count == 0
        assert core.valid_from_bar == -1
        assert math.isnan(core.min_value)
        assert math.isnan(core.max_value)

    def test_first_update_fixes_valid_from_bar(self):
        core = IndicatorCore(2, RecordingSink())
        core.update_with_new_value(5.0, 3)
        core.update_with_new_value(7.0, 4)
        assert core.valid_from_bar == 3
        assert core.result_count == 2

    def test_bounds_track_every_value(self):
        core = IndicatorCore(0, RecordingSink())
        for i, value in enumerate([3.0, -1.0, 8.0, 2.0], start=1):
            core.update_with_new_value(value, i)
        assert core.min_value == -1.0
        assert core.max_value == 8.0

    def test_extrema_override_value_for_bounds(self):
        sink = RecordingSink()
        core = IndicatorCore(0, sink)
        core.update_with_new_value(("a", "b"), 1, extrema=(4.0, -2.0, 9.0))
        assert core.min_value == -2.0
        assert core.max_value == 9.0
        assert sink.received == [(("a", "b"), 1)]

    def test_sink_receives_value_and_bar_index(self):
        sink = RecordingSink()
        core = IndicatorCore(0, sink)
        core.update_with_new_value(1.5, 10)
        assert sink.received == [(1.5, 10)]


class TestSinks:
    """Sink protocol, storage and listener routing."""

    def test_missing_sink_raises(self):
        with pytest.raises(MissingSinkError, match="with_storage"):
            SMA(5)

    def test_require_sink_rejects_objects_without_accept(self):
        with pytest.raises(TypeError):
            require_sink(object(), "SMA")

    def test_result_series_records_first_bar(self):
        series = ResultSeries()
        series.accept(1.0, 5)
        series.accept(2.0, 6)
        assert series.first_bar_index == 5
        assert len(series) == 2

    def test_result_series_to_pandas_index(self):
        series = ResultSeries()
        for i, v in enumerate([1.0, 2.0, 3.0], start=4):
            series.accept(v, i)
        s = series.to_pandas(name="x")
        assert isinstance(s, pd.Series)
        assert list(s.index) == [4, 5, 6]
        assert s.index.name == "bar_index"

    def test_listener_routes_to_handler(self):
        calls = []
        listener = Listener(lambda value, bar_index: calls.append((value, bar_index)))
        listener.accept(3.0, 2)
        assert calls == [(3.0, 2)]

    def test_custom_sink_gets_every_result(self):
        sink = RecordingSink()
        sma = SMA(2, sink=sink)
        feed_ticks(sma, [1, 2, 3, 4])
        assert sink.received == [(1.5, 2), (2.5, 3), (3.5, 4)]


class TestStoredResults:
    """Indicator.data / to_series alignment."""

    def test_data_aligns_with_valid_from_bar(self):
        sma = SMA.with_storage(time_period=3)
        feed_ticks(sma, [1, 2, 3, 4, 5])
        assert sma.valid_from_bar == 3
        assert len(sma.data) == len(sma) == 3
        assert sma.data == [2.0, 3.0, 4.0]

    def test_data_without_storage_raises(self):
        sma = SMA(3, sink=RecordingSink())
        with pytest.raises(StorageNotConfiguredError):
            _ = sma.data
        with pytest.raises(StorageNotConfiguredError):
            sma.to_series()

    def test_to_series_scalar(self):
        sma = SMA.with_storage(time_period=2)
        feed_ticks(sma, [1, 3, 5])
        s = sma.to_series()
        assert list(s.index) == [2, 3]
        assert s.tolist() == [2.0, 4.0]

    def test_to_series_tuple_results_give_dataframe(self):
        macd = MACD.with_storage(fast_period=3, slow_period=5, signal_period=2)
        feed_ticks(macd, np.linspace(1.0, 20.0, 20))
        df = macd.to_series()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["macd", "signal", "histogram"]
        assert df.index[0] == macd.valid_from_bar

    def test_bounds_match_stored_data(self):
        sma = SMA.with_storage(time_period=2)
        feed_ticks(sma, [5, 1, 9, 2, 7])
        assert sma.min_value == min(sma.data)
        assert sma.max_value == max(sma.data)

    def test_identity_equality(self):
        a = SMA.with_storage(time_period=3)
        b = SMA.with_storage(time_period=3)
        assert a != b
        assert a == a


class TestCheckPeriod:
    """Integer period validation."""

    @pytest.mark.parametrize("value", [1, 2, 100000])
    def test_accepts_in_range(self, value):
        assert check_period("time_period", value, 1) == value

    @pytest.mark.parametrize("value", [0, -3, 100001])
    def test_rejects_out_of_range(self, value):
        with pytest.raises(ParameterRangeError) as exc_info:
            check_period("time_period", value, 1)
        assert exc_info.value.name == "time_period"

    @pytest.mark.parametrize("value", [2.5, "5", True, None])
    def test_rejects_non_integers(self, value):
        with pytest.raises(ParameterRangeError, match="integer"):
            check_period("time_period", value, 1)

    def test_parameter_range_error_is_value_error(self):
        with pytest.raises(ValueError):
            SMA.with_storage(time_period=0)


class TestReceiverProtocols:
    """Structural receiver protocols."""

    def test_scalar_indicators_take_ticks_and_bars(self):
        sma = SMA.with_storage(time_period=3)
        assert isinstance(sma, TickReceiver)
        assert isinstance(sma, BarReceiver)

    def test_bar_only_indicators_are_not_tick_receivers(self):
        atr = ATR.with_storage()
        assert isinstance(atr, BarReceiver)
        assert not isinstance(atr, TickReceiver)

    def test_listener_is_a_result_sink(self):
        assert isinstance(Listener(lambda value, bar_index: None), ResultSink)
