"""
Tests for DEMA, TEMA and MACD.
"""

import numpy as np
import pytest

from stream_ta.core.errors import ParameterRangeError
from stream_ta.indicators import DEMA, MACD, TEMA

from .fixtures import feed_ticks, generate_random_walk, reference_ema


class TestDEMA:
    """Double EMA."""

    @pytest.mark.parametrize("period", [2, 5, 10])
    def test_lookback(self, walk, period):
        dema = DEMA.with_storage(time_period=period)
        feed_ticks(dema, walk.close)
        assert dema.lookback_period == 2 * (period - 1)
        assert dema.valid_from_bar == 2 * (period - 1) + 1
        assert len(dema) == len(walk) - 2 * (period - 1)

    def test_matches_reference(self, walk):
        period = 7
        dema = DEMA.with_storage(time_period=period)
        feed_ticks(dema, walk.close)

        e1 = reference_ema(walk.close, period)
        e2 = reference_ema(e1, period)
        expected = 2.0 * e1[period - 1:] - e2
        np.testing.assert_allclose(dema.data, expected, rtol=1e-10)


class TestTEMA:
    """Triple EMA."""

    def test_lookback(self, walk):
        tema = TEMA.with_storage(time_period=5)
        feed_ticks(tema, walk.close)
        assert tema.lookback_period == 12
        assert tema.valid_from_bar == 13

    def test_matches_reference(self, walk):
        period = 4
        tema = TEMA.with_storage(time_period=period)
        feed_ticks(tema, walk.close)

        e1 = reference_ema(walk.close, period)
        e2 = reference_ema(e1, period)
        e3 = reference_ema(e2, period)
        skip = period - 1
        expected = 3.0 * e1[2 * skip:] - 3.0 * e2[skip:] + e3
        np.testing.assert_allclose(tema.data, expected, rtol=1e-10)


class TestMACD:
    """MACD with fast/slow alignment and signal line."""

    def test_standard_lengths(self, walk):
        macd = MACD.with_storage(fast_period=12, slow_period=26, signal_period=9)
        feed_ticks(macd, walk.close)
        assert macd.lookback_period == 33
        assert macd.valid_from_bar == 34
        assert len(macd) == len(walk) - 33

    def test_histogram_is_macd_minus_signal(self, walk):
        macd = MACD.with_storage()
        feed_ticks(macd, walk.close)
        for result in macd.data:
            assert result.histogram == pytest.approx(result.macd - result.signal)

    def test_matches_reference(self):
        data = generate_random_walk(n_bars=200, seed=11)
        fast, slow, signal = 5, 13, 4
        macd = MACD.with_storage(fast_period=fast, slow_period=slow, signal_period=signal)
        feed_ticks(macd, data.close)

        fast_ref = reference_ema(data.close[slow - fast:], fast)
        slow_ref = reference_ema(data.close, slow)
        macd_ref = fast_ref - slow_ref
        signal_ref = reference_ema(macd_ref, signal)

        np.testing.assert_allclose([r.macd for r in macd.data], macd_ref[signal - 1:], rtol=1e-10)
        np.testing.assert_allclose([r.signal for r in macd.data], signal_ref, rtol=1e-10)

    def test_bounds_cover_all_components(self, walk):
        macd = MACD.with_storage()
        feed_ticks(macd, walk.close)
        components = [v for result in macd.data for v in result]
        assert macd.min_value == min(components)
        assert macd.max_value == max(components)

    @pytest.mark.parametrize("fast,slow", [(26, 12), (12, 12)])
    def test_fast_must_be_below_slow(self, fast, slow):
        with pytest.raises(ParameterRangeError, match="slow_period"):
            MACD.with_storage(fast_period=fast, slow_period=slow)

    def test_signal_period_validated(self):
        with pytest.raises(ParameterRangeError):
            MACD.with_storage(signal_period=1)
