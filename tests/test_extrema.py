"""
Tests for HHV, LLV and their bars-since variants.
"""

import numpy as np
import pandas as pd
import pytest

from stream_ta.indicators import HHV, LLV, HHVBars, LLVBars, MonotonicWindow

from .fixtures import feed_bars, feed_ticks, generate_random_walk


def bars_since_extreme(values, period, highest):
    """Brute force: ties resolve to the most recent position."""
    out = []
    for i in range(period - 1, len(values)):
        window = list(values[i - period + 1:i + 1])
        target = max(window) if highest else min(window)
        last_pos = len(window) - 1 - window[::-1].index(target)
        out.append(float(len(window) - 1 - last_pos))
    return out


class TestMonotonicWindow:
    """Window helper."""

    def test_tracks_max_over_window(self):
        window = MonotonicWindow(3, highest=True)
        results = []
        for v in [1, 5, 2, 3, 1, 0]:
            window.push(v)
            results.append(window.extreme)
        assert results == [1, 5, 5, 5, 3, 3]

    def test_is_full(self):
        window = MonotonicWindow(2, highest=False)
        window.push(1.0)
        assert not window.is_full
        window.push(2.0)
        assert window.is_full


class TestHHVLLV:
    """Rolling highest/lowest values."""

    @pytest.mark.parametrize("period", [1, 4, 14])
    def test_hhv_matches_rolling_max(self, walk, period):
        hhv = HHV.with_storage(time_period=period)
        feed_bars(hhv, walk.bars())
        expected = pd.Series(walk.high).rolling(period).max().dropna().to_numpy()
        np.testing.assert_array_equal(hhv.data, expected)
        assert hhv.lookback_period == period - 1

    @pytest.mark.parametrize("period", [1, 4, 14])
    def test_llv_matches_rolling_min(self, walk, period):
        llv = LLV.with_storage(time_period=period)
        feed_bars(llv, walk.bars())
        expected = pd.Series(walk.low).rolling(period).min().dropna().to_numpy()
        np.testing.assert_array_equal(llv.data, expected)

    def test_first_result_on_bar_n(self):
        hhv = HHV.with_storage(time_period=3)
        feed_ticks(hhv, [1.0, 2.0, 3.0])
        assert hhv.valid_from_bar == 3


class TestBarsSince:
    """HHVBars / LLVBars."""

    def test_ties_resolve_to_most_recent(self):
        hhv_bars = HHVBars.with_storage(time_period=3)
        feed_ticks(hhv_bars, [1.0, 3.0, 3.0, 2.0])
        assert hhv_bars.data == [0.0, 1.0]

        llv_bars = LLVBars.with_storage(time_period=3)
        feed_ticks(llv_bars, [5.0, 1.0, 1.0, 4.0])
        assert llv_bars.data == [0.0, 1.0]

    @pytest.mark.parametrize("seed", [5, 6])
    def test_matches_brute_force(self, seed):
        # Rounded values force plenty of ties
        values = np.round(generate_random_walk(n_bars=300, seed=seed).close)
        for cls, highest in ((HHVBars, True), (LLVBars, False)):
            ind = cls.with_storage(time_period=7)
            feed_ticks(ind, values)
            assert ind.data == bars_since_extreme(values, 7, highest)

    def test_values_within_window(self, walk):
        ind = HHVBars.with_storage(time_period=10)
        feed_bars(ind, walk.bars())
        assert all(0 <= v <= 9 for v in ind.data)
