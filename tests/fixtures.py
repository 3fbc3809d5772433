"""
Test Fixtures - Synthetic bar generators and reference implementations.

Provides deterministic data for validating indicators:
- Seeded random walks (property checks over many seeds)
- Constant and trending series (degenerate and directional cases)
- Brute-force references computed over full history
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import numpy as np
import pandas as pd

from stream_ta.core.bar import Bar, BarReceiver, TickReceiver


# =============================================================================
# Core Data Structures
# =============================================================================

@dataclass
class SyntheticData:
    """Collection of OHLCV bars as pandas DataFrame."""
    df: pd.DataFrame

    @property
    def high(self) -> np.ndarray:
        return self.df["high"].to_numpy()

    @property
    def low(self) -> np.ndarray:
        return self.df["low"].to_numpy()

    @property
    def close(self) -> np.ndarray:
        return self.df["close"].to_numpy()

    def bars(self) -> list[Bar]:
        return [
            Bar(ts.to_pydatetime(), o, h, l, c, v)
            for ts, o, h, l, c, v in zip(
                self.df.index, self.df["open"], self.df["high"],
                self.df["low"], self.df["close"], self.df["volume"],
            )
        ]

    def __len__(self) -> int:
        return len(self.df)


def _frame(open_, high, low, close, volume) -> pd.DataFrame:
    dates = pd.date_range("2024-01-01", periods=len(close), freq="D", tz="UTC")
    return pd.DataFrame({
        "open": open_,
        "high": high,
        "low": low,
        "close": close,
        "volume": volume,
    }, index=dates)


# =============================================================================
# Generators
# =============================================================================

def generate_random_walk(
    n_bars: int = 300,
    start: float = 100.0,
    volatility: float = 1.0,
    seed: int = 42,
) -> SyntheticData:
    """
    Generate a random-walk OHLCV series.

    high >= max(open, close) and low <= min(open, close) on every bar.
    """
    np.random.seed(seed)

    close = start + np.cumsum(np.random.randn(n_bars) * volatility)
    open_ = np.roll(close, 1)
    open_[0] = start
    high = np.maximum(open_, close) + np.abs(np.random.randn(n_bars) * volatility * 0.5)
    low = np.minimum(open_, close) - np.abs(np.random.randn(n_bars) * volatility * 0.5)
    volume = np.random.randint(1000, 10000, n_bars).astype(float)

    return SyntheticData(df=_frame(open_, high, low, close, volume))


def generate_constant(value: float = 100.0, n_bars: int = 60) -> SyntheticData:
    """Generate perfectly flat bars (open = high = low = close)."""
    flat = np.full(n_bars, value)
    return SyntheticData(df=_frame(flat, flat, flat, flat, np.full(n_bars, 1000.0)))


def generate_trending_up(
    start: float = 100.0,
    step: float = 1.0,
    n_bars: int = 60,
) -> SyntheticData:
    """Generate a noiseless staircase: every bar higher than the last."""
    close = start + step * np.arange(n_bars)
    open_ = close - step * 0.5
    high = close + step * 0.25
    low = open_ - step * 0.25
    return SyntheticData(df=_frame(open_, high, low, close, np.full(n_bars, 1000.0)))


def generate_trending_down(
    start: float = 200.0,
    step: float = 1.0,
    n_bars: int = 60,
) -> SyntheticData:
    """Generate a noiseless descending staircase."""
    close = start - step * np.arange(n_bars)
    open_ = close + step * 0.5
    high = open_ + step * 0.25
    low = close - step * 0.25
    return SyntheticData(df=_frame(open_, high, low, close, np.full(n_bars, 1000.0)))


def make_bar(high: float, low: float, close: float, day: int = 1) -> Bar:
    """Hand-built bar for small worked examples."""
    ts = datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(days=day - 1)
    return Bar(ts, (high + low) / 2.0, high, low, close)


# =============================================================================
# Drivers
# =============================================================================

def feed_bars(indicator: BarReceiver, bars) -> None:
    """Push bars with 1-based indices, as the stream would."""
    for bar_index, bar in enumerate(bars, start=1):
        indicator.receive_bar(bar, bar_index)


def feed_ticks(indicator: TickReceiver, values) -> None:
    """Push scalar ticks with 1-based indices."""
    for bar_index, value in enumerate(values, start=1):
        indicator.receive_tick(float(value), bar_index)


# =============================================================================
# Brute-force references
# =============================================================================

def reference_ema(values, period: int) -> np.ndarray:
    """EMA seeded with the SMA of the first `period` values."""
    values = np.asarray(values, dtype=float)
    if len(values) < period:
        return np.array([])
    alpha = 2.0 / (period + 1)
    out = [values[:period].mean()]
    for x in values[period:]:
        out.append((x - out[-1]) * alpha + out[-1])
    return np.array(out)


def reference_true_range(high, low, close) -> np.ndarray:
    """True range from the second bar on."""
    prev_close = close[:-1]
    return np.maximum(high[1:], prev_close) - np.minimum(low[1:], prev_close)


def reference_wilder_rsi(values, period: int) -> np.ndarray:
    values = np.asarray(values, dtype=float)
    changes = np.diff(values)
    gains = np.clip(changes, 0.0, None)
    losses = np.clip(-changes, 0.0, None)
    if len(changes) < period:
        return np.array([])

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()
    out = []
    for i in range(period, len(changes) + 1):
        if i > period:
            avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
            avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        total = avg_gain + avg_loss
        out.append(100.0 * avg_gain / total if total != 0.0 else 0.0)
    return np.array(out)
