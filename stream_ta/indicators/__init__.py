"""
Streaming indicators.

Every indicator consumes one bar (or tick) at a time and hands each result
to its sink the moment enough history has accumulated.

Usage:
    from stream_ta.indicators import SMA, create_indicator

    sma = SMA.with_storage(time_period=20)
    macd = create_indicator("macd", {"fast_period": 12, "slow_period": 26})
"""

from .base import (
    Indicator,
    IndicatorCore,
    Listener,
    ResultSeries,
    ResultSink,
    ScalarIndicator,
    check_period,
    require_sink,
)
from .moving_average import SMA, EMA, WMA
from .ema_composable import DEMA, TEMA, MACD, MACDResult
from .variance import Variance, StdDev, BollingerBands, BollingerResult
from .extrema import HHV, LLV, HHVBars, LLVBars, MonotonicWindow
from .directional import (
    TrueRange,
    ATR,
    PlusDM,
    MinusDM,
    PlusDI,
    MinusDI,
    DX,
    ADX,
    ADXR,
    directional_movement,
)
from .oscillators import RSI, StochRSI, StochRSIResult
from .stateful import SAR, TrendState
from .factory import (
    IndicatorSpec,
    IndicatorSpecFileError,
    create_indicator,
    list_indicators,
    load_indicator_specs,
)

__all__ = [
    # Base
    "Indicator",
    "IndicatorCore",
    "Listener",
    "ResultSeries",
    "ResultSink",
    "ScalarIndicator",
    "check_period",
    "require_sink",
    # Moving averages
    "SMA",
    "EMA",
    "WMA",
    # EMA-composable
    "DEMA",
    "TEMA",
    "MACD",
    "MACDResult",
    # Variance-based
    "Variance",
    "StdDev",
    "BollingerBands",
    "BollingerResult",
    # Window extremes
    "HHV",
    "LLV",
    "HHVBars",
    "LLVBars",
    "MonotonicWindow",
    # Directional movement
    "TrueRange",
    "ATR",
    "PlusDM",
    "MinusDM",
    "PlusDI",
    "MinusDI",
    "DX",
    "ADX",
    "ADXR",
    "directional_movement",
    # Oscillators
    "RSI",
    "StochRSI",
    "StochRSIResult",
    # Stateful
    "SAR",
    "TrendState",
    # Factory
    "IndicatorSpec",
    "IndicatorSpecFileError",
    "create_indicator",
    "list_indicators",
    "load_indicator_specs",
]
