"""
stream-ta: streaming technical-analysis indicators.

Indicators consume one bar at a time and emit a value as soon as enough
history has accumulated. A BarStream fans every bar out to all attached
indicators.

Usage:
    from stream_ta import BarStream, SMA, MACD
    from stream_ta.feeds import CSVFeed

    sma = SMA.with_storage(time_period=20)
    macd = MACD.with_storage()
    with BarStream() as stream:
        stream.attach(sma)
        stream.attach(macd)
        CSVFeed("prices.csv").fill(stream)
    print(sma.to_series().tail())
"""

__version__ = "0.1.0"

from .core import (
    Bar,
    BarStream,
    TickTimePeriod,
    get_tick_time_period,
    tick_time_periods,
    use_open,
    use_high,
    use_low,
    use_close,
    use_volume,
    StreamTAError,
    IndicatorError,
    ParameterRangeError,
    MissingSinkError,
    StorageNotConfiguredError,
    UnsupportedIndicatorError,
    StreamError,
    EmptyStreamError,
    StreamBusyError,
    FanOutError,
    FeedError,
)
from .indicators import (
    Indicator,
    ScalarIndicator,
    Listener,
    ResultSeries,
    SMA,
    EMA,
    WMA,
    DEMA,
    TEMA,
    MACD,
    Variance,
    StdDev,
    BollingerBands,
    HHV,
    LLV,
    HHVBars,
    LLVBars,
    TrueRange,
    ATR,
    PlusDM,
    MinusDM,
    PlusDI,
    MinusDI,
    DX,
    ADX,
    ADXR,
    RSI,
    StochRSI,
    SAR,
    TrendState,
    create_indicator,
    list_indicators,
)

__all__ = [
    "__version__",
    # Core
    "Bar",
    "BarStream",
    "TickTimePeriod",
    "get_tick_time_period",
    "tick_time_periods",
    "use_open",
    "use_high",
    "use_low",
    "use_close",
    "use_volume",
    # Errors
    "StreamTAError",
    "IndicatorError",
    "ParameterRangeError",
    "MissingSinkError",
    "StorageNotConfiguredError",
    "UnsupportedIndicatorError",
    "StreamError",
    "EmptyStreamError",
    "StreamBusyError",
    "FanOutError",
    "FeedError",
    # Indicators
    "Indicator",
    "ScalarIndicator",
    "Listener",
    "ResultSeries",
    "SMA",
    "EMA",
    "WMA",
    "DEMA",
    "TEMA",
    "MACD",
    "Variance",
    "StdDev",
    "BollingerBands",
    "HHV",
    "LLV",
    "HHVBars",
    "LLVBars",
    "TrueRange",
    "ATR",
    "PlusDM",
    "MinusDM",
    "PlusDI",
    "MinusDI",
    "DX",
    "ADX",
    "ADXR",
    "RSI",
    "StochRSI",
    "SAR",
    "TrendState",
    "create_indicator",
    "list_indicators",
]
