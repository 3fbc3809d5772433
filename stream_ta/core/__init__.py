"""
Core bar types and the bar stream hub.
"""

from .bar import (
    Bar,
    BarReceiver,
    TickReceiver,
    SelectFn,
    PROJECTIONS,
    get_projection,
    use_open,
    use_high,
    use_low,
    use_close,
    use_volume,
)
from .errors import (
    StreamTAError,
    IndicatorError,
    ParameterRangeError,
    MissingSinkError,
    StorageNotConfiguredError,
    UnsupportedIndicatorError,
    StreamError,
    EmptyStreamError,
    StreamBusyError,
    DispatchFailure,
    FanOutError,
    FeedError,
)
from .stream import BarStream
from .timeframes import TickTimePeriod, tick_time_periods, get_tick_time_period

__all__ = [
    # Bars
    "Bar",
    "BarReceiver",
    "TickReceiver",
    "SelectFn",
    "PROJECTIONS",
    "get_projection",
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
    "DispatchFailure",
    "FanOutError",
    "FeedError",
    # Stream hub
    "BarStream",
    # Timeframes
    "TickTimePeriod",
    "tick_time_periods",
    "get_tick_time_period",
]
