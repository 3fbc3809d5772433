"""
Configuration management.
"""

from .config import (
    Config,
    DispatchConfig,
    LogConfig,
    get_config,
    reload_config,
)

from .constants import (
    MINIMUM_TIME_PERIOD,
    MAXIMUM_TIME_PERIOD,
    DEFAULT_SAR_ACCELERATION,
    DEFAULT_SAR_ACCELERATION_MAX,
)

__all__ = [
    # Config classes
    "Config",
    "DispatchConfig",
    "LogConfig",
    "get_config",
    "reload_config",
    # Constants
    "MINIMUM_TIME_PERIOD",
    "MAXIMUM_TIME_PERIOD",
    "DEFAULT_SAR_ACCELERATION",
    "DEFAULT_SAR_ACCELERATION_MAX",
]
