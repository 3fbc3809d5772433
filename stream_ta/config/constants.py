"""
Centralized constants for stream-ta.

Period bounds apply to every indicator constructor. Individual indicators
raise the lower bound where their recurrence needs more history
(e.g. EMA requires at least 2).
"""

# ==================== Period Bounds ====================

MINIMUM_TIME_PERIOD = 1
MAXIMUM_TIME_PERIOD = 100000

# ==================== Parabolic SAR Defaults ====================

DEFAULT_SAR_ACCELERATION = 0.02
DEFAULT_SAR_ACCELERATION_MAX = 0.2
