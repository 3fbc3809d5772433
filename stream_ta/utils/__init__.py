"""
Utility modules.
"""

from .logger import get_logger, setup_logger, StreamLogger

__all__ = [
    "get_logger",
    "setup_logger",
    "StreamLogger",
]
