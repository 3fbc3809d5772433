"""
Logging system for stream-ta.
Provides human-readable console logs and optional dated log files.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional


# ANSI color codes for terminal output
class Colors:
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    BOLD = "\033[1m"


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record):
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        # Format a copy so file handlers sharing the record stay uncolored
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{Colors.RESET}"
        record.msg = f"{color}{record.msg}{Colors.RESET}"
        return super().format(record)


class StreamLogger:
    """
    Central logging system for stream-ta.

    Features:
    - Console output with colors
    - Optional file output (one file per day)
    - Structured one-line records for dispatch and feed events
    """

    _instance: Optional['StreamLogger'] = None
    _initialized: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, log_dir: str = "logs", log_level: str = "INFO", log_to_file: bool = False):
        if StreamLogger._initialized:
            return

        self.log_dir = Path(log_dir)
        self.log_to_file = log_to_file
        if log_to_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self.main_logger = self._create_logger("stream_ta", log_level)
        self.dispatch_logger = self._create_logger("stream_ta.dispatch", log_level, "dispatch")

        StreamLogger._initialized = True

    def _create_logger(self, name: str, level: str, file_prefix: str = None) -> logging.Logger:
        """Create a configured logger instance."""
        logger = logging.getLogger(name)
        logger.setLevel(getattr(logging, level.upper()))
        logger.handlers.clear()
        logger.propagate = False

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(ColoredFormatter(
            "%(asctime)s | %(levelname)s | %(message)s",
            datefmt="%H:%M:%S"
        ))
        logger.addHandler(console_handler)

        if self.log_to_file:
            prefix = file_prefix or "stream_ta"
            log_file = self.log_dir / f"{prefix}_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))
            logger.addHandler(file_handler)

        return logger

    def info(self, msg: str, *args, **kwargs):
        """Log info message."""
        self.main_logger.info(msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        """Log debug message."""
        self.main_logger.debug(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        """Log warning message."""
        self.main_logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        """Log error message."""
        self.main_logger.error(msg, *args, **kwargs)

    def dispatch(self, action: str, bar_index: int, receiver: str, **kwargs):
        """
        Log a bar fan-out event with structured format.

        Args:
            action: ATTACHED, DETACHED, FAILED
            bar_index: Stream bar index (0 when not tied to a bar)
            receiver: Display name of the indicator/receiver
            **kwargs: Additional fields
        """
        parts = [f"[DISPATCH:{action}]", f"bar={bar_index}", f"receiver={receiver}"]
        for key, value in kwargs.items():
            parts.append(f"{key}={value}")

        msg = " | ".join(parts)
        if action == "FAILED":
            self.dispatch_logger.error(msg)
        else:
            self.dispatch_logger.debug(msg)

    def feed(self, source: str, bars: int, **kwargs):
        """Log feed progress (rows turned into bars)."""
        parts = ["[FEED]", f"source={source}", f"bars={bars}"]
        for key, value in kwargs.items():
            parts.append(f"{key}={value}")
        self.main_logger.info(" | ".join(parts))


# Global logger instance
_logger: Optional[StreamLogger] = None


def get_logger() -> StreamLogger:
    """Get or create the global logger instance (settings from config)."""
    global _logger
    if _logger is None:
        from ..config import get_config
        log_config = get_config().log
        _logger = StreamLogger(log_config.log_dir, log_config.level, log_config.log_to_file)
    return _logger


def setup_logger(log_dir: str = "logs", log_level: str = "INFO", log_to_file: bool = False) -> StreamLogger:
    """Initialize the logger with custom settings."""
    global _logger
    StreamLogger._initialized = False
    StreamLogger._instance = None
    _logger = StreamLogger(log_dir, log_level, log_to_file)
    return _logger
