"""
Configuration management for stream-ta.
Loads runtime settings from environment variables with sensible defaults.

Indicator parameters are never read from the environment; they are always
passed explicitly to the indicator constructors or the factory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


ENV_PREFIX = "STREAM_TA_"


@dataclass
class DispatchConfig:
    """
    Bar fan-out settings for BarStream.

    max_workers:
        Thread pool size used to notify attached indicators.
        None lets concurrent.futures pick its default; 1 forces
        inline (sequential) dispatch.
    """
    max_workers: Optional[int] = None

    def __post_init__(self):
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(
                f"{ENV_PREFIX}MAX_WORKERS must be >= 1, got {self.max_workers}"
            )


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = False


class Config:
    """
    Central configuration manager.

    Loads configuration from environment variables (and a local .env file
    when present) and provides typed access to all settings.
    """

    _instance: Optional['Config'] = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, env_file: str = ".env"):
        if self._initialized:
            return

        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path, override=False)

        self.dispatch = self._load_dispatch_config()
        self.log = self._load_log_config()

        self._initialized = True

    def _load_dispatch_config(self) -> DispatchConfig:
        """Load fan-out settings."""
        raw = os.getenv(f"{ENV_PREFIX}MAX_WORKERS", "").strip()
        return DispatchConfig(max_workers=int(raw) if raw else None)

    def _load_log_config(self) -> LogConfig:
        """Load logging settings."""
        return LogConfig(
            level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
            log_dir=os.getenv(f"{ENV_PREFIX}LOG_DIR", "logs"),
            log_to_file=os.getenv(f"{ENV_PREFIX}LOG_TO_FILE", "false").lower() == "true",
        )

    def summary_short(self) -> str:
        """Generate a short one-line configuration summary."""
        workers = self.dispatch.max_workers or "auto"
        return f"stream-ta | workers: {workers} | log: {self.log.level}"


def get_config(env_file: str = ".env") -> Config:
    """Get or create the global config instance."""
    return Config(env_file)


def reload_config(env_file: str = ".env") -> Config:
    """Drop the cached instance and reload from the environment."""
    Config._instance = None
    return Config(env_file)
