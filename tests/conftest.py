"""
Shared pytest fixtures for stream-ta.
"""

import pytest

from stream_ta.config import reload_config
from stream_ta.utils.logger import setup_logger

from .fixtures import generate_random_walk


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Fresh config and logger per test, independent of the developer's .env."""
    for key in ("STREAM_TA_MAX_WORKERS", "STREAM_TA_LOG_LEVEL", "STREAM_TA_LOG_DIR", "STREAM_TA_LOG_TO_FILE"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reload_config()
    setup_logger(log_dir=str(tmp_path / "logs"), log_level="WARNING")
    yield


@pytest.fixture
def walk():
    """300-bar seeded random walk."""
    return generate_random_walk(n_bars=300, seed=7)


@pytest.fixture
def walk_bars(walk):
    return walk.bars()
