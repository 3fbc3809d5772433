"""
Tests for configuration, logging and tick time periods.
"""

import os

import pytest

from stream_ta.config import get_config, reload_config
from stream_ta.config.config import DispatchConfig
from stream_ta.core.errors import FanOutError
from stream_ta.core.stream import BarStream
from stream_ta.core.timeframes import get_tick_time_period, tick_time_periods
from stream_ta.utils.logger import get_logger, setup_logger


class TestConfig:
    """Environment-driven configuration."""

    def test_defaults(self):
        config = reload_config()
        assert config.dispatch.max_workers is None
        assert config.log.level == "INFO"
        assert config.log.log_to_file is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("STREAM_TA_MAX_WORKERS", "3")
        monkeypatch.setenv("STREAM_TA_LOG_LEVEL", "debug")
        monkeypatch.setenv("STREAM_TA_LOG_TO_FILE", "true")
        config = reload_config()
        assert config.dispatch.max_workers == 3
        assert config.log.level == "DEBUG"
        assert config.log.log_to_file is True

    def test_reads_dotenv(self, monkeypatch, tmp_path):
        # load_dotenv writes straight into os.environ
        monkeypatch.setattr(os, "environ", dict(os.environ))
        (tmp_path / ".env").write_text("STREAM_TA_MAX_WORKERS=2\n")
        config = reload_config(str(tmp_path / ".env"))
        assert config.dispatch.max_workers == 2

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError, match="MAX_WORKERS"):
            DispatchConfig(max_workers=0)

    def test_summary(self, monkeypatch):
        monkeypatch.setenv("STREAM_TA_MAX_WORKERS", "4")
        assert "workers: 4" in reload_config().summary_short()


class TestLogger:
    """StreamLogger singleton and structured records."""

    def test_singleton(self):
        assert get_logger() is get_logger()

    def test_dispatch_failure_written_to_file(self, tmp_path, walk_bars):
        log_dir = tmp_path / "logs"
        setup_logger(log_dir=str(log_dir), log_level="INFO", log_to_file=True)

        class Broken:
            def receive_bar(self, bar, bar_index):
                raise RuntimeError("bad input")

        with BarStream() as stream:
            stream.attach(Broken())
            with pytest.raises(FanOutError):
                stream.receive_bar(walk_bars[0])

        text = "".join(p.read_text() for p in log_dir.glob("dispatch_*.log"))
        assert "[DISPATCH:FAILED]" in text
        assert "bar=1" in text
        assert "receiver=Broken" in text
        assert "RuntimeError: bad input" in text

    def test_feed_record(self, tmp_path):
        log_dir = tmp_path / "logs"
        logger = setup_logger(log_dir=str(log_dir), log_level="INFO", log_to_file=True)
        logger.feed("prices.csv", 42)
        text = "".join(p.read_text() for p in log_dir.glob("stream_ta_*.log"))
        assert "[FEED] | source=prices.csv | bars=42" in text


class TestTickTimePeriods:
    """Tick time period table."""

    def test_table_is_read_only(self):
        periods = tick_time_periods()
        with pytest.raises(TypeError):
            periods["fortnightly"] = None

    def test_table_built_once(self):
        assert tick_time_periods() is tick_time_periods()

    @pytest.mark.parametrize("name,seconds", [
        ("daily", 86400),
        ("hourly", 3600),
        ("15m", 900),
        ("1s", 1),
        ("tick", 0),
    ])
    def test_lookup(self, name, seconds):
        assert get_tick_time_period(name).seconds == seconds

    def test_intraday(self):
        assert get_tick_time_period("5m").is_intraday
        assert not get_tick_time_period("weekly").is_intraday
        assert not get_tick_time_period("tick").is_intraday

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Invalid tick time period"):
            get_tick_time_period("fortnightly")
