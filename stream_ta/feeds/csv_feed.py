"""
Bar feeds: CSV files and pandas DataFrames.

A feed turns external rows into Bars in source order and can push them
into a BarStream. Feeds own no indicator state.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from ..core.bar import Bar
from ..core.errors import FeedError
from ..core.stream import BarStream
from ..utils.logger import get_logger
from .date_parsers import DateParser, dashed_ymd_parser


@dataclass(frozen=True)
class ColumnMap:
    """Zero-based column positions of each bar field."""
    date: int = 0
    open: int = 1
    high: int = 2
    low: int = 3
    close: int = 4
    volume: int = 5

    @property
    def width(self) -> int:
        """Minimum number of columns a row must have."""
        return max(self.date, self.open, self.high, self.low, self.close, self.volume) + 1


class CSVFeed:
    """
    CSV file feed.

    Rows are read with pandas in chunks as plain strings and converted one
    at a time, so a malformed row is reported with its line number.

    Usage:
        feed = CSVFeed("prices.csv", date_parser=iso_parser(), has_header=True)
        with BarStream() as stream:
            stream.attach(sma)
            feed.fill(stream)
    """

    CHUNK_SIZE = 10_000

    def __init__(
        self,
        path: Path | str,
        columns: ColumnMap | None = None,
        date_parser: DateParser | None = None,
        has_header: bool = False,
    ):
        self.path = Path(path)
        self.columns = columns or ColumnMap()
        self.date_parser = date_parser or dashed_ymd_parser()
        self.has_header = has_header
        self.logger = get_logger()

    def bars(self) -> Iterator[Bar]:
        """
        Yield bars in file order.

        Raises:
            FeedError: If the file is missing or a row cannot be parsed
        """
        if not self.path.exists():
            raise FeedError(str(self.path), 0, "file not found")

        try:
            reader = pd.read_csv(
                self.path,
                header=0 if self.has_header else None,
                dtype=str,
                keep_default_na=False,
                chunksize=self.CHUNK_SIZE,
            )
        except pd.errors.EmptyDataError:
            self.logger.warning(f"{self.path.name}: file is empty, no bars to read")
            return
        first_line = 2 if self.has_header else 1
        row_offset = 0
        with reader:
            try:
                for chunk in reader:
                    for position, row in enumerate(chunk.itertuples(index=False, name=None)):
                        yield self._parse_row(row, first_line + row_offset + position)
                    row_offset += len(chunk)
            except pd.errors.ParserError as e:
                raise FeedError(str(self.path), first_line + row_offset, str(e)) from e

    def _parse_row(self, row: tuple, line_number: int) -> Bar:
        cols = self.columns
        if len(row) < cols.width:
            raise FeedError(
                str(self.path), line_number,
                f"expected at least {cols.width} columns, got {len(row)}",
            )
        fields = (cols.date, cols.open, cols.high, cols.low, cols.close, cols.volume)
        if any(not isinstance(row[i], str) or not row[i].strip() for i in fields):
            raise FeedError(str(self.path), line_number, "missing field")
        try:
            return Bar(
                timestamp=self.date_parser(row[cols.date]),
                open=float(row[cols.open]),
                high=float(row[cols.high]),
                low=float(row[cols.low]),
                close=float(row[cols.close]),
                volume=float(row[cols.volume]),
            )
        except (TypeError, ValueError) as e:
            raise FeedError(str(self.path), line_number, str(e)) from e

    def fill(self, stream: BarStream) -> int:
        """Push every bar into the stream; returns the number of bars."""
        count = 0
        try:
            for bar in self.bars():
                stream.receive_bar(bar)
                count += 1
        except FeedError as e:
            self.logger.error(f"Feed stopped after {count} bars: {e}")
            raise
        self.logger.feed(self.path.name, count)
        return count


class DataFrameFeed:
    """
    Feed over an OHLCV DataFrame (timestamp, open, high, low, close[, volume]).

    A DatetimeIndex is used when there is no timestamp column.
    """

    REQUIRED_COLUMNS = ("open", "high", "low", "close")

    def __init__(self, df: pd.DataFrame, name: str = "dataframe"):
        missing = [c for c in self.REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"DataFrame is missing OHLC columns: {missing}")
        if "timestamp" not in df.columns and not isinstance(df.index, pd.DatetimeIndex):
            raise ValueError("DataFrame needs a 'timestamp' column or a DatetimeIndex")
        self.df = df
        self.name = name
        self.logger = get_logger()

    def bars(self) -> Iterator[Bar]:
        df = self.df
        timestamps = df["timestamp"] if "timestamp" in df.columns else df.index.to_series()
        volumes = df["volume"] if "volume" in df.columns else pd.Series(0.0, index=df.index)
        for ts, o, h, l, c, v in zip(
            pd.to_datetime(timestamps), df["open"], df["high"], df["low"], df["close"], volumes
        ):
            yield Bar(ts.to_pydatetime(), float(o), float(h), float(l), float(c), float(v))

    def fill(self, stream: BarStream) -> int:
        count = 0
        for bar in self.bars():
            stream.receive_bar(bar)
            count += 1
        self.logger.feed(self.name, count)
        return count
