"""
Bar stream hub.

Holds the ordered history of received bars and fans each new bar out to
every attached receiver. Each bar is a fan-out/barrier-join: receivers run
concurrently on a thread pool and receive_bar() returns only after every
receiver has finished with that bar.

Containment policy:
- A receiver that raises does not stop its siblings; every receiver sees
  every bar. Failures are collected, logged, and raised together as a
  FanOutError once the barrier is reached.
- attach(), detach() and receive_bar() are rejected with StreamBusyError
  while a dispatch is in flight (including from inside a receiver).
"""

from __future__ import annotations

import math
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime

import pandas as pd

from .bar import Bar, BarReceiver
from .errors import DispatchFailure, EmptyStreamError, FanOutError, StreamBusyError
from .timeframes import TickTimePeriod
from ..config import get_config
from ..utils.logger import get_logger


class BarStream:
    """
    Ordered bar history plus subscription fan-out.

    Usage:
        with BarStream(period=get_tick_time_period("daily")) as stream:
            sma = SMA.with_storage(time_period=20)
            stream.attach(sma)
            for bar in feed.bars():
                stream.receive_bar(bar)
    """

    def __init__(
        self,
        period: TickTimePeriod | None = None,
        max_workers: int | None = None,
    ):
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.period = period
        self._max_workers = max_workers if max_workers is not None else get_config().dispatch.max_workers
        self._bars: list[Bar] = []
        self._receivers: list[BarReceiver] = []
        self._bar_index = 0
        self._min_value = math.nan
        self._max_value = math.nan
        self._executor: ThreadPoolExecutor | None = None
        self._lock = threading.Lock()
        self._dispatching = False
        self.logger = get_logger()

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def attach(self, receiver: BarReceiver) -> None:
        """Subscribe a receiver to every subsequent bar."""
        if not isinstance(receiver, BarReceiver):
            raise TypeError(f"{type(receiver).__name__} has no receive_bar(bar, bar_index) method")
        with self._lock:
            self._ensure_idle("attach")
            if any(r is receiver for r in self._receivers):
                return
            self._receivers.append(receiver)
        self.logger.dispatch("ATTACHED", self._bar_index, type(receiver).__name__)

    def detach(self, receiver: BarReceiver) -> None:
        """Unsubscribe a receiver. Raises ValueError if it is not attached."""
        with self._lock:
            self._ensure_idle("detach")
            for position, attached in enumerate(self._receivers):
                if attached is receiver:
                    del self._receivers[position]
                    break
            else:
                raise ValueError(f"{type(receiver).__name__} is not attached to this stream")
        self.logger.dispatch("DETACHED", self._bar_index, type(receiver).__name__)

    @property
    def max_workers(self) -> int | None:
        """Fan-out thread count (None = concurrent.futures default)."""
        return self._max_workers

    @property
    def receivers(self) -> tuple[BarReceiver, ...]:
        return tuple(self._receivers)

    def _ensure_idle(self, operation: str) -> None:
        if self._dispatching:
            raise StreamBusyError(
                f"Cannot {operation} while bar {self._bar_index} is being dispatched"
            )

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def receive_bar(self, bar: Bar) -> int:
        """
        Append a bar and fan it out to every attached receiver.

        Blocks until every receiver has processed the bar.

        Returns:
            The 1-based index assigned to this bar

        Raises:
            StreamBusyError: If called while a dispatch is in flight
            FanOutError: If one or more receivers raised for this bar
        """
        with self._lock:
            self._ensure_idle("receive a bar")
            self._dispatching = True
            self._bar_index += 1
            bar_index = self._bar_index
            self._bars.append(bar)
            if math.isnan(self._min_value) or bar.low < self._min_value:
                self._min_value = bar.low
            if math.isnan(self._max_value) or bar.high > self._max_value:
                self._max_value = bar.high
            receivers = list(self._receivers)

        try:
            failures = self._dispatch(receivers, bar, bar_index)
        finally:
            with self._lock:
                self._dispatching = False

        if failures:
            for failure in failures:
                self.logger.dispatch(
                    "FAILED", bar_index, failure.receiver_name,
                    error=f"{type(failure.error).__name__}: {failure.error}",
                )
            raise FanOutError(bar_index, failures)

        return bar_index

    def _dispatch(self, receivers: list[BarReceiver], bar: Bar, bar_index: int) -> list[DispatchFailure]:
        """Notify every receiver and wait for all of them."""
        if not receivers:
            return []

        if len(receivers) == 1 or self._max_workers == 1:
            failures = []
            for receiver in receivers:
                try:
                    receiver.receive_bar(bar, bar_index)
                except Exception as e:
                    failures.append(DispatchFailure(receiver, e))
            return failures

        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix="stream-ta-fanout",
            )

        futures = {
            self._executor.submit(receiver.receive_bar, bar, bar_index): receiver
            for receiver in receivers
        }
        wait(futures)

        # Report failures in attachment order so errors are deterministic
        failures = []
        for future, receiver in futures.items():
            error = future.exception()
            if error is not None:
                failures.append(DispatchFailure(receiver, error))
        return failures

    # ------------------------------------------------------------------
    # History queries
    # ------------------------------------------------------------------

    @property
    def bar_index(self) -> int:
        """Index of the most recent bar (0 before the first bar)."""
        return self._bar_index

    @property
    def bars(self) -> tuple[Bar, ...]:
        return tuple(self._bars)

    def __len__(self) -> int:
        return len(self._bars)

    def min_date(self) -> datetime:
        """Timestamp of the first bar."""
        if not self._bars:
            raise EmptyStreamError("Stream has no bars; min_date is undefined")
        return self._bars[0].timestamp

    def max_date(self) -> datetime:
        """Timestamp of the most recent bar."""
        if not self._bars:
            raise EmptyStreamError("Stream has no bars; max_date is undefined")
        return self._bars[-1].timestamp

    @property
    def min_value(self) -> float:
        """Lowest low seen so far (NaN before the first bar)."""
        return self._min_value

    @property
    def max_value(self) -> float:
        """Highest high seen so far (NaN before the first bar)."""
        return self._max_value

    def to_frame(self) -> pd.DataFrame:
        """Bar history as a DataFrame indexed by 1-based bar index."""
        df = pd.DataFrame(
            [(b.timestamp, b.open, b.high, b.low, b.close, b.volume) for b in self._bars],
            columns=["timestamp", "open", "high", "low", "close", "volume"],
        )
        df.index = pd.RangeIndex(1, len(self._bars) + 1, name="bar_index")
        return df

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Shut down the fan-out thread pool."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
            self.logger.debug(f"Fan-out pool closed after bar {self._bar_index}")

    def __enter__(self) -> BarStream:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
