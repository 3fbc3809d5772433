"""
Exception hierarchy for stream-ta.

Construction problems surface as IndicatorError subclasses before an
indicator exists; stream problems surface as StreamError subclasses.
Degenerate arithmetic inside an indicator (zero denominators) is never
raised; the affected indicators emit 0.0 instead.
"""

from __future__ import annotations

from dataclasses import dataclass


class StreamTAError(Exception):
    """Root of every error raised by stream-ta."""


# =============================================================================
# Indicator construction
# =============================================================================

class IndicatorError(StreamTAError):
    """Raised when an indicator cannot be built or queried."""


class ParameterRangeError(IndicatorError, ValueError):
    """Raised when a numeric indicator parameter is outside its bounds."""

    def __init__(
        self,
        name: str,
        value: object,
        minimum: float | None = None,
        maximum: float | None = None,
        reason: str | None = None,
    ):
        self.name = name
        self.value = value
        self.minimum = minimum
        self.maximum = maximum

        if reason is None:
            if minimum is not None and maximum is not None:
                reason = f"must be between {minimum} and {maximum}"
            elif minimum is not None:
                reason = f"must be >= {minimum}"
            else:
                reason = f"must be <= {maximum}"

        super().__init__(f"{name}={value!r} {reason}")


class MissingSinkError(IndicatorError):
    """Raised when an indicator is built without a result sink."""

    def __init__(self, indicator: str):
        self.indicator = indicator
        super().__init__(
            f"{indicator} requires a result sink; use {indicator}.with_storage(...) "
            f"to keep results on the indicator"
        )


class StorageNotConfiguredError(IndicatorError):
    """Raised when stored results are requested from an indicator without storage."""


class UnsupportedIndicatorError(IndicatorError):
    """Raised when the factory is asked for an unknown indicator type."""

    def __init__(self, indicator_type: str, supported: list[str] | None = None):
        self.indicator_type = indicator_type
        self.supported = supported or []
        super().__init__(
            f"Unsupported indicator type: '{indicator_type}'. "
            f"Supported: {', '.join(self.supported)}"
        )


# =============================================================================
# Bar stream
# =============================================================================

class StreamError(StreamTAError):
    """Raised for bar-stream hub failures."""


class EmptyStreamError(StreamError):
    """Raised when date bounds are requested from a stream with no bars."""


class StreamBusyError(StreamError):
    """Raised when the hub is modified or re-entered while dispatching a bar."""


@dataclass(frozen=True)
class DispatchFailure:
    """One receiver's failure during a bar fan-out."""
    receiver: object
    error: BaseException

    @property
    def receiver_name(self) -> str:
        return type(self.receiver).__name__


class FanOutError(StreamError):
    """
    Raised after a bar fan-out in which one or more receivers failed.

    Every receiver still ran for this bar; the bar is kept in the stream's
    history and the bar index has advanced.
    """

    def __init__(self, bar_index: int, failures: list[DispatchFailure]):
        self.bar_index = bar_index
        self.failures = failures
        names = ", ".join(
            f"{f.receiver_name}: {type(f.error).__name__}: {f.error}" for f in failures
        )
        super().__init__(f"{len(failures)} receiver(s) failed on bar {bar_index}: {names}")


# =============================================================================
# Feeds
# =============================================================================

class FeedError(StreamTAError):
    """Raised when a feed row cannot be turned into a bar."""

    def __init__(self, source: str, line_number: int, reason: str):
        self.source = source
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"{source}:{line_number}: {reason}")
