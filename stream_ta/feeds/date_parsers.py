"""
Text date parsers for feeds.

Each factory returns a callable str -> datetime. Parsers raise ValueError on
malformed input; feeds turn that into a FeedError naming the line.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone, tzinfo

DateParser = Callable[[str], datetime]


def _ymd_parser(separator: str, tz: tzinfo) -> DateParser:
    def parse(text: str) -> datetime:
        parts = text.strip().split(separator)
        if len(parts) != 3:
            raise ValueError(f"expected YYYY{separator}MM{separator}DD, got '{text}'")
        year, month, day = (int(p) for p in parts)
        return datetime(year, month, day, tzinfo=tz)

    return parse


def dashed_ymd_parser(tz: tzinfo = timezone.utc) -> DateParser:
    """Parse '2024-01-31' as midnight in tz."""
    return _ymd_parser("-", tz)


def slashed_ymd_parser(tz: tzinfo = timezone.utc) -> DateParser:
    """Parse '2024/01/31' as midnight in tz."""
    return _ymd_parser("/", tz)


def iso_parser(default_tz: tzinfo = timezone.utc) -> DateParser:
    """Parse ISO-8601 timestamps; naive values are placed in default_tz."""
    def parse(text: str) -> datetime:
        value = datetime.fromisoformat(text.strip())
        if value.tzinfo is None:
            value = value.replace(tzinfo=default_tz)
        return value

    return parse


DATE_PARSERS: dict[str, Callable[[], DateParser]] = {
    "dashed": dashed_ymd_parser,
    "slashed": slashed_ymd_parser,
    "iso": iso_parser,
}


def get_date_parser(name: str) -> DateParser:
    """Build a parser by name ('dashed', 'slashed', 'iso')."""
    try:
        factory = DATE_PARSERS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown date format: '{name}'. Must be one of: {sorted(DATE_PARSERS)}"
        ) from None
    return factory()
