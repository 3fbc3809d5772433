"""
Bar feeds and date parsers.
"""

from .csv_feed import CSVFeed, ColumnMap, DataFrameFeed
from .date_parsers import (
    DATE_PARSERS,
    DateParser,
    dashed_ymd_parser,
    get_date_parser,
    iso_parser,
    slashed_ymd_parser,
)

__all__ = [
    "CSVFeed",
    "ColumnMap",
    "DataFrameFeed",
    "DATE_PARSERS",
    "DateParser",
    "dashed_ymd_parser",
    "slashed_ymd_parser",
    "iso_parser",
    "get_date_parser",
]
