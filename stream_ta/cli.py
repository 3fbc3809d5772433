"""
stream-ta command-line runner.

Reads a CSV bar file, attaches an indicator set to a BarStream, pushes
every bar through it and prints a summary table.
"""

from __future__ import annotations

import argparse
import math
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from .config import get_config
from .core.errors import FanOutError, FeedError, StreamTAError
from .core.stream import BarStream
from .core.timeframes import get_tick_time_period, tick_time_periods
from .feeds import CSVFeed, get_date_parser
from .indicators.base import Indicator
from .indicators.factory import IndicatorSpec, list_indicators, load_indicator_specs
from .utils.logger import get_logger, setup_logger

console = Console()


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "-"
    return f"{value:,.4f}"


def _format_result(value: Any) -> str:
    if hasattr(value, "_fields"):
        return " ".join(f"{name}={_format_number(v)}" for name, v in zip(value._fields, value))
    return _format_number(value)


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{text}'") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stream-ta",
        description="stream-ta - streaming technical-analysis indicators",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stream-ta list
  stream-ta run prices.csv --indicator sma:time_period=20 --indicator rsi
  stream-ta run prices.csv --indicators indicators.yml --has-header --date-format iso
  stream-ta run prices.csv --indicator macd --tail 5
        """
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run indicators over a CSV bar file")
    run_parser.add_argument("file", help="CSV file (date, open, high, low, close, volume)")
    run_parser.add_argument("--indicators", dest="indicators_file", help="YAML indicator set")
    run_parser.add_argument(
        "--indicator",
        action="append",
        default=[],
        metavar="TYPE[:k=v,...]",
        help="Indicator to attach (repeatable), e.g. sma:time_period=20",
    )
    run_parser.add_argument("--has-header", action="store_true", help="Skip the first CSV row")
    run_parser.add_argument(
        "--date-format",
        choices=["dashed", "slashed", "iso"],
        default="dashed",
        help="Date column format (default: dashed, YYYY-MM-DD)",
    )
    run_parser.add_argument(
        "--period",
        choices=sorted(tick_time_periods()),
        default=None,
        help="Bar interval label for the stream",
    )
    run_parser.add_argument("--tail", type=int, default=0, help="Also print the last N results of each indicator")
    run_parser.add_argument("--workers", type=_positive_int, default=None, help="Fan-out thread count (default: from config)")
    run_parser.add_argument("--log-level", default=None, help="Override STREAM_TA_LOG_LEVEL")

    subparsers.add_parser("list", help="List supported indicator types")
    return parser


def _collect_specs(args: argparse.Namespace) -> list[IndicatorSpec]:
    specs: list[IndicatorSpec] = []
    if args.indicators_file:
        specs.extend(load_indicator_specs(args.indicators_file))
    specs.extend(IndicatorSpec.from_string(text) for text in args.indicator)
    return specs


def _summary_table(attached: list[tuple[str, Indicator]], stream: BarStream) -> Table:
    title = f"{len(stream)} bars"
    if len(stream):
        title += f" | {stream.min_date():%Y-%m-%d} -> {stream.max_date():%Y-%m-%d}"
    if stream.period is not None:
        title += f" | {stream.period.name}"

    table = Table(title=title)
    table.add_column("Indicator", style="cyan")
    table.add_column("Lookback", justify="right")
    table.add_column("Valid From", justify="right")
    table.add_column("Length", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Last", justify="right", style="green")

    for name, indicator in attached:
        data = indicator.data
        table.add_row(
            name,
            str(indicator.lookback_period),
            str(indicator.valid_from_bar),
            str(len(indicator)),
            _format_number(indicator.min_value),
            _format_number(indicator.max_value),
            _format_result(data[-1]) if data else "-",
        )
    return table


def _tail_table(name: str, indicator: Indicator, count: int) -> Table:
    table = Table(title=f"{name} (last {count})")
    table.add_column("Bar", justify="right")
    table.add_column("Value", justify="right")
    data = indicator.data
    start = len(data) - min(count, len(data))
    for offset, value in enumerate(data[start:]):
        table.add_row(str(indicator.valid_from_bar + start + offset), _format_result(value))
    return table


def handle_run(args: argparse.Namespace) -> int:
    """Run an indicator set over a CSV file."""
    try:
        specs = _collect_specs(args)
        indicators = [(spec.display_name, spec.build()) for spec in specs]
    except (StreamTAError, ValueError) as e:
        console.print(f"[red]Invalid indicator set: {e}[/]")
        return 2

    if not indicators:
        console.print("[yellow]No indicators given; use --indicator or --indicators[/]")
        return 2

    feed = CSVFeed(
        args.file,
        date_parser=get_date_parser(args.date_format),
        has_header=args.has_header,
    )
    period = get_tick_time_period(args.period) if args.period else None

    with BarStream(period=period, max_workers=args.workers) as stream:
        for _, indicator in indicators:
            stream.attach(indicator)

        try:
            feed.fill(stream)
        except FeedError as e:
            console.print(f"[red]Feed error: {e}[/]")
            return 1
        except FanOutError as e:
            console.print(f"[red]Indicator failure on bar {e.bar_index}:[/]")
            for failure in e.failures:
                console.print(f"  [dim]{failure.receiver_name}: {failure.error}[/]")
            return 1

        get_logger().info(f"Run complete | bars={len(stream)} | indicators={len(indicators)}")
        console.print(_summary_table(indicators, stream))
        if args.tail > 0:
            for name, indicator in indicators:
                console.print(_tail_table(name, indicator, args.tail))

    return 0


def handle_list(args: argparse.Namespace) -> int:
    """Print supported indicator types."""
    table = Table(title="Supported indicators")
    table.add_column("Type", style="cyan")
    for name in list_indicators():
        table.add_row(name)
    console.print(table)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    log_config = get_config().log
    level = getattr(args, "log_level", None) or log_config.level
    setup_logger(log_config.log_dir, level, log_config.log_to_file)

    if args.command == "run":
        return handle_run(args)
    if args.command == "list":
        return handle_list(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
