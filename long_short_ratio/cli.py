"""
Long/Short Ratio - CLI.

============================================================
USAGE
============================================================
python -m long_short_ratio ratio --symbol ETH --timeframe 1h
python -m long_short_ratio volume --symbol BTC --json
python -m long_short_ratio markets

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from long_short_ratio import __version__
from long_short_ratio.aggregator import (
    available_markets,
    build_aggregator,
    build_taker_volume_summarizer,
)
from long_short_ratio.config import LongShortConfig, get_config
from long_short_ratio.exceptions import LongShortError
from long_short_ratio.models import NormalizedRatio, TakerVolume, Timeframe, parse_symbol


BAR_WIDTH = 40


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="long-short-ratio",
        description="Cross-exchange long/short account ratio snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  ratio    - Long/short account ratio from every configured exchange
  volume   - Taker buy/sell volume across timeframes
  markets  - Binance USDT perpetual base assets

Examples:
  %(prog)s ratio --symbol ETH --timeframe 4h
  %(prog)s volume --json
        """
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    ratio_parser = subparsers.add_parser("ratio", help="Long/short account ratio")
    ratio_parser.add_argument("--symbol", "-s", type=str, help="Base asset (default: LSR_DEFAULT_SYMBOL)")
    ratio_parser.add_argument(
        "--timeframe", "-t",
        type=str,
        choices=[tf.value for tf in Timeframe],
        help="Timeframe (default: LSR_DEFAULT_TIMEFRAME)",
    )
    ratio_parser.add_argument("--json", action="store_true", help="Print JSON instead of bars")

    volume_parser = subparsers.add_parser("volume", help="Taker buy/sell volume summary")
    volume_parser.add_argument("--symbol", "-s", type=str, help="Base asset (default: LSR_DEFAULT_SYMBOL)")
    volume_parser.add_argument(
        "--timeframe", "-t",
        type=str,
        action="append",
        choices=[tf.value for tf in Timeframe],
        help="Timeframe, repeatable (default: all)",
    )
    volume_parser.add_argument("--source", type=str, help="Taker volume source id")
    volume_parser.add_argument("--json", action="store_true", help="Print JSON instead of bars")

    markets_parser = subparsers.add_parser("markets", help="Binance USDT perpetual base assets")
    markets_parser.add_argument("--json", action="store_true", help="Print a JSON list")

    return parser


# ============================================================
# OUTPUT
# ============================================================

def render_bar(long_percent: float, width: int = BAR_WIDTH) -> str:
    """'#' for the long side, '-' for the short side."""
    longs = max(0, min(width, round(long_percent / 100 * width)))
    return "#" * longs + "-" * (width - longs)


def format_ratio(record: NormalizedRatio) -> str:
    if not record.is_success:
        return f"  {record.exchange:<14} {record.status.value}: {record.message or ''}"
    ratio = f"{record.long_short_ratio:.4f}" if record.long_short_ratio is not None else "n/a"
    return (
        f"  {record.exchange:<14} [{render_bar(float(record.long_percent))}] "
        f"L {record.long_percent:6.2f}% | S {record.short_percent:6.2f}% | R {ratio}"
    )


def format_volume(record: TakerVolume) -> str:
    label = f"{record.source} {record.timeframe.value}"
    if not record.is_success:
        return f"  {label:<18} {record.status.value}: {record.message or ''}"
    return (
        f"  {label:<18} [{render_bar(float(record.long_percent))}] "
        f"buy {record.buy_volume:,.2f} | sell {record.sell_volume:,.2f} | "
        f"total {record.total_volume:,.2f}"
    )


def print_banner(text: str) -> None:
    print("\n" + "=" * 60)
    print(f"  {text}")
    print("=" * 60)


# ============================================================
# COMMANDS
# ============================================================

async def run_ratio(args: argparse.Namespace, config: LongShortConfig) -> int:
    symbol = args.symbol or config.default_symbol
    timeframe = args.timeframe or config.default_timeframe
    records = await build_aggregator(config).aggregate(symbol, timeframe)

    if args.json:
        print(json.dumps([r.to_dict(include_raw=False) for r in records], indent=2))
    else:
        print_banner(f"LONG/SHORT RATIO: {symbol.upper()} {Timeframe.parse(timeframe).value}")
        for record in records:
            print(format_ratio(record))
        print()
    return 0


async def run_volume(args: argparse.Namespace, config: LongShortConfig) -> int:
    symbol = args.symbol or config.default_symbol
    summarizer = build_taker_volume_summarizer(config, source_id=args.source)
    records = await summarizer.summarize(symbol, args.timeframe)

    if args.json:
        print(json.dumps(
            {r.timeframe.value: r.to_dict(include_raw=False) for r in records},
            indent=2,
        ))
    else:
        print_banner(f"TAKER VOLUME: {symbol.upper()} ({summarizer.source.name})")
        for record in records:
            print(format_volume(record))
        print()
    return 0


async def run_markets(args: argparse.Namespace, config: LongShortConfig) -> int:
    markets = await available_markets(config)
    if args.json:
        print(json.dumps(markets))
    else:
        print("\n".join(markets))
    return 0


COMMANDS = {
    "ratio": run_ratio,
    "volume": run_volume,
    "markets": run_markets,
}


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    if getattr(args, "symbol", None):
        try:
            args.symbol = parse_symbol(args.symbol)
        except ValueError as e:
            parser.error(str(e))

    try:
        config = get_config()
        return asyncio.run(COMMANDS[args.command](args, config))
    except LongShortError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
