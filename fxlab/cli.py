"""
Command-line interface for the options calculator.

This module provides CLI commands for pricing a currency option (premium,
Greeks, break-even, payoff scenarios) and for inspecting market data.
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import Optional
import pandas as pd

from fxlab.analytics.garman_kohlhagen import evaluate
from fxlab.analytics.maturity import days_to_years, time_to_maturity, days_to_maturity
from fxlab.analytics.scenarios import generate_scenarios, generate_hedge_scenarios
from fxlab.cache import SnapshotCache
from fxlab.config import AppConfig, load_config
from fxlab.data_sources.market import MarketSnapshot, get_market_snapshot, fallback_snapshot
from fxlab.entities import OptionInputs
from fxlab.errors import FXLabError
from fxlab.reporting.charts import plot_payoff_profile
from fxlab.reporting.report import Report


def _needs_market_data(args) -> bool:
    return any(v is None for v in (args.spot, args.vol, args.rd, args.rf))


def _load_snapshot(args, config: AppConfig) -> MarketSnapshot:
    if args.offline:
        return fallback_snapshot(config.market, reason="offline")
    cache = SnapshotCache(config.cache_dir, ttl_seconds=config.cache_ttl_seconds)
    return get_market_snapshot(config=config, cache=cache)


def _resolve_time_to_maturity(args) -> float:
    if args.maturity:
        maturity_date = datetime.strptime(args.maturity, "%Y-%m-%d").date()
        print(f"  Days to maturity: {days_to_maturity(maturity_date)}")
        return time_to_maturity(maturity_date)
    return days_to_years(args.days)


def price_command(args):
    """Price an option and print premium, Greeks, break-even and scenarios."""
    try:
        config = load_config(args.config)

        snapshot: Optional[MarketSnapshot] = None
        if _needs_market_data(args):
            print("Loading market data...")
            snapshot = _load_snapshot(args, config)
            marker = "⚠" if snapshot.is_fallback else "✓"
            print(f"  {marker} {snapshot.pair} {snapshot.current_rate:.2f} ({snapshot.source})")

        spot = args.spot if args.spot is not None else snapshot.current_rate
        inputs = OptionInputs(
            spot=spot,
            strike=args.strike if args.strike is not None else spot,
            time_to_maturity=_resolve_time_to_maturity(args),
            volatility=args.vol if args.vol is not None else snapshot.volatility,
            domestic_rate=args.rd if args.rd is not None else snapshot.domestic_rate,
            foreign_rate=args.rf if args.rf is not None else snapshot.foreign_rate,
            option_type=args.type,
        )

        precision = None if args.full_precision else (
            args.precision if args.precision is not None else config.greeks_precision
        )
        result = evaluate(inputs, notional=args.notional, precision=precision)

        variation_range = tuple(args.range) if args.range else config.scenarios.variation_range
        steps = args.steps if args.steps is not None else config.scenarios.steps
        scenarios = generate_scenarios(
            inputs.spot, inputs.strike, result.premium, result.break_even,
            args.notional, inputs.option_type,
            variation_range=variation_range, steps=steps,
            max_steps=config.scenarios.max_steps
        )

        print(f"\n{inputs.option_type.value.upper()} {inputs.spot:.2f} / K={inputs.strike:.2f}, "
              f"T={inputs.time_to_maturity:.6f}y, σ={inputs.volatility:.2%}")
        print(f"  Premium:       {result.premium:.4f}")
        print(f"  Total premium: {result.total_premium:,.2f}")
        print(f"  Break-even:    {result.break_even:.4f}")
        print("  Greeks:")
        for name, value in result.greeks.to_dict().items():
            print(f"    {name:<6} {value:.6g}")

        print("\nScenarios:")
        with pd.option_context("display.float_format", "{:,.2f}".format):
            print(scenarios.to_frame().to_string(index=False))

        hedge_rows = None
        if args.hedge:
            hedge_rows = generate_hedge_scenarios(
                inputs.spot, inputs.strike, result.premium, args.notional, inputs.option_type
            )
            print("\nHedging table:")
            print(pd.DataFrame([vars(r) for r in hedge_rows]).to_string(index=False))

        if args.chart:
            plot_payoff_profile(scenarios, inputs.spot, inputs.strike, args.chart,
                                pair=snapshot.pair if snapshot else None)
            print(f"\n✓ Chart saved to: {args.chart}")

        if args.report:
            report_path = Report(args.report_dir).generate_report(
                result, scenarios, hedge_scenarios=hedge_rows, snapshot=snapshot
            )
            print(f"✓ Report saved to: {report_path}")

    except (FXLabError, ValueError) as e:
        print(f"\n✗ Error: {e}", file=sys.stderr)
        sys.exit(1)


def market_command(args):
    """Print the market snapshot used to seed calculations."""
    try:
        config = load_config(args.config)
        cache = SnapshotCache(config.cache_dir, ttl_seconds=config.cache_ttl_seconds)
        snapshot = get_market_snapshot(
            base=args.base, quote=args.quote, config=config, cache=cache,
            use_cache=not args.refresh
        )
    except FXLabError as e:
        print(f"\n✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    marker = "⚠" if snapshot.is_fallback else "✓"
    print(f"{marker} {snapshot.pair}")
    print(f"  Spot:          {snapshot.current_rate:.2f}")
    print(f"  Volatility:    {snapshot.volatility:.2%}")
    print(f"  Domestic rate: {snapshot.domestic_rate:.2%}")
    print(f"  Foreign rate:  {snapshot.foreign_rate:.2%}")
    print(f"  Updated:       {snapshot.last_updated}")
    print(f"  Source:        {snapshot.source}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="FX Options Lab (Garman-Kohlhagen)",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", default=None, help="YAML config file")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Price command
    price_parser = subparsers.add_parser("price", help="Price a currency option")
    price_parser.add_argument("--spot", type=float, help="Spot rate (default: market)")
    price_parser.add_argument("--strike", type=float, help="Strike rate (default: spot)")
    maturity = price_parser.add_mutually_exclusive_group()
    maturity.add_argument("--days", type=int, default=33, help="Days to maturity (default: 33)")
    maturity.add_argument("--maturity", help="Maturity date (YYYY-MM-DD)")
    price_parser.add_argument("--vol", type=float, help="Annualized volatility, decimal (default: market)")
    price_parser.add_argument("--rd", type=float, help="Domestic rate, decimal (default: config)")
    price_parser.add_argument("--rf", type=float, help="Foreign rate, decimal (default: config)")
    price_parser.add_argument("--type", default="call", help="call or put (default: call)")
    price_parser.add_argument("--notional", type=float, default=44000.0,
                              help="Foreign-currency amount (default: 44000)")
    price_parser.add_argument("--steps", type=int,
                              help="Scenario points, at most scenarios.max_steps (default: config)")
    price_parser.add_argument("--range", type=float, nargs=2, metavar=("LOW", "HIGH"),
                              help="Scenario variation range, e.g. -0.25 0.25")
    price_parser.add_argument("--precision", type=int, help="Greeks decimals (default: config)")
    price_parser.add_argument("--full-precision", action="store_true", help="Do not round Greeks")
    price_parser.add_argument("--hedge", action="store_true", help="Print the hedging table")
    price_parser.add_argument("--chart", help="Save payoff chart to this path")
    price_parser.add_argument("--report", action="store_true", help="Write a markdown report")
    price_parser.add_argument("--report-dir", default="reports", help="Report directory")
    price_parser.add_argument("--offline", action="store_true",
                              help="Use configured defaults instead of downloading market data")

    # Market command
    market_parser = subparsers.add_parser("market", help="Show market data for a pair")
    market_parser.add_argument("--base", default=None, help="Foreign currency (default: USD)")
    market_parser.add_argument("--quote", default=None, help="Domestic currency (default: CLP)")
    market_parser.add_argument("--refresh", action="store_true", help="Bypass the cache")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    if args.command == "price":
        price_command(args)
    elif args.command == "market":
        market_command(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
