"""
Demo script for the margin pool risk engine

This script demonstrates:
1. Loading engine configuration
2. Normalizing raw margin manager states into positions
3. Running the stress curve, cliff and first-liquidation analysis
4. Bucketing current positions
5. Projecting supplier earnings

Input is a pre-fetched JSON file (default: data/sample_pool.json) holding
"states", "pool_config", "interest_config" and "pool_state".
"""

import argparse
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from marginrisk import PoolRiskAnalyzer, PoolState, load_config
from marginrisk.metrics.buckets import MODE_COUNT, MODE_DEBT, RiskBucketAggregator
from marginrisk.rates.earnings import TIME_HORIZONS
from marginrisk.reporting import earnings_summary, format_usd, generate_summary
from marginrisk.state.loader import PositionLoader


# ANSI color codes for pretty output
class Colors:
    HEADER = "\033[95m"
    OKCYAN = "\033[96m"
    OKGREEN = "\033[92m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


def print_header(text):
    """Print a colored header"""
    print(f"\n{Colors.HEADER}{Colors.BOLD}{'=' * 60}{Colors.ENDC}")
    print(f"{Colors.HEADER}{Colors.BOLD}{text.center(60)}{Colors.ENDC}")
    print(f"{Colors.HEADER}{Colors.BOLD}{'=' * 60}{Colors.ENDC}\n")


def print_success(text):
    print(f"{Colors.OKGREEN}[OK] {text}{Colors.ENDC}")


def print_info(text):
    print(f"{Colors.OKCYAN}  {text}{Colors.ENDC}")


def print_warning(text):
    print(f"{Colors.WARNING}[WARNING] {text}{Colors.ENDC}")


def print_error(text):
    print(f"{Colors.FAIL}[ERROR] {text}{Colors.ENDC}")


def load_pool_file(path):
    """Load a pre-fetched pool file"""
    print_header("Loading Pool Data")

    path = Path(path)
    if not path.exists():
        print_error(f"Pool data file not found: {path}")
        sys.exit(1)

    with open(path, "r") as f:
        data = json.load(f)

    print_success(f"Loaded {len(data.get('states', []))} raw states from {path.name}")
    return data


def main():
    """Main demo function"""
    load_dotenv()

    parser = argparse.ArgumentParser(description="Margin Pool Risk Engine")
    parser.add_argument(
        "--data",
        default=os.getenv("MARGINRISK_DATA", str(Path(__file__).parent / "data" / "sample_pool.json")),
        help="Pre-fetched pool JSON file",
    )
    parser.add_argument("--shock", type=float, default=-10.0, help="Price shock in percent")
    parser.add_argument("--asset", default="ALL", help="Base asset to shock (default: ALL)")
    parser.add_argument("--scheme", default="status", choices=["status", "ratio"])
    parser.add_argument("--mode", default=MODE_COUNT, choices=[MODE_COUNT, MODE_DEBT])
    parser.add_argument("--deposit", type=float, default=1000.0)
    parser.add_argument("--horizon", default="1M", choices=list(TIME_HORIZONS))
    args = parser.parse_args()

    config = load_config()
    data = load_pool_file(args.data)

    loader = PositionLoader(data.get("pool_config"))
    positions = loader.load_positions(data.get("states", []))

    if not positions:
        print_warning("No positions with debt found")

    analyzer = PoolRiskAnalyzer(config)
    analysis = analyzer.analyze(positions, shock_asset=args.asset, bucket_scheme=args.scheme)

    print_header("Stress Analysis")
    print(generate_summary(analysis, data.get("name", "Pool")))

    print_header(f"Shock {args.shock:+.0f}% ({args.asset})")
    print(analyzer.shock(positions, args.shock, args.asset).summary())

    print(f"{Colors.BOLD}Histogram ({args.mode}):{Colors.ENDC}")
    histogram = RiskBucketAggregator(args.scheme, config).to_frame(positions, args.mode)
    for _, row in histogram.iterrows():
        value = format_usd(row["value"]) if args.mode == MODE_DEBT else f"{row['value']:.0f}"
        print_info(f"{row['label']:<14} {value:>10} ({row['share_pct']:.1f}%)")

    if data.get("interest_config"):
        print_header("Earnings Projection")
        rate_config = PositionLoader.load_rate_config(data["interest_config"])
        pool_state = PoolState(**data["pool_state"]) if data.get("pool_state") else None
        projection = analyzer.earnings(args.deposit, TIME_HORIZONS[args.horizon], rate_config, pool_state)
        print(earnings_summary(projection))

    print_info(f"Cache: {analyzer.cache.get_cache_info()}")


if __name__ == "__main__":
    main()
