#!/usr/bin/env python3
"""
Forensic audit CLI.

Replays candidate arbitrage cycles against an execution environment and
prints the gas-inclusive net profit of each cycle plus a run summary.

Usage:
    python3 run_audit.py
    python3 run_audit.py --config configs/audit.yaml
    python3 run_audit.py --pools v2pools.json --opportunities weth_opportunities.json --paper
"""

import argparse
import sys
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from dotenv import load_dotenv

import logging_config
from cycle_audit.auditor import CycleAuditor
from cycle_audit.config import check_gas_price, load_config
from cycle_audit.environments import build_environment
from cycle_audit.exceptions import AuditError, ConfigError, MalformedDecimal
from cycle_audit.loader import load_opportunities, load_pools
from cycle_audit.report import (
    SEPARATOR,
    format_outcome,
    format_summary,
    write_json_report,
)
from cycle_audit.units import gwei_to_price_per_unit
from cycle_audit.version import __version__


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Forensic audit of candidate arbitrage cycles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Offline audit with the in-memory environment
  python3 run_audit.py --paper --pools v2pools.json --opportunities weth_opportunities.json

  # Audit against a local node (Anvil/Hardhat) using configs/audit.yaml
  python3 run_audit.py --config configs/audit.yaml --rpc-url http://127.0.0.1:8545

  # Top 10 cycles only, stricter pool matching, JSON output
  python3 run_audit.py --config configs/audit.yaml --limit 10 --strict-pools --output audit.json
        """,
    )

    parser.add_argument("--config", help="Path to config YAML file")
    parser.add_argument("--pools", help="Pool dataset JSON (overrides pools_file)")
    parser.add_argument(
        "--opportunities", help="Opportunity list JSON (overrides opportunities_file)"
    )
    parser.add_argument(
        "--paper",
        action="store_true",
        help="Use the in-memory paper environment (overrides environment)",
    )
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint for the web3 environment")
    parser.add_argument("--gas-price-gwei", help="Gas price in gwei (default: 32)")
    parser.add_argument("--limit", type=int, help="Audit only the first N cycles")
    parser.add_argument(
        "--strict-pools",
        action="store_true",
        help="Fail cycles with a hop that has no pool record",
    )
    parser.add_argument(
        "--show-reverted",
        action="store_true",
        help="Print a line for reverted and failed cycles",
    )
    parser.add_argument("--output", help="Write summary and reports to a JSON file")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Warnings only")

    return parser.parse_args(argv)


def apply_overrides(config, args: argparse.Namespace) -> None:
    """CLI flags take precedence over the config file."""
    if args.pools:
        config.pools_file = args.pools
    if args.opportunities:
        config.opportunities_file = args.opportunities
    if args.paper:
        config.environment = "paper"
    if args.rpc_url:
        config.rpc_url = args.rpc_url
        if not args.paper:
            config.environment = "web3"
    if args.gas_price_gwei is not None:
        try:
            price = gwei_to_price_per_unit(args.gas_price_gwei)
        except (InvalidOperation, ValueError, MalformedDecimal):
            raise ConfigError(f"Invalid --gas-price-gwei: {args.gas_price_gwei}") from None
        config.gas_price_per_unit = check_gas_price(price)
    if args.limit is not None:
        if args.limit <= 0:
            raise ConfigError(f"--limit must be positive, got {args.limit}")
        config.limit = args.limit
    if args.strict_pools:
        config.strict_pools = True


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)
    load_dotenv()

    if args.verbose:
        logging_config.setup_debug()
    elif args.quiet:
        logging_config.setup_minimal()
    else:
        logging_config.setup()

    # Load config
    try:
        config = load_config(args.config)
        apply_overrides(config, args)
    except ConfigError as e:
        print(f"❌ Config error: {e}", file=sys.stderr)
        return 1

    print(">>> STARTING FORENSIC AUDIT SIMULATION <<<")

    # Load inputs and build the environment; any failure here is fatal
    try:
        pools = load_pools(config.pools_file, config.default_decimals)
        opportunities = load_opportunities(config.opportunities_file, config.limit)
        environment = build_environment(config)
    except AuditError as e:
        print(f"❌ Script Error: {e}", file=sys.stderr)
        return 1

    gas_price_gwei: Decimal = config.gas_price_gwei

    def print_outcome(opportunity, outcome):
        for line in format_outcome(
            opportunity, outcome, gas_price_gwei, show_reverted=args.show_reverted
        ):
            print(line)

    print(f"Loaded {len(opportunities)} cycles to audit.")
    print("\n" + SEPARATOR)

    auditor = CycleAuditor(environment, pools, config)
    try:
        summary = auditor.run(opportunities, on_outcome=print_outcome)
    except KeyboardInterrupt:
        print("\n\n⏸ Stopped by user")
        return 0

    for line in format_summary(summary):
        print(line)

    if args.output:
        path = write_json_report(summary, args.output)
        print(f"Report written to {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
