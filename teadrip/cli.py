"""
Disburse random amounts of a chain's native token to a list of addresses.

Usage:
    teadrip [--addresses <path>] [--once] [--overlap skip|queue|allow]

Environment variables (a .env file in the working directory is loaded):
    PRIVATE_KEY        funding wallet key (required)
    RPC_URL            node endpoint (default: TEA Sepolia public RPC)
    MIN_AMOUNT         lower bound per send (default: 0.001)
    MAX_AMOUNT         upper bound per send (default: 0.01)
    INTERVAL_MINUTES   minutes between runs (default: 1)
    ADDRESS_FILE       recipient list (default: address.txt)
    TOKEN_SYMBOL       symbol shown in output (default: TEA)
    CONFIRM_TIMEOUT    seconds to wait for each receipt (default: 300)
    OVERLAP_POLICY     skip | queue | allow (default: skip)
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from teadrip.client import ChainClient
from teadrip.config import ConfigError, load_config
from teadrip.recipients import RecipientFileError, load_recipients
from teadrip.runner import run_disbursement
from teadrip.scheduler import OverlapPolicy, RunScheduler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teadrip",
        description="Send random native-token amounts to every address in a file, on a timer.",
    )
    parser.add_argument("--addresses", help="Recipient file (overrides ADDRESS_FILE)")
    parser.add_argument("--once", action="store_true", help="Run a single pass and exit")
    parser.add_argument(
        "--overlap",
        choices=[p.value for p in OverlapPolicy],
        help="What to do when a run is still going at the next tick (overrides OVERLAP_POLICY)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv(find_dotenv(usecwd=True))

    try:
        cfg = load_config()
    except ConfigError as exc:
        print(f"❌ Error: {exc}", file=sys.stderr)
        return 1

    address_file = args.addresses or cfg.address_file
    try:
        recipients = load_recipients(address_file)
    except RecipientFileError as exc:
        print(f"❌ Error: {exc}", file=sys.stderr)
        return 1
    print(f"Loaded {len(recipients)} recipient addresses")

    try:
        client = ChainClient.connect(cfg.rpc_url, cfg.private_key, cfg.confirm_timeout)
    except ValueError as exc:
        print(f"❌ Error: invalid PRIVATE_KEY: {exc}", file=sys.stderr)
        return 1

    def job():
        return run_disbursement(client, recipients, cfg)

    if args.once:
        job()
        return 0

    policy = OverlapPolicy(args.overlap) if args.overlap else cfg.overlap_policy
    print(f"Will run every {cfg.interval_minutes} minutes (overlap policy: {policy.value})")
    scheduler = RunScheduler(job, cfg.interval_seconds, policy)
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        scheduler.stop()
        print("Stopped")
    return 0
