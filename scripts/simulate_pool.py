#!/usr/bin/env python3
"""Run a swap sequence against a fresh pool and report the reserve product.

Example:
    python scripts/simulate_pool.py --fee 3 --swaps 20 --amount 50
"""

import argparse
import os
import sys
from pathlib import Path

import structlog

sys.path.insert(0, str(Path(__file__).parent.parent))

from cpamm import Amm, EngineConfig
from cpamm.config import LOG_LEVEL_ENV_VAR
from cpamm.errors import PoolError
from cpamm.log_config import configure_logging

logger = structlog.get_logger()

PROVIDER = "provider"
TRADER = "trader"


def main() -> int:
    parser = argparse.ArgumentParser(description="Simulate swaps against a constant-product pool")
    parser.add_argument("--fee", type=int, default=3, help="Swap fee in per mille (default: 3)")
    parser.add_argument("--swaps", type=int, default=10, help="Number of swaps to run")
    parser.add_argument("--amount", type=int, default=100, help="Size of each swap")
    parser.add_argument(
        "--liquidity", type=int, default=1_000_000, help="Initial reserve of each token"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    level = "DEBUG" if args.verbose else os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING")
    config = EngineConfig(fee_per_mille=args.fee, log_level=level)
    configure_logging(config.log_level)

    amm = Amm(config=config)
    amm.fund(PROVIDER, args.liquidity, args.liquidity)
    amm.fund(TRADER, args.amount * args.swaps * 2, args.amount * args.swaps * 2)
    shares = amm.provide(PROVIDER, args.liquidity, args.liquidity)

    summary = amm.pool_summary()
    k_start = summary.total_token1 * summary.total_token2
    print(f"Shares minted: {shares}")
    print(f"Start: token1={summary.total_token1} token2={summary.total_token2} k={k_start}")

    rejected = 0
    for i in range(args.swaps):
        try:
            if i % 2 == 0:
                out = amm.swap1_for2(TRADER, args.amount, 0)
                print(f"  swap {i:3d}: {args.amount} token1 -> {out} token2")
            else:
                paid = amm.swap2_for1(TRADER, args.amount, args.amount * 2)
                print(f"  swap {i:3d}: {paid} token1 -> {args.amount} token2")
        except PoolError as err:
            rejected += 1
            print(f"  swap {i:3d}: rejected ({err.kind.value})")

    summary = amm.pool_summary()
    k_end = summary.total_token1 * summary.total_token2
    print(f"End:   token1={summary.total_token1} token2={summary.total_token2} k={k_end}")
    print(f"k changed by {k_end - k_start}, {rejected} swaps rejected")
    logger.info(
        "simulation_finished", swaps=args.swaps, rejected=rejected, k_start=k_start, k_end=k_end
    )

    for account in amm.accounts():
        token1, token2, held = amm.holdings_of(account)
        print(f"  {account:>10}: token1={token1} token2={token2} shares={held}")

    violations = amm.check_invariants()
    if violations:
        for violation in violations:
            print(f"Invariant violated: {violation}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
