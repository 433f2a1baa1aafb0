"""Consistency audit of the ledger against the pool totals."""

from cpamm.constants import MAX_FEE_PER_MILLE
from cpamm.state.ledger import Ledger
from cpamm.state.pool import PoolState
from cpamm.types import BalanceKind


def find_violations(ledger: Ledger, pool: PoolState) -> list[str]:
    """Check the data-model invariants.

    - The pool is either empty (no shares, no reserves) or fully active
    - Share balances across accounts sum to total_shares
    - The fee stays below the fee denominator

    Returns:
        Human-readable descriptions of each violated invariant, empty if consistent
    """
    violations: list[str] = []

    reserves_empty = pool.total_token1 == 0 and pool.total_token2 == 0
    if pool.is_empty != reserves_empty:
        violations.append(
            f"total_shares={pool.total_shares} inconsistent with reserves "
            f"({pool.total_token1}, {pool.total_token2})"
        )

    held_shares = ledger.total(BalanceKind.SHARES)
    if held_shares != pool.total_shares:
        violations.append(
            f"account shares sum to {held_shares}, pool reports {pool.total_shares}"
        )

    if not 0 <= pool.fee_per_mille <= MAX_FEE_PER_MILLE:
        violations.append(f"fee_per_mille={pool.fee_per_mille} out of range")

    return violations
