"""Aggregate pool state: reserves, share supply and fee."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import NamedTuple

from cpamm.safe_int import S


class PoolSummary(NamedTuple):
    """Snapshot of the pool totals as reported to callers."""

    total_token1: int
    total_token2: int
    total_shares: int
    fee_per_mille: int


@dataclass
class PoolState:
    """Totals describing the shared reserve.

    The pool is either empty (no shares, no reserves) or active (shares
    outstanding and both reserves positive). The fee is fixed at creation.
    """

    fee_per_mille: int = 0
    total_token1: int = 0
    total_token2: int = 0
    total_shares: int = 0

    @property
    def k(self) -> int:
        """Reserve product total_token1 * total_token2 (checked)."""
        return (S(self.total_token1) * self.total_token2).value

    @property
    def is_empty(self) -> bool:
        return self.total_shares == 0

    def summary(self) -> PoolSummary:
        return PoolSummary(
            total_token1=self.total_token1,
            total_token2=self.total_token2,
            total_shares=self.total_shares,
            fee_per_mille=self.fee_per_mille,
        )

    def copy(self) -> PoolState:
        return replace(self)

    # --- Mutations (checked; callers validate before calling) ---

    def mint(self, amount1: int, amount2: int, shares: int) -> None:
        """Add a deposit to the reserves and issue shares against it."""
        self.total_token1 = (S(self.total_token1) + amount1).value
        self.total_token2 = (S(self.total_token2) + amount2).value
        self.total_shares = (S(self.total_shares) + shares).value

    def burn(self, amount1: int, amount2: int, shares: int) -> None:
        """Retire shares and release their reserves."""
        self.total_shares = (S(self.total_shares) - shares).value
        self.total_token1 = (S(self.total_token1) - amount1).value
        self.total_token2 = (S(self.total_token2) - amount2).value

    def apply_swap(self, token1_in: int, token2_out: int) -> None:
        """Move reserves for a token-1-in, token-2-out exchange."""
        self.total_token1 = (S(self.total_token1) + token1_in).value
        self.total_token2 = (S(self.total_token2) - token2_out).value
