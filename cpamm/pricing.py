"""Constant-product pricing.

Read-only estimates derived from the pool totals. All divisions floor, so
rounding loss always lands in the pool:

    net_in       = (1000 - fee) * amount_in / 1000
    token2_after = k / (total_token1 + net_in)
    amount_out   = total_token2 - token2_after

The exact-output direction inverts this and grosses the required input up
for the fee.
"""

from cpamm.constants import FEE_DENOMINATOR
from cpamm.errors import InsufficientLiquidity, InvalidShare
from cpamm.safe_int import S
from cpamm.state.pool import PoolState
from cpamm.validation import check_active


class PricingEngine:
    """Swap, withdraw and equivalence quotes for one pool state.

    Every method requires an active pool and raises ZeroLiquidity otherwise.
    Nothing here mutates the pool.
    """

    def __init__(self, pool: PoolState) -> None:
        self.pool = pool

    @property
    def fee_multiplier(self) -> int:
        """Part of the input that is converted (1000 - fee_per_mille).

        For a 3 per-mille fee this returns 997.
        """
        return (S(FEE_DENOMINATOR) - self.pool.fee_per_mille).value

    def equivalent_token1(self, amount2: int) -> int:
        """Token-1 amount worth amount2 of token-2 at the current ratio."""
        check_active(self.pool)
        return (S(self.pool.total_token1) * amount2 // self.pool.total_token2).value

    def equivalent_token2(self, amount1: int) -> int:
        """Token-2 amount worth amount1 of token-1 at the current ratio."""
        check_active(self.pool)
        return (S(self.pool.total_token2) * amount1 // self.pool.total_token1).value

    def withdraw_estimate(self, share: int) -> tuple[int, int]:
        """Reserves released by redeeming share.

        Args:
            share: Number of shares to redeem

        Returns:
            Tuple of (amount1, amount2), each floored

        Raises:
            ZeroLiquidity: If the pool is empty
            InvalidShare: If share exceeds total shares outstanding
        """
        check_active(self.pool)
        total_shares = self.pool.total_shares
        if share > total_shares:
            raise InvalidShare(f"Share {share} exceeds total shares {total_shares}")

        amount1 = S(share) * self.pool.total_token1 // total_shares
        amount2 = S(share) * self.pool.total_token2 // total_shares
        return amount1.value, amount2.value

    def swap_given_input_token1(self, amount1: int) -> int:
        """Token-2 received for exactly amount1 of token-1 (exact input).

        The fee is taken from the input before pricing. If flooring would
        report the whole token-2 reserve as the output, one unit is kept
        back so a swap never drains the opposite reserve.

        Args:
            amount1: Token-1 paid in, fee included

        Returns:
            Token-2 amount out
        """
        check_active(self.pool)
        net_in = S(self.fee_multiplier) * amount1 // FEE_DENOMINATOR

        token1_after = net_in + self.pool.total_token1
        token2_after = S(self.pool.k) // token1_after
        amount2 = S(self.pool.total_token2) - token2_after

        if amount2 == self.pool.total_token2:
            amount2 = amount2 - 1
        return amount2.value

    def swap_given_output_token2(self, amount2: int) -> int:
        """Token-1 required to receive exactly amount2 of token-2 (exact output).

        Args:
            amount2: Token-2 to take out of the pool

        Returns:
            Token-1 amount in, fee included

        Raises:
            ZeroLiquidity: If the pool is empty
            InsufficientLiquidity: If amount2 is the whole reserve or more
        """
        check_active(self.pool)
        if amount2 >= self.pool.total_token2:
            raise InsufficientLiquidity(
                f"Cannot take {amount2} of token2 from a reserve of {self.pool.total_token2}"
            )

        token2_after = S(self.pool.total_token2) - amount2
        token1_after = S(self.pool.k) // token2_after
        amount1 = (token1_after - self.pool.total_token1) * FEE_DENOMINATOR // self.fee_multiplier
        return amount1.value
