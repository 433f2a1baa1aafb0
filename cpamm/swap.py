"""Token-for-token exchange against the pool."""

from __future__ import annotations

import structlog

from cpamm.errors import SlippageExceeded
from cpamm.pricing import PricingEngine
from cpamm.state.ledger import Ledger
from cpamm.state.pool import PoolState
from cpamm.types import AccountId, BalanceKind
from cpamm.validation import check_amount

logger = structlog.get_logger()


class SwapExecutor:
    """Executes swaps in both directions with slippage guards.

    Token-1 is always the input side: the caller either fixes the token-1
    paid (swap_token1_for_token2) or the token-2 received
    (swap_token2_for_token1).
    """

    def __init__(self, ledger: Ledger, pool: PoolState) -> None:
        self.ledger = ledger
        self.pool = pool
        self.pricing = PricingEngine(pool)

    def _settle(self, caller: AccountId, amount1: int, amount2: int) -> None:
        """Move amount1 of token-1 from caller into the pool and amount2 of token-2 back."""
        self.ledger.debit(caller, BalanceKind.TOKEN1, amount1)
        self.pool.apply_swap(token1_in=amount1, token2_out=amount2)
        self.ledger.credit(caller, BalanceKind.TOKEN2, amount2)

    def swap_token1_for_token2(self, caller: AccountId, amount1: int, min_out: int) -> int:
        """Sell exactly amount1 of token-1.

        Args:
            caller: Trading account
            amount1: Token-1 to sell
            min_out: Least token-2 the caller accepts

        Returns:
            Token-2 received

        Raises:
            ZeroAmount: If amount1 is zero
            InsufficientAmount: If amount1 exceeds the caller's token-1 balance
            ZeroLiquidity: If the pool is empty
            SlippageExceeded: If the output is below min_out
        """
        check_amount(self.ledger, caller, BalanceKind.TOKEN1, amount1)
        amount2 = self.pricing.swap_given_input_token1(amount1)
        if amount2 < min_out:
            raise SlippageExceeded(f"Output {amount2} below minimum {min_out}")

        self._settle(caller, amount1, amount2)
        logger.debug("swap_settled", caller=caller, token1_in=amount1, token2_out=amount2)
        return amount2

    def swap_token2_for_token1(self, caller: AccountId, amount2: int, max_in: int) -> int:
        """Buy exactly amount2 of token-2, paying in token-1.

        Args:
            caller: Trading account
            amount2: Token-2 to receive
            max_in: Most token-1 the caller will pay

        Returns:
            Token-1 paid

        Raises:
            ZeroLiquidity: If the pool is empty
            InsufficientLiquidity: If amount2 is the whole reserve or more
            SlippageExceeded: If the required input is above max_in
            ZeroAmount: If the required input is zero
            InsufficientAmount: If the required input exceeds the caller's token-1
        """
        amount1 = self.pricing.swap_given_output_token2(amount2)
        if amount1 > max_in:
            raise SlippageExceeded(f"Input {amount1} above maximum {max_in}")
        check_amount(self.ledger, caller, BalanceKind.TOKEN1, amount1)

        self._settle(caller, amount1, amount2)
        logger.debug("swap_settled", caller=caller, token1_in=amount1, token2_out=amount2)
        return amount1
