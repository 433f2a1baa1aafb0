"""Liquidity provision and redemption.

Deposits mint shares proportional to the existing supply; the first deposit
into an empty pool mints a fixed BOOTSTRAP_SHARES and so sets the starting
price. Redemptions burn shares for a pro-rata slice of both reserves.
"""

from __future__ import annotations

import structlog

from cpamm.constants import BOOTSTRAP_SHARES
from cpamm.errors import NonEquivalentValue, ThresholdNotReached
from cpamm.pricing import PricingEngine
from cpamm.safe_int import S
from cpamm.state.ledger import Ledger
from cpamm.state.pool import PoolState
from cpamm.types import AccountId, BalanceKind
from cpamm.validation import check_amount

logger = structlog.get_logger()


class LiquidityManager:
    """Applies provide and withdraw to a ledger and pool state.

    All checks and computations run before the first mutation, so an error
    leaves both untouched.
    """

    def __init__(self, ledger: Ledger, pool: PoolState) -> None:
        self.ledger = ledger
        self.pool = pool
        self.pricing = PricingEngine(pool)

    def shares_for_deposit(self, amount1: int, amount2: int) -> int:
        """Shares a deposit of (amount1, amount2) would mint.

        Raises:
            NonEquivalentValue: If the two amounts imply different share counts
            ThresholdNotReached: If the deposit mints zero shares
        """
        if self.pool.total_shares == 0:
            share = BOOTSTRAP_SHARES
        else:
            share1 = (S(self.pool.total_shares) * amount1 // self.pool.total_token1).value
            share2 = (S(self.pool.total_shares) * amount2 // self.pool.total_token2).value
            if share1 != share2:
                raise NonEquivalentValue(
                    f"Deposit ratio mismatch: token1 mints {share1} shares, token2 mints {share2}"
                )
            share = share1

        if share == 0:
            raise ThresholdNotReached("Deposit too small to mint a share")
        return share

    def provide(self, caller: AccountId, amount1: int, amount2: int) -> int:
        """Deposit both tokens and mint shares to caller.

        Args:
            caller: Depositing account
            amount1: Token-1 to deposit
            amount2: Token-2 to deposit

        Returns:
            Number of shares minted

        Raises:
            ZeroAmount: If either amount is zero
            InsufficientAmount: If either amount exceeds the caller's balance
            NonEquivalentValue: If the amounts are off the pool ratio
            ThresholdNotReached: If the deposit mints zero shares
        """
        check_amount(self.ledger, caller, BalanceKind.TOKEN1, amount1)
        check_amount(self.ledger, caller, BalanceKind.TOKEN2, amount2)
        share = self.shares_for_deposit(amount1, amount2)

        self.ledger.debit(caller, BalanceKind.TOKEN1, amount1)
        self.ledger.debit(caller, BalanceKind.TOKEN2, amount2)
        self.pool.mint(amount1, amount2, share)
        self.ledger.credit(caller, BalanceKind.SHARES, share)

        logger.debug(
            "shares_minted",
            caller=caller,
            amount1=amount1,
            amount2=amount2,
            share=share,
            total_shares=self.pool.total_shares,
        )
        return share

    def withdraw(self, caller: AccountId, share: int) -> tuple[int, int]:
        """Burn caller's shares for their slice of the reserves.

        Args:
            caller: Redeeming account
            share: Shares to burn

        Returns:
            Tuple of (amount1, amount2) credited to caller

        Raises:
            ZeroAmount: If share is zero
            InsufficientAmount: If share exceeds the caller's share balance
            ZeroLiquidity: If the pool is empty
            InvalidShare: If share exceeds total shares outstanding
        """
        check_amount(self.ledger, caller, BalanceKind.SHARES, share)
        amount1, amount2 = self.pricing.withdraw_estimate(share)

        self.ledger.debit(caller, BalanceKind.SHARES, share)
        self.pool.burn(amount1, amount2, share)
        self.ledger.credit(caller, BalanceKind.TOKEN1, amount1)
        self.ledger.credit(caller, BalanceKind.TOKEN2, amount2)

        logger.debug(
            "shares_burned",
            caller=caller,
            share=share,
            amount1=amount1,
            amount2=amount2,
            total_shares=self.pool.total_shares,
        )
        return amount1, amount2
