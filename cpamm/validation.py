"""Stateless pre-condition checks against the ledger and pool."""

from cpamm.errors import InsufficientAmount, ZeroAmount, ZeroLiquidity
from cpamm.state.ledger import Ledger
from cpamm.state.pool import PoolState
from cpamm.types import AccountId, BalanceKind


def check_amount(ledger: Ledger, account: AccountId, kind: BalanceKind, qty: int) -> None:
    """Check that account can spend qty from the named balance.

    Raises:
        ZeroAmount: If qty is zero
        InsufficientAmount: If qty exceeds the balance
    """
    if qty == 0:
        raise ZeroAmount(f"{kind.value} amount must be positive")
    balance = ledger.balance(account, kind)
    if qty > balance:
        raise InsufficientAmount(f"{kind.value} amount {qty} exceeds balance {balance}")


def check_active(pool: PoolState) -> None:
    """Check that both reserves are non-zero.

    Raises:
        ZeroLiquidity: If the reserve product is zero
    """
    if pool.k == 0:
        raise ZeroLiquidity("Pool has no liquidity")
