"""Per-account balance bookkeeping.

Implements Ledger[(BalanceKind, AccountId)] -> Amount over a host store.
"""

from __future__ import annotations

from typing import NamedTuple

from cpamm.safe_int import S
from cpamm.state.store import KeyValueStore
from cpamm.types import AccountId, BalanceKind


class Holdings(NamedTuple):
    """An account's three balances."""

    token1: int
    token2: int
    shares: int


class Ledger:
    """Token-1, token-2 and share balances keyed by account.

    A missing entry is indistinguishable from a zero balance. Entries are
    created on first credit and never removed.

    Credits that would overflow and debits that would underflow raise a
    SafeIntError; callers are expected to have validated the amount first.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @staticmethod
    def _key(account: AccountId, kind: BalanceKind) -> tuple[str, AccountId]:
        return (kind.value, account)

    def balance(self, account: AccountId, kind: BalanceKind) -> int:
        """Get one balance for account. Returns 0 if never written."""
        stored = self._store.get(self._key(account, kind))
        return 0 if stored is None else stored

    def balances_of(self, account: AccountId) -> Holdings:
        return Holdings(
            token1=self.balance(account, BalanceKind.TOKEN1),
            token2=self.balance(account, BalanceKind.TOKEN2),
            shares=self.balance(account, BalanceKind.SHARES),
        )

    def credit(self, account: AccountId, kind: BalanceKind, amount: int) -> None:
        """Add amount to the named balance.

        Raises:
            Overflow: If the balance would exceed 2^128-1
        """
        new_balance = S(self.balance(account, kind)) + amount
        self._store.set(self._key(account, kind), new_balance.value)

    def debit(self, account: AccountId, kind: BalanceKind, amount: int) -> None:
        """Subtract amount from the named balance.

        Raises:
            Underflow: If amount exceeds the balance
        """
        new_balance = S(self.balance(account, kind)) - amount
        self._store.set(self._key(account, kind), new_balance.value)

    def total(self, kind: BalanceKind) -> int:
        """Sum of one balance kind across every account.

        Unchecked: the sum may exceed a single balance's width.
        """
        return sum(value for (key_kind, _), value in self._store.items() if key_kind == kind.value)

    def accounts(self) -> list[AccountId]:
        """Every account with a ledger entry, sorted."""
        return sorted({account for (_, account), _ in self._store.items()})
