"""Pool engine: the public operation surface.

Amm is the entry point a host calls into. It owns the ledger store and the
pool slot and runs each state-changing operation as a transaction:
- the operation sees a staged overlay of the store and a copy of the pool
- on success both are committed
- on a PoolError (rejected input) or SafeIntError (fatal arithmetic) the
  staged state is discarded and the error is re-raised

The caller identity is always an explicit argument; the engine never reads
it from ambient state.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from cpamm.config import EngineConfig
from cpamm.errors import PoolError
from cpamm.invariants import find_violations
from cpamm.liquidity import LiquidityManager
from cpamm.log_config import configure_logging
from cpamm.pricing import PricingEngine
from cpamm.safe_int import SafeIntError
from cpamm.state.ledger import Holdings, Ledger
from cpamm.state.pool import PoolState, PoolSummary
from cpamm.state.store import (
    InMemoryPoolSlot,
    InMemoryStore,
    KeyValueStore,
    PoolSlot,
    StagedStore,
)
from cpamm.swap import SwapExecutor
from cpamm.types import AccountId, BalanceKind, validate_account, validate_balance

logger = structlog.get_logger()


class Amm:
    """Two-token constant-product pool with share accounting.

    Args:
        config: Engine configuration. If None, uses EngineConfig() defaults.
        store: Ledger storage. If None, uses a fresh InMemoryStore.
        pool_slot: Pool state storage. If None, uses a fresh InMemoryPoolSlot.
            A slot that already holds a pool keeps its stored fee; the
            configured fee only applies to a newly created pool.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        store: KeyValueStore | None = None,
        pool_slot: PoolSlot | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self._store: KeyValueStore = store if store is not None else InMemoryStore()
        self._pool_slot: PoolSlot = pool_slot if pool_slot is not None else InMemoryPoolSlot()

        if self._pool_slot.load() is None:
            self._pool_slot.save(PoolState(fee_per_mille=self.config.fee_per_mille))
            logger.info("engine_created", fee_per_mille=self.config.fee_per_mille)

    # --- Internals ---

    def _read_pool(self) -> PoolState:
        pool = self._pool_slot.load()
        if pool is None:
            raise RuntimeError("Pool slot is empty")
        return pool

    @contextmanager
    def _transaction(self, operation: str, **fields: Any) -> Iterator[tuple[Ledger, PoolState]]:
        """Stage an operation and commit it only if it completes."""
        staged = StagedStore(self._store)
        pool = self._read_pool()
        try:
            yield Ledger(staged), pool
        except PoolError as err:
            logger.info(
                "operation_rejected",
                operation=operation,
                error=err.kind.value,
                reason=str(err),
                **fields,
            )
            raise
        except SafeIntError as err:
            logger.error(
                "operation_aborted",
                operation=operation,
                error=type(err).__name__,
                reason=str(err),
                **fields,
            )
            raise

        logger.debug("transaction_committed", operation=operation, writes=staged.pending)
        staged.commit()
        self._pool_slot.save(pool)

    # --- Accounts ---

    def fund(self, caller: AccountId, amount1: int, amount2: int) -> None:
        """Credit caller with token-1 and token-2 (faucet-style funding)."""
        validate_account(caller)
        validate_balance(amount1)
        validate_balance(amount2)

        with self._transaction("fund", caller=caller) as (ledger, _pool):
            ledger.credit(caller, BalanceKind.TOKEN1, amount1)
            ledger.credit(caller, BalanceKind.TOKEN2, amount2)

        logger.info("account_funded", caller=caller, amount1=amount1, amount2=amount2)

    def holdings_of(self, caller: AccountId) -> Holdings:
        """Caller's (token1, token2, shares) balances, zero if unknown."""
        validate_account(caller)
        return Ledger(self._store).balances_of(caller)

    def accounts(self) -> list[AccountId]:
        """Every account that has ever held a balance, sorted."""
        return Ledger(self._store).accounts()

    def pool_summary(self) -> PoolSummary:
        """Pool (total_token1, total_token2, total_shares, fee_per_mille)."""
        return self._read_pool().summary()

    # --- Liquidity ---

    def provide(self, caller: AccountId, amount1: int, amount2: int) -> int:
        """Deposit both tokens and return the shares minted.

        Raises:
            ZeroAmount, InsufficientAmount, NonEquivalentValue, ThresholdNotReached
        """
        validate_account(caller)
        validate_balance(amount1)
        validate_balance(amount2)

        with self._transaction("provide", caller=caller) as (ledger, pool):
            share = LiquidityManager(ledger, pool).provide(caller, amount1, amount2)

        logger.info(
            "liquidity_provided",
            caller=caller,
            amount1=amount1,
            amount2=amount2,
            share=share,
        )
        return share

    def withdraw_quote(self, share: int) -> tuple[int, int]:
        """Reserves that redeeming share would release.

        Raises:
            ZeroLiquidity, InvalidShare
        """
        validate_balance(share)
        return PricingEngine(self._read_pool()).withdraw_estimate(share)

    def withdraw(self, caller: AccountId, share: int) -> tuple[int, int]:
        """Burn caller's shares and return the (amount1, amount2) released.

        Raises:
            ZeroAmount, InsufficientAmount, ZeroLiquidity, InvalidShare
        """
        validate_account(caller)
        validate_balance(share)

        with self._transaction("withdraw", caller=caller) as (ledger, pool):
            amount1, amount2 = LiquidityManager(ledger, pool).withdraw(caller, share)

        logger.info(
            "liquidity_withdrawn",
            caller=caller,
            share=share,
            amount1=amount1,
            amount2=amount2,
        )
        return amount1, amount2

    # --- Quotes ---

    def quote_token1_for(self, amount2: int) -> int:
        """Token-1 equivalent of amount2 token-2 at the current ratio.

        Raises:
            ZeroLiquidity
        """
        validate_balance(amount2)
        return PricingEngine(self._read_pool()).equivalent_token1(amount2)

    def quote_token2_for(self, amount1: int) -> int:
        """Token-2 equivalent of amount1 token-1 at the current ratio.

        Raises:
            ZeroLiquidity
        """
        validate_balance(amount1)
        return PricingEngine(self._read_pool()).equivalent_token2(amount1)

    def swap_in_quote1(self, amount1: int) -> int:
        """Token-2 out for an exact token-1 input.

        Raises:
            ZeroLiquidity
        """
        validate_balance(amount1)
        return PricingEngine(self._read_pool()).swap_given_input_token1(amount1)

    def swap_out_quote2(self, amount2: int) -> int:
        """Token-1 in for an exact token-2 output.

        Raises:
            ZeroLiquidity, InsufficientLiquidity
        """
        validate_balance(amount2)
        return PricingEngine(self._read_pool()).swap_given_output_token2(amount2)

    # --- Swaps ---

    def swap1_for2(self, caller: AccountId, amount1: int, min_out2: int) -> int:
        """Sell exactly amount1 token-1; return the token-2 received.

        Raises:
            ZeroAmount, InsufficientAmount, ZeroLiquidity, SlippageExceeded
        """
        validate_account(caller)
        validate_balance(amount1)
        validate_balance(min_out2)

        with self._transaction("swap1_for2", caller=caller) as (ledger, pool):
            k_before = pool.k
            amount2 = SwapExecutor(ledger, pool).swap_token1_for_token2(caller, amount1, min_out2)
            k_after = pool.k

        logger.info(
            "swap_executed",
            caller=caller,
            direction="token1_for_token2",
            token1_in=amount1,
            token2_out=amount2,
            k_before=k_before,
            k_after=k_after,
        )
        return amount2

    def swap2_for1(self, caller: AccountId, amount2: int, max_in1: int) -> int:
        """Buy exactly amount2 token-2; return the token-1 paid.

        Raises:
            ZeroLiquidity, InsufficientLiquidity, SlippageExceeded,
            ZeroAmount, InsufficientAmount
        """
        validate_account(caller)
        validate_balance(amount2)
        validate_balance(max_in1)

        with self._transaction("swap2_for1", caller=caller) as (ledger, pool):
            k_before = pool.k
            amount1 = SwapExecutor(ledger, pool).swap_token2_for_token1(caller, amount2, max_in1)
            k_after = pool.k

        logger.info(
            "swap_executed",
            caller=caller,
            direction="token2_for_token1",
            token1_in=amount1,
            token2_out=amount2,
            k_before=k_before,
            k_after=k_after,
        )
        return amount1

    # --- Audit ---

    def check_invariants(self) -> list[str]:
        """Descriptions of any violated ledger/pool invariants (empty if consistent)."""
        violations = find_violations(Ledger(self._store), self._read_pool())
        if violations:
            logger.error("invariants_violated", violations=violations)
        return violations


_default_engine: Amm | None = None


def get_default_engine() -> Amm:
    """Return the process-wide engine, creating it from the environment on first use.

    The first call also installs the structlog processor chain at the
    configured log level.
    """
    global _default_engine
    if _default_engine is None:
        config = EngineConfig.from_env()
        configure_logging(config.log_level)
        _default_engine = Amm(config=config)
    return _default_engine
