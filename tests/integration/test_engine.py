"""Integration tests for the Amm operation surface."""

import pytest
from structlog.testing import capture_logs

import cpamm.engine as engine_module
from cpamm import Amm, EngineConfig, get_default_engine
from cpamm.config import FEE_ENV_VAR, LOG_LEVEL_ENV_VAR
from cpamm.constants import BOOTSTRAP_SHARES
from cpamm.errors import (
    InsufficientAmount,
    InsufficientLiquidity,
    InvalidShare,
    NonEquivalentValue,
    SlippageExceeded,
    ThresholdNotReached,
    ZeroAmount,
    ZeroLiquidity,
)
from cpamm.safe_int import BALANCE_MAX, Overflow
from cpamm.state import InMemoryPoolSlot, InMemoryStore, PoolState
from tests.helpers import ALICE, BOB, CAROL, FUNDED, SEED_SHARES, make_slot


class TestReferenceScenario:
    """Fresh pool, fee 0, one provider."""

    def test_bootstrap_then_quote(self):
        """fund(1000, 1000), provide(100, 100) mints 1e8 and 10 in quotes 10 out."""
        amm = Amm(config=EngineConfig(fee_per_mille=0))
        amm.fund(ALICE, 1_000, 1_000)

        assert amm.provide(ALICE, 100, 100) == 100_000_000
        assert amm.pool_summary() == (100, 100, 100_000_000, 0)
        assert amm.holdings_of(ALICE) == (900, 900, 100_000_000)
        assert amm.swap_in_quote1(10) == 10
        assert amm.swap_out_quote2(10) == 11
        assert amm.check_invariants() == []


class TestAccounts:
    """Tests for fund, holdings_of, accounts and pool_summary."""

    def test_unknown_account_holds_nothing(self, amm):
        """An account never credited reads as all zeros."""
        assert amm.holdings_of(CAROL) == (0, 0, 0)

    def test_fund_accumulates(self, amm):
        """Repeated funding adds to both token balances."""
        amm.fund(CAROL, 5, 7)
        amm.fund(CAROL, 1, 1)
        assert amm.holdings_of(CAROL) == (6, 8, 0)

    def test_accounts_lists_every_holder(self, seeded_amm):
        """accounts() names each account with a ledger entry, sorted."""
        seeded_amm.fund(CAROL, 1, 0)
        assert seeded_amm.accounts() == [ALICE, BOB, CAROL]

    def test_new_pool_uses_configured_fee(self):
        """A fresh pool takes its fee from the config."""
        assert Amm(config=EngineConfig(fee_per_mille=5)).pool_summary() == (0, 0, 0, 5)

    def test_default_config(self):
        """Without a config the pool charges 3 per mille."""
        assert Amm().pool_summary().fee_per_mille == 3


class TestLiquidity:
    """Tests for provide, withdraw_quote and withdraw."""

    def test_provide_debits_both_tokens(self, seeded_amm):
        """The seeding deposit debits token-1 and token-2 by their own amounts."""
        assert seeded_amm.holdings_of(ALICE) == (
            FUNDED - 10_000,
            FUNDED - 40_000,
            SEED_SHARES,
        )

    def test_proportional_provide(self, seeded_amm):
        """A deposit at the pool ratio mints proportional shares."""
        assert seeded_amm.provide(BOB, 100, 400) == 1_000_000
        assert seeded_amm.pool_summary() == (10_100, 40_400, 101_000_000, 0)
        assert seeded_amm.check_invariants() == []

    def test_off_ratio_provide_rejected(self, seeded_amm):
        """A deposit off the pool ratio is NonEquivalentValue."""
        with pytest.raises(NonEquivalentValue):
            seeded_amm.provide(BOB, 100, 500)

    def test_dust_provide_rejected(self):
        """A deposit that floors to zero shares is ThresholdNotReached."""
        amm = Amm(config=EngineConfig(fee_per_mille=0))
        amm.fund(ALICE, 10**12, 10**12)
        amm.fund(BOB, 10, 10)
        amm.provide(ALICE, 10**12, 10**12)
        with pytest.raises(ThresholdNotReached):
            amm.provide(BOB, 1, 1)

    def test_withdraw_matches_quote(self, fee_amm):
        """withdraw releases exactly what withdraw_quote reported."""
        fee_amm.swap1_for2(BOB, 1_000, 0)
        quoted = fee_amm.withdraw_quote(25_000_000)
        assert fee_amm.withdraw(ALICE, 25_000_000) == quoted

    def test_withdraw_everything_empties_pool(self, seeded_amm):
        """Redeeming every share returns both reserves and empties the pool."""
        assert seeded_amm.withdraw(ALICE, SEED_SHARES) == (10_000, 40_000)
        assert seeded_amm.pool_summary() == (0, 0, 0, 0)
        assert seeded_amm.holdings_of(ALICE) == (FUNDED, FUNDED, 0)
        assert seeded_amm.check_invariants() == []

    def test_pool_can_be_bootstrapped_again(self, seeded_amm):
        """An emptied pool mints the bootstrap amount on the next deposit."""
        seeded_amm.withdraw(ALICE, SEED_SHARES)
        assert seeded_amm.provide(BOB, 3, 7) == BOOTSTRAP_SHARES
        assert seeded_amm.pool_summary() == (3, 7, BOOTSTRAP_SHARES, 0)

    def test_withdraw_quote_above_supply(self, seeded_amm):
        """Quoting more shares than exist is InvalidShare."""
        with pytest.raises(InvalidShare):
            seeded_amm.withdraw_quote(SEED_SHARES + 1)

    def test_withdraw_without_shares(self, seeded_amm):
        """Redeeming shares the caller does not hold is InsufficientAmount."""
        with pytest.raises(InsufficientAmount):
            seeded_amm.withdraw(BOB, 1)


class TestQuotes:
    """Tests for the read-only quotes."""

    def test_equivalents(self, seeded_amm):
        """Equivalent-value quotes follow the 1:4 reserve ratio."""
        assert seeded_amm.quote_token2_for(100) == 400
        assert seeded_amm.quote_token1_for(400) == 100

    @pytest.mark.parametrize(
        "method",
        [
            "quote_token1_for",
            "quote_token2_for",
            "swap_in_quote1",
            "swap_out_quote2",
            "withdraw_quote",
        ],
    )
    def test_empty_pool(self, amm, method):
        """Every quote on an empty pool is ZeroLiquidity."""
        with pytest.raises(ZeroLiquidity):
            getattr(amm, method)(10)

    def test_quotes_do_not_change_state(self, fee_amm):
        """Quotes leave the pool untouched."""
        before = fee_amm.pool_summary()
        fee_amm.swap_in_quote1(1_000)
        fee_amm.swap_out_quote2(1_000)
        fee_amm.withdraw_quote(1_000)
        assert fee_amm.pool_summary() == before

    def test_swap_out_whole_reserve(self, seeded_amm):
        """Quoting the whole token-2 reserve is InsufficientLiquidity."""
        with pytest.raises(InsufficientLiquidity):
            seeded_amm.swap_out_quote2(40_000)


class TestSwaps:
    """Tests for swap1_for2 and swap2_for1."""

    def test_swap1_for2_matches_quote(self, fee_amm):
        """An exact-input swap pays out its quote and moves the reserves by it."""
        quoted = fee_amm.swap_in_quote1(1_000)
        assert fee_amm.swap1_for2(BOB, 1_000, quoted) == quoted == 3_627
        assert fee_amm.holdings_of(BOB) == (FUNDED - 1_000, FUNDED + 3_627, 0)
        assert fee_amm.pool_summary() == (11_000, 36_373, SEED_SHARES, 3)

    def test_swap2_for1_matches_quote(self, fee_amm):
        """An exact-output swap charges its quote."""
        quoted = fee_amm.swap_out_quote2(4_000)
        assert fee_amm.swap2_for1(BOB, 4_000, quoted) == quoted == 1_114
        assert fee_amm.holdings_of(BOB) == (FUNDED - 1_114, FUNDED + 4_000, 0)

    def test_swap2_for1_credits_token2(self, seeded_amm):
        """Token-2 bought lands on the caller's token-2 balance."""
        assert seeded_amm.swap2_for1(BOB, 400, 1_000) == 101
        assert seeded_amm.holdings_of(BOB) == (FUNDED - 101, FUNDED + 400, 0)

    def test_min_out_guard(self, seeded_amm):
        """An output below min_out2 is SlippageExceeded."""
        with pytest.raises(SlippageExceeded):
            seeded_amm.swap1_for2(BOB, 100, 398)

    def test_max_in_guard(self, seeded_amm):
        """A cost above max_in1 is SlippageExceeded."""
        with pytest.raises(SlippageExceeded):
            seeded_amm.swap2_for1(BOB, 400, 100)

    def test_swaps_keep_shares_consistent(self, fee_amm):
        """Swaps never touch share balances or supply."""
        fee_amm.swap1_for2(BOB, 500, 0)
        fee_amm.swap2_for1(BOB, 500, 10**6)
        assert fee_amm.check_invariants() == []


class TestRejectionsLeaveStateUnchanged:
    """A rejected operation commits nothing."""

    @pytest.mark.parametrize(
        ("method", "args", "error"),
        [
            ("provide", (CAROL, 1, 1), InsufficientAmount),
            ("provide", (BOB, 100, 0), ZeroAmount),
            ("provide", (BOB, 100, 500), NonEquivalentValue),
            ("provide", (BOB, FUNDED, FUNDED + 1), InsufficientAmount),
            ("withdraw", (ALICE, 0), ZeroAmount),
            ("withdraw", (BOB, 1), InsufficientAmount),
            ("swap1_for2", (BOB, 0, 0), ZeroAmount),
            ("swap1_for2", (BOB, 100, 10**6), SlippageExceeded),
            ("swap1_for2", (CAROL, 100, 0), InsufficientAmount),
            ("swap2_for1", (BOB, 0, 10), ZeroAmount),
            ("swap2_for1", (BOB, 40_000, 10**12), InsufficientLiquidity),
            ("swap2_for1", (CAROL, 400, 1_000), InsufficientAmount),
        ],
    )
    def test_rejected(self, seeded_amm, method, args, error):
        """Each rejection leaves the pool and every balance as it was."""
        pool_before = seeded_amm.pool_summary()
        holdings_before = [seeded_amm.holdings_of(a) for a in (ALICE, BOB, CAROL)]

        with pytest.raises(error):
            getattr(seeded_amm, method)(*args)

        assert seeded_amm.pool_summary() == pool_before
        assert [seeded_amm.holdings_of(a) for a in (ALICE, BOB, CAROL)] == holdings_before


class TestArithmeticAbort:
    """Overflow aborts the whole operation, even after earlier steps succeeded."""

    def test_swap_overflow_rolls_back_debit_and_reserves(self, seeded_amm):
        """Overflow on the token-2 credit undoes the token-1 debit and the reserve move."""
        seeded_amm.fund(BOB, 0, BALANCE_MAX - FUNDED)
        pool_before = seeded_amm.pool_summary()

        with pytest.raises(Overflow):
            seeded_amm.swap1_for2(BOB, 100, 0)

        assert seeded_amm.pool_summary() == pool_before
        assert seeded_amm.holdings_of(BOB) == (FUNDED, BALANCE_MAX, 0)

    def test_fund_overflow_rolls_back_first_credit(self, amm):
        """Overflow on the token-2 credit undoes the token-1 credit."""
        with pytest.raises(Overflow):
            amm.fund(ALICE, 1, BALANCE_MAX)
        assert amm.holdings_of(ALICE) == (FUNDED, FUNDED, 0)


class TestInputValidation:
    """Values outside the u128 domain are refused before any work."""

    @pytest.mark.parametrize("amount", [-1, BALANCE_MAX + 1, "10", 1.5])
    def test_bad_amount(self, seeded_amm, amount):
        """Negative, oversized and non-int amounts are ValueError."""
        with pytest.raises(ValueError):
            seeded_amm.swap1_for2(BOB, amount, 0)

    @pytest.mark.parametrize("caller", ["", None, 7])
    def test_bad_caller(self, amm, caller):
        """Empty or non-string callers are ValueError."""
        with pytest.raises(ValueError):
            amm.fund(caller, 1, 1)

    def test_bad_quote_argument(self, seeded_amm):
        """Quotes validate their argument too."""
        with pytest.raises(ValueError):
            seeded_amm.swap_in_quote1(-5)


class TestStorage:
    """Engines over caller-supplied storage."""

    def test_existing_pool_keeps_its_fee(self):
        """A slot that already holds a pool keeps its stored fee."""
        slot = make_slot(PoolState(fee_per_mille=5))
        amm = Amm(config=EngineConfig(fee_per_mille=9), pool_slot=slot)
        assert amm.pool_summary().fee_per_mille == 5

    def test_engines_share_state_through_storage(self):
        """Two engines over the same store and slot see the same state."""
        store, slot = InMemoryStore(), InMemoryPoolSlot()
        first = Amm(config=EngineConfig(fee_per_mille=0), store=store, pool_slot=slot)
        first.fund(ALICE, 100, 100)
        first.provide(ALICE, 50, 50)

        second = Amm(config=EngineConfig(fee_per_mille=9), store=store, pool_slot=slot)
        assert second.pool_summary() == (50, 50, BOOTSTRAP_SHARES, 0)
        assert second.holdings_of(ALICE) == (50, 50, BOOTSTRAP_SHARES)

    @pytest.mark.usefixtures("reset_logging")
    def test_default_engine_is_cached(self, monkeypatch):
        """get_default_engine builds one engine from the environment and reuses it."""
        monkeypatch.setattr(engine_module, "_default_engine", None)
        monkeypatch.setenv(FEE_ENV_VAR, "7")

        engine = get_default_engine()
        assert engine is get_default_engine()
        assert engine.pool_summary().fee_per_mille == 7

    @pytest.mark.usefixtures("reset_logging")
    def test_default_engine_applies_log_level(self, monkeypatch, capsys):
        """CPAMM_LOG_LEVEL=ERROR hides info events but still shows aborts."""
        monkeypatch.setattr(engine_module, "_default_engine", None)
        monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "ERROR")

        engine = get_default_engine()
        engine.fund(ALICE, 1, 1)
        with pytest.raises(Overflow):
            engine.fund(ALICE, 0, BALANCE_MAX)

        out = capsys.readouterr().out
        assert "account_funded" not in out
        assert "operation_aborted" in out


class TestLogging:
    """Structured events emitted by the engine."""

    def test_engine_created(self):
        """Creating a pool logs engine_created with its fee."""
        with capture_logs() as logs:
            Amm(config=EngineConfig(fee_per_mille=4))
        assert logs == [{"event": "engine_created", "log_level": "info", "fee_per_mille": 4}]

    def test_existing_slot_logs_nothing(self):
        """Reusing a stored pool logs nothing."""
        slot = make_slot(PoolState())
        with capture_logs() as logs:
            Amm(pool_slot=slot)
        assert logs == []

    def test_commit_logs_staged_writes(self, amm):
        """A committed transaction reports how many ledger writes it flushed."""
        with capture_logs() as logs:
            amm.fund(CAROL, 1, 2)

        committed = [log for log in logs if log["event"] == "transaction_committed"]
        assert committed == [
            {
                "event": "transaction_committed",
                "log_level": "debug",
                "operation": "fund",
                "writes": 2,
            }
        ]

    def test_swap_executed(self, fee_amm):
        """A swap logs direction, amounts and k before and after."""
        with capture_logs() as logs:
            fee_amm.swap1_for2(BOB, 1_000, 0)

        executed = [log for log in logs if log["event"] == "swap_executed"]
        assert len(executed) == 1
        assert executed[0]["direction"] == "token1_for_token2"
        assert executed[0]["token2_out"] == 3_627
        assert executed[0]["k_after"] >= executed[0]["k_before"]

    def test_rejection_logged(self, seeded_amm):
        """A PoolError is logged at info with its canonical name."""
        with capture_logs() as logs:
            with pytest.raises(ZeroAmount):
                seeded_amm.swap1_for2(BOB, 0, 0)

        assert logs == [
            {
                "event": "operation_rejected",
                "log_level": "info",
                "operation": "swap1_for2",
                "error": "ZeroAmount",
                "reason": "token1 amount must be positive",
                "caller": BOB,
            }
        ]

    def test_abort_logged_as_error(self, amm):
        """An arithmetic fault is logged at error level."""
        with capture_logs() as logs:
            with pytest.raises(Overflow):
                amm.fund(ALICE, 0, BALANCE_MAX)

        assert logs[0]["event"] == "operation_aborted"
        assert logs[0]["log_level"] == "error"
        assert logs[0]["error"] == "Overflow"
