"""Pytest configuration and fixtures."""

import pytest
import structlog

from cpamm import Amm
from tests.helpers import make_engine, make_seeded_engine


@pytest.fixture
def amm() -> Amm:
    """Engine with a zero fee, an empty pool, and ALICE and BOB funded."""
    return make_engine()


@pytest.fixture
def seeded_amm() -> Amm:
    """Zero-fee engine whose pool ALICE seeded with (10_000, 40_000)."""
    return make_seeded_engine()


@pytest.fixture
def fee_amm() -> Amm:
    """Engine with a 3 per-mille fee and a seeded pool."""
    return make_seeded_engine(fee_per_mille=3)


@pytest.fixture
def reset_logging():
    """Restore structlog's default configuration after tests that configure it."""
    yield
    structlog.reset_defaults()
