"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Account ids and common amounts
- factories: Engine and state factory functions
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    FUNDED,
    SEED_SHARES,
    SEED_TOKEN1,
    SEED_TOKEN2,
)
from tests.helpers.factories import make_engine, make_seeded_engine, make_slot, make_state

__all__ = [
    "ALICE",
    "BOB",
    "CAROL",
    "FUNDED",
    "SEED_SHARES",
    "SEED_TOKEN1",
    "SEED_TOKEN2",
    "make_engine",
    "make_seeded_engine",
    "make_slot",
    "make_state",
]
