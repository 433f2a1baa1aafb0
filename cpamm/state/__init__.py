"""Ledger and pool state, plus the storage contracts they run on."""

from .ledger import Holdings, Ledger
from .pool import PoolState, PoolSummary
from .store import (
    InMemoryPoolSlot,
    InMemoryStore,
    KeyValueStore,
    PoolSlot,
    StagedStore,
)

__all__ = [
    "Holdings",
    "Ledger",
    "PoolState",
    "PoolSummary",
    "KeyValueStore",
    "PoolSlot",
    "InMemoryStore",
    "InMemoryPoolSlot",
    "StagedStore",
]
