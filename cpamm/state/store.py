"""Storage contracts supplied by the host.

The engine never owns durable storage. It talks to two collaborators:
- KeyValueStore backs the ledger (one integer per (kind, account) key)
- PoolSlot backs the single pool state record

Lookups return None for a missing key; the zero default is applied by the
caller, never by the store.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from cpamm.state.pool import PoolState


class KeyValueStore(Protocol):
    """Mapping of ledger keys to unsigned integers."""

    def get(self, key: Hashable) -> int | None:
        """Return the stored value, or None if the key was never written."""
        ...

    def set(self, key: Hashable, value: int) -> None:
        """Store value under key."""
        ...

    def items(self) -> Iterator[tuple[Hashable, int]]:
        """Iterate over every stored (key, value) pair."""
        ...


class PoolSlot(Protocol):
    """Single-slot storage for the pool state record."""

    def load(self) -> PoolState | None:
        """Return the stored pool state, or None if nothing was saved."""
        ...

    def save(self, pool: PoolState) -> None:
        """Replace the stored pool state."""
        ...


class InMemoryStore:
    """Dict-backed KeyValueStore for tests and embedding."""

    def __init__(self, initial: dict[Hashable, int] | None = None) -> None:
        self._data: dict[Hashable, int] = dict(initial or {})

    def get(self, key: Hashable) -> int | None:
        return self._data.get(key)

    def set(self, key: Hashable, value: int) -> None:
        self._data[key] = value

    def items(self) -> Iterator[tuple[Hashable, int]]:
        return iter(list(self._data.items()))

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"InMemoryStore({len(self._data)} entries)"


class InMemoryPoolSlot:
    """PoolSlot holding a private copy of the pool state."""

    def __init__(self, pool: PoolState | None = None) -> None:
        self._pool = pool.copy() if pool is not None else None

    def load(self) -> PoolState | None:
        return self._pool.copy() if self._pool is not None else None

    def save(self, pool: PoolState) -> None:
        self._pool = pool.copy()


class StagedStore:
    """Write-buffering overlay over a KeyValueStore.

    Reads see staged writes first, then the base store. Nothing reaches the
    base store until commit(); dropping the overlay discards the writes.
    """

    def __init__(self, base: KeyValueStore) -> None:
        self._base = base
        self._writes: dict[Hashable, int] = {}

    def get(self, key: Hashable) -> int | None:
        if key in self._writes:
            return self._writes[key]
        return self._base.get(key)

    def set(self, key: Hashable, value: int) -> None:
        self._writes[key] = value

    def items(self) -> Iterator[tuple[Hashable, int]]:
        merged = dict(self._base.items())
        merged.update(self._writes)
        return iter(merged.items())

    @property
    def pending(self) -> int:
        """Number of keys written since the last commit."""
        return len(self._writes)

    def commit(self) -> None:
        """Flush staged writes to the base store."""
        for key, value in self._writes.items():
            self._base.set(key, value)
        self._writes.clear()
