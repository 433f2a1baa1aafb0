"""Pool error classes.

Each error maps to one rejection reason a caller can act on. They are raised
before any state is committed. Arithmetic faults are not part of this
hierarchy; see cpamm.safe_int.
"""

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """Canonical names of the user-facing rejection reasons."""

    ZERO_LIQUIDITY = "ZeroLiquidity"
    ZERO_AMOUNT = "ZeroAmount"
    INSUFFICIENT_AMOUNT = "InsufficientAmount"
    NON_EQUIVALENT_VALUE = "NonEquivalentValue"
    THRESHOLD_NOT_REACHED = "ThresholdNotReached"
    INVALID_SHARE = "InvalidShare"
    INSUFFICIENT_LIQUIDITY = "InsufficientLiquidity"
    SLIPPAGE_EXCEEDED = "SlippageExceeded"


class PoolError(Exception):
    """Base error for pool operations."""

    kind: ClassVar[ErrorKind]


class ZeroLiquidity(PoolError):
    """Pool has no reserves to price against."""

    kind = ErrorKind.ZERO_LIQUIDITY


class ZeroAmount(PoolError):
    """Requested quantity is zero."""

    kind = ErrorKind.ZERO_AMOUNT


class InsufficientAmount(PoolError):
    """Requested quantity exceeds the caller's balance."""

    kind = ErrorKind.INSUFFICIENT_AMOUNT


class NonEquivalentValue(PoolError):
    """Deposit amounts are not in the pool's current ratio."""

    kind = ErrorKind.NON_EQUIVALENT_VALUE


class ThresholdNotReached(PoolError):
    """Deposit is too small to mint a single share."""

    kind = ErrorKind.THRESHOLD_NOT_REACHED


class InvalidShare(PoolError):
    """Share amount exceeds total shares outstanding."""

    kind = ErrorKind.INVALID_SHARE


class InsufficientLiquidity(PoolError):
    """Requested output would drain the reserve."""

    kind = ErrorKind.INSUFFICIENT_LIQUIDITY


class SlippageExceeded(PoolError):
    """Executed price is worse than the caller's guard."""

    kind = ErrorKind.SLIPPAGE_EXCEEDED
