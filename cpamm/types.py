"""Shared type definitions for the pool engine.

These types are used at the engine boundary and across the state layer.
"""

from enum import Enum
from typing import Annotated, Any

from pydantic import Field, Strict, TypeAdapter

from cpamm.safe_int import BALANCE_MAX

# Opaque caller identity resolved by the host
AccountId = str

# 128-bit unsigned integer, strictly an int (no string or float coercion)
Balance = Annotated[
    int,
    Strict(),
    Field(ge=0, le=BALANCE_MAX, description="128-bit unsigned integer"),
]

_balance_adapter: TypeAdapter[int] = TypeAdapter(Balance)


class BalanceKind(str, Enum):
    """Which of an account's balances an operation reads or writes."""

    SHARES = "shares"
    TOKEN1 = "token1"
    TOKEN2 = "token2"


def validate_balance(value: Any) -> int:
    """Validate that a value is a 128-bit unsigned int.

    Args:
        value: Value supplied by the host

    Returns:
        The value, unchanged

    Raises:
        pydantic.ValidationError: If value is not an int in [0, 2^128-1]
            (a ValueError subclass)
    """
    return _balance_adapter.validate_python(value)


def validate_account(account: Any) -> AccountId:
    """Validate a caller identity.

    Raises:
        ValueError: If account is not a non-empty string
    """
    if not isinstance(account, str) or not account:
        raise ValueError(f"Account id must be a non-empty string, got {account!r}")
    return account
