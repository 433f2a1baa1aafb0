"""Checked 128-bit unsigned arithmetic for pool balances.

Every balance, reserve and share count in the engine is an unsigned 128-bit
integer. SafeInt keeps values inside that range at all times:
- Addition or multiplication past BALANCE_MAX raises Overflow
- Subtraction below zero raises Underflow
- Division by zero raises DivisionByZero

These are fatal conditions. They signal a broken precondition rather than a
bad user input, so callers let them propagate and the engine discards any
staged state.

Usage pattern:
    from cpamm.safe_int import S

    def share_of(total_shares: int, amount: int, reserve: int) -> int:
        return (S(total_shares) * amount // reserve).value
"""

from __future__ import annotations

from functools import total_ordering

BALANCE_BITS = 128
BALANCE_MAX = 2**BALANCE_BITS - 1


class SafeIntError(ArithmeticError):
    """Checked arithmetic left the u128 domain."""


class DivisionByZero(SafeIntError):
    """Floor division by zero."""


class Underflow(SafeIntError):
    """Result below zero."""


class Overflow(SafeIntError):
    """Result above BALANCE_MAX."""


def _in_range(result: int, expression: str) -> int:
    """Return result if it fits in a u128, else raise naming the expression."""
    if result < 0:
        raise Underflow(f"{expression} is negative")
    if result > BALANCE_MAX:
        raise Overflow(f"{expression} exceeds u{BALANCE_BITS}")
    return result


def _operand(x: SafeInt | int) -> int:
    if isinstance(x, SafeInt):
        return x._value
    if isinstance(x, int) and not isinstance(x, bool):
        return _in_range(x, f"operand {x}")
    raise TypeError(f"Expected int or SafeInt operand, got {type(x).__name__}")


@total_ordering
class SafeInt:
    """Unsigned 128-bit integer with checked arithmetic.

    Construction validates the range and every operator re-validates its
    result, so a SafeInt never holds a value a u128 balance could not.
    Floor division is the only division offered. Plain int operands are
    accepted on either side.
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Wrap value.

        Raises:
            TypeError: If value is a bool or not an int/SafeInt
            Underflow: If value is negative
            Overflow: If value exceeds BALANCE_MAX
        """
        if isinstance(value, SafeInt):
            self._value = value._value
            return
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f"SafeInt wraps int values, got {type(value).__name__}")
        self._value = _in_range(value, str(value))

    @classmethod
    def zero(cls) -> SafeInt:
        return cls(0)

    @property
    def value(self) -> int:
        return self._value

    # Arithmetic

    def __add__(self, other: SafeInt | int) -> SafeInt:
        rhs = _operand(other)
        return SafeInt(_in_range(self._value + rhs, f"{self._value} + {rhs}"))

    __radd__ = __add__

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        rhs = _operand(other)
        return SafeInt(_in_range(self._value * rhs, f"{self._value} * {rhs}"))

    __rmul__ = __mul__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        rhs = _operand(other)
        return SafeInt(_in_range(self._value - rhs, f"{self._value} - {rhs}"))

    def __rsub__(self, other: int) -> SafeInt:
        return SafeInt(other) - self

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        divisor = _operand(other)
        if divisor == 0:
            raise DivisionByZero(f"{self._value} // 0")
        return SafeInt(self._value // divisor)

    def __rfloordiv__(self, other: int) -> SafeInt:
        return SafeInt(other) // self

    def __truediv__(self, other: object) -> SafeInt:
        raise TypeError("SafeInt has floor division (//) only")

    __rtruediv__ = __truediv__

    # Comparison and conversion

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SafeInt, int)) and not isinstance(other, bool):
            return self._value == int(other)
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        if isinstance(other, (SafeInt, int)) and not isinstance(other, bool):
            return self._value < int(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __int__(self) -> int:
        return self._value

    __index__ = __int__

    def __bool__(self) -> bool:
        return self._value != 0

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)


# Short alias used throughout the engine math
S = SafeInt
