"""Checked fixed-point arithmetic on 1e18-scaled integers.

All values are non-negative ints that must fit in 256 bits.  Anything that
would leave that domain raises ``ArithmeticFault`` instead of wrapping.
"""

from lendrate.protocol.errors import ArithmeticFault

SCALE = 10**18
UINT256_MAX = 2**256 - 1


def _require_uint(value: int) -> int:
    # bool is an int subclass; reject it along with floats
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected int, got {type(value).__name__}")
    if value < 0:
        raise ArithmeticFault(f"negative operand: {value}")
    if value > UINT256_MAX:
        raise ArithmeticFault(f"operand exceeds uint256: {value}")
    return value


def _bounded(result: int, op: str) -> int:
    if result > UINT256_MAX:
        raise ArithmeticFault(f"overflow in {op}")
    return result


def checked_add(a: int, b: int) -> int:
    return _bounded(_require_uint(a) + _require_uint(b), "addition")


def checked_sub(a: int, b: int) -> int:
    a, b = _require_uint(a), _require_uint(b)
    if b > a:
        raise ArithmeticFault(f"underflow in subtraction: {a} - {b}")
    return a - b


def checked_mul(a: int, b: int) -> int:
    return _bounded(_require_uint(a) * _require_uint(b), "multiplication")


def checked_div(a: int, b: int) -> int:
    """Integer division, truncating toward zero."""
    a, b = _require_uint(a), _require_uint(b)
    if b == 0:
        raise ArithmeticFault("division by zero")
    return a // b


def mul_scaled(a: int, b: int) -> int:
    """Product of two scaled values, kept in scale: ``a * b / SCALE``."""
    return checked_div(checked_mul(a, b), SCALE)


def div_scaled(a: int, b: int) -> int:
    """Quotient of two values as a scaled fraction: ``a * SCALE / b``."""
    return checked_div(checked_mul(a, SCALE), b)


def to_float(mantissa: int) -> float:
    """Convert a scaled value to a float. Display only."""
    return mantissa / SCALE
