"""Unsigned integer helpers shared by the ledger and the registry."""
from credit_engine.errors import ArithmeticOverflow

# Largest value a BIGINT column can hold
MAX_UINT = 2**63 - 1


def checked_add(a: int, b: int, field: str = "value") -> int:
    """Add two unsigned integers, raising instead of wrapping."""
    total = a + b
    if total > MAX_UINT:
        raise ArithmeticOverflow(f"{field} would exceed {MAX_UINT}")
    return total


def saturating_sub(a: int, b: int) -> int:
    """Subtract, flooring the result at zero."""
    return a - b if a > b else 0
