"""Shared utilities for pandas conversion operations."""

from decimal import Decimal
from typing import Union


def amount_to_float(value: Union[int, Decimal]) -> float:
    """Convert an int/Decimal amount to float for pandas compatibility."""
    return float(value)


def float_to_amount(value: float) -> Union[int, Decimal]:
    """Convert a float read back from a DataFrame to an amount.

    Whole numbers come back as ``int`` (amounts are whole currency units);
    anything else as ``Decimal``, avoiding binary float artifacts.

    Warning:
        Floats with >15 significant digits may lose precision due to
        float representation limits.

    Raises:
        TypeError: If value is not numeric

    Example:
        >>> float_to_amount(2500000.0)
        2500000
        >>> float_to_amount(123.45)
        Decimal('123.45')
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected numeric type, got {type(value)}")
    as_float = float(value)
    if as_float.is_integer():
        return int(as_float)
    return Decimal(str(as_float))
