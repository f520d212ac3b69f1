"""Lenient numeric parsing for values that arrive from forms and remote payloads"""

import math
from decimal import Decimal
from typing import Any, Optional


def to_number(value: Any) -> Optional[float]:
    """
    Parse a value as a finite float, or return None.

    Booleans, blanks, NaN, infinities and unparseable strings are all None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_amount(value: Any) -> float:
    """Amount as a float, with anything non-numeric counting as 0"""
    number = to_number(value)
    return 0.0 if number is None else number
