"""Value coercion shared by the rule evaluator, validator and scorer.

Answers arrive loosely typed (strings from text inputs, numbers from score
pickers, lists from multi-selects). These helpers give every consumer the
same notion of "empty", "equal" and "numeric".
"""

import math
import re
from typing import Any

_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_HEX_RE = re.compile(r"^0[xX][0-9a-fA-F]+$")
_INFINITY_RE = re.compile(r"^[+-]?Infinity$")


class _Missing:
    """Marker for an answer key that is absent from the answer set."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def is_number(value: Any) -> bool:
    """True for int/float values; booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_number(value: Any) -> float:
    """Coerce a value to a float, returning NaN when it is not numeric.

    Handles:
    - numbers: returned as float
    - booleans: 1.0 / 0.0
    - None and blank strings: 0.0
    - decimal, exponent and hex strings: "2", " 2.5 ", "1e3", "0x1F"
    - "Infinity" / "-Infinity"
    - anything else (lists, records, absent answers, free text): NaN
    """
    if value is MISSING:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _DECIMAL_RE.match(text):
            return float(text)
        if _HEX_RE.match(text):
            return float(int(text, 16))
        if _INFINITY_RE.match(text):
            return -math.inf if text.startswith("-") else math.inf
    return math.nan


def to_finite_number(value: Any, default: float = 0.0) -> float:
    """Coerce to a finite float, falling back to ``default``."""
    number = to_number(value)
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def is_present(value: Any) -> bool:
    """An answer exists when it is not absent, None or an empty string."""
    return value is not MISSING and value is not None and value != ""


def is_empty(value: Any) -> bool:
    """Empty for requiredness: absent, None, empty string or empty list."""
    if not is_present(value):
        return True
    return isinstance(value, list) and len(value) == 0


def is_blank(value: Any) -> bool:
    """Empty, or a string made only of whitespace."""
    if is_empty(value):
        return True
    return isinstance(value, str) and not value.strip()


def stringify(value: Any) -> str:
    """Render a scalar the way it is compared in ``contains`` rules."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def strict_equals(left: Any, right: Any) -> bool:
    """Type-strict equality: 1 equals 1.0, but never True, "1" or [1]."""
    if left is MISSING or right is MISSING:
        return False
    if left is None or right is None:
        return left is None and right is None
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) or is_number(right):
        return is_number(left) and is_number(right) and left == right
    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right
    # Lists and records only equal themselves
    return left is right
