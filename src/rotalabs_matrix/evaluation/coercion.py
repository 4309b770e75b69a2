"""Coercion rules for comparing context values against rule literals.

Values are JSON-like: None, bool, int/float, str, list and dict, plus the
``MISSING`` marker for unresolved field paths.

Numeric coercion (ordering operators):
- bool becomes 1 or 0
- int and float are used as-is; NaN is not numeric
- str is numeric when, after stripping whitespace, it is a decimal literal
- everything else is not numeric

Loose equality (``=`` / ``!=``):
- None and MISSING equal each other and nothing else
- values of the same kind compare directly; lists and dicts compare deeply
- a bool compared with a number or string is first turned into 1 or 0
- a number compared with a string uses the string's numeric coercion
- any other combination is unequal
"""

import math
import re
from typing import Any, Optional, Union

from rotalabs_matrix.core.context import MISSING

_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_nullish(value: Any) -> bool:
    return value is None or value is MISSING


def to_number(value: Any) -> Optional[Union[int, float]]:
    """Coerce a value to a number, or None if it has no numeric reading.

    Integers are returned unchanged, so values beyond float range still
    compare exactly.

    Examples:
        >>> to_number(" 42 ")
        42.0
        >>> to_number(True)
        1.0
        >>> to_number("abc") is None
        True
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        return None if math.isnan(value) else value

    if isinstance(value, str):
        text = value.strip()
        if _NUMBER_PATTERN.fullmatch(text):
            return float(text)

    return None


def json_equal(left: Any, right: Any) -> bool:
    """Strict deep equality that keeps bools distinct from numbers."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right

    if _is_number(left) and _is_number(right):
        return left == right

    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        return len(left) == len(right) and all(json_equal(a, b) for a, b in zip(left, right))

    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(json_equal(left[k], right[k]) for k in left)

    if _is_nullish(left) or _is_nullish(right):
        return _is_nullish(left) and _is_nullish(right)

    return type(left) is type(right) and left == right


def loose_equals(left: Any, right: Any) -> bool:
    """Equality with cross-type coercion, as used by the ``=`` operator."""
    if _is_nullish(left) or _is_nullish(right):
        return _is_nullish(left) and _is_nullish(right)

    if isinstance(left, bool) and isinstance(right, bool):
        return left == right

    if isinstance(left, bool):
        return loose_equals(to_number(left), right)
    if isinstance(right, bool):
        return loose_equals(left, to_number(right))

    if _is_number(left) and _is_number(right):
        return left == right

    if isinstance(left, str) and isinstance(right, str):
        return left == right

    if _is_number(left) and isinstance(right, str):
        return to_number(right) == left
    if isinstance(left, str) and _is_number(right):
        return to_number(left) == right

    if isinstance(left, (list, tuple, dict)) or isinstance(right, (list, tuple, dict)):
        return json_equal(left, right)

    return False
