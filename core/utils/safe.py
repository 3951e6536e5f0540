"""
Optional-Field Helpers

Exchange payloads omit fields freely and send numbers as strings. These
helpers read one field with an explicit default instead of relying on
truthiness, because 0 is a legitimate price or balance.
"""

import math
from typing import Any, Mapping, Optional


def safe_float(data: Optional[Mapping[str, Any]], key: str, default: Optional[float] = None) -> Optional[float]:
    """
    Read `data[key]` as a float.

    Args:
        data: Mapping to read from (None is treated as empty)
        key: Field name
        default: Returned when the field is absent, null, not numeric or not finite

    Returns:
        The parsed float or `default`

    Examples:
        >>> safe_float({"last": "50000"}, "last")
        50000.0

        >>> safe_float({"last": "0"}, "last")
        0.0

        >>> safe_float({}, "last") is None
        True
    """
    if not data or key not in data:
        return default
    value = data[key]
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def safe_string(data: Optional[Mapping[str, Any]], key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Read `data[key]` as a string, or `default` when absent or null.

    Examples:
        >>> safe_string({"order_id": 12345}, "order_id")
        '12345'
    """
    if not data or key not in data:
        return default
    value = data[key]
    if value is None:
        return default
    return str(value)
