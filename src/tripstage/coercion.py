"""Numeric and lookup helpers shared by every payload extractor."""

import math
import re
from collections.abc import Mapping
from typing import Any

# Leading numeric prefix, the same portion a browser's parseFloat consumes.
_NUMERIC_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def to_number(value: Any) -> int | float | None:
    """Coerce a loosely-typed field to a finite number.

    Finite ints and floats come back unchanged; strings are parsed from their
    leading numeric prefix ("12.5km" -> 12.5). Everything else, including
    booleans, returns None rather than zero.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value.strip())
        if match is None:
            return None
        try:
            parsed = float(match.group(0))
        except (ValueError, OverflowError):
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def to_int(value: Any) -> int | None:
    """Coerce to an int, truncating fractional values."""
    number = to_number(value)
    if number is None:
        return None
    return int(number)


def as_record(value: Any) -> Mapping[str, Any]:
    """Treat anything that is not a mapping as an empty record."""
    if isinstance(value, Mapping):
        return value
    return {}


def first_present(record: Mapping[str, Any], *keys: str) -> Any:
    """Return the first value under ``keys`` that is not None.

    Empty strings and zero count as present.
    """
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None
