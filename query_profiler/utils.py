"""
utils
=====

Small, shared utilities used across the codebase.

This module only contains low-level helpers that are safe to import from
anywhere (no database calls, no heavy imports).

Functions
---------
- :func:`to_number`:
  Parse a raw status value the way the server reports it (``"42"``,
  ``"0.000000"``) into an ``int`` or ``float``.
- :func:`normalize_label`:
  Normalize a trace step label for comparison.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Union

Number = Union[int, float]


def to_number(value: Any) -> Number | None:
    """Return *value* as an ``int`` or ``float``, or ``None`` if not numeric.

    Parameters
    ----------
    value:
        Raw value. Strings are stripped before parsing; booleans are not
        considered numeric.

    Returns
    -------
    int | float | None
        ``int`` for integral strings and ints, ``float`` otherwise, ``None``
        when the value cannot be parsed.

    Examples
    --------
    >>> to_number("240")
    240
    >>> to_number("1.5")
    1.5
    >>> to_number("ON") is None
    True
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        return float(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    # "nan"/"inf" parse as floats but are not counters
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def normalize_label(label: str) -> str:
    """Return *label* trimmed and lower-cased.

    >>> normalize_label("  Sending data ")
    'sending data'
    """
    return label.strip().lower()
