"""
Shared helpers for request coercion and predicate composition.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Sequence

from django.db.models import Q

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_int(value: Any, *, default: int = 0) -> int:
    """
    Coerce a request value to an integer without raising.

    Grid widgets send every parameter as a string. Leading digits are kept
    (``"15px"`` gives 15) and anything else falls back to ``default``.
    """

    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        return int(value)

    match = _LEADING_INT.match(str(value))
    if not match:
        return default
    return int(match.group(1))


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def combine_q(conditions: Sequence[Optional[Q]], *, op: str) -> Optional[Q]:
    conditions = [condition for condition in conditions if condition is not None]
    if not conditions:
        return None
    op = (op or "and").lower()
    combined = conditions[0]
    for condition in conditions[1:]:
        combined = (combined | condition) if op == "or" else (combined & condition)
    return combined
