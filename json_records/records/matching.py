"""Identifier comparison rules used by the mutation intents.

Update matches ids loosely, so ``"5"`` finds a record stored with ``5``.
Delete matches strictly and requires the same JSON type.
"""
from __future__ import annotations

import math
from typing import Any, Optional


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return float(value)
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return None


def strict_equals(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def loose_equals(left: Any, right: Any) -> bool:
    if strict_equals(left, right):
        return True
    if left is None or right is None:
        return False
    if isinstance(left, (dict, list)) or isinstance(right, (dict, list)):
        return False
    if isinstance(left, str) and isinstance(right, str):
        return False
    left_number = _to_number(left)
    right_number = _to_number(right)
    if left_number is None or right_number is None:
        return False
    return left_number == right_number
