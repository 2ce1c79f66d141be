"""Record identifier generation and parsing."""
from __future__ import annotations

import re
import threading
import time
from typing import Callable, Optional

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class RecordIdGenerator:
    """Issues millisecond timestamps as ids, never repeating within a process."""

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.time
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            candidate = int(self._clock() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return candidate


def parse_record_id(segment: Optional[str]) -> int:
    """Parse the leading integer of a path segment, falling back to 0."""
    if not segment:
        return 0
    match = _LEADING_INT.match(segment)
    if match is None:
        return 0
    return int(match.group(1))
