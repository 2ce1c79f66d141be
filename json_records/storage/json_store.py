"""Flat-file JSON collection store."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class JSONCollectionStore:
    """Reads and rewrites the whole record collection as one JSON array."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def ensure_exists(self) -> None:
        if self._path.exists():
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps([]), encoding="utf-8")

    def read_all(self) -> List[Record]:
        try:
            self.ensure_exists()
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.exception("Error reading data file %s", self._path)
            return []
        if not isinstance(data, list):
            logger.error("Data file %s does not hold a JSON array", self._path)
            return []
        return data

    def write_all(self, records: List[Record]) -> bool:
        try:
            payload = json.dumps(records, indent=2, allow_nan=False)
            self._path.write_text(payload, encoding="utf-8")
        except (OSError, TypeError, ValueError):
            logger.exception("Error writing data file %s", self._path)
            return False
        return True
