"""Read-modify-write mutations over the persisted record collection."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Optional

from json_records.storage.json_store import JSONCollectionStore, Record

from .matching import loose_equals, strict_equals

logger = logging.getLogger(__name__)

IntentName = Literal["create", "update", "delete"]


@dataclass(frozen=True)
class MutationOutcome:
    """Result of applying one intent.

    ``written`` is ``None`` when the intent did not touch the file, otherwise
    it reports whether the collection was persisted.
    """

    intent: IntentName
    record_id: Any
    matched: int
    written: Optional[bool]


class RecordMutator:
    """Applies create, update and delete intents, one full cycle each."""

    def __init__(self, store: JSONCollectionStore) -> None:
        self._store = store

    def create(self, record: Record) -> MutationOutcome:
        records = self._store.read_all()
        records.append(record)
        written = self._store.write_all(records)
        logger.info("Data saved: %s", record)
        return MutationOutcome("create", record.get("id"), 0, written)

    def update(self, record: Record) -> MutationOutcome:
        if "id" not in record:
            raise ValueError("update requires a record carrying an 'id'")
        record_id = record["id"]
        records = self._store.read_all()
        for index, existing in enumerate(records):
            if isinstance(existing, dict) and loose_equals(existing.get("id"), record_id):
                records[index] = record
                written = self._store.write_all(records)
                logger.info("Data updated: %s", record)
                return MutationOutcome("update", record_id, 1, written)
        logger.info("No record with id %s to update", record_id)
        return MutationOutcome("update", record_id, 0, None)

    def delete(self, record_id: Any) -> MutationOutcome:
        records = self._store.read_all()
        kept = [
            item
            for item in records
            if not (isinstance(item, dict) and strict_equals(item.get("id"), record_id))
        ]
        written = self._store.write_all(kept)
        logger.info("Data with id %s deleted", record_id)
        return MutationOutcome("delete", record_id, len(records) - len(kept), written)
