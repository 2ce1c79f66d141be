"""Storage package exports."""
from .json_store import JSONCollectionStore, Record

__all__ = ["JSONCollectionStore", "Record"]
