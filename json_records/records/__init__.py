"""Record mutation package exports."""
from .dispatcher import DispatchError, IntentDispatcher, bind_mutator
from .ids import RecordIdGenerator, parse_record_id
from .matching import loose_equals, strict_equals
from .mutator import MutationOutcome, RecordMutator

__all__ = [
    "DispatchError",
    "IntentDispatcher",
    "MutationOutcome",
    "RecordIdGenerator",
    "RecordMutator",
    "bind_mutator",
    "loose_equals",
    "parse_record_id",
    "strict_equals",
]
