"""Named sequence counters."""

from stationery.services.sequences.counter_store import SequenceCounterStore
from stationery.services.sequences.exceptions import SequenceAllocationError

__all__ = ["SequenceAllocationError", "SequenceCounterStore"]
