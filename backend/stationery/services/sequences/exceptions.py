"""Sequence allocation exceptions."""

from stationery.services.exceptions import ServiceError


class SequenceAllocationError(ServiceError):
    """A sequential id could not be allocated.

    Raised when the counter store is unavailable or the compare-and-swap
    retry budget is exhausted. Entity creation must fail when this is raised.
    """

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Failed to allocate from sequence {name!r}: {reason}")
