"""Sequential identifier convention and lookups."""

from stationery.services.identity.identifiers import IdentifierService
from stationery.services.identity.lookup import (
    find_by_any_id,
    find_by_key,
    find_by_sequential_id,
    resolve_ref,
)

__all__ = [
    "IdentifierService",
    "find_by_any_id",
    "find_by_key",
    "find_by_sequential_id",
    "resolve_ref",
]
