"""Custom SQLAlchemy types and reference value objects."""

from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, model_validator
from sqlalchemy import Uuid
from sqlalchemy.types import TypeDecorator
from ulid import ULID


class ULIDType(TypeDecorator[str]):
    """Storage-native key column: a ULID kept in a UUID column.

    Binds ULID objects or 26-character strings; always loads as the
    string form, which is what references and lookups compare against.
    """

    impl = Uuid
    cache_ok = True

    def process_bind_param(self, value: str | ULID | None, dialect: Any) -> UUID | None:
        if value is None:
            return None
        if isinstance(value, str):
            value = ULID.from_str(value)
        if isinstance(value, ULID):
            return value.to_uuid()
        raise ValueError(f"Not a storage key: {value!r}")

    def process_result_value(self, value: UUID | None, dialect: Any) -> str | None:
        if value is None:
            return None
        return str(ULID.from_uuid(value))


def new_key() -> str:
    """Generate a new storage-native key."""
    return str(ULID())


def is_storage_key(value: str) -> bool:
    """Whether ``value`` is a well-formed storage-native key."""
    try:
        ULID.from_str(value)
    except ValueError:
        return False
    return True


class RefKind(StrEnum):
    """Which identifier space a reference points into."""

    LEGACY_KEY = "legacy_key"
    SEQUENTIAL_ID = "sequential_id"


class EntityRef(BaseModel):
    """Reference from one entity to another.

    Stored as a pair of nullable columns (``<name>_id`` and
    ``<name>_legacy_key``) of which at most one is set. Records created
    before integer ids existed carry a legacy key until the rewriter
    replaces it.
    """

    model_config = ConfigDict(frozen=True)

    kind: RefKind
    value: int | str

    @model_validator(mode="after")
    def _check_value(self) -> "EntityRef":
        if self.kind is RefKind.SEQUENTIAL_ID:
            if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value < 0:
                raise ValueError(f"Sequential id must be a non-negative integer, got {self.value!r}")
        elif not isinstance(self.value, str) or not self.value:
            raise ValueError(f"Legacy key must be a non-empty string, got {self.value!r}")
        return self

    @classmethod
    def sequential(cls, entity_id: int) -> "EntityRef":
        return cls(kind=RefKind.SEQUENTIAL_ID, value=entity_id)

    @classmethod
    def legacy(cls, key: str) -> "EntityRef":
        return cls(kind=RefKind.LEGACY_KEY, value=key)

    @classmethod
    def from_raw(cls, raw: int | str) -> "EntityRef":
        """Classify an untagged value imported from pre-migration data.

        Integers and all-digit strings are taken as sequential ids,
        anything else as a legacy key.
        """
        sequential_id = parse_sequential_id(raw)
        if sequential_id is not None:
            return cls.sequential(sequential_id)
        return cls.legacy(str(raw).strip())

    @property
    def is_sequential(self) -> bool:
        return self.kind is RefKind.SEQUENTIAL_ID


def parse_sequential_id(raw: object) -> int | None:
    """Return ``raw`` as a non-negative integer id, or None if it is not one."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    if isinstance(raw, str):
        candidate = raw.strip()
        if candidate.isascii() and candidate.isdigit():
            return int(candidate)
    return None
