"""Shared fields for entities carrying a storage key and a sequential id."""

from datetime import UTC, datetime
from typing import ClassVar

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from stationery.models.enums import SequenceName
from stationery.models.types import ULIDType, new_key


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from backends without timezone support."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class IdentifiedEntity(SQLModel):
    """Base for User, Product, Order and Category.

    ``key`` is assigned on construction and is the primary key. ``id`` is
    drawn from the entity's named sequence when the creation completes and
    is what every other record refers to.

    Fields use ``sa_type`` rather than ``sa_column`` so each concrete table
    gets its own Column instances.
    """

    sequence_name: ClassVar[SequenceName]

    key: str = Field(default_factory=new_key, primary_key=True, sa_type=ULIDType)
    id: int | None = Field(default=None, unique=True, index=True)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    def touch(self) -> None:
        self.updated_at = utc_now()
