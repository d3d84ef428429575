"""Named sequence counter model."""

from sqlalchemy import BigInteger
from sqlmodel import Field, SQLModel


class SequenceCounter(SQLModel, table=True):
    """Next integer to hand out for one named sequence.

    Rows are created lazily by the first allocation for a name and are only
    ever incremented, except by the administrative reset.
    """

    __tablename__ = "sequence_counters"

    name: str = Field(primary_key=True, max_length=64)
    next_value: int = Field(sa_type=BigInteger)
