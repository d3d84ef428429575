"""User database model."""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import Column, DateTime
from sqlmodel import Field

from stationery.models.base import IdentifiedEntity
from stationery.models.enums import (
    INSTITUTE_TYPE_SA_ENUM,
    USER_ROLE_SA_ENUM,
    USER_STATUS_SA_ENUM,
    VERIFICATION_STATUS_SA_ENUM,
    InstituteType,
    SequenceName,
    UserRole,
    UserStatus,
    VerificationStatus,
)
from stationery.models.references import ref_constraint


class User(IdentifiedEntity, table=True):
    """Customer, institute (bulk buyer) or admin account.

    Institute accounts carry the verification details inline; the reviewing
    admin is held as the ``verified_by`` reference.
    """

    __tablename__ = "users"
    __table_args__ = (ref_constraint("users", "verified_by", required=False),)

    sequence_name: ClassVar[SequenceName] = SequenceName.USER

    name: str
    email: str = Field(unique=True, index=True)
    role: UserRole = Field(default=UserRole.PERSONAL, sa_column=Column(USER_ROLE_SA_ENUM, nullable=False))
    status: UserStatus = Field(default=UserStatus.ACTIVE, sa_column=Column(USER_STATUS_SA_ENUM, nullable=False))
    is_verified: bool = False
    otp: str | None = None
    otp_expires_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
    phone: str | None = None
    address: str | None = None

    # Institute verification
    verification_status: VerificationStatus | None = Field(
        default=None, sa_column=Column(VERIFICATION_STATUS_SA_ENUM, nullable=True)
    )
    institute_name: str | None = None
    institute_type: InstituteType | None = Field(default=None, sa_column=Column(INSTITUTE_TYPE_SA_ENUM, nullable=True))
    invoice_number: str | None = None
    pan_number: str | None = None
    gst_number: str | None = None
    contact_number: str | None = None
    verification_comments: str | None = None
    verified_by_id: int | None = None
    verified_by_legacy_key: str | None = None
    verified_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))

    @property
    def is_institute(self) -> bool:
        return self.role == UserRole.INSTITUTE
