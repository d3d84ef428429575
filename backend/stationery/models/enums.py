"""Enum definitions for database models."""

from enum import Enum as PyEnum
from enum import StrEnum

from sqlalchemy import Enum


class SequenceName(StrEnum):
    """Named counters handing out sequential integer ids."""

    USER = "userId"
    PRODUCT = "productId"
    ORDER = "orderId"
    CATEGORY = "categoryId"


class UserRole(StrEnum):
    PERSONAL = "personal"
    INSTITUTE = "institute"
    ADMIN = "admin"


class UserStatus(StrEnum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class VerificationStatus(StrEnum):
    """Institute verification review state."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class InstituteType(StrEnum):
    SCHOOL = "school"
    COLLEGE = "college"
    WHOLESALER = "wholesaler"


class OrderStatus(StrEnum):
    """Fulfilment status of an order."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(StrEnum):
    ESEWA = "esewa"
    KHALTI = "khalti"
    COD = "cod"


class PaymentStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class OrderType(StrEnum):
    REGULAR = "regular"
    BULK = "bulk"


def _sa_enum(enum_cls: type[PyEnum], name: str) -> Enum:
    """Native enum on PostgreSQL, VARCHAR + CHECK elsewhere; stores member values."""
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda e: [member.value for member in e],
    )


# SQLAlchemy enum types - define alongside the enums for co-location
USER_ROLE_SA_ENUM = _sa_enum(UserRole, "userrole")
USER_STATUS_SA_ENUM = _sa_enum(UserStatus, "userstatus")
VERIFICATION_STATUS_SA_ENUM = _sa_enum(VerificationStatus, "verificationstatus")
INSTITUTE_TYPE_SA_ENUM = _sa_enum(InstituteType, "institutetype")
ORDER_STATUS_SA_ENUM = _sa_enum(OrderStatus, "orderstatus")
PAYMENT_METHOD_SA_ENUM = _sa_enum(PaymentMethod, "paymentmethod")
PAYMENT_STATUS_SA_ENUM = _sa_enum(PaymentStatus, "paymentstatus")
ORDER_TYPE_SA_ENUM = _sa_enum(OrderType, "ordertype")
