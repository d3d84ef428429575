"""Database models."""

# ruff: noqa: I001 - Import order matters for SQLAlchemy relationship resolution
from sqlmodel import SQLModel

from stationery.models.enums import (
    InstituteType,
    OrderStatus,
    OrderType,
    PaymentMethod,
    PaymentStatus,
    SequenceName,
    UserRole,
    UserStatus,
    VerificationStatus,
)
from stationery.models.base import IdentifiedEntity
from stationery.models.sequence import SequenceCounter
from stationery.models.user import User
from stationery.models.catalog import Category, Product
from stationery.models.order import Order, OrderLineItem
from stationery.models.cart import CartItem, WishlistEntry
from stationery.models.types import EntityRef, RefKind

__all__ = [
    "SQLModel",
    "IdentifiedEntity",
    "SequenceCounter",
    "User",
    "Category",
    "Product",
    "Order",
    "OrderLineItem",
    "CartItem",
    "WishlistEntry",
    "EntityRef",
    "RefKind",
    "SequenceName",
    "UserRole",
    "UserStatus",
    "VerificationStatus",
    "InstituteType",
    "OrderStatus",
    "OrderType",
    "PaymentMethod",
    "PaymentStatus",
]
