"""Order domain exceptions."""

from stationery.services.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError


class OrderNotFound(NotFoundError):
    """Order not found."""

    pass


class EmptyOrder(ValidationError):
    """Order has no items."""

    pass


class OrderAccessDenied(PermissionDeniedError):
    """Order belongs to another user."""

    pass


class PaymentAlreadyCompleted(ConflictError):
    """Payment for this order was already completed."""

    pass
