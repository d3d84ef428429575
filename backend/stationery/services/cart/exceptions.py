"""Cart and wishlist domain exceptions."""

from stationery.services.exceptions import ConflictError, NotFoundError, ValidationError


class InvalidProductId(ValidationError):
    """Product id is not a positive integer."""

    pass


class InvalidQuantity(ValidationError):
    """Quantity must be at least 1."""

    pass


class InsufficientStock(ValidationError):
    """Requested quantity exceeds available stock."""

    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. Available: {available}, Requested: {requested}"
        )


class CartItemNotFound(NotFoundError):
    """Product is not in the cart."""

    pass


class AlreadyInWishlist(ConflictError):
    """Product already in wishlist."""

    pass


class NotInWishlist(NotFoundError):
    """Product is not in the wishlist."""

    pass
