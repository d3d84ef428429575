"""Catalog domain exceptions."""

from stationery.services.exceptions import ConflictError, NotFoundError, ValidationError


class ProductNotFound(NotFoundError):
    """Product not found."""

    pass


class CategoryNotFound(NotFoundError):
    """Category not found."""

    pass


class CategoryAlreadyExists(ConflictError):
    """A category with the same name already exists."""

    pass


class InvalidProductData(ValidationError):
    """Product fields failed validation."""

    pass
