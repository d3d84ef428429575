"""Base service exceptions.

Domain packages subclass these; an outer layer maps the base classes to
its own responses (not-found, bad request, conflict, forbidden). Lookups
that may legitimately miss return None instead of raising.
"""


class ServiceError(Exception):
    """Base service exception."""

    pass


class NotFoundError(ServiceError):
    """Requested record does not exist."""

    pass


class ValidationError(ServiceError):
    """Input was rejected before anything was written."""

    pass


class ConflictError(ServiceError):
    """Resource already exists or is in a state that forbids the operation."""

    pass


class PermissionDeniedError(ServiceError):
    """Caller may not access or modify this resource."""

    pass
