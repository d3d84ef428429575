"""User domain exceptions."""

from stationery.services.exceptions import ConflictError, NotFoundError, ValidationError


class UserNotFound(NotFoundError):
    """User not found."""

    pass


class EmailAlreadyRegistered(ConflictError):
    """An account with this email already exists."""

    pass


class AdminRegistrationNotAllowed(ValidationError):
    """Admin accounts cannot be created through public registration."""

    pass


class InvalidOtp(ValidationError):
    """OTP does not match or has expired."""

    pass


class NotAnInstitute(ValidationError):
    """Operation requires an institute account."""

    pass


class NotAnAdmin(ValidationError):
    """Operation requires an admin account."""

    pass


class CannotSuspendSelf(ValidationError):
    """Admins cannot suspend their own account."""

    pass


class CannotDeleteSelf(ValidationError):
    """Admins cannot delete their own account."""

    pass
