"""User registration, OTP verification and institute verification service.

Email delivery is not done here: operations that issue an OTP return it so
the caller can hand it to the mailer.
"""

import secrets
from datetime import timedelta
from typing import Any

import structlog
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from stationery.config import settings
from stationery.models.base import as_utc, utc_now
from stationery.models.enums import InstituteType, UserRole, UserStatus, VerificationStatus
from stationery.models.references import set_ref
from stationery.models.types import EntityRef, parse_sequential_id
from stationery.models.user import User
from stationery.services.exceptions import ValidationError
from stationery.services.identity.identifiers import IdentifierService
from stationery.services.identity.lookup import find_by_any_id
from stationery.services.users.exceptions import (
    AdminRegistrationNotAllowed,
    CannotDeleteSelf,
    CannotSuspendSelf,
    EmailAlreadyRegistered,
    InvalidOtp,
    NotAnAdmin,
    NotAnInstitute,
    UserNotFound,
)
from stationery.services.users.schemas import InstituteVerificationDetails, RegistrationRequest

logger = structlog.get_logger(__name__)

_email_adapter = TypeAdapter(EmailStr)
_PROFILE_FIELDS = frozenset({"name", "phone", "address"})


def generate_otp(length: int | None = None) -> str:
    """Random numeric OTP of ``length`` digits without a leading zero."""
    length = length or settings.otp_length
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


class UserService:
    """Service for account lifecycle operations."""

    def __init__(self, session: AsyncSession, identifiers: IdentifierService | None = None):
        self.session = session
        self.identifiers = identifiers or IdentifierService(session)

    async def register(self, request: RegistrationRequest) -> tuple[User, str]:
        """Register a personal or institute account. Returns (user, otp)."""
        try:
            role = UserRole(request.role)
        except ValueError:
            raise ValidationError(f"Unknown role: {request.role}")
        if role == UserRole.ADMIN:
            raise AdminRegistrationNotAllowed("Admin registration is not allowed")

        email = _normalize_email(str(request.email))
        await self._ensure_email_available(email)

        user = User(
            name=request.name.strip(),
            email=email,
            role=role,
            phone=request.phone,
            address=request.address,
        )
        if role == UserRole.INSTITUTE:
            user.verification_status = VerificationStatus.PENDING
            user.institute_type = InstituteType.SCHOOL
            user.institute_name = ""

        otp = self._issue_otp(user)
        await self.identifiers.create_with_sequential_id(user)
        logger.info("Registered user", user_id=user.id, role=role.value)
        return user, otp

    async def create_admin(self, name: str, email: str) -> User:
        email = _normalize_email(email)
        await self._ensure_email_available(email)
        user = User(name=name.strip(), email=email, role=UserRole.ADMIN, is_verified=True)
        return await self.identifiers.create_with_sequential_id(user)

    async def get_user(self, raw_id: Any) -> User:
        """Get user by sequential id or storage key."""
        user = await find_by_any_id(self.session, User, raw_id)
        if not user:
            raise UserNotFound()
        return user

    async def get_user_by_email(self, email: str) -> User:
        result = await self.session.execute(select(User).where(User.email == _normalize_email(email)))
        user = result.scalars().first()
        if not user:
            raise UserNotFound()
        return user

    async def resend_otp(self, email: str) -> tuple[User, str]:
        user = await self.get_user_by_email(email)
        otp = self._issue_otp(user)
        user.touch()
        await self.session.commit()
        return user, otp

    async def verify_otp(self, email: str, otp: str) -> User:
        """Mark the account verified when ``otp`` matches and has not expired."""
        user = await self.get_user_by_email(email)
        submitted = otp.strip() if isinstance(otp, str) else ""
        if (
            user.otp is None
            or user.otp_expires_at is None
            or not submitted.isascii()
            or not secrets.compare_digest(user.otp, submitted)
            or as_utc(user.otp_expires_at) < utc_now()
        ):
            raise InvalidOtp("Invalid or expired OTP")

        user.is_verified = True
        user.otp = None
        user.otp_expires_at = None
        user.touch()
        await self.session.commit()
        logger.info("User verified", user_id=user.id)
        return user

    async def update_profile(self, raw_id: Any, **fields: Any) -> User:
        """Update the caller's own name, phone or address."""
        unknown = set(fields) - _PROFILE_FIELDS
        if unknown:
            raise ValidationError(f"Invalid updates: {', '.join(sorted(unknown))}")
        if "name" in fields and not (fields["name"] or "").strip():
            raise ValidationError("Name is required")

        user = await self.get_user(raw_id)
        for field_name, value in fields.items():
            setattr(user, field_name, value.strip() if field_name == "name" else value)
        user.touch()
        await self.session.commit()
        return user

    async def list_users(
        self,
        *,
        search: str | None = None,
        role: UserRole | None = None,
        status: UserStatus | None = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[User], int]:
        """List accounts, newest first. Returns (users, total_count).

        A search term made of digits also matches the user id.
        """
        filters = []
        if search and search.strip():
            term = search.strip()
            pattern = f"%{term}%"
            matches = [
                User.name.ilike(pattern),  # type: ignore[attr-defined]
                User.email.ilike(pattern),  # type: ignore[attr-defined]
                User.phone.ilike(pattern),  # type: ignore[union-attr]
                User.address.ilike(pattern),  # type: ignore[union-attr]
            ]
            search_id = parse_sequential_id(term)
            if search_id is not None:
                matches.append(User.id == search_id)
            filters.append(or_(*matches))
        if role is not None:
            filters.append(User.role == role)
        if status is not None:
            filters.append(User.status == status)

        statement = (
            select(User)
            .where(*filters)
            .order_by(User.created_at.desc(), User.key.desc())  # type: ignore[attr-defined]
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(statement)
        users = list(result.scalars().all())

        count_result = await self.session.execute(select(func.count()).select_from(User).where(*filters))
        return users, count_result.scalar() or 0

    async def set_status(self, raw_id: Any, status: UserStatus, acting_user: User) -> User:
        return await self.update_user(raw_id, acting_user, status=status)

    async def update_user(
        self,
        raw_id: Any,
        acting_user: User,
        *,
        name: str | None = None,
        email: str | None = None,
        role: UserRole | None = None,
        status: UserStatus | None = None,
        phone: str | None = None,
        address: str | None = None,
    ) -> User:
        """Admin edit of any account. ``None`` leaves a field unchanged."""
        _require_admin(acting_user)
        user = await self.get_user(raw_id)
        if user.id == acting_user.id and status == UserStatus.SUSPENDED:
            raise CannotSuspendSelf("You cannot suspend your own account")

        if email is not None:
            email = _normalize_email(email)
            if email != user.email:
                await self._ensure_email_available(email)
                user.email = email
        if name is not None and name.strip():
            user.name = name.strip()
        if role is not None:
            user.role = role
        if status is not None:
            user.status = status
        if phone is not None:
            user.phone = phone
        if address is not None:
            user.address = address
        user.touch()
        await self.session.commit()
        logger.info("User updated", user_id=user.id, admin_id=acting_user.id)
        return user

    async def delete_user(self, raw_id: Any, acting_user: User) -> None:
        """Admin removal of an account. Its id is never handed out again."""
        _require_admin(acting_user)
        user = await self.get_user(raw_id)
        if user.id == acting_user.id:
            raise CannotDeleteSelf("You cannot delete your own account")
        await self.session.delete(user)
        await self.session.commit()
        logger.info("User deleted", user_id=user.id, key=user.key, admin_id=acting_user.id)

    async def submit_verification(self, raw_id: Any, details: InstituteVerificationDetails) -> User:
        """Record institute details and put the account back into review."""
        user = await self.get_user(raw_id)
        if not user.is_institute:
            raise NotAnInstitute("User is not an institute")

        user.institute_name = details.institute_name.strip()
        user.institute_type = details.institute_type
        user.invoice_number = details.invoice_number
        user.pan_number = details.pan_number
        user.gst_number = details.gst_number
        user.contact_number = details.contact_number
        user.verification_status = VerificationStatus.PENDING
        set_ref(user, "verified_by", None)
        user.verified_at = None
        user.touch()
        await self.session.commit()
        logger.info("Institute verification submitted", user_id=user.id)
        return user

    async def list_pending_verifications(self) -> list[User]:
        statement = (
            select(User)
            .where(User.role == UserRole.INSTITUTE, User.verification_status == VerificationStatus.PENDING)
            .order_by(User.created_at)  # type: ignore[arg-type]
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def review_verification(
        self,
        raw_id: Any,
        admin: User,
        status: VerificationStatus,
        comments: str | None = None,
    ) -> User:
        """Approve or reject an institute. The reviewing admin is stored by sequential id."""
        _require_admin(admin)
        if status == VerificationStatus.PENDING:
            raise ValidationError("Review must approve or reject")

        user = await self.get_user(raw_id)
        if not user.is_institute:
            raise NotAnInstitute("User is not an institute")

        user.verification_status = status
        if comments:
            user.verification_comments = comments
        set_ref(user, "verified_by", EntityRef.sequential(admin.id))
        user.verified_at = utc_now()
        user.touch()
        await self.session.commit()
        logger.info("Institute verification reviewed", user_id=user.id, status=status.value, admin_id=admin.id)
        return user

    async def _ensure_email_available(self, email: str) -> None:
        result = await self.session.execute(select(User.key).where(User.email == email))
        if result.first() is not None:
            raise EmailAlreadyRegistered("Email already exists")

    def _issue_otp(self, user: User) -> str:
        otp = generate_otp()
        user.otp = otp
        user.otp_expires_at = utc_now() + timedelta(minutes=settings.otp_ttl_minutes)
        return otp


def _require_admin(user: User) -> None:
    if user.role != UserRole.ADMIN or user.id is None:
        raise NotAnAdmin("Only admins can perform this action")


def _normalize_email(email: str) -> str:
    normalized = email.strip().lower()
    try:
        _email_adapter.validate_python(normalized)
    except PydanticValidationError:
        raise ValidationError("Invalid email format")
    return normalized
