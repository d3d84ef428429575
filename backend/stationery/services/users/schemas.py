"""Input schemas for user operations."""

from pydantic import BaseModel, EmailStr, Field

from stationery.models.enums import InstituteType


class InstituteVerificationDetails(BaseModel):
    """Details an institute submits for bulk-order verification."""

    institute_name: str = Field(min_length=1)
    institute_type: InstituteType = InstituteType.SCHOOL
    invoice_number: str = ""
    pan_number: str = ""
    gst_number: str = ""
    contact_number: str = ""


class RegistrationRequest(BaseModel):
    """Public registration payload."""

    name: str = Field(min_length=1)
    email: EmailStr
    role: str = "personal"
    phone: str | None = None
    address: str | None = None
