"""Patient schemas for request/response validation."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class PatientCreate(BaseModel):
    """Schema for registering a patient in the clinic."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., min_length=1, max_length=100, alias="firstName")
    last_name: str = Field(..., min_length=1, max_length=100, alias="lastName")
    document_type: str = Field(default="DNI", max_length=20, alias="documentType")
    document_number: str = Field(..., min_length=3, max_length=30, alias="documentNumber")
    birth_date: date | None = Field(None, alias="birthDate")
    phone: str = Field(..., min_length=7, max_length=30)
    email: EmailStr | None = None
    address: str | None = Field(None, max_length=500)
    allergies: str | None = Field(None, max_length=1000)
    notes: str | None = Field(None, max_length=2000)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        """Validate phone number format."""
        cleaned = (
            v.replace("-", "").replace(" ", "").replace("(", "").replace(")", "").replace("+", "")
        )
        if not cleaned.isdigit():
            raise ValueError("Phone number must contain only digits and separators")
        if len(cleaned) < 7:
            raise ValueError("Phone number must have at least 7 digits")
        return v

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: date | None) -> date | None:
        """Birth date cannot be in the future."""
        if v is not None and v > date.today():
            raise ValueError("Birth date cannot be in the future")
        return v


class PatientResponse(BaseModel):
    """Schema for patient response."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    document_type: str = Field(..., alias="documentType")
    document_number: str = Field(..., alias="documentNumber")
    birth_date: date | None = Field(None, alias="birthDate")
    phone: str
    email: str | None = None
    address: str | None = None
    allergies: str | None = None
    notes: str | None = None
    is_active: bool = Field(..., alias="isActive")
    created_at: datetime = Field(..., alias="createdAt")


class PatientListResponse(BaseModel):
    """Schema for paginated patient list response."""

    total: int
    page: int
    page_size: int
    items: list[PatientResponse]
