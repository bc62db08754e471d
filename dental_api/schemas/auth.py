"""Authentication schemas."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, model_validator


class UserRole(str, Enum):
    """Staff role enumeration."""

    SUPER_ADMIN = "super_admin"
    TENANT_ADMIN = "tenant_admin"
    DENTIST = "dentist"
    ASSISTANT = "assistant"
    RECEPTIONIST = "receptionist"


class UserStatus(str, Enum):
    """Staff account status enumeration."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


ADMIN_ROLES = frozenset({UserRole.SUPER_ADMIN, UserRole.TENANT_ADMIN})

# Roles that can be assigned appointments
PRACTITIONER_ROLES = frozenset({UserRole.DENTIST, UserRole.TENANT_ADMIN})


class LoginRequest(BaseModel):
    """Email/password login scoped to one clinic."""

    email: EmailStr
    password: str = Field(..., min_length=1)
    subdomain: str = Field(..., min_length=1, max_length=100)


class TokenRefresh(BaseModel):
    """Token refresh request schema."""

    refresh_token: str


class UserResponse(BaseModel):
    """Staff user information."""

    id: UUID
    tenant_id: UUID
    email: EmailStr
    first_name: str
    last_name: str
    role: UserRole
    status: UserStatus

    model_config = {"from_attributes": True}


class UserAccessUpdate(BaseModel):
    """Role or account status change made by a clinic administrator."""

    role: UserRole | None = None
    status: UserStatus | None = None

    @model_validator(mode="after")
    def require_change(self) -> "UserAccessUpdate":
        if self.role is None and self.status is None:
            raise ValueError("Provide a role or a status to change")
        return self


class LoginResponse(BaseModel):
    """Login response with tokens and user info."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class Principal(BaseModel):
    """Authenticated caller resolved from the access token."""

    user_id: UUID
    tenant_id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        """Whether the caller administers the clinic."""
        return self.role in ADMIN_ROLES
