"""User schemas for request/response validation."""

from datetime import datetime
from typing import ClassVar, Literal

from pydantic import EmailStr, Field, field_validator

from healthsync.schemas.base import ApiResponse, CamelModel, PartialUpdate
from healthsync.utils.validators import (
    is_valid_age,
    is_valid_name,
    is_valid_phone_number,
    sanitize_string,
)

UserRole = Literal["patient", "doctor"]


class UserProfileUpdate(PartialUpdate):
    """Profile fields a user may change; age and phone may be cleared."""

    nullable_fields: ClassVar[frozenset[str]] = frozenset({"age", "phone"})

    name: str | None = None
    email: EmailStr | None = None
    role: UserRole | None = None
    age: int | None = None
    phone: str | None = Field(None, max_length=20)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = sanitize_string(v)
        if not is_valid_name(v):
            raise ValueError("Invalid name (2-50 characters, letters and spaces only)")
        return v

    @field_validator("age")
    @classmethod
    def validate_age(cls, v: int | None) -> int | None:
        if v is not None and not is_valid_age(v):
            raise ValueError("Invalid age (must be between 0 and 150)")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v is not None and not is_valid_phone_number(v):
            raise ValueError("Invalid phone number format")
        return v


class UserCreate(UserProfileUpdate):
    """Profile submitted on first sign-in; the role defaults to patient."""

    role: UserRole = "patient"


class UserAccount(CamelModel):
    """User document as stored under ``users/{uid}``."""

    uid: str
    email: str | None = None
    name: str | None = None
    role: UserRole = "patient"
    xp: int = 0
    streak: int = 0
    best_streak: int = 0
    last_active: datetime | None = None
    health_score: int = 0
    age: int | None = None
    phone: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserResponse(ApiResponse):
    user: UserAccount


class UserUpsertResponse(ApiResponse):
    id: str
    created: bool


class UserListResponse(ApiResponse):
    users: list[UserAccount]
    total: int
