"""Medication schemas for request/response validation."""

from datetime import datetime
from typing import ClassVar, Literal

from pydantic import field_validator

from healthsync.schemas.base import ApiResponse, CamelModel, PartialUpdate
from healthsync.utils.validators import (
    is_valid_dosage,
    is_valid_hex_color,
    is_valid_medication_name,
    is_valid_time,
    sanitize_string,
)

Frequency = Literal["daily", "weekly", "asNeeded"]


def _check_name(v: str) -> str:
    v = sanitize_string(v)
    if not is_valid_medication_name(v):
        raise ValueError("Invalid medication name (2-100 characters required)")
    return v


def _check_dosage(v: str) -> str:
    v = v.strip()
    if not is_valid_dosage(v):
        raise ValueError("Invalid dosage format (e.g., 100mg, 5ml)")
    return v


def _check_time(v: str) -> str:
    if not is_valid_time(v):
        raise ValueError("Invalid time format (use HH:MM)")
    return v


def _check_color(v: str | None) -> str | None:
    if v is not None and not is_valid_hex_color(v):
        raise ValueError("Invalid color format (use hex color)")
    return v


class MedicationCreate(CamelModel):
    """Schema for adding a medication."""

    name: str
    dosage: str
    time: str
    frequency: Frequency = "daily"
    color: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("dosage")
    @classmethod
    def validate_dosage(cls, v: str) -> str:
        return _check_dosage(v)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return _check_time(v)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str | None) -> str | None:
        return _check_color(v)


class MedicationUpdate(PartialUpdate):
    """Schema for editing a medication; only the sent fields change."""

    nullable_fields: ClassVar[frozenset[str]] = frozenset({"color"})

    name: str | None = None
    dosage: str | None = None
    time: str | None = None
    frequency: Frequency | None = None
    color: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return None if v is None else _check_name(v)

    @field_validator("dosage")
    @classmethod
    def validate_dosage(cls, v: str | None) -> str | None:
        return None if v is None else _check_dosage(v)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str | None) -> str | None:
        return None if v is None else _check_time(v)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str | None) -> str | None:
        return _check_color(v)


class Medication(CamelModel):
    """Medication document as stored under ``medications/{id}``."""

    id: str
    user_id: str
    name: str
    dosage: str | None = None
    time: str | None = None
    frequency: Frequency = "daily"
    color: str | None = None
    taken: bool = False
    last_taken: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class MedicationResponse(ApiResponse):
    medication: Medication


class MedicationListResponse(ApiResponse):
    meds: list[Medication]
