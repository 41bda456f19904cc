"""Symptom schemas for request/response validation."""

from datetime import datetime

from pydantic import Field, field_validator

from healthsync.schemas.base import ApiResponse, CamelModel
from healthsync.utils.validators import SEVERITY_MAX, SEVERITY_MIN, sanitize_string


class SymptomCreate(CamelModel):
    """Schema for logging a symptom. Severity uses the 1-5 scale."""

    name: str
    severity: int = Field(..., strict=True)
    notes: str | None = Field(None, max_length=1000)
    date: datetime | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = sanitize_string(v)
        if len(v) < 2:
            raise ValueError("Symptom name is required (minimum 2 characters)")
        return v

    @field_validator("severity")
    @classmethod
    def validate_severity(cls, v: int) -> int:
        if not SEVERITY_MIN <= v <= SEVERITY_MAX:
            raise ValueError(f"Severity must be a number between {SEVERITY_MIN} and {SEVERITY_MAX}")
        return v

    @field_validator("notes")
    @classmethod
    def sanitize_notes(cls, v: str | None) -> str | None:
        return None if v is None else sanitize_string(v)


class Symptom(CamelModel):
    """Symptom document as stored under ``symptoms/{id}``."""

    id: str
    user_id: str
    name: str
    severity: int | None = None
    notes: str | None = None
    date: datetime | None = None


class SymptomResponse(ApiResponse):
    symptom: Symptom


class SymptomListResponse(ApiResponse):
    symptoms: list[Symptom]
