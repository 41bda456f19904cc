"""Record-level validation: raw input in, typed record or violation list out."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from healthsync.core.exceptions import ValidationException
from healthsync.schemas.medications import MedicationCreate
from healthsync.schemas.symptoms import SymptomCreate
from healthsync.schemas.users import UserProfileUpdate

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class ValidationResult(Generic[ModelT]):
    """Either a fully validated record or the reasons it was rejected."""

    value: ModelT | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.value is not None and not self.errors

    def unwrap(self) -> ModelT:
        """
        Return the validated record.

        Raises:
            ValidationException: If validation failed
        """
        if self.value is None or self.errors:
            raise ValidationException("; ".join(self.errors) or "Invalid input", self.errors)
        return self.value


def error_messages(errors: Sequence[Any]) -> list[str]:
    """
    Flatten pydantic error dicts into readable messages.

    Messages raised by our own validators are used as they are; the request
    body prefix FastAPI adds to locations is dropped.
    """
    messages = []
    for error in errors:
        ctx_error = error.get("ctx", {}).get("error")
        if isinstance(ctx_error, ValueError):
            messages.append(str(ctx_error))
            continue
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return messages


def _validate(model: type[ModelT], data: Any, label: str) -> ValidationResult[ModelT]:
    if not isinstance(data, dict):
        return ValidationResult(errors=[f"Invalid {label} data"])
    try:
        return ValidationResult(value=model.model_validate(data))
    except PydanticValidationError as e:
        return ValidationResult(errors=error_messages(e.errors()))


def validate_medication_data(data: Any) -> ValidationResult[MedicationCreate]:
    return _validate(MedicationCreate, data, "medication")


def validate_symptom_data(data: Any) -> ValidationResult[SymptomCreate]:
    return _validate(SymptomCreate, data, "symptom")


def validate_user_profile(data: Any) -> ValidationResult[UserProfileUpdate]:
    return _validate(UserProfileUpdate, data, "profile")
