"""Shared schema bases."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Schema whose JSON (and stored document) keys are camelCase.

    Python code uses the snake_case attribute names; both spellings are
    accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self, exclude_unset: bool = False) -> dict:
        """Field values keyed the way documents are stored."""
        return self.model_dump(by_alias=True, exclude_unset=exclude_unset)


class ApiResponse(CamelModel):
    """Envelope flag carried by every successful response."""

    ok: bool = True


class PartialUpdate(CamelModel):
    """
    Patch schema: omitted fields stay untouched, sent fields replace stored ones.

    Only fields listed in ``nullable_fields`` may be cleared with an explicit null.
    """

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_cleared_fields(self) -> "PartialUpdate":
        fields = type(self).model_fields
        cleared = sorted(
            fields[name].alias or name
            for name in self.model_fields_set
            if getattr(self, name) is None and name not in self.nullable_fields
        )
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self
