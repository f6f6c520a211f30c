"""Pydantic schemas and helpers for validating API payloads and LLM output."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, field_validator

from models.taxonomy import SECTIONS, validate_section


class ClothingMetadata(BaseModel):
    """User-entered fields accompanying an uploaded photo."""

    section: str
    name: str = Field(min_length=1)
    type: str = ""
    color: str = ""
    style: str = ""

    @field_validator("section")
    @classmethod
    def _validate_section(cls, section: str) -> str:
        return validate_section(section)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, name: str) -> str:
        if not name.strip():
            raise ValueError("name cannot be blank")
        return name.strip()


class ClothingUpdateRequest(BaseModel):
    """Editable fields of a catalog entry. Section and image are fixed."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    style: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _validate_name(cls, name: Optional[str]) -> Optional[str]:
        if name is not None and not name.strip():
            raise ValueError("name cannot be blank")
        return name


class OutfitIds(BaseModel):
    """Identifier view of an outfit selection. ``None`` marks an empty slot."""

    top: Optional[str] = None
    bottom: Optional[str] = None
    shoes: Optional[str] = None


class OutfitPromptRequest(BaseModel):
    """Free-form styling request plus the selection currently on screen."""

    prompt: str = Field(min_length=1, max_length=2000)
    previous: Optional[OutfitIds] = None


class SaveOutfitRequest(BaseModel):
    """A complete triple to toggle in the saved outfits list."""

    top_id: str = Field(min_length=1)
    bottom_id: str = Field(min_length=1)
    shoes_id: str = Field(min_length=1)


class LLMSelectionPayload(BaseModel):
    """Shape of the JSON object returned by the completion endpoint.

    Each slot may be absent, null, a string or an integer identifier. Any other
    value type is a malformed payload. Unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    top: Optional[Union[StrictStr, StrictInt]] = None
    bottom: Optional[Union[StrictStr, StrictInt]] = None
    shoes: Optional[Union[StrictStr, StrictInt]] = None

    @field_validator("top", "bottom", "shoes")
    @classmethod
    def _coerce_identifier(cls, value: Optional[Union[str, int]]) -> Optional[str]:
        if value is None:
            return None
        identifier = str(value).strip()
        return identifier or None


class SelectionDecodeResult(BaseModel):
    """Tagged outcome of decoding an LLM response.

    ``status == "ok"`` may still carry unselected slots (listed in
    ``missing_slots``). ``status == "failed"`` means nothing usable was decoded.
    """

    status: Literal["ok", "failed"]
    ids: Dict[str, Optional[str]] = Field(default_factory=lambda: {section: None for section in SECTIONS})
    missing_slots: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class ValidationResult(BaseModel):
    """Wrapper returned to callers when validation fails."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    return ValidationResult(
        message=message,
        details=exc.errors(include_url=False, include_context=False, include_input=False),
    ).model_dump()


__all__ = [
    "ClothingMetadata",
    "ClothingUpdateRequest",
    "OutfitIds",
    "OutfitPromptRequest",
    "SaveOutfitRequest",
    "LLMSelectionPayload",
    "SelectionDecodeResult",
    "ValidationResult",
    "validation_failure",
]
