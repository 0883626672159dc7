"""
Edit patch contract: the closed set of operations a model may apply to a deck.

Validation is atomic: a candidate either parses as a whole into an
``EditPatch`` or is rejected with a ``PatchValidationError`` listing every
violated field. Partial validation is never performed.
"""

from __future__ import annotations

import math
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

MAX_OPS = 50
MAX_TEXT_LENGTH = 1500
MAX_SUMMARY_LENGTH = 300
MAX_SLIDE_INDEX = 20


class PatchValidationError(ValueError):
    """Raised when a candidate patch does not match the edit contract.

    ``issues`` holds one entry per violation with the dotted ``field``
    location, the ``constraint`` that failed and a readable ``message``.
    """

    def __init__(self, issues: list[dict[str, str]]) -> None:
        self.issues = issues
        if issues:
            first = issues[0]
            detail = f"{first['field'] or '<root>'}: {first['message']}"
            if len(issues) > 1:
                detail += f" (+{len(issues) - 1} more)"
        else:
            detail = "invalid edit patch"
        super().__init__(detail)

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "PatchValidationError":
        return cls(
            [
                {
                    "field": ".".join(str(part) for part in err["loc"]),
                    "constraint": err["type"],
                    "message": err["msg"],
                }
                for err in exc.errors()
            ]
        )


def _reject_null(v: Any) -> Any:
    # Optional fields may be omitted, but an explicit null is not a value.
    # Defaults are not validated, so only a supplied None reaches here.
    if v is None:
        raise ValueError("field may be omitted but must not be null")
    return v


class _EditOpBase(BaseModel):
    """Fields shared by every operation: the slide target and element id."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    object_id: StrictStr = Field(min_length=1)
    slide_id: Optional[StrictStr] = Field(default=None, min_length=1)
    slide_index: Optional[StrictInt] = Field(default=None, ge=1, le=MAX_SLIDE_INDEX)

    @field_validator("slide_id", mode="before")
    @classmethod
    def _slide_id_not_null(cls, v: Any) -> Any:
        return _reject_null(v)

    @field_validator("slide_index", mode="before")
    @classmethod
    def _integral_slide_index(cls, v: Any) -> Any:
        # 2.0 is an integer index; 2.5 and "2" still fail the strict check.
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return _reject_null(v)

    @property
    def target_key(self) -> str:
        """``"<slideIndex>:<objectId>"`` as used by target allow-lists."""
        return f"{self.slide_index}:{self.object_id}"


class SetTextOp(_EditOpBase):
    """Replace the element's text wholesale."""

    op: Literal["set_text"]
    text: StrictStr = Field(min_length=1, max_length=MAX_TEXT_LENGTH)


class SetStyleOp(_EditOpBase):
    """Shallow-merge style keys onto the element."""

    op: Literal["set_style"]
    style: dict[str, Any]


class MoveOp(_EditOpBase):
    """Update x and/or y; an absent coordinate is left unchanged."""

    op: Literal["move"]
    x: Optional[Union[StrictInt, StrictFloat]] = None
    y: Optional[Union[StrictInt, StrictFloat]] = None

    @field_validator("x", "y", mode="before")
    @classmethod
    def _coordinate_not_null(cls, v: Any) -> Any:
        return _reject_null(v)

    @field_validator("x", "y")
    @classmethod
    def _finite(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return v
        try:
            finite = math.isfinite(v)
        except OverflowError:
            # Integers beyond float range.
            finite = False
        if not finite:
            raise ValueError("coordinate must be a finite number")
        return v


EditOp = Annotated[Union[SetTextOp, SetStyleOp, MoveOp], Field(discriminator="op")]


class EditPatch(BaseModel):
    """An ordered batch of operations plus an optional human-readable summary."""

    model_config = ConfigDict(extra="ignore")

    ops: list[EditOp] = Field(min_length=1, max_length=MAX_OPS)
    summary: Optional[StrictStr] = Field(default=None, max_length=MAX_SUMMARY_LENGTH)

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_not_null(cls, v: Any) -> Any:
        return _reject_null(v)

    def to_dict(self) -> dict[str, Any]:
        """Wire form with camelCase keys and unset optionals omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


def validate_edit_patch(candidate: Any) -> EditPatch:
    """
    Validate an untyped value (typically a ``json.loads`` result) as a patch.

    Args:
        candidate: Any value; only a mapping can succeed.

    Returns:
        The validated EditPatch.

    Raises:
        PatchValidationError: if any part of the candidate violates the
            contract. Nothing is partially accepted.
    """
    if isinstance(candidate, EditPatch):
        return candidate
    try:
        return EditPatch.model_validate(candidate)
    except ValidationError as exc:
        raise PatchValidationError.from_pydantic(exc) from exc
