from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from edits.contract import EditOp, EditPatch, MoveOp, SetStyleOp, SetTextOp, validate_edit_patch
from edits.locks import is_locked

logger = logging.getLogger(__name__)

SLIDES_KEY = "slides"
ELEMENTS_KEY = "objects"
ID_KEY = "id"


@dataclass
class ApplyResult:
    """Outcome of applying a patch: the new document plus per-op accounting.

    Every operation lands in exactly one bucket, so
    ``applied + skipped_locked + skipped_missing == len(ops)``.
    """

    document: dict[str, Any]
    applied: int = 0
    skipped_locked: int = 0
    skipped_missing: int = 0
    applied_ops: list[EditOp] = field(default_factory=list)
    skipped_locked_ops: list[EditOp] = field(default_factory=list)
    skipped_missing_ops: list[EditOp] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.applied + self.skipped_locked + self.skipped_missing

    def to_dict(self) -> dict[str, Any]:
        """Return the result in the camelCase shape handed back to callers."""
        return {
            "nextState": self.document,
            "applied": self.applied,
            "skippedLocked": self.skipped_locked,
            "skippedMissing": self.skipped_missing,
        }


class EditPatchApplier:

    @classmethod
    def _clone(cls, value: Any) -> Any:
        """Structural deep copy of a JSON-shaped value.

        Raises TypeError on anything that would not survive a JSON round trip.
        """
        if value is None or isinstance(value, (str, bool, int, float)):
            return value
        if isinstance(value, dict):
            out: dict[str, Any] = {}
            for k, v in value.items():
                if not isinstance(k, str):
                    raise TypeError(
                        f"document keys must be strings, got {type(k).__name__}"
                    )
                out[k] = cls._clone(v)
            return out
        if isinstance(value, (list, tuple)):
            return [cls._clone(v) for v in value]
        raise TypeError(
            f"document is not JSON-serializable: {type(value).__name__}"
        )

    @staticmethod
    def _find_slide(
        slides: list[Any],
        slide_id: Optional[str],
        slide_index: Optional[int],
    ) -> Optional[dict[str, Any]]:
        # The stable id wins; the 1-based index is only a fallback.
        if slide_id:
            for slide in slides:
                if isinstance(slide, dict) and slide.get(ID_KEY) == slide_id:
                    return slide
        if slide_index is not None and 1 <= slide_index <= len(slides):
            slide = slides[slide_index - 1]
            if isinstance(slide, dict):
                return slide
        return None

    @staticmethod
    def _find_element(slide: dict[str, Any], object_id: str) -> Optional[dict[str, Any]]:
        elements = slide.get(ELEMENTS_KEY)
        if not isinstance(elements, list):
            return None
        for element in elements:
            if isinstance(element, dict) and element.get(ID_KEY) == object_id:
                return element
        return None

    @staticmethod
    def _apply_op(element: dict[str, Any], op: EditOp) -> None:
        if isinstance(op, SetTextOp):
            element["text"] = op.text
        elif isinstance(op, SetStyleOp):
            for key, value in op.style.items():
                element[key] = EditPatchApplier._clone(value)
        elif isinstance(op, MoveOp):
            if op.x is not None:
                element["x"] = op.x
            if op.y is not None:
                element["y"] = op.y

    @classmethod
    def apply_ops(
        cls,
        document: dict[str, Any],
        locks: Any,
        ops: list[EditOp],
    ) -> ApplyResult:
        """Apply already-validated operations in order to a copy of ``document``."""
        next_doc = cls._clone(document)
        if not isinstance(next_doc, dict):
            raise TypeError(
                f"document must be a mapping, got {type(document).__name__}"
            )
        if not isinstance(next_doc.get(SLIDES_KEY), list):
            next_doc[SLIDES_KEY] = []
        slides = next_doc[SLIDES_KEY]

        result = ApplyResult(document=next_doc)

        for i, op in enumerate(ops):
            slide = cls._find_slide(slides, op.slide_id, op.slide_index)
            if slide is None:
                logger.debug(
                    "op %d (%s): slide not found (slide_id=%s, slide_index=%s)",
                    i, op.op, op.slide_id, op.slide_index,
                )
                result.skipped_missing += 1
                result.skipped_missing_ops.append(op)
                continue

            resolved_id = slide.get(ID_KEY)
            if is_locked(
                locks,
                op.object_id,
                slide_id=resolved_id if isinstance(resolved_id, str) else None,
                slide_index=op.slide_index,
            ):
                logger.debug("op %d (%s): %s is locked", i, op.op, op.object_id)
                result.skipped_locked += 1
                result.skipped_locked_ops.append(op)
                continue

            element = cls._find_element(slide, op.object_id)
            if element is None:
                logger.debug(
                    "op %d (%s): element %s not found on slide %s",
                    i, op.op, op.object_id, resolved_id,
                )
                result.skipped_missing += 1
                result.skipped_missing_ops.append(op)
                continue

            cls._apply_op(element, op)
            result.applied += 1
            result.applied_ops.append(op)

        return result


def apply_edit_patch(
    document: dict[str, Any],
    locks: Any,
    patch: EditPatch | dict[str, Any],
) -> ApplyResult:
    """
    Apply an edit patch to a deck document, honoring element locks.

    The input document is never modified; operations run against a single
    deep copy taken before the first mutation. Targets that no longer exist
    and locked elements are counted, not raised.

    Args:
        document: JSON-shaped deck with a ``slides`` list.
        locks: Opaque lock state in any supported encoding (or None).
        patch: A validated EditPatch, or an untyped candidate that is
            validated first.

    Returns:
        ApplyResult with the new document and applied/skipped counters.

    Raises:
        PatchValidationError: if ``patch`` is untyped and fails validation.
        TypeError: if ``document`` holds non-JSON values.
    """
    patch = validate_edit_patch(patch)
    result = EditPatchApplier.apply_ops(document, locks, patch.ops)
    logger.info(
        "Edit patch: %d applied, %d skipped (locked), %d skipped (missing)",
        result.applied, result.skipped_locked, result.skipped_missing,
    )
    return result
