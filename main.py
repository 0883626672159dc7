import json
import logging
from typing import Any, Iterable, Optional

from edits.apply_patches import EditPatchApplier
from edits.contract import PatchValidationError, validate_edit_patch
from edits.locks import detect_lock_encoding, lock_token
from edits.policy import filter_ops, locked_targets, slide_id_map
from edits.summary import describe_result
from misc.json_extract import extract_first_json
from settings import get_settings

logger = logging.getLogger(__name__)


def parse_edit_patch(raw_text: str) -> dict[str, Any]:
    """
    Turn raw model output into a validated edit patch.

    The first balanced JSON value in the text is extracted (the trimmed text
    itself is tried when none is found), parsed and validated against the
    edit contract. Bad model output is reported, never raised.

    Args:
        raw_text: Free text returned by the model.

    Returns:
        A dictionary with:
        - "ok": Whether a valid patch was obtained.
        - "patch": The EditPatch, or None.
        - "error": Error message, if there is one.
        - "issues": Structured validation issues (field/constraint/message).
        - "raw": The candidate text that was parsed.
    """
    settings = get_settings()
    raw_text = raw_text or ""
    if len(raw_text) > settings.MAX_RAW_TEXT_CHARS:
        return {
            "ok": False,
            "patch": None,
            "error": (
                f"Model output too large ({len(raw_text)} chars, "
                f"limit {settings.MAX_RAW_TEXT_CHARS})."
            ),
            "issues": [],
            "raw": "",
        }

    extracted = extract_first_json(raw_text)
    candidate_text = extracted if extracted is not None else raw_text.strip()

    try:
        candidate = json.loads(candidate_text)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError, oversized integer literals and runaway nesting.
        logger.warning("Model output is not valid JSON: %s", e)
        return {
            "ok": False,
            "patch": None,
            "error": f"Model output is not valid JSON: {e}",
            "issues": [],
            "raw": candidate_text,
        }

    try:
        patch = validate_edit_patch(candidate)
    except PatchValidationError as e:
        logger.warning("Model output does not match the edit contract: %s", e)
        return {
            "ok": False,
            "patch": None,
            "error": f"Model output does not match the edit contract: {e}",
            "issues": e.issues,
            "raw": candidate_text,
        }

    return {"ok": True, "patch": patch, "error": None, "issues": [], "raw": candidate_text}


def run_edit(
    raw_text: str,
    document: dict[str, Any],
    locks: Any = None,
    allowed_targets: Optional[Iterable[str]] = None,
    slide_index: Optional[int] = None,
) -> dict[str, Any]:
    """
    Parse model output and apply it to a deck document.

    Args:
        raw_text: Free text returned by the model.
        document: Current deck document; left unmodified.
        locks: Element lock state in any supported encoding.
        allowed_targets: Optional ``"<slideIndex>:<objectId>"`` keys the
            user asked to edit; other operations are dropped.
        slide_index: Optional slide the edit is restricted to.

    Returns:
        A dictionary with:
        - "ok": False when the model output could not be used.
        - "nextState": The new document (the original when nothing ran).
        - "applied", "skippedLocked", "skippedMissing": Apply counters.
        - "skippedPolicy": Operations dropped by the targeting policy.
        - "blockedTargets": Targets blocked by locks.
        - "summary": Short outcome phrases.
        - "patch": The validated patch in wire form, for edit history.
        - "patchSummary": The model's own summary, if any.
        - "error": Error message, if there is one.

    Example:
        >>> from main import run_edit
        >>> doc = {"version": 1, "slides": [{"id": "s1", "objects": [{"id": "title", "text": "old"}]}]}
        >>> out = run_edit('Here you go: {"ops": [{"op": "set_text", "slideId": "s1", '
        ...                '"objectId": "title", "text": "new"}]}', doc)
        >>> out["applied"], out["nextState"]["slides"][0]["objects"][0]["text"]
        (1, 'new')
    """
    parsed = parse_edit_patch(raw_text)
    if not parsed["ok"]:
        return {
            "ok": False,
            "nextState": document,
            "applied": 0,
            "skippedLocked": 0,
            "skippedMissing": 0,
            "skippedPolicy": 0,
            "blockedTargets": [],
            "summary": [],
            "patch": None,
            "patchSummary": None,
            "error": parsed["error"],
        }

    patch = parsed["patch"]
    if locks is not None:
        encoding = detect_lock_encoding(locks)
        logger.debug("Lock state encoding: %s", encoding.value if encoding else "unrecognized")

    policy = filter_ops(patch.ops, allowed_targets=allowed_targets, slide_index=slide_index)
    result = EditPatchApplier.apply_ops(document, locks, policy.ops)

    # Count blocked targets per element, covering both lock-skipped ops and
    # requested targets the model never emitted an op for.
    blocked = {
        lock_token(op.slide_index if op.slide_index is not None else op.slide_id, op.object_id)
        for op in result.skipped_locked_ops
    }
    if allowed_targets:
        blocked.update(
            locked_targets(locks, allowed_targets, slide_ids=slide_id_map(document))
        )

    out = result.to_dict()
    out.update(
        {
            "ok": True,
            "skippedPolicy": policy.skipped_policy,
            "blockedTargets": sorted(blocked),
            "summary": describe_result(
                result,
                skipped_policy=policy.skipped_policy,
                blocked_targets=len(blocked),
            ),
            "patch": patch.to_dict(),
            "patchSummary": patch.summary,
            "error": None,
        }
    )
    return out


def main():
    """Entry point of the CLI."""
    from cli.app import main as cli_main
    cli_main()


if __name__ == "__main__":
    main()
