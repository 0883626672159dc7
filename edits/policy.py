"""Targeting policy applied to model-proposed operations before they run.

When the user asked for an edit on a specific slide or a specific set of
elements, operations that retarget anything else are dropped and counted
rather than applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from edits.contract import EditOp
from edits.locks import is_locked

logger = logging.getLogger(__name__)


@dataclass
class PolicyResult:
    ops: list[EditOp] = field(default_factory=list)
    skipped_policy: int = 0


def parse_target(key: str) -> Optional[tuple[int, str]]:
    """Split ``"<slideIndex>:<objectId>"`` into its parts, or None if malformed."""
    slide_raw, sep, object_id = key.partition(":")
    if not sep or not object_id:
        return None
    try:
        slide_index = int(slide_raw)
    except ValueError:
        return None
    if slide_index < 1:
        return None
    return slide_index, object_id


def filter_ops(
    ops: Iterable[EditOp],
    allowed_targets: Optional[Iterable[str]] = None,
    slide_index: Optional[int] = None,
) -> PolicyResult:
    """
    Drop operations that fall outside the requested targets.

    Args:
        ops: Validated operations, in patch order.
        allowed_targets: ``"<slideIndex>:<objectId>"`` keys the user asked
            for. Empty or None means no restriction.
        slide_index: If given, only operations on this slide index survive.

    Returns:
        PolicyResult with the surviving operations (order preserved) and the
        number dropped.
    """
    allowed = set(allowed_targets or ())
    result = PolicyResult()
    for op in ops:
        if slide_index is not None and op.slide_index != slide_index:
            result.skipped_policy += 1
            continue
        if allowed and op.target_key not in allowed:
            result.skipped_policy += 1
            continue
        result.ops.append(op)
    if result.skipped_policy:
        logger.info("Policy dropped %d operation(s)", result.skipped_policy)
    return result


def locked_targets(
    locks: Any,
    targets: Iterable[str],
    slide_ids: Optional[Mapping[int, str]] = None,
) -> list[str]:
    """
    Return the ``"<slideIndex>:<objectId>"`` targets that are currently locked.

    ``slide_ids`` maps slide indexes to stable slide ids so id-keyed lock
    entries are honored too. Malformed target keys are ignored.
    """
    slide_ids = slide_ids or {}
    found: list[str] = []
    for key in targets:
        parsed = parse_target(key)
        if parsed is None:
            continue
        index, object_id = parsed
        if is_locked(locks, object_id, slide_id=slide_ids.get(index), slide_index=index):
            found.append(key)
    return found


def slide_id_map(document: Mapping[str, Any]) -> dict[int, str]:
    """Map 1-based slide indexes to slide ids for slides that carry one."""
    slides = document.get("slides")
    if not isinstance(slides, list):
        return {}
    return {
        i: slide["id"]
        for i, slide in enumerate(slides, start=1)
        if isinstance(slide, dict) and isinstance(slide.get("id"), str)
    }
