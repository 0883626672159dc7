from __future__ import annotations

from edits.apply_patches import ApplyResult


def describe_result(
    result: ApplyResult,
    skipped_policy: int = 0,
    blocked_targets: int = 0,
) -> list[str]:
    """
    Summarize an apply outcome as short phrases for user-facing messages.

    Args:
        result: The ApplyResult to describe.
        skipped_policy: Operations dropped by the targeting policy.
        blocked_targets: Distinct targets blocked by locks. Defaults to the
            number of lock-skipped operations.
    """
    kinds = {op.op for op in result.applied_ops}
    parts: list[str] = []
    if kinds & {"set_text", "set_style"}:
        parts.append("Updated text/style")
    if "move" in kinds:
        parts.append("Moved elements")
    if not parts:
        parts.append("No changes applied")

    blocked = blocked_targets or result.skipped_locked
    if blocked:
        parts.append(f"Locks respected: {blocked}")
    if result.skipped_missing:
        parts.append(f"Targets not found: {result.skipped_missing}")
    if skipped_policy:
        parts.append(f"Skipped by policy: {skipped_policy}")
    return parts
