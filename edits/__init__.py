from edits.contract import EditPatch, PatchValidationError, validate_edit_patch
from edits.locks import LockEncoding, detect_lock_encoding, is_locked
from edits.apply_patches import ApplyResult, apply_edit_patch
from edits.policy import filter_ops, locked_targets
from edits.summary import describe_result

__all__ = [
    "EditPatch",
    "PatchValidationError",
    "validate_edit_patch",
    "LockEncoding",
    "detect_lock_encoding",
    "is_locked",
    "ApplyResult",
    "apply_edit_patch",
    "filter_ops",
    "locked_targets",
    "describe_result",
]
