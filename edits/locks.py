"""
Element lock resolution.

Lock metadata is stored by the persistence layer in whatever shape was
current when it was written, and old payloads stay valid. ``is_locked``
therefore accepts every historical encoding without a migration step:

- token list:       ``["slide_1:title", "1:title"]``
- nested mapping:   ``{"slide_1": {"title": True}}`` / ``{"1": {"title": True}}``
- dotted mapping:   ``{"slide_1.title": True}`` / ``{"1.title": True}``
- wrapped mapping:  ``{"bySlide": {"slide_1": {"title": True}}}``

Unknown or malformed lock data resolves to "unlocked".
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Callable, Iterator, Optional

logger = logging.getLogger(__name__)

WRAPPED_CONTAINER_KEY = "bySlide"


class LockEncoding(str, Enum):
    TOKEN_LIST = "token_list"
    NESTED = "nested"
    DOTTED = "dotted"
    WRAPPED = "wrapped"


def lock_token(slide: str | int, object_id: str) -> str:
    """Token-list entry for an element, e.g. ``lock_token(1, "title") == "1:title"``."""
    return f"{slide}:{object_id}"


def _slide_keys(slide_id: Optional[str], slide_index: Optional[int]) -> Iterator[str]:
    # Stable id first, then the stringified positional index.
    if slide_id:
        yield slide_id
    if isinstance(slide_index, int) and not isinstance(slide_index, bool):
        yield str(slide_index)


def _is_token_list(locks: Any) -> bool:
    return isinstance(locks, Sequence) and not isinstance(locks, (str, bytes))


def _nested_flag(root: Any, slide_key: str, object_id: str) -> bool:
    if not isinstance(root, Mapping):
        return False
    level1 = root.get(slide_key)
    if not isinstance(level1, Mapping):
        return False
    return bool(level1.get(object_id))


def _probe_token_list(locks: Any, keys: list[str], object_id: str) -> bool:
    if not _is_token_list(locks):
        return False
    tokens = {x for x in locks if isinstance(x, str)}
    return any(lock_token(k, object_id) in tokens for k in keys)


def _probe_nested(locks: Any, keys: list[str], object_id: str) -> bool:
    return any(_nested_flag(locks, k, object_id) for k in keys)


def _probe_dotted(locks: Any, keys: list[str], object_id: str) -> bool:
    if not isinstance(locks, Mapping):
        return False
    return any(bool(locks.get(f"{k}.{object_id}")) for k in keys)


def _probe_wrapped(locks: Any, keys: list[str], object_id: str) -> bool:
    if not isinstance(locks, Mapping):
        return False
    container = locks.get(WRAPPED_CONTAINER_KEY)
    return any(_nested_flag(container, k, object_id) for k in keys)


_PROBES: tuple[tuple[LockEncoding, Callable[[Any, list[str], str], bool]], ...] = (
    (LockEncoding.TOKEN_LIST, _probe_token_list),
    (LockEncoding.NESTED, _probe_nested),
    (LockEncoding.DOTTED, _probe_dotted),
    (LockEncoding.WRAPPED, _probe_wrapped),
)


def matching_encoding(
    locks: Any,
    object_id: str,
    slide_id: Optional[str] = None,
    slide_index: Optional[int] = None,
) -> Optional[LockEncoding]:
    """Return the first encoding under which the element is locked, or None."""
    if locks is None or not object_id:
        return None
    keys = list(_slide_keys(slide_id, slide_index))
    if not keys:
        return None
    for encoding, probe in _PROBES:
        if probe(locks, keys, object_id):
            return encoding
    return None


def is_locked(
    locks: Any,
    object_id: str,
    slide_id: Optional[str] = None,
    slide_index: Optional[int] = None,
) -> bool:
    """
    Decide whether an element is protected against automated edits.

    Args:
        locks: Opaque lock state as stored; never modified.
        object_id: Element id within the slide.
        slide_id: Stable id of the slide, if known.
        slide_index: 1-based slide position, if known.

    Returns:
        True if any known encoding marks the element as locked. Absent,
        malformed or unrecognized lock data yields False.
    """
    encoding = matching_encoding(locks, object_id, slide_id, slide_index)
    if encoding is not None:
        logger.debug(
            "Element %s locked (slide_id=%s, slide_index=%s, encoding=%s)",
            object_id, slide_id, slide_index, encoding.value,
        )
        return True
    return False


def detect_lock_encoding(locks: Any) -> Optional[LockEncoding]:
    """
    Best-effort guess of the encoding a lock payload is written in.

    Only used for diagnostics; ``is_locked`` never depends on it.
    """
    if _is_token_list(locks):
        return LockEncoding.TOKEN_LIST
    if not isinstance(locks, Mapping) or not locks:
        return None
    if isinstance(locks.get(WRAPPED_CONTAINER_KEY), Mapping):
        return LockEncoding.WRAPPED
    if any(isinstance(v, Mapping) for v in locks.values()):
        return LockEncoding.NESTED
    if any(isinstance(k, str) and "." in k for k in locks):
        return LockEncoding.DOTTED
    return None
