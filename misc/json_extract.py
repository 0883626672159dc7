"""Locate the first balanced JSON value embedded in free text.

Model output rarely arrives as pure JSON: it is wrapped in prose, code fences
or trailing remarks. ``extract_first_json`` does the minimum work needed to
find a syntactically balanced candidate span without parsing it, leaving real
parsing to ``json.loads`` and validation to the patch contract.

Only the delimiter pair that opens the span is tracked. Braces and brackets
inside string literals are never structural.
"""

from __future__ import annotations

from typing import Optional

_PAIRS = {"{": "}", "[": "]"}


def _find_start(text: str) -> int:
    """Return the index of the earliest ``{`` or ``[``, or -1."""
    first_brace = text.find("{")
    first_bracket = text.find("[")
    if first_brace == -1:
        return first_bracket
    if first_bracket == -1:
        return first_brace
    return min(first_brace, first_bracket)


def extract_first_json(text: str) -> Optional[str]:
    """
    Return the substring spanning the first balanced JSON object or array.

    Args:
        text: Arbitrary text, possibly empty, possibly without any JSON.

    Returns:
        The balanced span (opening through matching closing delimiter,
        inclusive), or None when the text holds no opening delimiter or the
        structure is never closed.

    Example:
        >>> extract_first_json('Sure! {"a": "contains } a brace"} thanks')
        '{"a": "contains } a brace"}'
    """
    trimmed = text.strip() if text else ""
    if not trimmed:
        return None

    start = _find_start(trimmed)
    if start == -1:
        return None

    opening = trimmed[start]
    closing = _PAIRS[opening]
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(trimmed)):
        ch = trimmed[i]

        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
            continue

        if ch == opening:
            depth += 1
        elif ch == closing:
            depth -= 1
            if depth == 0:
                return trimmed[start:i + 1]

    # Exhausted mid-structure: truncated or malformed.
    return None
