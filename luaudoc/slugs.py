"""Shared anchor and path sanitising.

Anchors allocated on class pages and the fragments produced for cross-links
must agree character for character, so both sides go through this module.
"""

from __future__ import annotations

import string
from typing import List, Optional

_ANCHOR_ALPHABET = frozenset(string.ascii_letters + string.digits + "_-")
_PATH_FORBIDDEN = frozenset('<>:"|?*')


def sanitize_anchor_id(value: object) -> Optional[str]:
    """Collapse whitespace runs to `-` and keep only `[A-Za-z0-9_-]`."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    if not trimmed:
        return None

    chars: List[str] = []
    in_space = False
    for char in trimmed:
        if char.isspace():
            if not in_space:
                chars.append("-")
            in_space = True
            continue
        in_space = False
        if char in _ANCHOR_ALPHABET:
            chars.append(char)
    cleaned = "".join(chars)
    return cleaned or None


def sanitize_path_segment(segment: str) -> str:
    trimmed = segment.strip()
    if not trimmed:
        return "unnamed"
    return "".join("_" if char in _PATH_FORBIDDEN else char for char in trimmed)


def sanitize_module_path(value: str) -> str:
    """Normalise a slash-delimited id or category into a safe relative path."""
    normalized = value.replace("\\", "/")
    return "/".join(sanitize_path_segment(part) for part in normalized.split("/"))


def strip_member_call(value: str) -> str:
    """Drop a trailing call suffix such as `(a, b)` from a member reference."""
    index = value.find("(")
    if index != -1 and value.endswith(")"):
        return value[:index]
    return value


__all__ = [
    "sanitize_anchor_id",
    "sanitize_module_path",
    "sanitize_path_segment",
    "strip_member_call",
]
