"""Keeps the generated code tab-size rule inside a user stylesheet."""

from __future__ import annotations

import re
from pathlib import Path

MARKER_START = "/* luaudoc-tab-size-start */"
MARKER_END = "/* luaudoc-tab-size-end */"

_MARKED_BLOCK = re.compile(re.escape(MARKER_START) + r".*?" + re.escape(MARKER_END), re.DOTALL)


def tab_size_rule(tab_size: int) -> str:
    return "\n".join(
        [
            MARKER_START,
            ".theme-code-block, pre code {",
            f"  tab-size: {tab_size};",
            f"  -moz-tab-size: {tab_size};",
            f"  -o-tab-size: {tab_size};",
            "}",
            MARKER_END,
            "",
        ]
    )


def apply_tab_size_rule(css: str, tab_size: int) -> str:
    """Replace any previous marked rule in `css` with a fresh one at the end."""
    remaining = _MARKED_BLOCK.sub("", css).rstrip()
    if remaining:
        remaining += "\n"
    return remaining + tab_size_rule(tab_size)


def write_tab_size_rule(stylesheet: Path, tab_size: int) -> bool:
    """Update `stylesheet` in place; returns False when the content was unchanged."""
    current = stylesheet.read_text(encoding="utf-8") if stylesheet.exists() else ""
    updated = apply_tab_size_rule(current, tab_size)
    if updated == current:
        return False
    stylesheet.parent.mkdir(parents=True, exist_ok=True)
    stylesheet.write_text(updated, encoding="utf-8")
    return True


__all__ = [
    "MARKER_END",
    "MARKER_START",
    "apply_tab_size_rule",
    "tab_size_rule",
    "write_tab_size_rule",
]
