"""Comment-block scanning for Lua documentation comments."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from ..models import DocBlock

LINE_MARKER = "---"
BLOCK_OPEN = "--[=["
BLOCK_CLOSE = "]=]"


def strip_line_marker(line: str) -> str:
    """Remove leading whitespace, the `---` marker and at most one space."""
    stripped = line.lstrip()
    if not stripped.startswith(LINE_MARKER):
        return line
    rest = stripped[len(LINE_MARKER):]
    if rest.startswith(" "):
        rest = rest[1:]
    return rest


def read_bracket_block(lines: Sequence[str], start: int) -> Tuple[List[str], int, bool]:
    """Collect a `--[=[ ... ]=]` block opening at `start`.

    Returns the content lines, the 0-based index of the closing line and
    whether a closer was found. Unterminated blocks run to end of file.
    """
    first = lines[start]
    content: List[str] = []
    after_open = first[first.index(BLOCK_OPEN) + len(BLOCK_OPEN):]
    close_on_first = after_open.find(BLOCK_CLOSE)
    if close_on_first != -1:
        inner = after_open[:close_on_first]
        if inner:
            content.append(inner)
        return content, start, True
    if after_open:
        content.append(after_open)

    index = start + 1
    while index < len(lines):
        current = lines[index]
        end = current.find(BLOCK_CLOSE)
        if end != -1:
            before = current[:end]
            if before:
                content.append(before)
            return content, index, True
        content.append(current)
        index += 1
    return content, len(lines) - 1, False


def read_line_block(lines: Sequence[str], start: int) -> Tuple[List[str], int]:
    content: List[str] = []
    index = start
    while index < len(lines) and lines[index].lstrip().startswith(LINE_MARKER):
        content.append(strip_line_marker(lines[index]))
        index += 1
    return content, index - 1


def block_at(lines: Sequence[str], index: int) -> Optional[DocBlock]:
    """Return the block starting on `index` (0-based), if any."""
    trimmed = lines[index].strip()
    if trimmed.startswith(LINE_MARKER):
        content, end = read_line_block(lines, index)
        return DocBlock(start_line=index + 1, end_line=end + 1, content_lines=content)
    if trimmed.startswith(BLOCK_OPEN):
        content, end, _ = read_bracket_block(lines, index)
        return DocBlock(start_line=index + 1, end_line=end + 1, content_lines=content)
    return None


def scan_blocks(lines: Sequence[str]) -> List[DocBlock]:
    """Split source lines into ordered, non-overlapping documentation blocks.

    Blocks are recognised purely by line prefix, so markers that happen to sit
    inside a multi-line string literal are picked up as well.
    """
    blocks: List[DocBlock] = []
    index = 0
    while index < len(lines):
        block = block_at(lines, index)
        if block is None:
            index += 1
            continue
        blocks.append(block)
        index = block.end_line
    return blocks


def dedent_lines(lines: Sequence[str]) -> List[str]:
    """Remove the indentation shared by every non-blank line."""
    min_indent: Optional[int] = None
    for line in lines:
        if not line.strip():
            continue
        indent = len(line) - len(line.lstrip(" \t"))
        if min_indent is None or indent < min_indent:
            min_indent = indent
    if not min_indent:
        return list(lines)
    return [line[min_indent:] for line in lines]


__all__ = [
    "BLOCK_CLOSE",
    "BLOCK_OPEN",
    "LINE_MARKER",
    "block_at",
    "dedent_lines",
    "read_bracket_block",
    "read_line_block",
    "scan_blocks",
    "strip_line_marker",
]
