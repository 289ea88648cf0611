"""Best-effort inference of the declaration a doc block is attached to.

This is pattern matching over single source lines, not a Lua parser. Every
entry point returns ``None`` instead of raising when the code does not match
a known shape, so malformed sources degrade to tag-only documentation.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import (
    Binding,
    BindingParam,
    ClassBinding,
    DocBlock,
    FunctionBinding,
    PropertyBinding,
    TableField,
    TypeBinding,
)
from .scanner import block_at, dedent_lines

_FUNCTION_DECL = re.compile(
    r"^(?:local\s+)?function\s+([A-Za-z_][A-Za-z0-9_.:]*)\s*(?:<[^>]*>)?\s*\("
)
_FUNCTION_ASSIGN = re.compile(
    r"^([A-Za-z_][A-Za-z0-9_.]*)\s*=\s*function\s*(?:<[^>]*>)?\s*\("
)
_TYPE_TABLE = re.compile(
    r"^\s*(?:export\s+)?type\s+([A-Za-z_][A-Za-z0-9_]*)\s*(?:<[^>]*>)?\s*=\s*\{"
)
_PROPERTY_ASSIGN = re.compile(r"^([A-Za-z_][A-Za-z0-9_.]*)\s*=")
_LOCAL_TABLE = re.compile(r"^local\s+([A-Za-z_][A-Za-z0-9_]*)\s*(?::\s*[^=]+)?=\s*\{")
_TABLE_FIELD = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*:\s*(.*)$")
_PARAM_NAME = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)")

_OPENERS = {"(": ")", "{": "}", "[": "]", "<": ">"}
_CLOSERS = {value: key for key, value in _OPENERS.items()}


def strip_trailing_comment(line: str) -> str:
    """Drop a `--` comment that is not inside a quoted string."""
    quote: Optional[str] = None
    index = 0
    while index < len(line):
        char = line[index]
        if quote:
            if char == "\\":
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in ("'", '"', "`"):
            quote = char
        elif line.startswith("--", index):
            return line[:index]
        index += 1
    return line


def split_top_level(text: str, separators: str = ",") -> List[str]:
    """Split on separators that are not nested inside brackets."""
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for index, char in enumerate(text):
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            # `->` in function types is not a closing angle bracket.
            if not (char == ">" and index > 0 and text[index - 1] == "-"):
                depth = max(depth - 1, 0)
        if char in separators and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def parse_param_list(text: str) -> List[BindingParam]:
    params: List[BindingParam] = []
    for token in split_top_level(text):
        if token.startswith("..."):
            variadic_type = token[3:].lstrip(":").strip() or None
            params.append(BindingParam("...", variadic_type))
            continue
        match = _PARAM_NAME.match(token)
        name = match.group(1) if match else token
        type_text: Optional[str] = None
        colon = token.find(":")
        if colon != -1:
            type_text = token[colon + 1:]
            default = _find_default(type_text)
            if default != -1:
                type_text = type_text[:default]
            type_text = type_text.strip() or None
        params.append(BindingParam(name, type_text))
    return params


def _find_default(type_text: str) -> int:
    depth = 0
    for index, char in enumerate(type_text):
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS and not (char == ">" and index and type_text[index - 1] == "-"):
            depth = max(depth - 1, 0)
        elif char == "=" and depth == 0:
            return index
    return -1


def _match_parens(text: str, open_index: int) -> int:
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return index
    return -1


def _split_owner(path: str) -> Tuple[Optional[str], str, bool]:
    colon = path.rfind(":")
    dot = path.rfind(".")
    if colon != -1 and colon > dot:
        return path[:colon], path[colon + 1:], True
    if dot != -1:
        return path[:dot], path[dot + 1:], False
    return None, path, False


def _function_binding(path: str, text: str, open_index: int) -> Optional[FunctionBinding]:
    close = _match_parens(text, open_index)
    if close == -1:
        return None
    params = parse_param_list(text[open_index + 1:close])
    tail = text[close + 1:].strip()
    return_type: Optional[str] = None
    if tail.startswith(":"):
        return_type = tail[1:].strip() or None
    within, name, is_method = _split_owner(path)
    if not is_method and within and params and params[0].name == "self":
        is_method = True
    return FunctionBinding(
        name=name,
        within=within,
        is_method=is_method,
        params=params,
        return_type=return_type,
    )


def parse_function_binding(line: str) -> Optional[FunctionBinding]:
    trimmed = line.strip()
    for pattern in (_FUNCTION_DECL, _FUNCTION_ASSIGN):
        match = pattern.match(trimmed)
        if match:
            return _function_binding(match.group(1), trimmed, match.end() - 1)
    return None


def extract_table_fields(lines: Sequence[str], start: int) -> Tuple[List[TableField], int]:
    """Read the fields of a table type opening on `start`; return fields and end index."""
    first = strip_trailing_comment(lines[start])
    brace = first.find("{")
    if brace == -1:
        return [], start
    head = first[brace + 1:]
    depth = 1 + head.count("{") - head.count("}")
    if depth <= 0:
        inner = head[: head.rfind("}")]
        fields = []
        for part in split_top_level(inner, ",;"):
            match = _TABLE_FIELD.match(part)
            if match:
                fields.append(TableField(match.group(1), match.group(2).strip() or None, None, start + 1))
        return fields, start

    fields: List[TableField] = []
    pending_doc: Optional[List[str]] = None
    index = start + 1
    while index < len(lines):
        block = block_at(lines, index)
        if block is not None:
            pending_doc = block.content_lines
            index = block.end_line
            continue
        raw = lines[index]
        if raw.strip().startswith("--"):
            index += 1
            continue

        line = strip_trailing_comment(raw)
        field_line = index
        depth_before = depth
        depth += line.count("{") - line.count("}")
        match = _TABLE_FIELD.match(line) if depth_before == 1 else None
        if match:
            type_text = match.group(2).strip()
            while depth > 1 and index + 1 < len(lines):
                index += 1
                nested = strip_trailing_comment(lines[index])
                depth += nested.count("{") - nested.count("}")
                type_text = f"{type_text} {nested.strip()}"
            if depth <= 0:
                type_text = type_text[: type_text.rfind("}")]
            type_text = type_text.strip().rstrip(",;").strip()
            fields.append(
                TableField(
                    name=match.group(1),
                    type=type_text or None,
                    description=_inline_description(pending_doc),
                    line=field_line + 1,
                )
            )
            pending_doc = None
        if depth <= 0:
            return fields, index
        index += 1
    return fields, len(lines) - 1


def _inline_description(lines: Optional[List[str]]) -> Optional[str]:
    if not lines:
        return None
    trimmed = dedent_lines(lines)
    while trimmed and not trimmed[0].strip():
        trimmed.pop(0)
    while trimmed and not trimmed[-1].strip():
        trimmed.pop()
    text = "\n".join(trimmed).rstrip()
    return text or None


def find_type_table_ranges(lines: Sequence[str]) -> List[Tuple[int, int]]:
    """Return 1-based inclusive line ranges of every table type declaration."""
    ranges: List[Tuple[int, int]] = []
    index = 0
    while index < len(lines):
        if _TYPE_TABLE.match(lines[index]):
            _, end = extract_table_fields(lines, index)
            ranges.append((index + 1, end + 1))
            index = end + 1
            continue
        index += 1
    return ranges


def parse_binding_at(lines: Sequence[str], index: int) -> Optional[Binding]:
    """Match the code line at `index` (0-based) against the known declaration shapes."""
    raw = lines[index]
    line = strip_trailing_comment(raw).rstrip()
    line_number = index + 1

    function = parse_function_binding(line)
    if function is not None:
        return FunctionBinding(
            name=function.name,
            within=function.within,
            is_method=function.is_method,
            params=function.params,
            return_type=function.return_type,
            line_number=line_number,
            line=raw,
        )

    type_match = _TYPE_TABLE.match(line)
    if type_match:
        fields, end = extract_table_fields(lines, index)
        return TypeBinding(
            name=type_match.group(1),
            fields=fields,
            end_line=end + 1,
            line_number=line_number,
            line=raw,
        )

    stripped = line.strip()
    assign = _PROPERTY_ASSIGN.match(stripped)
    if assign and not stripped.startswith("local "):
        within, name, _ = _split_owner(assign.group(1))
        if within:
            return PropertyBinding(name=name, within=within, line_number=line_number, line=raw)

    table = _LOCAL_TABLE.match(stripped)
    if table:
        return ClassBinding(name=table.group(1), line_number=line_number, line=raw)
    return None


def find_next_code_line(
    lines: Sequence[str], start: int, blocks_by_start: Dict[int, DocBlock]
) -> Optional[int]:
    """Return the 0-based index of the first code line at or after `start`."""
    index = start
    while index < len(lines):
        block = blocks_by_start.get(index + 1)
        if block is not None:
            index = block.end_line
            continue
        trimmed = lines[index].strip()
        if not trimmed or trimmed.startswith("--"):
            index += 1
            continue
        return index
    return None


def resolve_binding(
    lines: Sequence[str], block: DocBlock, blocks_by_start: Dict[int, DocBlock]
) -> Optional[Binding]:
    index = find_next_code_line(lines, block.end_line, blocks_by_start)
    if index is None:
        return None
    return parse_binding_at(lines, index)


__all__ = [
    "extract_table_fields",
    "find_next_code_line",
    "find_type_table_ranges",
    "parse_binding_at",
    "parse_function_binding",
    "parse_param_list",
    "resolve_binding",
    "split_top_level",
    "strip_trailing_comment",
]
