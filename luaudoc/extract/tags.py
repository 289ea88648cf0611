"""Tag grammar for documentation blocks."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..models import (
    Deprecation,
    DocEntry,
    DocRecord,
    External,
    FieldEntry,
    TypeTag,
)
from .scanner import dedent_lines

TAG_PATTERN = re.compile(r"^@([A-Za-z_][A-Za-z0-9_]*)\s*(.*)$")
FENCE = "```"
OWNER_PLACEHOLDER = "~"

REALM_TAGS = ("server", "client", "plugin")


@dataclass(frozen=True)
class MemberName:
    within: Optional[str]
    name: str
    is_method: bool


def parse_member_name(value: str) -> MemberName:
    """Split `Owner.name`, `Owner:name`, `~:name` or a bare name."""
    trimmed = value.strip() if value else ""
    if not trimmed:
        return MemberName(None, "", False)
    if trimmed.startswith(OWNER_PLACEHOLDER + ":"):
        return MemberName(OWNER_PLACEHOLDER, trimmed[2:], True)
    if trimmed.startswith(OWNER_PLACEHOLDER + "."):
        return MemberName(OWNER_PLACEHOLDER, trimmed[2:], False)

    colon = trimmed.rfind(":")
    dot = trimmed.rfind(".")
    if colon != -1 and colon > dot:
        return MemberName(trimmed[:colon], trimmed[colon + 1:], True)
    if dot != -1:
        return MemberName(trimmed[:dot], trimmed[dot + 1:], False)
    return MemberName(None, trimmed, False)


def split_tag_value(value: str) -> Tuple[str, str]:
    parts = value.split(None, 1)
    if not parts:
        return "", ""
    rest = parts[1].strip() if len(parts) > 1 else ""
    return parts[0], rest


def split_type_description(value: str) -> Tuple[str, str]:
    """Split `Type -- description` on the first `--`."""
    type_part, sep, description = value.partition("--")
    return type_part.strip(), description.strip() if sep else ""


# ----------------------------------------------------------------------
# Kind tags, in the order they are matched. The first kind tag seen in a
# block is authoritative; later ones are recorded only.


def _class_tag(value: str, record: DocRecord) -> TypeTag:
    return TypeTag(kind="class", name=value)


def _interface_tag(value: str, record: DocRecord) -> TypeTag:
    return TypeTag(kind="interface", name=value)


def _type_tag(value: str, record: DocRecord) -> TypeTag:
    name, rest = split_tag_value(value)
    return TypeTag(kind="type", name=name, type=rest or None)


def _member_tag(kind: str, force_method: Optional[bool]) -> Callable[[str, DocRecord], TypeTag]:
    def build(value: str, record: DocRecord) -> TypeTag:
        raw = value
        type_text: Optional[str] = None
        if kind == "property":
            raw, type_text = split_tag_value(value)
        member = parse_member_name(raw)
        if member.within and not record.state.within:
            record.state.within = member.within
        is_method = member.is_method if force_method is None else force_method
        return TypeTag(kind=kind, name=member.name, type=type_text or None, is_method=is_method)

    return build


KIND_TAGS: Dict[str, Callable[[str, DocRecord], TypeTag]] = {
    "class": _class_tag,
    "prop": _member_tag("property", False),
    "type": _type_tag,
    "interface": _interface_tag,
    "function": _member_tag("function", None),
    "method": _member_tag("function", True),
    "constructor": _member_tag("constructor", False),
}


def _apply_tag(name: str, value: str, record: DocRecord) -> Optional[DocEntry]:
    """Apply one tag to `record`; return the entry that continuation lines extend."""
    state = record.state

    builder = KIND_TAGS.get(name)
    if builder is not None:
        record.type_tags.append(builder(value, record))
        return None

    if name == "within":
        state.within = value or None
    elif name == "field":
        field_name, rest = split_tag_value(value)
        type_part, description = split_type_description(rest)
        record.fields.append(FieldEntry(field_name, type_part or None, description or None))
    elif name == "param":
        param_name, rest = split_tag_value(value)
        type_part, description = split_type_description(rest)
        entry = DocEntry(param_name, type_part or None, [description] if description else [])
        record.params.append(entry)
        return entry
    elif name in ("return", "error"):
        type_part, description = split_type_description(value)
        entry = DocEntry(None, type_part or None, [description] if description else [])
        (record.returns if name == "return" else record.errors).append(entry)
        return entry
    elif name == "yields":
        state.yields = True
    elif name == "tag":
        if value:
            record.tags.append(value)
    elif name == "category":
        if value:
            state.categories.append(value)
    elif name == "event":
        state.event = True
    elif name == "callback":
        state.callback = True
    elif name == "extends":
        if value:
            state.extends.append(value)
    elif name == "unreleased":
        state.unreleased = True
    elif name == "since":
        state.since = value or None
    elif name == "deprecated":
        version, description = split_type_description(value)
        state.deprecated = Deprecation(version or None, description or None)
    elif name in REALM_TAGS:
        record.realms.append(name)
    elif name == "private":
        state.visibility = "private"
    elif name == "ignore":
        state.visibility = "ignored"
    elif name == "readonly":
        state.readonly = True
    elif name == "__index":
        state.index_name = value or None
    elif name == "external":
        ext_name, url = split_tag_value(value)
        if ext_name and url:
            record.externals.append(External(ext_name, url))
    elif name == "inheritDoc":
        state.inherit_doc = value or None
    elif name == "include":
        if value:
            state.includes.append(value)
    elif name == "snippet":
        if value:
            state.snippets.append(value)
    elif name == "alias":
        if value:
            state.aliases.append(value)
    return None


def _is_continuation(line: str) -> bool:
    body = line.lstrip(" \t")
    indent = line[: len(line) - len(body)]
    if not ("\t" in indent or len(indent) >= 2):
        return False
    head = body.strip()
    return not (head.startswith("@") or head.startswith("."))


def parse_doc_block(content_lines: Sequence[str]) -> DocRecord:
    """Parse the (raw) content lines of one block into a DocRecord."""
    record = DocRecord()
    in_fence = False
    continuation: Optional[DocEntry] = None

    for line in dedent_lines(content_lines):
        trimmed = line.strip()
        if trimmed.startswith(FENCE):
            in_fence = not in_fence

        if continuation is not None and not in_fence and _is_continuation(line):
            continuation.description_lines.append(line.lstrip(" \t").rstrip())
            continue
        continuation = None

        if not in_fence and trimmed.startswith("@"):
            match = TAG_PATTERN.match(trimmed)
            if match:
                continuation = _apply_tag(match.group(1), match.group(2).strip(), record)
            continue

        if not in_fence and trimmed.startswith("."):
            field_name, rest = split_tag_value(trimmed[1:].strip())
            type_part, description = split_type_description(rest)
            record.fields.append(FieldEntry(field_name, type_part or None, description or None))
            continue

        record.description_lines.append(line.rstrip())

    return record


def join_description(lines: List[str]) -> Tuple[str, str]:
    """Return `(summary, description_markdown)` for accumulated description lines."""
    trimmed = list(lines)
    while trimmed and not trimmed[0].strip():
        trimmed.pop(0)
    text = "\n".join(trimmed).rstrip()
    if not text:
        return "", ""
    summary = next((line.strip() for line in text.splitlines() if line.strip()), "")
    return summary, text


__all__ = [
    "KIND_TAGS",
    "MemberName",
    "TAG_PATTERN",
    "join_description",
    "parse_doc_block",
    "parse_member_name",
    "split_tag_value",
    "split_type_description",
]
