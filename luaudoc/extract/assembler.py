"""Assembles Symbols from parsed doc records and inferred bindings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..models import (
    Binding,
    DocBlock,
    DocEntry,
    DocRecord,
    FunctionBinding,
    Symbol,
    SymbolDocs,
    SymbolLocation,
    SymbolTag,
    SymbolTypes,
    TableField,
    TypeBinding,
    binding_within,
)
from .bindings import find_type_table_ranges, resolve_binding
from .diagnostics import (
    AMBIGUOUS_OWNER,
    MISSING_CLASS,
    PARAM_MISMATCH,
    READONLY_MISUSE,
    DiagnosticsCollector,
)
from .scanner import scan_blocks
from .tags import OWNER_PLACEHOLDER, join_description, parse_doc_block

OWNED_KINDS = frozenset({"function", "property", "constructor"})


def build_qualified_name(within: Optional[str], name: str, is_method: bool) -> str:
    if not within:
        return name
    return f"{within}{':' if is_method else '.'}{name}"


def split_qualified_name(qualified_name: str) -> Tuple[Optional[str], str, bool]:
    """Inverse of `build_qualified_name`."""
    colon = qualified_name.find(":")
    if colon != -1:
        return qualified_name[:colon], qualified_name[colon + 1:], True
    dot = qualified_name.rfind(".")
    if dot != -1:
        return qualified_name[:dot], qualified_name[dot + 1:], False
    return None, qualified_name, False


def build_location(file: str, line_number: int, line: str) -> SymbolLocation:
    stripped = line.lstrip()
    column = len(line) - len(stripped) + 1 if stripped else 1
    return SymbolLocation(file=file, line=line_number, column=column)


def build_docs(record: DocRecord) -> SymbolDocs:
    summary, description = join_description(record.description_lines)
    state = record.state
    tags: List[SymbolTag] = []
    tags.extend(SymbolTag("tag", label) for label in record.tags)
    tags.extend(SymbolTag("category", category) for category in state.categories)
    if state.since:
        tags.append(SymbolTag("since", state.since))
    if state.deprecated is not None:
        tags.append(
            SymbolTag("deprecated", state.deprecated.version, state.deprecated.description)
        )
    if state.unreleased:
        tags.append(SymbolTag("unreleased", True))
    if state.event:
        tags.append(SymbolTag("event", True))
    if state.callback:
        tags.append(SymbolTag("callback", True))
    tags.extend(SymbolTag("extends", value) for value in state.extends)
    tags.extend(SymbolTag(realm, True) for realm in record.realms)
    tags.extend(SymbolTag("external", f"{ext.name} {ext.url}") for ext in record.externals)
    tags.extend(SymbolTag("alias", alias) for alias in state.aliases)
    tags.extend(SymbolTag("include", include) for include in state.includes)
    tags.extend(SymbolTag("snippet", snippet) for snippet in state.snippets)
    if state.inherit_doc:
        tags.append(SymbolTag("inheritDoc", state.inherit_doc))
    return SymbolDocs(summary=summary, description_markdown=description, tags=tags)


def _entry_payload(entry: DocEntry, fallback_type: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "type": entry.type or fallback_type,
        "description": entry.description,
    }
    if entry.name is not None:
        payload = {"name": entry.name, **payload}
    return payload


def format_function_display(params: Sequence[Dict[str, Any]], returns: Sequence[Dict[str, Any]]) -> str:
    params_text = ", ".join(
        f"{param['name']}: {param['type']}" if param.get("type") else str(param["name"])
        for param in params
    )
    returns_text = ", ".join(ret.get("type") or "any" for ret in returns)
    if returns_text:
        return f"({params_text}) -> {returns_text}"
    return f"({params_text})"


def build_function_types(
    record: DocRecord, binding: Optional[FunctionBinding], is_method: bool
) -> SymbolTypes:
    binding_params = list(binding.params) if binding else []
    if is_method and binding_params and binding_params[0].name == "self":
        binding_params = binding_params[1:]
    by_name = {param.name: param for param in binding_params}

    if record.params:
        params = []
        for entry in record.params:
            matched = by_name.get(entry.name or "")
            params.append(_entry_payload(entry, matched.type if matched else None))
    else:
        params = [
            {"name": param.name, "type": param.type, "description": None}
            for param in binding_params
        ]

    if record.returns:
        returns = [_entry_payload(entry) for entry in record.returns]
    elif binding is not None and binding.return_type:
        returns = [{"type": binding.return_type, "description": None}]
    else:
        returns = []

    structured = {
        "params": params,
        "returns": returns,
        "errors": [_entry_payload(entry) for entry in record.errors],
        "yields": record.state.yields,
    }
    return SymbolTypes(display=format_function_display(params, returns), structured=structured)


def build_property_types(record: DocRecord) -> SymbolTypes:
    tag = next((tag for tag in record.type_tags if tag.kind == "property"), None)
    resolved = tag.type if tag else None
    return SymbolTypes(
        display=resolved or "",
        structured={"type": resolved, "readonly": record.state.readonly},
    )


def build_interface_types(record: DocRecord) -> SymbolTypes:
    fields = [
        {"name": item.name, "type": item.type, "description": item.description}
        for item in record.fields
    ]
    return SymbolTypes(display="", structured={"fields": fields})


def build_type_types(record: DocRecord, binding: Optional[TypeBinding]) -> SymbolTypes:
    tag = next((tag for tag in record.type_tags if tag.kind == "type"), None)
    value = tag.type if tag else None
    structured: Dict[str, Any] = {"type": value}
    if binding is not None and binding.fields:
        structured["fields"] = [
            {"name": item.name, "type": item.type, "description": item.description}
            for item in binding.fields
        ]
    return SymbolTypes(display=value or "", structured=structured)


def build_class_types(record: DocRecord) -> SymbolTypes:
    return SymbolTypes(display="", structured={"indexName": record.state.index_name})


@dataclass
class _Resolved:
    kind: Optional[str]
    name: Optional[str]
    within: Optional[str]
    is_method: bool


class SymbolAssembler:
    """Turns the doc blocks of one file into Symbols, reporting ownership problems."""

    def __init__(self, diagnostics: DiagnosticsCollector) -> None:
        self.diagnostics = diagnostics

    def assemble(self, lines: Sequence[str], file: str) -> List[Symbol]:
        blocks = scan_blocks(lines)
        blocks_by_start = {block.start_line: block for block in blocks}
        table_ranges = find_type_table_ranges(lines)

        records: List[Tuple[DocBlock, DocRecord]] = []
        class_names: List[str] = []
        for block in blocks:
            if any(start <= block.start_line <= end for start, end in table_ranges):
                continue
            record = parse_doc_block(block.content_lines)
            records.append((block, record))
            for tag in record.type_tags:
                if tag.kind == "class" and tag.name and tag.name not in class_names:
                    class_names.append(tag.name)

        symbols: List[Symbol] = []
        current_class: Optional[str] = None
        for block, record in records:
            for tag in record.type_tags:
                if tag.kind == "class" and tag.name:
                    current_class = tag.name
            if record.state.within == OWNER_PLACEHOLDER:
                record.state.within = current_class

            binding: Optional[Binding] = None
            primary = record.primary_tag
            if primary is None or primary.kind == "function":
                binding = resolve_binding(lines, block, blocks_by_start)

            symbols.extend(self.build_symbols(record, block, binding, lines, file, class_names))
            self._check_signature(record, block, binding, file)
        return symbols

    def build_symbols(
        self,
        record: DocRecord,
        block: DocBlock,
        binding: Optional[Binding],
        lines: Sequence[str],
        file: str,
        class_names: Sequence[str],
    ) -> List[Symbol]:
        resolved = self._resolve(record, binding, class_names, file, block)
        if not resolved.kind or not resolved.name:
            return []
        kind, name, within, is_method = (
            resolved.kind,
            resolved.name,
            resolved.within,
            resolved.is_method,
        )

        if record.state.readonly and kind != "property":
            self.diagnostics.warning(file, block.start_line, READONLY_MISUSE)

        if binding is not None:
            location = build_location(file, binding.line_number, binding.line)
        else:
            location = build_location(file, block.start_line, _line_at(lines, block.start_line))

        if kind in ("function", "constructor"):
            function_binding = binding if isinstance(binding, FunctionBinding) else None
            types = build_function_types(record, function_binding, is_method)
        elif kind == "property":
            types = build_property_types(record)
        elif kind == "interface":
            types = build_interface_types(record)
        elif kind == "type":
            types = build_type_types(record, binding if isinstance(binding, TypeBinding) else None)
        elif kind == "class":
            types = build_class_types(record)
        else:
            types = SymbolTypes()

        visibility = record.state.visibility or "public"
        symbol = Symbol(
            kind=kind,
            name=name,
            qualified_name=build_qualified_name(within, name, is_method),
            location=location,
            docs=build_docs(record),
            types=types,
            visibility=visibility,
        )
        symbols = [symbol]

        if kind == "type" and isinstance(binding, TypeBinding):
            for item in binding.fields:
                field_location = location
                if item.line:
                    field_location = build_location(file, item.line, _line_at(lines, item.line))
                symbols.append(_field_symbol(name, item, field_location, visibility))
        if kind == "interface":
            for entry in record.fields:
                if entry.name:
                    item = TableField(entry.name, entry.type, entry.description)
                    symbols.append(_field_symbol(name, item, location, visibility))
        return symbols

    def _resolve(
        self,
        record: DocRecord,
        binding: Optional[Binding],
        class_names: Sequence[str],
        file: str,
        block: DocBlock,
    ) -> _Resolved:
        primary = record.primary_tag
        within = record.state.within or None
        bound_owner = binding_within(binding)
        kind: Optional[str] = None
        name: Optional[str] = None
        is_method = False

        if primary is not None:
            kind = primary.kind
            name = primary.name or None
            is_method = primary.is_method if kind == "function" else False
            if isinstance(binding, FunctionBinding) and kind == "function":
                if name is None or name == binding.name:
                    is_method = is_method or binding.is_method
            if name is None and binding is not None:
                name = binding.name or None
        elif binding is not None:
            kind = binding.kind
            name = binding.name or None
            is_method = binding.is_method if isinstance(binding, FunctionBinding) else False

        if not within and bound_owner:
            within = bound_owner

        needs_within = kind in OWNED_KINDS
        if not within and needs_within and len(class_names) == 1:
            within = class_names[0]

        if kind == "function" and name == "new" and within and not is_method:
            kind = "constructor"

        if not within and needs_within:
            if not class_names:
                self.diagnostics.error(file, block.start_line, MISSING_CLASS)
            else:
                self.diagnostics.warning(file, block.start_line, AMBIGUOUS_OWNER)

        return _Resolved(kind=kind, name=name, within=within, is_method=is_method)

    def _check_signature(
        self, record: DocRecord, block: DocBlock, binding: Optional[Binding], file: str
    ) -> None:
        if not isinstance(binding, FunctionBinding) or not record.params:
            return
        has_explicit_type = any(
            entry.type and entry.type.strip() not in ("", "any") for entry in record.params
        )
        if not has_explicit_type:
            return
        documented = {entry.name for entry in record.params}
        declared = {param.name for param in binding.params if param.name != "self"}
        if documented != declared:
            self.diagnostics.warning(file, block.start_line, PARAM_MISMATCH)


def _field_symbol(
    owner: str, item: TableField, location: SymbolLocation, visibility: str
) -> Symbol:
    description = item.description or ""
    summary = next((line.strip() for line in description.splitlines() if line.strip()), "")
    return Symbol(
        kind="field",
        name=item.name,
        qualified_name=f"{owner}.{item.name}",
        location=location,
        docs=SymbolDocs(summary=summary, description_markdown=description, tags=[]),
        types=SymbolTypes(display=item.type or "", structured={"type": item.type}),
        visibility=visibility,
    )


def _line_at(lines: Sequence[str], line_number: int) -> str:
    if 1 <= line_number <= len(lines):
        return lines[line_number - 1]
    return ""


__all__ = [
    "OWNED_KINDS",
    "SymbolAssembler",
    "build_docs",
    "build_function_types",
    "build_location",
    "build_qualified_name",
    "format_function_display",
    "split_qualified_name",
]
