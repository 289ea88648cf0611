"""Builds class pages and the overview page from planned class entries."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config import RenderConfig, SourceLinkConfig
from ..extract.assembler import split_qualified_name
from ..extract.tags import REALM_TAGS
from ..models import Symbol, SymbolLocation
from ..slugs import sanitize_anchor_id
from .document import (
    Block,
    BulletList,
    Code,
    CodeBlock,
    Document,
    Heading,
    Inline,
    Link,
    Markdown,
    Paragraph,
    Strong,
    Table,
    Text,
    code_cell,
    join_inlines,
    text_cell,
)
from .grouping import BUCKET_ANCHORS, BUCKET_ORDER, ClassEntry, MemberEntry
from .xref import CrossReferenceResolver

INDEX_PAGE = "index.md"

DEFAULT_LABELS: Dict[str, str] = {
    "summary": "Summary",
    "types": "Types",
    "interfaces": "Interfaces",
    "constructors": "Constructors",
    "properties": "Properties",
    "methods": "Methods",
    "functions": "Functions",
    "callbacks": "Callbacks",
    "events": "Events",
    "extends": "Extends",
    "parameters": "Parameters",
    "returns": "Returns",
    "errors": "Errors",
    "fields": "Fields",
    "name": "Name",
    "type": "Type",
    "description": "Description",
    "source": "View Source",
    "tags": "Tags",
    "classes": "classes",
    "noClasses": "No classes found.",
    "classBadge": "Class",
    "typeBadge": "Type",
    "interfaceBadge": "Interface",
    "constructorBadge": "Constructor",
    "propertyBadge": "Property",
    "methodBadge": "Method",
    "functionBadge": "Function",
    "callbackBadge": "Callback",
    "eventBadge": "Event",
    "readonlyBadge": "Read Only",
    "yieldsBadge": "Yields",
    "privateBadge": "Private",
    "unreleasedBadge": "Unreleased",
    "deprecatedBadge": "Deprecated",
    "since": "Since",
}

SIGNATURE_INDENT = "  "


def merge_labels(overrides: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    labels = dict(DEFAULT_LABELS)
    if overrides:
        labels.update({key: value for key, value in overrides.items() if value})
    return labels


def resolve_source_url(location: Optional[SymbolLocation], source: Optional[SourceLinkConfig]) -> Optional[str]:
    """Build a `blob` URL for a symbol location, or None without source settings."""
    if location is None or not location.file or source is None or not source.repo_url:
        return None
    relative = location.file.replace("\\", "/")
    if source.strip_prefix and relative.startswith(source.strip_prefix):
        relative = relative[len(source.strip_prefix):].lstrip("/")
    parts = [source.repo_url.rstrip("/"), "blob", source.branch or "main"]
    base_path = source.base_path.strip("/")
    if base_path:
        parts.append(base_path)
    parts.append(relative)
    url = "/".join(parts)
    if location.line:
        url += f"#L{location.line}"
    return url


def fence_language(lang: str) -> str:
    return "lua" if not lang or lang == "luau" else lang


def apply_default_fence_language(markdown: str, lang: str) -> str:
    """Give unlabelled opening fences the page language; `luau` fences become `lua`."""
    if not markdown:
        return markdown
    language = fence_language(lang)
    output: List[str] = []
    in_fence = False
    for line in markdown.split("\n"):
        stripped = line.strip()
        if not stripped.startswith("```"):
            output.append(line)
            continue
        if in_fence:
            in_fence = False
            output.append(line)
            continue
        in_fence = True
        label = stripped[3:].strip()
        indent = line[: len(line) - len(line.lstrip())]
        if not label:
            output.append(f"{indent}```{language}")
        elif label == "luau":
            output.append(f"{indent}```lua")
        else:
            output.append(line)
    return "\n".join(output)


def _format_params(params: Sequence[Mapping[str, Any]]) -> List[str]:
    formatted = []
    for param in params:
        name = param.get("name")
        if not name:
            continue
        formatted.append(f"{name}: {param['type']}" if param.get("type") else str(name))
    return formatted


def format_return_text(returns: Sequence[Mapping[str, Any]]) -> str:
    types = [str(item["type"]) for item in returns if item.get("type")]
    if not types:
        return "nil"
    if len(types) == 1:
        return types[0]
    return f"({', '.join(types)})"


def build_function_signature(
    prefix: str,
    params: Sequence[Mapping[str, Any]],
    returns: Sequence[Mapping[str, Any]],
    style: str = "block",
) -> str:
    """Format `prefix(params) -> returns`.

    Block style puts each parameter on its own line once there is more than
    one of them.
    """
    formatted = _format_params(params)
    return_text = format_return_text(returns)
    if style == "block" and len(formatted) > 1:
        body = f",\n{SIGNATURE_INDENT}".join(formatted)
        return f"{prefix}(\n{SIGNATURE_INDENT}{body}\n) -> {return_text}"
    return f"{prefix}({', '.join(formatted)}) -> {return_text}"


def render_type_definition(name: str, value: Optional[str], fields: Sequence[Mapping[str, Any]] = (), keyword: str = "type") -> str:
    if value:
        return f"{keyword} {name} = {value}"
    if fields:
        lines = [
            f"{SIGNATURE_INDENT}{item['name']}: {item['type']}" if item.get("type") else f"{SIGNATURE_INDENT}{item['name']}"
            for item in fields
        ]
        return f"{keyword} {name} = {{\n" + "\n".join(lines) + "\n}"
    return f"{keyword} {name} = unknown"


def _structured(symbol: Symbol) -> Dict[str, Any]:
    return dict(symbol.types.structured or {})


def _entries(structured: Mapping[str, Any], key: str) -> List[Dict[str, Any]]:
    value = structured.get(key)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


class PageRenderer:
    """Renders class pages and the overview into document trees."""

    def __init__(self, config: RenderConfig, resolver: CrossReferenceResolver) -> None:
        self.config = config
        self.resolver = resolver
        self.labels = merge_labels(config.labels)

    # ------------------------------------------------------------------
    # Pages

    def render_all(self, entries: Sequence[ClassEntry]) -> List[Document]:
        documents = [self.render_class(entry) for entry in entries]
        documents.append(self.render_overview(entries))
        return documents

    def render_class(self, entry: ClassEntry) -> Document:
        symbol = entry.symbol
        document = Document(
            relative_path=entry.relative_path,
            title=entry.name,
            front_matter={"title": entry.name, "sidebar_label": entry.name},
        )
        document.add(Heading(1, entry.name))
        document.add(*self._badges(symbol, self.labels["classBadge"]))
        document.add(*self._source_link(symbol))
        document.add(*self._description(symbol))
        document.add(*self._tag_list(symbol))
        document.add(*self._summary_section(entry))

        for bucket in BUCKET_ORDER:
            members = entry.buckets.get(bucket)
            if not members:
                continue
            anchor = BUCKET_ANCHORS[bucket]
            document.add(Heading(2, self.labels.get(anchor, anchor), anchor))
            for member in members:
                document.add(*self._member_section(entry, member))
        return document

    def render_overview(self, entries: Sequence[ClassEntry]) -> Document:
        title = self.config.overview_title or "Overview"
        document = Document(
            relative_path=INDEX_PAGE,
            title=title,
            front_matter={"title": title, "sidebar_label": title, "sidebar_position": 1},
        )
        document.add(Heading(1, title))
        if not entries:
            document.add(Paragraph([Text(self.labels["noClasses"])]))
            return document

        for top, subgroups in self._group_by_category(entries):
            count = sum(len(items) for _, items in subgroups)
            document.add(Heading(2, top, sanitize_anchor_id(top)))
            document.add(Paragraph([Text(f"{count} {self.labels['classes']}")]))
            for sub, items in subgroups:
                if sub:
                    document.add(Heading(3, sub))
                document.add(
                    BulletList([[Link(item.name, self._page_href(item))] for item in items])
                )
        return document

    def _group_by_category(
        self, entries: Sequence[ClassEntry]
    ) -> List[Tuple[str, List[Tuple[str, List[ClassEntry]]]]]:
        default = self.config.default_category or "Classes"
        groups: Dict[str, Dict[str, List[ClassEntry]]] = {}
        for entry in entries:
            categories = [value for value in entry.categories if value.strip()] or [default]
            for category in categories:
                parts = [part.strip() for part in category.split("/") if part.strip()]
                top = parts[0] if parts else category
                sub = "/".join(parts[1:])
                groups.setdefault(top, {}).setdefault(sub, []).append(entry)

        order = list(self.config.category_order)

        def top_key(name: str) -> Tuple[int, int, str]:
            if name in order:
                return (0, order.index(name), name)
            return (1, 0, name)

        result = []
        for top in sorted(groups, key=top_key):
            subgroups = [
                (sub, sorted(items, key=lambda item: item.name))
                for sub, items in sorted(groups[top].items())
            ]
            result.append((top, subgroups))
        return result

    def _page_href(self, entry: ClassEntry) -> str:
        return self.resolver.page_href(entry.name) or entry.link

    # ------------------------------------------------------------------
    # Sections

    def _summary_section(self, entry: ClassEntry) -> List[Block]:
        blocks: List[Block] = [Heading(2, self.labels["summary"], "summary")]
        extends = [str(value) for value in entry.symbol.docs.tag_values("extends")]
        if extends:
            blocks.append(Heading(3, self.labels["extends"]))
            blocks.append(BulletList([[self.resolver.link_class(name)] for name in extends]))

        for bucket in BUCKET_ORDER:
            members = entry.buckets.get(bucket)
            if not members:
                continue
            anchor = BUCKET_ANCHORS[bucket]
            rows = []
            for member in members:
                name = member.symbol.name or member.symbol.qualified_name
                name_cell: List[Inline] = (
                    [Link(name, f"#{member.anchor_id}")] if member.anchor_id else [Text(name)]
                )
                rows.append(
                    [
                        name_cell,
                        code_cell(self._summary_type(member, entry.name)),
                        text_cell(member.symbol.docs.summary),
                    ]
                )
            blocks.append(Heading(3, self.labels.get(anchor, anchor)))
            blocks.append(
                Table(
                    [self.labels["name"], self.labels["type"], self.labels["description"]],
                    rows,
                )
            )
        return blocks

    def _member_section(self, entry: ClassEntry, member: MemberEntry) -> List[Block]:
        symbol = member.symbol
        badge = self.labels.get(f"{member.bucket}Badge", member.bucket.title())
        blocks: List[Block] = [Heading(3, symbol.name or symbol.qualified_name, member.anchor_id)]
        blocks.extend(self._badges(symbol, badge))
        blocks.extend(self._source_link(symbol))
        signature = self._signature(entry, member)
        if signature:
            blocks.append(CodeBlock(signature, fence_language(self.config.lang)))
        blocks.extend(self._detail_tables(symbol, member.bucket))
        blocks.extend(self._description(symbol))
        blocks.extend(self._tag_list(symbol))
        return blocks

    def _badges(self, symbol: Symbol, primary: str) -> List[Block]:
        labels = self.labels
        structured = _structured(symbol)
        inlines: List[Inline] = [Strong(primary)]
        for realm in REALM_TAGS:
            if symbol.docs.tag_values(realm):
                inlines.append(Strong(realm.title()))
        if structured.get("readonly"):
            inlines.append(Strong(labels["readonlyBadge"]))
        if structured.get("yields"):
            inlines.append(Strong(labels["yieldsBadge"]))
        if symbol.visibility == "private":
            inlines.append(Strong(labels["privateBadge"]))
        if symbol.docs.tag_values("unreleased"):
            inlines.append(Strong(labels["unreleasedBadge"]))
        since = symbol.docs.tag_values("since")
        if since:
            inlines.append(Text(f"{labels['since']} {since[0]}"))

        blocks: List[Block] = [Paragraph(join_inlines(inlines, " · "))]
        for tag in symbol.docs.tags:
            if tag.name != "deprecated":
                continue
            notice: List[Inline] = [Strong(labels["deprecatedBadge"])]
            if tag.value and tag.value is not True:
                notice.append(Text(f" ({tag.value})"))
            if tag.description:
                notice.append(Text(f": {tag.description}"))
            blocks.append(Paragraph(notice))
        return blocks

    def _source_link(self, symbol: Symbol) -> List[Block]:
        url = resolve_source_url(symbol.location, self.config.source)
        if not url:
            return []
        return [Paragraph([Link(self.labels["source"], url)])]

    def _description(self, symbol: Symbol) -> List[Block]:
        text = symbol.docs.description_markdown.strip() or symbol.docs.summary.strip()
        if not text:
            return []
        text = apply_default_fence_language(text, self.config.lang)
        return [Markdown(self.resolver.link_inline(text))]

    def _tag_list(self, symbol: Symbol) -> List[Block]:
        labels = [str(value) for value in symbol.docs.tag_values("tag")]
        if not labels:
            return []
        inlines: List[Inline] = [Text(f"{self.labels['tags']}: ")]
        inlines.extend(join_inlines([Code(label) for label in labels]))
        return [Paragraph(inlines)]

    def _detail_tables(self, symbol: Symbol, bucket: str) -> List[Block]:
        labels = self.labels
        structured = _structured(symbol)
        blocks: List[Block] = []

        params = _entries(structured, "params")
        if params:
            blocks.append(Heading(4, labels["parameters"]))
            blocks.append(
                Table(
                    [labels["name"], labels["type"], labels["description"]],
                    [
                        [
                            code_cell(item.get("name")),
                            self._type_cell(item.get("type")),
                            text_cell(item.get("description")),
                        ]
                        for item in params
                    ],
                )
            )

        for key in ("returns", "errors"):
            items = _entries(structured, key)
            if not items:
                continue
            blocks.append(Heading(4, labels[key]))
            blocks.append(
                Table(
                    [labels["type"], labels["description"]],
                    [
                        [self._type_cell(item.get("type")), text_cell(item.get("description"))]
                        for item in items
                    ],
                )
            )

        fields = _entries(structured, "fields")
        if fields and bucket in ("type", "interface") and symbol.kind != "field":
            blocks.append(Heading(4, labels["fields"]))
            blocks.append(
                Table(
                    [labels["name"], labels["type"], labels["description"]],
                    [
                        [
                            code_cell(item.get("name")),
                            self._type_cell(item.get("type")),
                            text_cell(item.get("description")),
                        ]
                        for item in fields
                    ],
                )
            )
        return blocks

    def _type_cell(self, value: Optional[str]) -> List[Inline]:
        if not value:
            return []
        if value in self.resolver:
            return [self.resolver.link_class(value)]
        return [Code(value)]

    # ------------------------------------------------------------------
    # Signatures

    def _signature(self, entry: ClassEntry, member: MemberEntry) -> Optional[str]:
        symbol = member.symbol
        structured = _structured(symbol)
        owner, name, is_method = split_qualified_name(symbol.qualified_name or symbol.name)
        owner = owner or entry.name
        separator = ":" if is_method else "."

        if symbol.kind in ("function", "method", "constructor") and "params" in structured:
            return build_function_signature(
                f"{owner}{separator}{name}",
                _entries(structured, "params"),
                _entries(structured, "returns"),
                self.config.signature_style,
            )
        if symbol.kind == "type":
            return render_type_definition(symbol.name, structured.get("type"), _entries(structured, "fields"))
        if symbol.kind == "interface":
            return render_type_definition(
                symbol.name, None, _entries(structured, "fields"), keyword="interface"
            )
        type_text = structured.get("type") or symbol.types.display
        if symbol.kind in ("property", "event", "field"):
            return f"{owner}.{name}: {type_text}" if type_text else f"{owner}.{name}"
        return symbol.types.display or None

    def _summary_type(self, member: MemberEntry, class_name: str) -> str:
        symbol = member.symbol
        structured = _structured(symbol)
        if member.bucket == "constructor":
            return class_name
        if symbol.kind in ("function", "method", "constructor") and "returns" in structured:
            return format_return_text(_entries(structured, "returns"))
        if symbol.kind == "type":
            return str(structured.get("type") or "type")
        if symbol.kind == "interface":
            return "interface"
        return str(structured.get("type") or symbol.types.display or "")


__all__ = [
    "DEFAULT_LABELS",
    "INDEX_PAGE",
    "PageRenderer",
    "apply_default_fence_language",
    "build_function_signature",
    "fence_language",
    "format_return_text",
    "merge_labels",
    "render_type_definition",
    "resolve_source_url",
]
