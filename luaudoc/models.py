"""Core data models shared across luaudoc components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

SCHEMA_VERSION = 1

SYMBOL_KINDS = (
    "class",
    "interface",
    "type",
    "constructor",
    "property",
    "method",
    "function",
    "event",
    "field",
)

VISIBILITIES = ("public", "private", "ignored")


# ----------------------------------------------------------------------
# Extraction-time records


@dataclass(frozen=True)
class DocBlock:
    """Raw documentation comment span, 1-based inclusive line numbers."""

    start_line: int
    end_line: int
    content_lines: List[str]


@dataclass
class DocEntry:
    """A `@param`, `@return` or `@error` entry; description grows by continuation."""

    name: Optional[str] = None
    type: Optional[str] = None
    description_lines: List[str] = field(default_factory=list)

    @property
    def description(self) -> Optional[str]:
        text = "\n".join(self.description_lines).strip()
        return text or None


@dataclass
class FieldEntry:
    name: str
    type: Optional[str] = None
    description: Optional[str] = None


@dataclass
class TypeTag:
    """A kind-declaring tag (`@class`, `@prop`, `@function`, ...)."""

    kind: str
    name: str
    type: Optional[str] = None
    is_method: bool = False


@dataclass
class Deprecation:
    version: Optional[str] = None
    description: Optional[str] = None


@dataclass
class External:
    name: str
    url: str


@dataclass
class DocState:
    """Semantic flags collected from the non-kind tags of a block."""

    within: Optional[str] = None
    yields: bool = False
    readonly: bool = False
    visibility: Optional[str] = None
    since: Optional[str] = None
    unreleased: bool = False
    deprecated: Optional[Deprecation] = None
    index_name: Optional[str] = None
    inherit_doc: Optional[str] = None
    includes: List[str] = field(default_factory=list)
    snippets: List[str] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)
    event: bool = False
    callback: bool = False
    extends: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)


@dataclass
class DocRecord:
    """Parsed semantic content of one documentation block."""

    description_lines: List[str] = field(default_factory=list)
    type_tags: List[TypeTag] = field(default_factory=list)
    fields: List[FieldEntry] = field(default_factory=list)
    params: List[DocEntry] = field(default_factory=list)
    returns: List[DocEntry] = field(default_factory=list)
    errors: List[DocEntry] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    realms: List[str] = field(default_factory=list)
    externals: List[External] = field(default_factory=list)
    state: DocState = field(default_factory=DocState)

    @property
    def primary_tag(self) -> Optional[TypeTag]:
        return self.type_tags[0] if self.type_tags else None


# ----------------------------------------------------------------------
# Bindings: one variant per declaration shape


@dataclass(frozen=True)
class BindingParam:
    name: str
    type: Optional[str] = None


@dataclass(frozen=True)
class TableField:
    name: str
    type: Optional[str] = None
    description: Optional[str] = None
    line: Optional[int] = None


@dataclass(frozen=True)
class FunctionBinding:
    name: str
    within: Optional[str]
    is_method: bool
    params: List[BindingParam]
    return_type: Optional[str]
    line_number: int = 0
    line: str = ""
    kind: str = "function"


@dataclass(frozen=True)
class PropertyBinding:
    name: str
    within: str
    line_number: int = 0
    line: str = ""
    kind: str = "property"


@dataclass(frozen=True)
class TypeBinding:
    name: str
    fields: List[TableField]
    end_line: int
    line_number: int = 0
    line: str = ""
    kind: str = "type"


@dataclass(frozen=True)
class ClassBinding:
    name: str
    line_number: int = 0
    line: str = ""
    kind: str = "class"


Binding = Union[FunctionBinding, PropertyBinding, TypeBinding, ClassBinding]


def binding_within(binding: Optional[Binding]) -> Optional[str]:
    if isinstance(binding, (FunctionBinding, PropertyBinding)):
        return binding.within
    return None


# ----------------------------------------------------------------------
# Boundary artifact


@dataclass(frozen=True)
class SymbolLocation:
    file: str
    line: int
    column: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"file": self.file, "line": self.line, "column": self.column}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SymbolLocation":
        return cls(
            file=str(payload.get("file") or ""),
            line=int(payload.get("line") or 0),
            column=int(payload.get("column") or 1),
        )


@dataclass(frozen=True)
class SymbolTag:
    name: str
    value: Any = True
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "value": self.value}
        if self.description is not None:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SymbolTag":
        return cls(
            name=str(payload.get("name") or ""),
            value=payload.get("value", True),
            description=payload.get("description"),
        )


@dataclass(frozen=True)
class SymbolDocs:
    summary: str = ""
    description_markdown: str = ""
    tags: List[SymbolTag] = field(default_factory=list)

    def tag_values(self, name: str) -> List[Any]:
        return [tag.value for tag in self.tags if tag.name == name and tag.value]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "descriptionMarkdown": self.description_markdown,
            "tags": [tag.to_dict() for tag in self.tags],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SymbolDocs":
        tags = payload.get("tags") or []
        return cls(
            summary=str(payload.get("summary") or ""),
            description_markdown=str(payload.get("descriptionMarkdown") or ""),
            tags=[SymbolTag.from_dict(tag) for tag in tags if isinstance(tag, dict)],
        )


@dataclass(frozen=True)
class SymbolTypes:
    display: str = ""
    structured: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"display": self.display, "structured": self.structured}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SymbolTypes":
        structured = payload.get("structured")
        return cls(
            display=str(payload.get("display") or ""),
            structured=structured if isinstance(structured, dict) else None,
        )


@dataclass(frozen=True)
class Symbol:
    """One documented entity of the reference model."""

    kind: str
    name: str
    qualified_name: str
    location: SymbolLocation
    docs: SymbolDocs = field(default_factory=SymbolDocs)
    types: SymbolTypes = field(default_factory=SymbolTypes)
    visibility: str = "public"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "qualifiedName": self.qualified_name,
            "location": self.location.to_dict(),
            "docs": self.docs.to_dict(),
            "types": self.types.to_dict(),
            "visibility": self.visibility,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Symbol":
        name = str(payload.get("name") or "")
        return cls(
            kind=str(payload.get("kind") or "module"),
            name=name,
            qualified_name=str(payload.get("qualifiedName") or name),
            location=SymbolLocation.from_dict(payload.get("location") or {}),
            docs=SymbolDocs.from_dict(payload.get("docs") or {}),
            types=SymbolTypes.from_dict(payload.get("types") or {}),
            visibility=str(payload.get("visibility") or "public"),
        )


@dataclass
class Module:
    id: str
    path: str
    source_hash: str
    symbols: List[Symbol] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "path": self.path,
            "sourceHash": self.source_hash,
            "symbols": [symbol.to_dict() for symbol in self.symbols],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Module":
        symbols = payload.get("symbols") or []
        return cls(
            id=str(payload.get("id") or ""),
            path=str(payload.get("path") or ""),
            source_hash=str(payload.get("sourceHash") or ""),
            symbols=[Symbol.from_dict(item) for item in symbols if isinstance(item, dict)],
        )


@dataclass
class ReferenceDocument:
    """Versioned extraction output consumed by the renderer."""

    generator_version: str
    modules: List[Module] = field(default_factory=list)
    luau_version: Optional[str] = None
    schema_version: int = SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "generatorVersion": self.generator_version,
            "luauVersion": self.luau_version,
            "modules": [module.to_dict() for module in self.modules],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ReferenceDocument":
        modules = payload.get("modules") or []
        luau_version = payload.get("luauVersion")
        return cls(
            schema_version=int(payload.get("schemaVersion") or SCHEMA_VERSION),
            generator_version=str(payload.get("generatorVersion") or "0.0.0"),
            luau_version=str(luau_version) if luau_version is not None else None,
            modules=[Module.from_dict(item) for item in modules if isinstance(item, dict)],
        )


@dataclass(frozen=True)
class Diagnostic:
    """Warning or error surfaced to the caller; never aborts a run."""

    level: str
    file: str
    line: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level, "file": self.file, "line": self.line, "message": self.message}

    def format(self) -> str:
        return f"{self.file}:{self.line}: {self.level}: {self.message}"
