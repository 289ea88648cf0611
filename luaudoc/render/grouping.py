"""Groups symbols under their owning classes and allocates in-page anchors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set

from ..extract.assembler import split_qualified_name
from ..models import ReferenceDocument, Symbol
from ..slugs import sanitize_anchor_id, sanitize_module_path

BUCKET_ORDER = (
    "type",
    "interface",
    "constructor",
    "property",
    "method",
    "function",
    "callback",
    "event",
)

BUCKET_ANCHORS = {
    "type": "types",
    "interface": "interfaces",
    "constructor": "constructors",
    "property": "properties",
    "method": "methods",
    "function": "functions",
    "callback": "callbacks",
    "event": "events",
}

RESERVED_ANCHORS = ("summary",) + tuple(BUCKET_ANCHORS.values())

PAGE_ROOT = "classes"
PAGE_SUFFIX = ".md"

EventPredicate = Callable[[Symbol], bool]


def is_signal_property(symbol: Symbol) -> bool:
    """Default event heuristic: a property whose type mentions `signal`."""
    if symbol.kind != "property":
        return False
    structured = symbol.types.structured or {}
    type_text = structured.get("type") or symbol.types.display or ""
    return "signal" in str(type_text).lower()


def has_event_marker(symbol: Symbol) -> bool:
    for tag in symbol.docs.tags:
        if tag.name == "event" and tag.value:
            return True
        if tag.name == "tag" and str(tag.value).lower() == "event":
            return True
    return False


def has_callback_marker(symbol: Symbol) -> bool:
    for tag in symbol.docs.tags:
        if tag.name == "callback" and tag.value:
            return True
        if tag.name == "tag" and str(tag.value).lower() == "callback":
            return True
    return False


def owner_of(symbol: Symbol) -> Optional[str]:
    within, _, _ = split_qualified_name(symbol.qualified_name or symbol.name)
    return within


def member_separator(symbol: Symbol) -> Optional[str]:
    within, _, is_method = split_qualified_name(symbol.qualified_name or symbol.name)
    if within is None:
        return None
    return ":" if is_method else "."


def display_bucket(symbol: Symbol, event_predicate: Optional[EventPredicate] = None) -> Optional[str]:
    """Pick the summary/section bucket of a member symbol.

    Precedence: event marker, configured event predicate, constructor kind,
    callback marker, `:` methods, `.new` constructors, then the plain kind.
    """
    kind = symbol.kind
    if kind in ("class", "module"):
        return None
    if has_event_marker(symbol):
        return "event"
    if event_predicate is not None and event_predicate(symbol):
        return "event"
    if kind == "constructor":
        return "constructor"
    if has_callback_marker(symbol):
        return "callback"
    if kind in ("function", "method"):
        separator = member_separator(symbol)
        if separator == ":" or kind == "method":
            return "method"
        if symbol.name == "new" and separator == ".":
            return "constructor"
        return "function"
    if kind == "field":
        return "interface"
    if kind in BUCKET_ORDER:
        return kind
    return None


class AnchorAllocator:
    """Hands out collision-free anchor ids for one page, in first-seen order."""

    def __init__(self, reserved: Iterable[str] = ()) -> None:
        self._used: Set[str] = set(reserved)

    def reserve(self, anchor: str) -> None:
        self._used.add(anchor)

    def __contains__(self, anchor: object) -> bool:
        return anchor in self._used

    def allocate(self, symbol: Optional[Symbol] = None, heading: Optional[str] = None) -> Optional[str]:
        candidates: List[str] = []
        for value in (
            symbol.name if symbol else None,
            symbol.qualified_name if symbol else None,
            heading,
        ):
            anchor = sanitize_anchor_id(value)
            if anchor and anchor not in candidates:
                candidates.append(anchor)
        if not candidates:
            return None

        for candidate in candidates:
            if candidate not in self._used:
                self._used.add(candidate)
                return candidate

        base = candidates[0]
        index = 2
        while f"{base}-{index}" in self._used:
            index += 1
        anchor = f"{base}-{index}"
        self._used.add(anchor)
        return anchor


def allocate_anchors(symbols: Sequence[Symbol], reserved: Iterable[str] = ()) -> List[Optional[str]]:
    allocator = AnchorAllocator(reserved)
    return [allocator.allocate(symbol, symbol.name or symbol.qualified_name) for symbol in symbols]


@dataclass
class MemberEntry:
    symbol: Symbol
    bucket: str
    anchor_id: Optional[str]


@dataclass
class ClassEntry:
    """One class page: its root symbol, members by bucket and output path."""

    name: str
    symbol: Symbol
    relative_path: str
    categories: List[str] = field(default_factory=list)
    members: List[Symbol] = field(default_factory=list)
    buckets: Dict[str, List[MemberEntry]] = field(default_factory=dict)

    @property
    def link(self) -> str:
        return self.relative_path[: -len(PAGE_SUFFIX)] if self.relative_path.endswith(PAGE_SUFFIX) else self.relative_path

    @property
    def primary_category(self) -> str:
        return self.categories[0] if self.categories else ""

    def anchor_for(self, member_name: str) -> Optional[str]:
        for entries in self.buckets.values():
            for entry in entries:
                if entry.symbol.name == member_name:
                    return entry.anchor_id
        return None

    def iter_members(self) -> Iterable[MemberEntry]:
        for bucket in BUCKET_ORDER:
            yield from self.buckets.get(bucket, [])


def is_visible(symbol: Symbol, include_private: bool) -> bool:
    if symbol.visibility == "ignored":
        return False
    if symbol.visibility == "private" and not include_private:
        return False
    return True


def class_page_path(symbol: Symbol) -> str:
    categories = [str(value) for value in symbol.docs.tag_values("category")]
    base = PAGE_ROOT
    if categories:
        base = f"{PAGE_ROOT}/{sanitize_module_path(categories[0])}"
    return f"{base}/{sanitize_module_path(symbol.name)}{PAGE_SUFFIX}"


def group_members(
    members: Sequence[Symbol], event_predicate: Optional[EventPredicate] = None
) -> Dict[str, List[MemberEntry]]:
    """Bucket and sort members, then allocate anchors bucket by bucket."""
    grouped: Dict[str, List[Symbol]] = {}
    for symbol in members:
        bucket = display_bucket(symbol, event_predicate)
        if bucket is None:
            continue
        grouped.setdefault(bucket, []).append(symbol)

    allocator = AnchorAllocator(RESERVED_ANCHORS)
    buckets: Dict[str, List[MemberEntry]] = {}
    for bucket in BUCKET_ORDER:
        items = sorted(grouped.get(bucket, []), key=lambda item: item.qualified_name or item.name)
        if not items:
            continue
        buckets[bucket] = [
            MemberEntry(item, bucket, allocator.allocate(item, item.name or item.qualified_name))
            for item in items
        ]
    return buckets


def plan_pages(
    document: ReferenceDocument,
    *,
    include_private: bool = False,
    event_predicate: Optional[EventPredicate] = None,
) -> List[ClassEntry]:
    """Build the class pages of `document`, sorted by class name.

    The first class declaration of a name wins; members whose owner is not a
    known class are left out of the pages but stay in the document.
    """
    entries: Dict[str, ClassEntry] = {}
    for module in document.modules:
        for symbol in module.symbols:
            if symbol.kind != "class" or not symbol.name or symbol.name in entries:
                continue
            if not is_visible(symbol, include_private):
                continue
            entries[symbol.name] = ClassEntry(
                name=symbol.name,
                symbol=symbol,
                relative_path=class_page_path(symbol),
                categories=[str(value) for value in symbol.docs.tag_values("category")],
            )

    for module in document.modules:
        for symbol in module.symbols:
            if symbol.kind == "class" or not is_visible(symbol, include_private):
                continue
            owner = owner_of(symbol)
            if owner and owner in entries:
                entries[owner].members.append(symbol)

    planned = sorted(entries.values(), key=lambda entry: entry.name)
    for entry in planned:
        entry.buckets = group_members(entry.members, event_predicate)
    return planned


__all__ = [
    "AnchorAllocator",
    "BUCKET_ANCHORS",
    "BUCKET_ORDER",
    "ClassEntry",
    "EventPredicate",
    "MemberEntry",
    "PAGE_SUFFIX",
    "allocate_anchors",
    "class_page_path",
    "display_bucket",
    "group_members",
    "has_event_marker",
    "is_signal_property",
    "is_visible",
    "owner_of",
    "plan_pages",
]
