"""`@inheritDoc` resolution within a single module."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from ..models import Symbol, SymbolDocs, SymbolTypes


def _inherit_target(symbol: Symbol) -> Optional[str]:
    for tag in symbol.docs.tags:
        if tag.name == "inheritDoc" and tag.value and isinstance(tag.value, str):
            return tag.value
    return None


def _has_own_tags(docs: SymbolDocs) -> bool:
    return any(tag.name != "inheritDoc" for tag in docs.tags)


def _is_empty_shape(value: Any) -> bool:
    if value is None or value is False or value == "":
        return True
    if isinstance(value, (list, tuple, dict)):
        items = value.values() if isinstance(value, dict) else value
        return all(_is_empty_shape(item) for item in items)
    return False


def has_type_shape(types: SymbolTypes) -> bool:
    return not _is_empty_shape(types.structured)


def merge_inherited(symbol: Symbol, target: Symbol) -> Symbol:
    """Fill the unset documentation fields of `symbol` from `target`."""
    docs = symbol.docs
    if not docs.description_markdown and target.docs.description_markdown:
        docs = replace(
            docs,
            summary=target.docs.summary,
            description_markdown=target.docs.description_markdown,
        )
    if not _has_own_tags(docs) and target.docs.tags:
        docs = replace(docs, tags=list(target.docs.tags))

    types = symbol.types
    if not has_type_shape(types) and has_type_shape(target.types):
        types = SymbolTypes(display=target.types.display, structured=target.types.structured)

    if docs is symbol.docs and types is symbol.types:
        return symbol
    return replace(symbol, docs=docs, types=types)


def apply_inherit_docs(symbols: Sequence[Symbol]) -> List[Symbol]:
    """Return a new symbol list with `@inheritDoc` directives resolved.

    Lookups use the qualified names of this module only and read the
    original (pre-merge) symbols, so chains are not followed transitively.
    """
    by_qualified: Dict[str, Symbol] = {}
    for symbol in symbols:
        by_qualified[symbol.qualified_name] = symbol

    resolved: List[Symbol] = []
    for symbol in symbols:
        target_name = _inherit_target(symbol)
        target = by_qualified.get(target_name) if target_name else None
        if target is None or target is symbol:
            resolved.append(symbol)
            continue
        resolved.append(merge_inherited(symbol, target))
    return resolved


__all__ = ["apply_inherit_docs", "has_type_shape", "merge_inherited"]
