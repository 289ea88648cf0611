"""Tests for @inheritDoc resolution."""

from __future__ import annotations

from luaudoc.extract.inherit import apply_inherit_docs, has_type_shape
from luaudoc.models import Symbol, SymbolDocs, SymbolLocation, SymbolTag, SymbolTypes


def _symbol(qualified_name: str, **kwargs) -> Symbol:
    name = qualified_name.replace(":", ".").rsplit(".", 1)[-1]
    return Symbol(
        kind=kwargs.pop("kind", "function"),
        name=name,
        qualified_name=qualified_name,
        location=SymbolLocation("src/Widget.luau", 1),
        **kwargs,
    )


def test_inherit_copies_description_summary_and_tags_but_not_visibility() -> None:
    target = _symbol(
        "Widget.new",
        docs=SymbolDocs(
            summary="Creates a widget.",
            description_markdown="Creates a widget.\n\nMore.",
            tags=[SymbolTag("since", "1.0")],
        ),
        types=SymbolTypes("(name: string) -> Widget", {"params": [{"name": "name", "type": "string"}]}),
    )
    inheritor = _symbol(
        "Widget.create",
        docs=SymbolDocs(tags=[SymbolTag("inheritDoc", "Widget.new")]),
        visibility="private",
    )

    resolved = apply_inherit_docs([target, inheritor])

    merged = resolved[1]
    assert merged.docs.summary == "Creates a widget."
    assert merged.docs.description_markdown == "Creates a widget.\n\nMore."
    assert merged.docs.tags == [SymbolTag("since", "1.0")]
    assert merged.types == target.types
    assert merged.visibility == "private"
    assert inheritor.docs.summary == ""


def test_inherit_keeps_explicit_fields() -> None:
    target = _symbol(
        "Widget.new",
        docs=SymbolDocs("Target.", "Target.", [SymbolTag("since", "1.0")]),
    )
    inheritor = _symbol(
        "Widget.create",
        docs=SymbolDocs(
            "Own text.",
            "Own text.",
            [SymbolTag("inheritDoc", "Widget.new"), SymbolTag("tag", "Mine")],
        ),
    )

    merged = apply_inherit_docs([target, inheritor])[1]

    assert merged.docs.description_markdown == "Own text."
    assert [tag.name for tag in merged.docs.tags] == ["inheritDoc", "tag"]


def test_unknown_target_leaves_symbol_unchanged() -> None:
    inheritor = _symbol("Widget.create", docs=SymbolDocs(tags=[SymbolTag("inheritDoc", "Nope.new")]))

    assert apply_inherit_docs([inheritor]) == [inheritor]


def test_inheritance_is_not_transitive() -> None:
    root = _symbol("A.a", docs=SymbolDocs("Root.", "Root.", []))
    middle = _symbol("A.b", docs=SymbolDocs(tags=[SymbolTag("inheritDoc", "A.a")]))
    leaf = _symbol("A.c", docs=SymbolDocs(tags=[SymbolTag("inheritDoc", "A.b")]))

    resolved = apply_inherit_docs([root, middle, leaf])

    assert resolved[1].docs.description_markdown == "Root."
    assert resolved[2].docs.description_markdown == ""


def test_has_type_shape_treats_empty_nested_values_as_empty() -> None:
    assert not has_type_shape(SymbolTypes("", None))
    assert not has_type_shape(SymbolTypes("", {"params": [], "returns": [], "yields": False}))
    assert has_type_shape(SymbolTypes("", {"type": "Signal", "readonly": False}))
