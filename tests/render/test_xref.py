"""Tests for inline cross-reference rewriting."""

from __future__ import annotations

import pytest

from luaudoc.render.document import Link, Text
from luaudoc.render.grouping import is_signal_property, plan_pages
from luaudoc.render.xref import CrossReferenceResolver, strip_legacy_prefix
from tests._fixtures.symbols import widget_document


@pytest.fixture
def resolver() -> CrossReferenceResolver:
    entries = plan_pages(widget_document(), event_predicate=is_signal_property)
    return CrossReferenceResolver(entries, "/reference/luau/")


def test_class_and_member_references_become_links(resolver: CrossReferenceResolver) -> None:
    text = "Use `Widget`, `Widget.new`, `Widget:Destroy()` or `Button`."

    assert resolver.link_inline(text) == (
        "Use [Widget](/reference/luau/classes/UI/Controls/Widget), "
        "[Widget.new](/reference/luau/classes/UI/Controls/Widget#new), "
        "[Widget:Destroy()](/reference/luau/classes/UI/Controls/Widget#Destroy) "
        "or [Button](/reference/luau/classes/Button)."
    )


def test_labels_legacy_prefixes_and_no_link(resolver: CrossReferenceResolver) -> None:
    assert resolver.link_inline("`Class.Widget|the widget`") == (
        "[the widget](/reference/luau/classes/UI/Controls/Widget)"
    )
    assert resolver.link_inline("`Widget|no-link`") == "`Widget`"
    assert resolver.link_inline("`Datatype.Vector3`") == "`Vector3`"


def test_unresolved_references_stay_literal(resolver: CrossReferenceResolver) -> None:
    assert resolver.link_inline("`Unknown.thing`") == "`Unknown.thing`"
    assert resolver.link_inline("`string | number`") == "`string | number`"


def test_fenced_code_is_left_untouched(resolver: CrossReferenceResolver) -> None:
    text = "```lua\nlocal w = `Widget`\n```\nSee `Widget`."

    rewritten = resolver.link_inline(text)

    assert rewritten.startswith("```lua\nlocal w = `Widget`\n```\n")
    assert rewritten.endswith("See [Widget](/reference/luau/classes/UI/Controls/Widget).")


def test_unknown_member_falls_back_to_sanitised_anchor(resolver: CrossReferenceResolver) -> None:
    assert resolver.resolve("Widget.Missing Thing") == (
        "/reference/luau/classes/UI/Controls/Widget#Missing-Thing"
    )


def test_link_class_returns_text_for_unknown(resolver: CrossReferenceResolver) -> None:
    assert resolver.link_class("Button") == Link("Button", "/reference/luau/classes/Button")
    assert resolver.link_class("Base") == Text("Base")


def test_strip_legacy_prefix() -> None:
    assert strip_legacy_prefix("Enum.KeyCode") == "KeyCode"
    assert strip_legacy_prefix("Widget") == "Widget"
