"""Tests for the doc-comment tag grammar."""

from __future__ import annotations

import pytest

from luaudoc.extract.tags import (
    MemberName,
    join_description,
    parse_doc_block,
    parse_member_name,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Widget.new", MemberName("Widget", "new", False)),
        ("Widget:Destroy", MemberName("Widget", "Destroy", True)),
        ("Net.Remote:Fire", MemberName("Net.Remote", "Fire", True)),
        ("~:Connect", MemberName("~", "Connect", True)),
        ("~.create", MemberName("~", "create", False)),
        ("bare", MemberName(None, "bare", False)),
        ("", MemberName(None, "", False)),
    ],
)
def test_parse_member_name(value: str, expected: MemberName) -> None:
    assert parse_member_name(value) == expected


def test_continuation_lines_attach_to_latest_entry() -> None:
    record = parse_doc_block(
        [
            "@param name string -- the name",
            "  continues here",
            "@return boolean",
            "  ok flag",
            "Back to description",
        ]
    )

    assert record.params[0].name == "name"
    assert record.params[0].type == "string"
    assert record.params[0].description == "the name\ncontinues here"
    assert record.returns[0].type == "boolean"
    assert record.returns[0].description == "ok flag"
    assert record.description_lines == ["Back to description"]


def test_field_line_ends_continuation() -> None:
    record = parse_doc_block(["@param a number", ".size number -- how big", "  more text"])

    assert record.params[0].description is None
    assert [(item.name, item.type, item.description) for item in record.fields] == [
        ("size", "number", "how big")
    ]
    assert record.description_lines == ["  more text"]


def test_fenced_code_suspends_continuation() -> None:
    record = parse_doc_block(
        ["@param a number -- first", "  ```lua", "  @not_a_tag()", "  ```"]
    )

    assert record.params[0].description == "first"
    assert record.description_lines == ["  ```lua", "  @not_a_tag()", "  ```"]
    assert record.type_tags == []


def test_first_kind_tag_is_authoritative() -> None:
    record = parse_doc_block(["@prop Changed Signal", "@within Widget", "@function Other"])

    primary = record.primary_tag
    assert primary is not None
    assert (primary.kind, primary.name, primary.type) == ("property", "Changed", "Signal")
    assert record.state.within == "Widget"
    assert [tag.kind for tag in record.type_tags] == ["property", "function"]


def test_method_tag_sets_owner_and_forces_method() -> None:
    record = parse_doc_block(["@method Destroy", "@within Widget"])
    assert record.primary_tag is not None and record.primary_tag.is_method

    qualified = parse_doc_block(["@function Widget:Destroy"])
    assert qualified.state.within == "Widget"
    assert qualified.primary_tag is not None and qualified.primary_tag.is_method


def test_type_tag_keeps_the_rest_of_the_line() -> None:
    record = parse_doc_block(["@type Callback (number) -> ()"])

    primary = record.primary_tag
    assert primary is not None
    assert (primary.kind, primary.name, primary.type) == ("type", "Callback", "(number) -> ()")


def test_semantic_tags_populate_state() -> None:
    record = parse_doc_block(
        [
            "@within Widget",
            "@yields",
            "@readonly",
            "@private",
            "@since 1.2",
            "@deprecated v2 -- use Other instead",
            "@server",
            "@client",
            "@tag Utility",
            "@category UI/Controls",
            "@extends Base",
            "@external Signal https://example.com/signal",
            "@__index prototype",
            "@unreleased",
        ]
    )
    state = record.state

    assert state.within == "Widget"
    assert state.yields and state.readonly and state.unreleased
    assert state.visibility == "private"
    assert state.since == "1.2"
    assert state.deprecated is not None
    assert (state.deprecated.version, state.deprecated.description) == ("v2", "use Other instead")
    assert record.realms == ["server", "client"]
    assert record.tags == ["Utility"]
    assert state.categories == ["UI/Controls"]
    assert state.extends == ["Base"]
    assert [(ext.name, ext.url) for ext in record.externals] == [
        ("Signal", "https://example.com/signal")
    ]
    assert state.index_name == "prototype"


def test_ignore_tag_hides_symbol() -> None:
    assert parse_doc_block(["@ignore"]).state.visibility == "ignored"


def test_bracket_content_is_dedented_before_parsing() -> None:
    record = parse_doc_block(["\t@class Widget", "", "\tA widget.", "\t  Second line."])

    assert record.primary_tag is not None and record.primary_tag.name == "Widget"
    assert record.description_lines == ["", "A widget.", "  Second line."]


def test_join_description_returns_summary_and_markdown() -> None:
    summary, markdown = join_description(["", "Summary line", "", "More detail", ""])

    assert summary == "Summary line"
    assert markdown == "Summary line\n\nMore detail"
    assert join_description(["", "  "]) == ("", "")
