"""Tests for comment-block scanning."""

from __future__ import annotations

from luaudoc.extract.scanner import dedent_lines, scan_blocks, strip_line_marker


def test_line_block_strips_marker_and_one_space() -> None:
    lines = ["--- Hello", "---   indented", "---", "local x = 1"]

    blocks = scan_blocks(lines)

    assert len(blocks) == 1
    block = blocks[0]
    assert (block.start_line, block.end_line) == (1, 3)
    assert block.content_lines == ["Hello", "  indented", ""]


def test_line_block_preserves_line_count() -> None:
    source = [
        "    --- Summary",
        "    ---",
        "    --- @param a number",
        "    ---   continued",
        "    function Foo.bar(a) end",
    ]

    block = scan_blocks(source)[0]

    assert len(block.content_lines) == block.end_line - block.start_line + 1 == 4
    assert block.content_lines == [strip_line_marker(line) for line in source[:4]]


def test_bracket_block_keeps_interior_lines_verbatim() -> None:
    lines = ["--[=[", "\t@class Widget", "", "\tA widget.", "]=]", "local Widget = {}"]

    blocks = scan_blocks(lines)

    assert len(blocks) == 1
    assert (blocks[0].start_line, blocks[0].end_line) == (1, 5)
    assert blocks[0].content_lines == ["\t@class Widget", "", "\tA widget."]


def test_bracket_block_closed_on_the_opening_line() -> None:
    blocks = scan_blocks(["local a = 1 --[=[ @class Foo ]=]", "--[=[ @class Bar ]=]"])

    assert len(blocks) == 1
    assert blocks[0].start_line == blocks[0].end_line == 2
    assert blocks[0].content_lines == [" @class Bar "]


def test_unterminated_bracket_block_runs_to_end_of_file() -> None:
    lines = ["--[=[", "@class Lost", "still inside"]

    blocks = scan_blocks(lines)

    assert len(blocks) == 1
    assert blocks[0].end_line == 3
    assert blocks[0].content_lines == ["@class Lost", "still inside"]


def test_blocks_are_ordered_and_do_not_overlap() -> None:
    lines = [
        "--- first",
        "--[=[",
        "second",
        "]=]",
        "local x = 1",
        "--- third",
    ]

    blocks = scan_blocks(lines)

    assert [(block.start_line, block.end_line) for block in blocks] == [(1, 1), (2, 4), (6, 6)]
    for previous, current in zip(blocks, blocks[1:]):
        assert previous.end_line < current.start_line


def test_markers_inside_string_literals_are_still_recognised() -> None:
    lines = ["local text = [[", "--- not really docs", "]]"]

    blocks = scan_blocks(lines)

    assert [block.content_lines for block in blocks] == [["not really docs"]]


def test_dedent_lines_ignores_blank_lines() -> None:
    assert dedent_lines(["    a", "", "      b"]) == ["a", "", "  b"]
    assert dedent_lines(["a", "  b"]) == ["a", "  b"]
