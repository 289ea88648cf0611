"""Tests for the code tab-size stylesheet rule."""

from __future__ import annotations

from pathlib import Path

from luaudoc.render.styles import MARKER_END, MARKER_START, apply_tab_size_rule, write_tab_size_rule


def test_rule_is_appended_after_existing_css() -> None:
    css = apply_tab_size_rule("body { margin: 0; }\n", 4)

    assert css.startswith("body { margin: 0; }\n" + MARKER_START)
    assert "  tab-size: 4;" in css
    assert css.endswith(MARKER_END + "\n")


def test_rule_replaces_previous_block() -> None:
    once = apply_tab_size_rule("a {}\n", 2)

    twice = apply_tab_size_rule(once, 8)

    assert twice.count(MARKER_START) == 1
    assert "tab-size: 8;" in twice
    assert "tab-size: 2;" not in twice


def test_write_is_idempotent(tmp_path: Path) -> None:
    stylesheet = tmp_path / "css" / "custom.css"

    assert write_tab_size_rule(stylesheet, 4) is True
    assert write_tab_size_rule(stylesheet, 4) is False
    assert stylesheet.read_text(encoding="utf-8").count(MARKER_START) == 1
