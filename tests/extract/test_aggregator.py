"""Tests for module aggregation over a source tree."""

from __future__ import annotations

from pathlib import Path

from luaudoc import __version__
from luaudoc.extract import ModuleAggregator
from luaudoc.extract.aggregator import hash_source, iter_source_files

WIDGET = """
--- @class Widget
local Widget = {}

--- @within Widget
--- @function new
function Widget.new(name: string): Widget
end

return Widget
"""


def test_extracts_modules_in_sorted_path_order(project_builder) -> None:
    project_builder.write(
        {
            "src/Widget.luau": WIDGET,
            "src/UI/Button.lua": "--- @class Button\nlocal Button = {}\n",
            "src/README.md": "not a source",
        }
    )

    result = project_builder.extract()

    document = result.document
    assert document.generator_version == __version__
    assert document.schema_version == 1
    assert [module.path for module in document.modules] == ["src/UI/Button.lua", "src/Widget.luau"]
    assert [module.id for module in document.modules] == ["UI/Button", "Widget"]
    widget = document.modules[1]
    content = (project_builder.path() / "src/Widget.luau").read_text(encoding="utf-8")
    assert widget.source_hash == hash_source(content)
    assert [symbol.qualified_name for symbol in widget.symbols] == ["Widget", "Widget.new"]
    assert result.diagnostics == []


def test_skips_hidden_and_dependency_directories(project_builder) -> None:
    project_builder.write(
        {
            "src/.cache/Hidden.luau": "--- @class Hidden\n",
            "src/node_modules/pkg/Dep.lua": "--- @class Dep\n",
            "src/vendor/Lib.lua": "--- @class Lib\n",
            "src/Keep.luau": "--- @class Keep\n",
        }
    )
    root = project_builder.path() / "src"

    found = [path.relative_to(root).as_posix() for path in iter_source_files(root, ["vendor/"])]

    assert found == ["Keep.luau"]


def test_module_id_overrides_and_types_dir(project_builder) -> None:
    project_builder.write(
        {
            "src/Widget.luau": WIDGET,
            "types/Shared.luau": "--- @class Shared\nlocal Shared = {}\n",
        }
    )
    root = project_builder.path()

    result = ModuleAggregator(
        root / "src",
        root=root,
        types_dir=root / "types",
        module_id_overrides={"src/Widget.luau": "Core/Widget"},
    ).run()

    assert {module.path: module.id for module in result.document.modules} == {
        "src/Widget.luau": "Core/Widget",
        "types/Shared.luau": "Shared",
    }


def test_diagnostics_are_pooled_across_files(project_builder) -> None:
    project_builder.write(
        {
            "src/a.luau": "--- Free function.\nlocal function a() end\n",
            "src/b.luau": "--- Another.\nlocal function b() end\n",
        }
    )

    result = project_builder.extract()

    assert result.has_errors
    assert [(item.file, item.line) for item in result.diagnostics] == [
        ("src/a.luau", 1),
        ("src/b.luau", 1),
    ]
    assert len(result.document.modules) == 2


def test_missing_source_directory_yields_empty_document(tmp_path: Path) -> None:
    result = ModuleAggregator(tmp_path / "missing").run()

    assert result.document.modules == []
    assert result.diagnostics == []
