"""Tests for luaudoc.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from luaudoc.config import ConfigError, LuauDocConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    root = tmp_path.resolve()
    assert isinstance(config, LuauDocConfig)
    assert config.root == root
    assert config.extract.src_dir == root / "src"
    assert config.extract.output == root / ".generated" / "reference" / "luau.json"
    assert config.extract.module_id_overrides == {}
    assert config.render.lang == "luau"
    assert config.render.route_base_path == "reference/luau"
    assert config.render.input == config.extract.output
    assert config.render.out_dir == root / "docs" / "reference" / "luau"
    assert config.render.manifest_path == root / ".generated" / "reference" / "manifest.json"
    assert config.render.clean is True
    assert config.render.include_private is False
    assert config.render.source is None
    assert config.render.signature_style == "block"
    assert config.render.classify_signals_as_events is True


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".luaudoc.yml"
    config_file.write_text(
        """
extract:
  src: "lib"
  types: "typings"
  output: "build/ref.json"
  exclude_paths:
    - "lib/vendor/"
  module_id_overrides:
    lib/init.luau: "Package"
render:
  lang: "luau"
  route_base_path: "/api/"
  out_dir: "site/api"
  clean: "no"
  include_private: true
  overview_title: "API"
  default_category: "Misc"
  category_order: [Core, UI]
  labels:
    summary: "At a glance"
  source:
    repo_url: "https://github.com/example/widgets"
    branch: "trunk"
    base_path: "packages/widgets"
    strip_prefix: "lib/"
  code_tab_size: 4
  stylesheet: "site/custom.css"
  classify_signals_as_events: false
  signature_style: "inline"
  templates_dir: "templates"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    root = tmp_path.resolve()
    assert config.extract.src_dir == root / "lib"
    assert config.extract.types_dir == root / "typings"
    assert config.extract.output == root / "build" / "ref.json"
    assert config.extract.exclude_paths == ["lib/vendor/"]
    assert config.extract.module_id_overrides == {"lib/init.luau": "Package"}

    render = config.render
    assert render.route_base_path == "api"
    assert render.input == root / "build" / "ref.json"
    assert render.out_dir == root / "site" / "api"
    assert render.clean is False
    assert render.include_private is True
    assert render.overview_title == "API"
    assert render.default_category == "Misc"
    assert render.category_order == ["Core", "UI"]
    assert render.labels == {"summary": "At a glance"}
    assert render.source is not None
    assert render.source.repo_url == "https://github.com/example/widgets"
    assert render.source.branch == "trunk"
    assert render.source.strip_prefix == "lib/"
    assert render.code_tab_size == 4
    assert render.stylesheet == root / "site" / "custom.css"
    assert render.classify_signals_as_events is False
    assert render.signature_style == "inline"
    assert render.templates_dir == root / "templates"


def test_module_overrides_are_read_from_docs_config(tmp_path: Path) -> None:
    (tmp_path / "docs.config.json").write_text(
        '{"moduleIdOverrides": {"src/init.luau": "Root", "bad": 3}}', encoding="utf-8"
    )

    config = load_config(tmp_path)

    assert config.extract.module_id_overrides == {"src/init.luau": "Root"}


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".luaudoc.yml").write_text("render: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".luaudoc.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".luaudoc.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.render.out_dir == tmp_path.resolve() / "docs" / "reference" / "luau"
