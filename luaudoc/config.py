"""Configuration loading for luaudoc (.luaudoc.yml and docs.config.json)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".luaudoc.yml"
OVERRIDES_FILENAME = "docs.config.json"


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be parsed."""


@dataclass
class SourceLinkConfig:
    """Where "view source" links point."""

    repo_url: str
    branch: str = "main"
    base_path: str = ""
    strip_prefix: str = ""


@dataclass
class ExtractConfig:
    """Extraction inputs and outputs, relative to the project root."""

    src_dir: Path
    types_dir: Optional[Path] = None
    output: Optional[Path] = None
    module_id_overrides: Dict[str, str] = field(default_factory=dict)
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class RenderConfig:
    """Page rendering and output reconciliation settings."""

    lang: str = "luau"
    route_base_path: str = "reference/luau"
    input: Optional[Path] = None
    out_dir: Optional[Path] = None
    manifest_path: Optional[Path] = None
    clean: bool = True
    include_private: bool = False
    overview_title: str = "Overview"
    default_category: str = "Classes"
    category_order: List[str] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    source: Optional[SourceLinkConfig] = None
    code_tab_size: Optional[int] = None
    stylesheet: Optional[Path] = None
    classify_signals_as_events: bool = True
    signature_style: str = "block"
    templates_dir: Optional[Path] = None


@dataclass
class LuauDocConfig:
    """Represents the settings defined in .luaudoc.yml."""

    root: Path
    extract: ExtractConfig
    render: RenderConfig


def default_config(root: Path) -> LuauDocConfig:
    return LuauDocConfig(
        root=root,
        extract=ExtractConfig(
            src_dir=root / "src",
            output=root / ".generated" / "reference" / "luau.json",
        ),
        render=_default_render(root, "luau"),
    )


def _default_render(root: Path, lang: str) -> RenderConfig:
    return RenderConfig(
        lang=lang,
        route_base_path=f"reference/{lang}",
        input=root / ".generated" / "reference" / f"{lang}.json",
        out_dir=root / "docs" / "reference" / lang,
        manifest_path=root / ".generated" / "reference" / "manifest.json",
    )


def load_config(config_path: Path) -> LuauDocConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()
    config = default_config(root)
    config.extract.module_id_overrides = load_module_overrides(root)

    if not config_file.exists():
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    extract_data = _as_dict(data.get("extract"))
    extract = config.extract
    if extract_data:
        extract.src_dir = _as_path(root, extract_data.get("src")) or extract.src_dir
        extract.types_dir = _as_path(root, extract_data.get("types"))
        extract.output = _as_path(root, extract_data.get("output")) or extract.output
        overrides = _as_dict(extract_data.get("module_id_overrides"))
        extract.module_id_overrides.update(
            {str(key): str(value) for key, value in overrides.items() if _as_str(value)}
        )
        extract.exclude_paths = _as_str_list(extract_data.get("exclude_paths"))

    render_data = _as_dict(data.get("render"))
    if render_data:
        lang = _as_str(render_data.get("lang")) or config.render.lang
        render = _default_render(root, lang)
        route = _as_str(render_data.get("route_base_path"))
        if route is not None:
            render.route_base_path = route.strip("/")
        render.input = _as_path(root, render_data.get("input")) or extract.output or render.input
        render.out_dir = _as_path(root, render_data.get("out_dir")) or render.out_dir
        render.manifest_path = _as_path(root, render_data.get("manifest_path")) or render.manifest_path
        render.clean = _as_bool(render_data.get("clean"), default=True)
        render.include_private = _as_bool(render_data.get("include_private"), default=False)
        render.overview_title = _as_str(render_data.get("overview_title")) or render.overview_title
        render.default_category = (
            _as_str(render_data.get("default_category")) or render.default_category
        )
        render.category_order = _as_str_list(render_data.get("category_order"))
        render.labels = {
            str(key): str(value)
            for key, value in _as_dict(render_data.get("labels")).items()
            if _as_str(value) is not None
        }
        render.source = _as_source(render_data.get("source"))
        render.code_tab_size = _as_int(render_data.get("code_tab_size"))
        render.stylesheet = _as_path(root, render_data.get("stylesheet"))
        render.classify_signals_as_events = _as_bool(
            render_data.get("classify_signals_as_events"), default=True
        )
        style = _as_str(render_data.get("signature_style"))
        if style in ("block", "inline"):
            render.signature_style = style
        render.templates_dir = _as_path(root, render_data.get("templates_dir"))
        config.render = render
    else:
        config.render.input = extract.output

    return config


def load_module_overrides(root: Path) -> Dict[str, str]:
    """Read `moduleIdOverrides` from docs.config.json; absence is not an error."""
    path = root / OVERRIDES_FILENAME
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Failed to parse {OVERRIDES_FILENAME}: {exc}") from exc
    if not isinstance(payload, dict):
        return {}
    overrides = payload.get("moduleIdOverrides")
    if not isinstance(overrides, dict):
        return {}
    return {str(key): str(value) for key, value in overrides.items() if isinstance(value, str)}


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_source(value: Any) -> Optional[SourceLinkConfig]:
    data = _as_dict(value)
    repo_url = _as_str(data.get("repo_url"))
    if not repo_url:
        return None
    return SourceLinkConfig(
        repo_url=repo_url,
        branch=_as_str(data.get("branch")) or "main",
        base_path=_as_str(data.get("base_path")) or "",
        strip_prefix=_as_str(data.get("strip_prefix")) or "",
    )


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_path(root: Path, value: Any) -> Optional[Path]:
    text = _as_str(value)
    if not text:
        return None
    path = Path(text).expanduser()
    return path if path.is_absolute() else root / path


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return default


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "ExtractConfig",
    "LuauDocConfig",
    "OVERRIDES_FILENAME",
    "RenderConfig",
    "SourceLinkConfig",
    "default_config",
    "load_config",
    "load_module_overrides",
]
