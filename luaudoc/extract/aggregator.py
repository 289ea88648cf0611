"""Walks a Lua source tree and aggregates per-file symbols into one document."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from .. import __version__
from ..logging import get_logger
from ..models import Diagnostic, Module, ReferenceDocument
from .assembler import SymbolAssembler
from .diagnostics import DiagnosticsCollector
from .inherit import apply_inherit_docs

SOURCE_SUFFIXES = (".lua", ".luau")
_DEPENDENCY_DIRS = {"node_modules"}


@dataclass
class ExtractionResult:
    """The reference document plus every diagnostic raised while building it."""

    document: ReferenceDocument
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(item.level == "error" for item in self.diagnostics)

    @property
    def has_warnings(self) -> bool:
        return any(item.level == "warning" for item in self.diagnostics)


def iter_source_files(root: Path, exclude: Sequence[str] = ()) -> Iterator[Path]:
    """Yield Lua sources under `root`, skipping dot entries and dependency caches."""
    if not root.is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix() if current != root else ""
        dirnames[:] = sorted(
            name
            for name in dirnames
            if not name.startswith(".")
            and name not in _DEPENDENCY_DIRS
            and not _excluded(f"{rel_dir}/{name}" if rel_dir else name, exclude)
        )
        for filename in sorted(filenames):
            if filename.startswith(".") or not filename.endswith(SOURCE_SUFFIXES):
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if _excluded(rel_path, exclude):
                continue
            yield current / filename


def _excluded(rel_path: str, patterns: Sequence[str]) -> bool:
    for pattern in patterns:
        cleaned = pattern.rstrip("/")
        if fnmatchcase(rel_path, cleaned) or rel_path.startswith(f"{cleaned}/"):
            return True
    return False


def hash_source(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def split_lines(content: str) -> List[str]:
    return content.replace("\r\n", "\n").split("\n")


def strip_source_suffix(rel_path: str) -> str:
    for suffix in SOURCE_SUFFIXES:
        if rel_path.endswith(suffix):
            return rel_path[: -len(suffix)]
    return rel_path


def _relative(path: Path, base: Path) -> str:
    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        return Path(os.path.relpath(path, base)).as_posix()


class ModuleAggregator:
    """Runs scanning, parsing, binding and assembly over every source file."""

    def __init__(
        self,
        src_dir: Path,
        *,
        root: Path | None = None,
        types_dir: Path | None = None,
        module_id_overrides: Mapping[str, str] | None = None,
        exclude_paths: Sequence[str] = (),
        generator_version: str | None = None,
        luau_version: str | None = None,
    ) -> None:
        self.src_dir = Path(src_dir).resolve()
        self.root = Path(root).resolve() if root is not None else self.src_dir.parent
        self.types_dir = Path(types_dir).resolve() if types_dir is not None else None
        self.module_id_overrides: Dict[str, str] = dict(module_id_overrides or {})
        self.exclude_paths = list(exclude_paths)
        self.generator_version = generator_version or __version__
        self.luau_version = luau_version
        self.logger = get_logger("extract")

    def collect_files(self) -> List[tuple[Path, Path]]:
        """Return `(file, owning_root)` pairs sorted by root-relative path."""
        seen: set[Path] = set()
        pairs: List[tuple[Path, Path]] = []
        roots = [self.src_dir] + ([self.types_dir] if self.types_dir else [])
        for base in roots:
            for path in iter_source_files(base, self.exclude_paths):
                resolved = path.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)
                pairs.append((resolved, base))
        pairs.sort(key=lambda pair: _relative(pair[0], self.root))
        return pairs

    def run(self) -> ExtractionResult:
        collector = DiagnosticsCollector()
        files = self.collect_files()
        self.logger.info("Extracting %d source files from %s", len(files), self.src_dir)

        modules: List[Module] = []
        for path, base in files:
            module = self.extract_module(path, base, collector)
            if module is not None:
                modules.append(module)

        document = ReferenceDocument(
            generator_version=self.generator_version,
            luau_version=self.luau_version,
            modules=modules,
        )
        symbol_count = sum(len(module.symbols) for module in modules)
        self.logger.debug(
            "Extracted %d symbols across %d modules (%d diagnostics)",
            symbol_count,
            len(modules),
            len(collector),
        )
        return ExtractionResult(document=document, diagnostics=collector.items)

    def extract_module(
        self, path: Path, base: Path, collector: DiagnosticsCollector
    ) -> Optional[Module]:
        rel_root = _relative(path, self.root)
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            collector.error(rel_root, 0, f"Failed to read source file: {exc}")
            return None

        assembler = SymbolAssembler(collector)
        symbols = apply_inherit_docs(assembler.assemble(split_lines(content), rel_root))
        module_id = self.module_id_overrides.get(rel_root) or strip_source_suffix(
            _relative(path, base)
        )
        return Module(
            id=module_id,
            path=rel_root,
            source_hash=hash_source(content),
            symbols=symbols,
        )


def extract_project(
    src_dir: Path,
    *,
    root: Path | None = None,
    types_dir: Path | None = None,
    module_id_overrides: Mapping[str, str] | None = None,
    exclude_paths: Sequence[str] = (),
    generator_version: str | None = None,
) -> ExtractionResult:
    """Convenience wrapper around `ModuleAggregator.run`."""
    return ModuleAggregator(
        src_dir,
        root=root,
        types_dir=types_dir,
        module_id_overrides=module_id_overrides,
        exclude_paths=exclude_paths,
        generator_version=generator_version,
    ).run()


__all__ = [
    "ExtractionResult",
    "ModuleAggregator",
    "SOURCE_SUFFIXES",
    "extract_project",
    "hash_source",
    "iter_source_files",
    "split_lines",
    "strip_source_suffix",
]
