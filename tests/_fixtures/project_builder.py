"""Helper utilities for constructing temporary Luau projects in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from luaudoc.config import LuauDocConfig, load_config
from luaudoc.extract import ExtractionResult, ModuleAggregator


class ProjectBuilder:
    """Utility for writing sources into a throwaway project and extracting it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_config(self, content: str) -> Path:
        self.write({".luaudoc.yml": content})
        return self.root / ".luaudoc.yml"

    def config(self) -> LuauDocConfig:
        return load_config(self.root)

    def extract(self) -> ExtractionResult:
        """Run the aggregator over `src/` with default settings."""
        return ModuleAggregator(self.root / "src", root=self.root).run()

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


__all__ = ["ProjectBuilder"]
