"""Persistent manifest of rendered outputs, used to clean up stale pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
import hashlib
import json
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ..logging import get_logger
from ..models import Diagnostic


@dataclass
class ReconcileResult:
    """What a reconcile pass touched, relative to the output directory."""

    written: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def outputs(self) -> List[str]:
        return sorted(self.written + self.unchanged)


def hash_content(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class ManifestStore:
    """Tracks, per language, which files the last render wrote and from what input."""

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._outputs: Dict[str, List[str]] = {}
        self._inputs: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        self.logger = get_logger("stores.manifest")
        if self._path is not None:
            self._load(self._path)

    @property
    def path(self) -> Path | None:
        return self._path

    def outputs_for(self, lang: str) -> List[str]:
        return list(self._outputs.get(lang, []))

    def input_for(self, lang: str) -> Optional[Dict[str, object]]:
        record = self._inputs.get(lang)
        return dict(record) if record else None

    def reconcile(
        self,
        out_dir: Path,
        lang: str,
        outputs: Mapping[str, str],
        *,
        input_path: Optional[Path] = None,
        input_raw: str = "",
        generator_version: Optional[str] = None,
        clean: bool = True,
    ) -> ReconcileResult:
        """Delete stale files, write `outputs`, prune empty dirs and record the run.

        `outputs` maps paths relative to `out_dir` to their content. Stale
        deletion failures and unwritable pages are reported as diagnostics.
        """
        result = ReconcileResult()
        next_paths = sorted(_normalise(path) for path in outputs)

        if clean:
            keep = set(next_paths)
            for relative in self.outputs_for(lang):
                if relative in keep:
                    continue
                target = out_dir / relative
                try:
                    target.unlink()
                except FileNotFoundError:
                    continue
                except OSError as exc:
                    self.logger.warning("Failed to delete stale file %s: %s", target, exc)
                    result.diagnostics.append(
                        Diagnostic("warning", str(target), 0, f"Failed to delete stale file: {exc}")
                    )
                    continue
                result.deleted.append(relative)

        for relative, content in sorted(outputs.items()):
            relative = _normalise(relative)
            target = out_dir / relative
            try:
                if target.is_file() and target.read_text(encoding="utf-8") == content:
                    result.unchanged.append(relative)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content, encoding="utf-8")
            except OSError as exc:
                self.logger.error("Failed to write %s: %s", target, exc)
                result.diagnostics.append(
                    Diagnostic("error", str(target), 0, f"Failed to write output: {exc}")
                )
                continue
            result.written.append(relative)

        prune_empty_dirs(out_dir)

        self._record(lang, next_paths, input_path, input_raw, generator_version)
        self.persist()
        self.logger.debug(
            "Reconciled %s: %d written, %d unchanged, %d deleted",
            lang,
            len(result.written),
            len(result.unchanged),
            len(result.deleted),
        )
        return result

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {"outputs": self._outputs, "inputs": self._inputs}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
        self._dirty = False

    # ------------------------------------------------------------------
    # Internal helpers

    def _record(
        self,
        lang: str,
        paths: List[str],
        input_path: Optional[Path],
        input_raw: str,
        generator_version: Optional[str],
    ) -> None:
        record: Dict[str, object] = {
            "path": str(input_path) if input_path is not None else None,
            "hash": hash_content(input_raw),
            "generatorVersion": generator_version,
        }
        previous = self._inputs.get(lang) or {}
        same_input = all(previous.get(key) == value for key, value in record.items())
        if same_input and previous.get("generatedAt") and self._outputs.get(lang) == paths:
            return
        record["generatedAt"] = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        self._outputs[lang] = paths
        self._inputs[lang] = record
        self._dirty = True

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError):
            self.logger.warning("Ignoring unreadable manifest at %s", path)
            return
        if not isinstance(data, dict):
            return
        outputs = data.get("outputs")
        if isinstance(outputs, dict):
            self._outputs = {
                str(lang): [_normalise(item) for item in paths if isinstance(item, str)]
                for lang, paths in outputs.items()
                if isinstance(paths, list)
            }
        inputs = data.get("inputs")
        if isinstance(inputs, dict):
            self._inputs = {
                str(lang): dict(record) for lang, record in inputs.items() if isinstance(record, dict)
            }
        self._dirty = False


def prune_empty_dirs(directory: Path) -> bool:
    """Remove empty directories bottom-up; returns True when `directory` itself went away."""
    if not directory.is_dir():
        return False
    for root, dirnames, _ in os.walk(directory, topdown=False):
        for dirname in dirnames:
            candidate = Path(root) / dirname
            try:
                if not any(candidate.iterdir()):
                    candidate.rmdir()
            except OSError:
                continue
    try:
        if not any(directory.iterdir()):
            directory.rmdir()
            return True
    except OSError:
        return False
    return False


def _normalise(relative: str) -> str:
    return relative.replace("\\", "/").lstrip("/")


__all__ = ["ManifestStore", "ReconcileResult", "hash_content", "prune_empty_dirs"]
