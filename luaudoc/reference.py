"""Reading and writing the extraction output document."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .models import SCHEMA_VERSION, ReferenceDocument


class ReferenceDocumentError(RuntimeError):
    """Raised when the reference document is missing or unreadable."""


@dataclass
class LoadedReference:
    """A parsed document together with the raw text it was read from."""

    document: ReferenceDocument
    raw: str
    path: Path | None = None


def upgrade_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Bring a payload with a missing or older schema version up to date.

    Only version 1 exists so far; older payloads lacked `schemaVersion` and
    `luauVersion`, and symbols could omit `qualifiedName` and `visibility`.
    """
    version = payload.get("schemaVersion")
    if isinstance(version, int) and version >= SCHEMA_VERSION:
        return payload

    upgraded = dict(payload)
    upgraded["schemaVersion"] = SCHEMA_VERSION
    upgraded.setdefault("luauVersion", None)
    modules = []
    for module in payload.get("modules") or []:
        if not isinstance(module, dict):
            continue
        module = dict(module)
        symbols = []
        for symbol in module.get("symbols") or []:
            if not isinstance(symbol, dict):
                continue
            symbol = dict(symbol)
            symbol.setdefault("qualifiedName", symbol.get("name") or "")
            symbol.setdefault("visibility", "public")
            symbols.append(symbol)
        module["symbols"] = symbols
        modules.append(module)
    upgraded["modules"] = modules
    return upgraded


def parse_reference_document(raw: str) -> ReferenceDocument:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ReferenceDocumentError(f"Reference document is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ReferenceDocumentError("Reference document must contain an object at the root")
    return ReferenceDocument.from_dict(upgrade_payload(payload))


def load_reference_document(path: Path) -> LoadedReference:
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ReferenceDocumentError(f"Reference document not found: {path}") from exc
    except OSError as exc:
        raise ReferenceDocumentError(f"Failed to read reference document {path}: {exc}") from exc
    return LoadedReference(document=parse_reference_document(raw), raw=raw, path=Path(path))


def dump_reference_document(document: ReferenceDocument) -> str:
    return json.dumps(document.to_dict(), indent=2) + "\n"


def write_reference_document(document: ReferenceDocument, path: Path) -> str:
    """Serialise `document` to `path` and return the text written."""
    raw = dump_reference_document(document)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(raw, encoding="utf-8")
    return raw


__all__ = [
    "LoadedReference",
    "ReferenceDocumentError",
    "dump_reference_document",
    "load_reference_document",
    "parse_reference_document",
    "upgrade_payload",
    "write_reference_document",
]
