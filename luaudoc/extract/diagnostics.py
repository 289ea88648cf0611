"""Diagnostics pooling for extraction runs."""

from __future__ import annotations

from typing import Iterator, List

from ..models import Diagnostic

MISSING_CLASS = "@class missing for this file."
AMBIGUOUS_OWNER = "@within missing for ambiguous class ownership."
READONLY_MISUSE = "@readonly used on non-property symbol."
PARAM_MISMATCH = "@param does not match function parameters."


class DiagnosticsCollector:
    """Append-only pool of warnings and errors; extraction never aborts on them."""

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []

    def warning(self, file: str, line: int, message: str) -> None:
        self._items.append(Diagnostic("warning", file, line, message))

    def error(self, file: str, line: int, message: str) -> None:
        self._items.append(Diagnostic("error", file, line, message))

    def extend(self, diagnostics: List[Diagnostic]) -> None:
        self._items.extend(diagnostics)

    @property
    def items(self) -> List[Diagnostic]:
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(item.level == "error" for item in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(item.level == "warning" for item in self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)


__all__ = [
    "AMBIGUOUS_OWNER",
    "DiagnosticsCollector",
    "MISSING_CLASS",
    "PARAM_MISMATCH",
    "READONLY_MISUSE",
]
