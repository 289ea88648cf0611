"""Extraction pipeline: comment blocks to the reference document."""

from .aggregator import ExtractionResult, ModuleAggregator, extract_project
from .assembler import SymbolAssembler
from .diagnostics import DiagnosticsCollector

__all__ = [
    "DiagnosticsCollector",
    "ExtractionResult",
    "ModuleAggregator",
    "SymbolAssembler",
    "extract_project",
]
