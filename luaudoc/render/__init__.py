"""Rendering pipeline: reference document to class and overview pages."""

from .grouping import ClassEntry, plan_pages
from .markdown import MarkdownWriter
from .pages import PageRenderer
from .xref import CrossReferenceResolver

__all__ = [
    "ClassEntry",
    "CrossReferenceResolver",
    "MarkdownWriter",
    "PageRenderer",
    "plan_pages",
]
