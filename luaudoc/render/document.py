"""Format-neutral document model produced by the page renderer.

Pages are trees of blocks (headings, paragraphs, tables, lists, code) whose
inline content is text, code spans and links. Writers translate the tree into
a concrete markup; `luaudoc.render.markdown` is the bundled one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Code:
    text: str


@dataclass(frozen=True)
class Strong:
    text: str


@dataclass(frozen=True)
class Link:
    text: str
    href: str


Inline = Union[Text, Code, Strong, Link]


@dataclass
class Heading:
    level: int
    text: str
    anchor: Optional[str] = None


@dataclass
class Paragraph:
    inlines: List[Inline]


@dataclass
class Markdown:
    """Author-written description text, passed through untouched."""

    text: str


@dataclass
class CodeBlock:
    code: str
    language: str = ""


@dataclass
class BulletList:
    items: List[List[Inline]]


@dataclass
class Table:
    headers: List[str]
    rows: List[List[List[Inline]]]


Block = Union[Heading, Paragraph, Markdown, CodeBlock, BulletList, Table]


@dataclass
class Document:
    """One output page."""

    relative_path: str
    title: str
    blocks: List[Block] = field(default_factory=list)
    front_matter: Dict[str, Any] = field(default_factory=dict)

    def add(self, *blocks: Block) -> "Document":
        self.blocks.extend(blocks)
        return self

    def headings(self, level: Optional[int] = None) -> List[Heading]:
        return [
            block
            for block in self.blocks
            if isinstance(block, Heading) and (level is None or block.level == level)
        ]

    def anchors(self) -> List[str]:
        return [block.anchor for block in self.blocks if isinstance(block, Heading) and block.anchor]


def cell(*inlines: Inline) -> List[Inline]:
    return list(inlines)


def text_cell(value: Optional[str]) -> List[Inline]:
    return [Text(value)] if value else []


def code_cell(value: Optional[str]) -> List[Inline]:
    return [Code(value)] if value else []


def join_inlines(parts: Sequence[Inline], separator: str = ", ") -> List[Inline]:
    joined: List[Inline] = []
    for index, part in enumerate(parts):
        if index:
            joined.append(Text(separator))
        joined.append(part)
    return joined


__all__ = [
    "Block",
    "BulletList",
    "Code",
    "CodeBlock",
    "Document",
    "Heading",
    "Inline",
    "Link",
    "Markdown",
    "Paragraph",
    "Strong",
    "Table",
    "Text",
    "cell",
    "code_cell",
    "join_inlines",
    "text_cell",
]
