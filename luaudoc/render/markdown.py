"""Markdown writer for the format-neutral document model."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

import yaml
from jinja2 import Environment, FileSystemLoader

from .. import __version__
from .document import (
    Block,
    BulletList,
    Code,
    CodeBlock,
    Document,
    Heading,
    Inline,
    Link,
    Markdown,
    Paragraph,
    Strong,
    Table,
    Text,
)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
PAGE_TEMPLATE = "page.md.j2"


def _escape_text(value: str) -> str:
    return value.replace("<", "&lt;").replace(">", "&gt;")


def _code_span(value: str) -> str:
    fence = "``" if "`" in value else "`"
    padding = " " if value.startswith("`") or value.endswith("`") else ""
    return f"{fence}{padding}{value}{padding}{fence}"


def render_inline(inline: Inline) -> str:
    if isinstance(inline, Code):
        return _code_span(inline.text)
    if isinstance(inline, Link):
        return f"[{_escape_text(inline.text)}]({inline.href})"
    if isinstance(inline, Strong):
        return f"**{_escape_text(inline.text)}**"
    if isinstance(inline, Text):
        return _escape_text(inline.text)
    raise TypeError(f"Unsupported inline node: {inline!r}")


def render_inlines(inlines: Sequence[Inline]) -> str:
    return "".join(render_inline(inline) for inline in inlines)


def _table_cell(inlines: Sequence[Inline]) -> str:
    text = render_inlines(inlines)
    return text.replace("|", "\\|").replace("\n", "<br />")


def _code_fence(code: str) -> str:
    longest = 0
    run = 0
    for char in code:
        run = run + 1 if char == "`" else 0
        longest = max(longest, run)
    return "`" * max(3, longest + 1)


def render_block(block: Block) -> str:
    if isinstance(block, Heading):
        suffix = f" {{#{block.anchor}}}" if block.anchor else ""
        return f"{'#' * block.level} {_escape_text(block.text)}{suffix}"
    if isinstance(block, Paragraph):
        return render_inlines(block.inlines)
    if isinstance(block, Markdown):
        return block.text.strip("\n")
    if isinstance(block, CodeBlock):
        fence = _code_fence(block.code)
        return f"{fence}{block.language}\n{block.code}\n{fence}"
    if isinstance(block, BulletList):
        return "\n".join(f"- {render_inlines(item)}" for item in block.items)
    if isinstance(block, Table):
        lines = [
            "| " + " | ".join(block.headers) + " |",
            "| " + " | ".join("---" for _ in block.headers) + " |",
        ]
        for row in block.rows:
            cells = [_table_cell(item) for item in row]
            cells.extend("" for _ in range(len(block.headers) - len(cells)))
            lines.append("| " + " | ".join(cells) + " |")
        return "\n".join(lines)
    raise TypeError(f"Unsupported block node: {block!r}")


def render_body(blocks: Sequence[Block]) -> str:
    parts: List[str] = []
    for block in blocks:
        rendered = render_block(block)
        if rendered.strip():
            parts.append(rendered)
    return "\n\n".join(parts)


class MarkdownWriter:
    """Renders documents through the `page.md.j2` template.

    A user templates directory, when given, is searched before the bundled one.
    """

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir
        self._env = self._create_env(templates_dir)

    def write(self, document: Document) -> str:
        template = self._env.get_template(PAGE_TEMPLATE)
        front_matter = ""
        if document.front_matter:
            front_matter = yaml.safe_dump(
                document.front_matter, sort_keys=False, allow_unicode=True
            ).strip()
        rendered = template.render(
            front_matter=front_matter,
            title=document.title,
            body=render_body(document.blocks),
            generator=f"luaudoc {__version__}",
        )
        return rendered.strip() + "\n"

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        default_dir = str(DEFAULT_TEMPLATES_DIR)
        if default_dir not in directories:
            directories.append(default_dir)
        loader = FileSystemLoader(directories)
        return Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )


__all__ = [
    "MarkdownWriter",
    "render_block",
    "render_body",
    "render_inline",
    "render_inlines",
]
