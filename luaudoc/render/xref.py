"""Class-name → page lookups used for inline links and `extends` lists."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from ..slugs import sanitize_anchor_id, strip_member_call
from .document import Code, Inline, Link, Text
from .grouping import ClassEntry

_INLINE_CODE = re.compile(r"`([^`\n]+)`")
_MEMBER_REFERENCE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)([:.])(.+)$")
_LEGACY_PREFIXES = ("Class.", "Datatype.", "Enum.", "Global.", "Library.")
NO_LINK = "no-link"


def strip_legacy_prefix(value: str) -> str:
    for prefix in _LEGACY_PREFIXES:
        if value.startswith(prefix):
            return value[len(prefix):]
    return value


class CrossReferenceResolver:
    """Resolves references like `Widget`, `Widget.new` or `Widget:Destroy` to links.

    Anything that does not name a known class degrades to literal text.
    """

    def __init__(self, entries: Sequence[ClassEntry], route_base: str = "") -> None:
        self.route_base = route_base.strip("/")
        self._entries: Dict[str, ClassEntry] = {entry.name: entry for entry in entries}

    def __contains__(self, class_name: object) -> bool:
        return class_name in self._entries

    def page_href(self, class_name: str) -> Optional[str]:
        entry = self._entries.get(class_name)
        if entry is None:
            return None
        prefix = f"/{self.route_base}" if self.route_base else ""
        return f"{prefix}/{entry.link}"

    def member_href(self, class_name: str, member: str) -> Optional[str]:
        href = self.page_href(class_name)
        if href is None:
            return None
        cleaned = strip_member_call(member.strip())
        anchor = self._entries[class_name].anchor_for(cleaned) or sanitize_anchor_id(cleaned)
        return f"{href}#{anchor}" if anchor else href

    def resolve(self, target: str) -> Optional[str]:
        """Return the href for a reference, or None when it is not a known class."""
        reference = strip_legacy_prefix(target.strip())
        match = _MEMBER_REFERENCE.match(reference)
        if match and match.group(1) in self._entries:
            return self.member_href(match.group(1), match.group(3))
        if reference in self._entries:
            return self.page_href(reference)
        return None

    def link_class(self, name: str) -> Inline:
        href = self.page_href(name)
        if href is None:
            return Text(name)
        return Link(name, href)

    def link_inline(self, markdown: str) -> str:
        """Rewrite inline code references into links, leaving fenced code untouched."""
        if not markdown:
            return markdown
        output: List[str] = []
        in_fence = False
        for line in markdown.split("\n"):
            if line.strip().startswith("```"):
                in_fence = not in_fence
                output.append(line)
                continue
            output.append(line if in_fence else _INLINE_CODE.sub(self._replace, line))
        return "\n".join(output)

    def _replace(self, match: "re.Match[str]") -> str:
        content = match.group(1)
        target, sep, label = content.partition("|")
        target = target.strip()
        label = label.strip() if sep else ""
        if label == NO_LINK:
            return f"`{target}`"
        href = self.resolve(target)
        if href is None:
            # Type unions such as `string | number` are not labels.
            return match.group(0) if label else f"`{strip_legacy_prefix(target)}`"
        display = label or strip_legacy_prefix(target)
        return f"[{display}]({href})"


__all__ = ["CrossReferenceResolver", "NO_LINK", "strip_legacy_prefix"]
