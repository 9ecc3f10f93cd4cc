"""Python-Markdown extensions used by :class:`~docsite.markdown.processor.MarkdownProcessor`."""

from __future__ import annotations

import re
import xml.etree.ElementTree as etree
from typing import Callable, Dict, List, Optional
from urllib.parse import quote

from markdown import Markdown
from markdown.blockprocessors import BlockProcessor
from markdown.extensions import Extension
from markdown.extensions.toc import stashedHTML2text, unescape
from markdown.inlinepatterns import InlineProcessor
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor

from ..models import Heading
from .highlighter import Highlighter

CONTAINER_KINDS = ("tip", "warning", "danger", "info", "details")

GLYPHS: Dict[str, str] = {
    ":smile:": "\U0001f60a",
    ":heart:": "❤️",
    ":rocket:": "\U0001f680",
    ":tada:": "\U0001f389",
    ":star:": "⭐",
    ":fire:": "\U0001f525",
    ":warning:": "⚠️",
    ":info:": "ℹ️",
    ":check:": "✔️",
    ":x:": "❌",
}

_SLUG_STRIP = re.compile(r"[^A-Za-z0-9_\-\u4e00-\u9fa5]+")
_HEADING_TAGS = {f"h{level}": level for level in range(1, 7)}


def slugify(text: str) -> str:
    """Deterministic anchor slug; identical text always yields the identical slug."""
    slug = re.sub(r"\s+", "-", text.strip().lower())
    slug = _SLUG_STRIP.sub("", slug)
    return quote(slug, safe="-_.!~*'()")


class FencePreprocessor(Preprocessor):
    """Replace fenced code blocks with stashed, highlighted HTML."""

    FENCE_RE = re.compile(
        r"(?P<fence>^(?:~{3,}|`{3,}))[ ]*(?P<lang>[\w#.+-]*)[^\n]*\n"
        r"(?P<code>.*?)(?<=\n)(?P=fence)[ ]*$",
        re.MULTILINE | re.DOTALL,
    )

    def __init__(self, md: Markdown, highlighter: Highlighter, line_numbers: bool) -> None:
        super().__init__(md)
        self.highlighter = highlighter
        self.line_numbers = line_numbers

    def run(self, lines: List[str]) -> List[str]:
        text = "\n".join(lines)
        position = 0
        while True:
            match = self.FENCE_RE.search(text, position)
            if match is None:
                break
            code = match.group("code")
            rendered = self.highlighter(code, match.group("lang"))
            if self.line_numbers:
                rendered = _with_line_numbers(rendered, code.count("\n"))
            placeholder = self.md.htmlStash.store(rendered)
            text = f"{text[:match.start()]}\n{placeholder}\n{text[match.end():]}"
            position = match.start() + len(placeholder) + 2
        return text.split("\n")


def _with_line_numbers(rendered: str, count: int) -> str:
    numbers = "".join(f'<span class="line-number">{index}</span>' for index in range(1, count + 1))
    wrapper = f'<div class="line-numbers-wrapper">{numbers}</div>'
    return rendered.replace("<code", f"{wrapper}<code", 1)


class ContainerBlockProcessor(BlockProcessor):
    """``::: kind [title]`` ... ``:::`` admonition blocks."""

    OPEN_RE = re.compile(r"^:::[ ]*(?P<kind>\w+)[ ]*(?P<title>[^\n]*)$")
    CLOSE_RE = re.compile(r"^:::[ ]*$")

    def test(self, parent: etree.Element, block: str) -> bool:
        return any(self._opens(line) for line in block.split("\n"))

    def _opens(self, line: str) -> bool:
        match = self.OPEN_RE.match(line)
        return bool(match) and match.group("kind") in CONTAINER_KINDS

    def run(self, parent: etree.Element, blocks: List[str]) -> Optional[bool]:
        lines = blocks.pop(0).split("\n")
        start = next(index for index, line in enumerate(lines) if self._opens(line))
        if start:
            # An opening line interrupts the paragraph above it.
            self.parser.parseBlocks(parent, ["\n".join(lines[:start])])
        match = self.OPEN_RE.match(lines[start])
        rest = "\n".join(lines[start + 1 :])

        body: List[str] = []
        remainder: Optional[str] = None
        depth = 1
        pending = [rest] + blocks
        consumed = 0
        for index, block in enumerate(pending):
            lines = block.split("\n") if block else []
            for offset, line in enumerate(lines):
                if self.CLOSE_RE.match(line):
                    depth -= 1
                    if depth == 0:
                        body.append("\n".join(lines[:offset]))
                        remainder = "\n".join(lines[offset + 1 :])
                        break
                elif self._opens(line):
                    depth += 1
            if remainder is not None:
                consumed = index
                break
            body.append(block)
        else:
            # Unterminated: the container runs to the end of the document.
            consumed = len(pending) - 1

        del blocks[:consumed]
        if remainder is not None and remainder.strip():
            blocks.insert(0, remainder)

        kind = match.group("kind")
        title = match.group("title").strip() or kind.capitalize()
        container = etree.SubElement(parent, "div")
        container.set("class", f"custom-block {kind}")
        title_element = etree.SubElement(container, "p")
        title_element.set("class", "custom-block-title")
        title_element.text = title
        self.parser.parseChunk(container, "\n\n".join(part for part in body if part))
        return None


class GlyphInlineProcessor(InlineProcessor):
    """Substitute ``:name:`` tokens from :data:`GLYPHS`; code spans are never touched."""

    def handleMatch(self, m: re.Match[str], data: str):  # type: ignore[override]
        return GLYPHS[m.group(0)], m.start(0), m.end(0)


class HeadingTreeprocessor(Treeprocessor):
    """Collect headings and, when enabled, add slug ids plus a header-anchor link."""

    def __init__(
        self,
        md: Markdown,
        *,
        anchors: bool,
        collector: Optional[List[Heading]] = None,
        slug: Callable[[str], str] = slugify,
    ) -> None:
        super().__init__(md)
        self.anchors = anchors
        self.collector = collector
        self.slug = slug

    def run(self, root: etree.Element) -> None:
        for element in root.iter():
            level = _HEADING_TAGS.get(element.tag)
            if level is None:
                continue
            text = unescape(stashedHTML2text("".join(element.itertext()), self.md)).strip()
            slug = self.slug(text)
            if self.collector is not None:
                self.collector.append(Heading(level=level, text=text, slug=slug))
            if self.anchors:
                self._anchor(element, slug)

    @staticmethod
    def _anchor(element: etree.Element, slug: str) -> None:
        element.set("id", slug)
        link = etree.Element("a")
        link.set("class", "header-anchor")
        link.set("href", f"#{slug}")
        link.text = element.text
        for child in list(element):
            element.remove(child)
            link.append(child)
        element.text = None
        element.append(link)


class DocsiteExtension(Extension):
    """Registers the fence, container, glyph and heading processors on one Markdown instance."""

    def __init__(
        self,
        *,
        highlighter: Highlighter,
        line_numbers: bool = True,
        containers: bool = True,
        glyphs: bool = True,
        anchors: bool = True,
        collector: Optional[List[Heading]] = None,
    ) -> None:
        super().__init__()
        self.highlighter = highlighter
        self.line_numbers = line_numbers
        self.containers = containers
        self.glyphs = glyphs
        self.anchors = anchors
        self.collector = collector

    def extendMarkdown(self, md: Markdown) -> None:
        md.preprocessors.register(
            FencePreprocessor(md, self.highlighter, self.line_numbers), "docsite_fence", 25
        )
        if self.containers:
            md.parser.blockprocessors.register(
                ContainerBlockProcessor(md.parser), "docsite_container", 105
            )
        if self.glyphs:
            pattern = "|".join(re.escape(token) for token in GLYPHS)
            md.inlinePatterns.register(GlyphInlineProcessor(pattern, md), "docsite_glyph", 5)
        md.treeprocessors.register(
            HeadingTreeprocessor(md, anchors=self.anchors, collector=self.collector),
            "docsite_headings",
            5,
        )


__all__ = [
    "CONTAINER_KINDS",
    "ContainerBlockProcessor",
    "DocsiteExtension",
    "FencePreprocessor",
    "GLYPHS",
    "GlyphInlineProcessor",
    "HeadingTreeprocessor",
    "slugify",
]
