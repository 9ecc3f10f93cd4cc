"""Prose rendering, heading extraction and excerpts."""

from __future__ import annotations

import html
import logging
import re
from typing import List, Optional

import markdown

from ..config import MarkdownConfig
from ..errors import RenderError
from ..logging import get_logger
from ..models import Heading
from .extensions import DocsiteExtension, slugify
from .highlighter import Highlighter, create_highlighter

DEFAULT_EXCERPT_LENGTH = 200

_EXCERPT_RULES = (
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),
    (re.compile(r"\*\*(.+?)\*\*"), r"\1"),
    (re.compile(r"\*(.+?)\*"), r"\1"),
    (re.compile(r"\[(.+?)\]\(.+?\)"), r"\1"),
    (re.compile(r"`(.+?)`"), r"\1"),
)


class MarkdownProcessor:
    """Renders prose to HTML with the configured fence/container/anchor/glyph passes.

    Every call builds a fresh ``markdown.Markdown`` instance, so renders never
    share state and the same text always produces the same output.
    """

    def __init__(
        self,
        config: MarkdownConfig | None = None,
        *,
        highlighter: Highlighter | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or MarkdownConfig()
        self.highlighter = highlighter or create_highlighter(self.config.theme_light)
        self.logger = logger or get_logger("markdown")

    def render(self, content: str) -> str:
        """Render ``content``; failures become an inline error block instead of raising."""
        try:
            return self.render_strict(content)
        except RenderError as exc:
            self.logger.warning("Markdown rendering failed: %s", exc)
            return f'<pre class="render-error">Error rendering markdown: {html.escape(str(exc))}</pre>'

    def render_strict(self, content: str) -> str:
        try:
            return self._markdown(anchors=self.config.anchor).convert(content)
        except Exception as exc:
            raise RenderError(str(exc) or exc.__class__.__name__) from exc

    def extract_headings(self, content: str) -> List[Heading]:
        """Headings in document order, from a separate parse of ``content``."""
        headings: List[Heading] = []
        self._markdown(anchors=False, collector=headings).convert(content)
        return headings

    @staticmethod
    def extract_excerpt(content: str, length: int = DEFAULT_EXCERPT_LENGTH) -> str:
        plain = content
        for pattern, replacement in _EXCERPT_RULES:
            plain = pattern.sub(replacement, plain)
        plain = plain.strip()
        if len(plain) <= length:
            return plain
        return plain[:length] + "..."

    @staticmethod
    def slugify(text: str) -> str:
        return slugify(text)

    def _markdown(self, *, anchors: bool, collector: Optional[List[Heading]] = None) -> markdown.Markdown:
        extension = DocsiteExtension(
            highlighter=self.highlighter,
            line_numbers=self.config.line_numbers,
            containers=self.config.containers,
            glyphs=self.config.emoji,
            anchors=anchors,
            collector=collector,
        )
        return markdown.Markdown(extensions=["tables", extension], output_format="html")


__all__ = ["DEFAULT_EXCERPT_LENGTH", "MarkdownProcessor"]
