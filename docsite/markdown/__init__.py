"""Prose processing built on Python-Markdown and Pygments."""

from .extensions import CONTAINER_KINDS, GLYPHS, slugify
from .highlighter import Highlighter, create_highlighter
from .processor import MarkdownProcessor

__all__ = [
    "CONTAINER_KINDS",
    "GLYPHS",
    "Highlighter",
    "MarkdownProcessor",
    "create_highlighter",
    "slugify",
]
