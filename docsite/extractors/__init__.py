"""Source-to-description extractors for annotated declarations and UI components."""

from .react import ReactComponentExtractor
from .typescript import TypeScriptExtractor
from .vue import VueComponentExtractor

__all__ = ["ReactComponentExtractor", "TypeScriptExtractor", "VueComponentExtractor"]
