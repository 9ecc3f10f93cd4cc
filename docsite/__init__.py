"""docsite: static documentation sites from Markdown, TypeScript and UI components."""

from .builder import build_site, run_build
from .config import DocsConfig, ResolvedDocsConfig, load_config, resolve_config
from .errors import ConfigurationError, DocsiteError, ExtractionError, OutputCollisionError, RenderError
from .generator import DocGenerator, GenerationResult
from .markdown import MarkdownProcessor
from .models import AnnotationNode, ComponentDescription, DocNode, SearchIndexItem
from .plugins import Plugin, PluginManager, define_plugin

__version__ = "0.1.0"

__all__ = [
    "AnnotationNode",
    "ComponentDescription",
    "ConfigurationError",
    "DocGenerator",
    "DocNode",
    "DocsConfig",
    "DocsiteError",
    "ExtractionError",
    "GenerationResult",
    "MarkdownProcessor",
    "OutputCollisionError",
    "Plugin",
    "PluginManager",
    "RenderError",
    "ResolvedDocsConfig",
    "SearchIndexItem",
    "build_site",
    "define_plugin",
    "load_config",
    "resolve_config",
    "run_build",
]
