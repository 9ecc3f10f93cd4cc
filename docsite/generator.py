"""Document generation: prose, API and component files into :class:`DocNode` objects."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Awaitable, Dict, Iterable, List, Optional

import yaml

from .config import ResolvedDocsConfig
from .errors import ExtractionError, OutputCollisionError, RenderError
from .extractors import ReactComponentExtractor, TypeScriptExtractor, VueComponentExtractor
from .logging import get_logger
from .markdown import MarkdownProcessor
from .models import DocKind, DocNode
from .plugins import GenerateContext, PluginManager
from .rendering import TemplateRenderer, humanize

IGNORED_DIRS = {"node_modules", ".git"}
OUTPUT_EXTENSION = ".html"

_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_QUOTES = re.compile(r"^['\"]|['\"]$")
_TEST_FILE = re.compile(r"\.(test|spec)\.[jt]sx?$")

_RECOVERABLE = (ExtractionError, RenderError, OSError, UnicodeDecodeError)


@dataclass(frozen=True)
class FileFailure:
    """A source file that was skipped; the rest of the batch still ran."""

    path: str
    category: DocKind
    message: str


@dataclass
class GenerationResult:
    docs: List[DocNode] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)


@dataclass
class FrontMatter:
    title: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    body: str = ""


def output_path(doc_path: str) -> str:
    """Page location of a document relative to the output root."""
    if doc_path.endswith(".md"):
        return doc_path[: -len(".md")] + OUTPUT_EXTENSION
    return doc_path


def parse_front_matter(content: str) -> FrontMatter:
    """Split a leading ``---`` block off ``content``.

    The block is read as YAML when it parses to a mapping; otherwise each
    ``key: value`` line is taken literally with surrounding quotes removed.
    """
    content = content.removeprefix("\ufeff")
    match = _FRONT_MATTER.match(content)
    if match is None:
        return FrontMatter(body=content)
    data = _front_matter_mapping(match.group(1))
    title = data.pop("title", "")
    return FrontMatter(
        title="" if title is None else str(title),
        metadata={key: _plain(value) for key, value in data.items()},
        body=content[match.end():],
    )


def _front_matter_mapping(block: str) -> Dict[str, Any]:
    try:
        loaded = yaml.safe_load(block)
    except yaml.YAMLError:
        loaded = None
    if isinstance(loaded, dict):
        return {str(key): value for key, value in loaded.items()}
    data: Dict[str, Any] = {}
    for line in block.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip():
            data[key.strip()] = _QUOTES.sub("", value.strip())
    return data


def _plain(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


class DocGenerator:
    """Runs the extractors and the prose processor over a resolved configuration."""

    def __init__(
        self,
        config: ResolvedDocsConfig,
        plugin_manager: PluginManager | None = None,
        markdown_processor: MarkdownProcessor | None = None,
        *,
        renderer: TemplateRenderer | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or get_logger("generator")
        self.plugins = plugin_manager or PluginManager(logger=self.logger)
        self.markdown = markdown_processor or MarkdownProcessor(config.markdown, logger=self.logger)
        self.renderer = renderer or TemplateRenderer(templates_dir=config.theme.templates_dir)
        self.typescript = TypeScriptExtractor(logger=self.logger)
        self.vue = VueComponentExtractor(logger=self.logger)
        self.react = ReactComponentExtractor(logger=self.logger)

    async def generate(self) -> GenerationResult:
        """Generate every document; raises :class:`OutputCollisionError` on duplicate paths."""
        prose_files = self.prose_files()
        api_files = self.api_files()
        component_files = self.component_files()
        context = GenerateContext(
            config=self.config,
            files=[self._display(path) for path in (*prose_files, *api_files, *component_files)],
        )
        await self.plugins.before_generate(context)

        result = GenerationResult()
        owners: Dict[str, str] = {}
        self.logger.info("Generating documents")
        categories = (
            ("prose", prose_files, self._prose_node),
            ("api", api_files, self._api_node),
            ("component", component_files, self._component_node),
        )
        for category, files, build in categories:
            for path in files:
                node = await self._guard(result, path, category, build(path))
                self._collect(result, owners, path, category, node)

        context.docs = list(result.docs)
        await self.plugins.after_generate(context)
        self.logger.info(
            "Generated %d documents (%d skipped)", len(result.docs), len(result.failures)
        )
        return result

    def prose_files(self) -> List[Path]:
        return self._find(self.config.docs_dir, ("*.md",))

    def api_files(self) -> List[Path]:
        files = []
        for path in self._find(self.config.src_dir, ("*.ts", "*.tsx")):
            if _TEST_FILE.search(path.name) or not self.typescript.supports(path):
                continue
            if path.is_relative_to(self.config.docs_dir):
                continue
            files.append(path)
        return files

    def component_files(self) -> List[Path]:
        vue_files = self._find(self.config.components_dir, ("*.vue",))
        react_files = [
            path
            for path in self._find(self.config.components_dir, ("*.jsx", "*.tsx"))
            if self.react.supports(path)
        ]
        return vue_files + react_files

    async def _guard(
        self,
        result: GenerationResult,
        path: Path,
        category: DocKind,
        pending: Awaitable[Optional[DocNode]],
    ) -> Optional[DocNode]:
        try:
            return await pending
        except _RECOVERABLE as exc:
            message = exc.message if isinstance(exc, ExtractionError) else str(exc)
            display = self._display(path)
            self.logger.warning("Skipping %s file %s: %s", category, display, message)
            result.failures.append(FileFailure(path=display, category=category, message=message))
            return None

    def _collect(
        self,
        result: GenerationResult,
        owners: Dict[str, str],
        path: Path,
        category: DocKind,
        node: Optional[DocNode],
    ) -> None:
        if node is None:
            return
        target = output_path(node.path)
        source = self._display(path)
        if target in owners:
            raise OutputCollisionError(target, owners[target], source)
        owners[target] = source
        result.docs.append(node)
        self.logger.debug("Processed %s %s -> %s", category, source, target)

    async def _prose_node(self, path: Path) -> DocNode:
        relative = path.relative_to(self.config.docs_dir).as_posix()
        content = path.read_text(encoding="utf-8-sig")
        transformed = await self.plugins.transform_markdown(content, str(path))
        front = parse_front_matter(transformed)
        html = self.markdown.render(front.body)
        metadata = dict(front.metadata)
        metadata.setdefault("excerpt", self.markdown.extract_excerpt(front.body))
        return DocNode(
            path=relative,
            title=front.title or self._first_heading(front.body) or humanize(path.stem),
            content=html,
            kind="prose",
            metadata=metadata,
            source=relative,
        )

    async def _api_node(self, path: Path) -> Optional[DocNode]:
        display = self._display(path)
        nodes = self.typescript.extract_file(path, display_path=display)
        if not nodes:
            self.logger.debug("No declarations in %s", display)
            return None
        relative = path.relative_to(self.config.src_dir).with_suffix(OUTPUT_EXTENSION).as_posix()
        return DocNode(
            path=f"api/{relative}",
            title=humanize(path.stem),
            content=self.renderer.render_api(nodes),
            kind="api",
            metadata={"declarations": [node.name for node in nodes]},
            source=display,
        )

    async def _component_node(self, path: Path) -> DocNode:
        display = self._display(path)
        extractor = self.vue if path.suffix == ".vue" else self.react
        component = extractor.extract_file(path, display_path=display)
        relative = path.relative_to(self.config.components_dir).with_suffix(OUTPUT_EXTENSION).as_posix()
        metadata: Dict[str, Any] = {"component": component.name}
        if component.description:
            metadata["description"] = component.description
        return DocNode(
            path=f"components/{relative}",
            title=component.name,
            content=self.renderer.render_component(component),
            kind="component",
            metadata=metadata,
            source=display,
        )

    def _first_heading(self, body: str) -> str:
        for heading in self.markdown.extract_headings(body):
            if heading.level == 1:
                return heading.text
        return ""

    def _find(self, base: Path, patterns: Iterable[str]) -> List[Path]:
        if not base.is_dir():
            self.logger.debug("Skipping missing directory %s", base)
            return []
        found = set()
        for pattern in patterns:
            for path in base.rglob(pattern):
                if path.is_file() and not self._ignored(path, base):
                    found.add(path)
        return sorted(found)

    def _ignored(self, path: Path, base: Path) -> bool:
        if any(part in IGNORED_DIRS for part in path.relative_to(base).parts):
            return True
        return path.is_relative_to(self.config.out_dir)

    def _display(self, path: Path) -> str:
        try:
            return path.relative_to(self.config.root).as_posix()
        except ValueError:
            return str(path)


def split_by_kind(docs: Iterable[DocNode]) -> Dict[DocKind, List[DocNode]]:
    grouped: Dict[DocKind, List[DocNode]] = {"prose": [], "api": [], "component": []}
    for doc in docs:
        grouped[doc.kind].append(doc)
    return grouped


__all__ = [
    "DocGenerator",
    "FileFailure",
    "FrontMatter",
    "GenerationResult",
    "IGNORED_DIRS",
    "output_path",
    "parse_front_matter",
    "split_by_kind",
]
