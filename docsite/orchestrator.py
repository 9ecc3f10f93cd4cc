"""Pipeline orchestration for the generate and build flows."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Optional

from .builder import run_build
from .config import ResolvedDocsConfig, load_config
from .errors import DocsiteError
from .generator import DocGenerator, GenerationResult
from .logging import get_logger
from .markdown import MarkdownProcessor
from .plugins import PluginManager, load_plugins, run_config_hooks


@dataclass
class BuildOutcome:
    """Result of a full build."""

    config: ResolvedDocsConfig
    generation: GenerationResult
    written: List[Path] = field(default_factory=list)


class Orchestrator:
    """Loads configuration and plugins once, then drives generation and building."""

    def __init__(
        self,
        root: Path | str = ".",
        *,
        config_file: Path | None = None,
        plugins: Optional[Iterable[Any]] = None,
        include_entry_points: bool = True,
        logger: logging.Logger | None = None,
    ) -> None:
        self.root = Path(root)
        self.config_file = config_file
        self.extra_plugins = list(plugins or [])
        self.include_entry_points = include_entry_points
        self.logger = logger or get_logger("orchestrator")
        self.plugin_manager: PluginManager | None = None
        self.config: ResolvedDocsConfig | None = None

    async def prepare(self) -> ResolvedDocsConfig:
        """Load config, register plugins and run the config hooks (idempotent)."""
        if self.config is not None:
            return self.config
        raw = load_config(self.root, self.config_file)
        plugins = load_plugins(raw.plugins, include_entry_points=self.include_entry_points)
        self.plugin_manager = PluginManager([*plugins, *self.extra_plugins], logger=self.logger)
        self.config = await run_config_hooks(raw, self.plugin_manager)
        self.logger.debug("Resolved configuration for %s", self.config.root)
        return self.config

    async def generate(self) -> GenerationResult:
        config = await self.prepare()
        generator = DocGenerator(
            config,
            self._plugins(),
            MarkdownProcessor(config.markdown, logger=self.logger),
            logger=self.logger,
        )
        return await generator.generate()

    async def build(self) -> BuildOutcome:
        config = await self.prepare()
        generation = await self.generate()
        written = await run_build(config, generation.docs, self._plugins(), logger=self.logger)
        return BuildOutcome(config=config, generation=generation, written=written)

    def _plugins(self) -> PluginManager:
        if self.plugin_manager is None:
            raise DocsiteError("Plugins are not loaded; call prepare() first")
        return self.plugin_manager


__all__ = ["BuildOutcome", "Orchestrator"]
