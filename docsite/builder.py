"""Static site assembly: pages, search index and synthesized assets."""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .config import NavItem, ResolvedDocsConfig, SidebarItem
from .errors import ConfigurationError
from .generator import output_path
from .logging import get_logger
from .models import DocNode
from .plugins import PluginManager
from .rendering import TemplateRenderer, humanize
from .search.indexer import write_search_index

SEARCH_INDEX_FILENAME = "search-index.json"

_EXTERNAL_LINK = re.compile(r"^(?:[a-z][a-z0-9+.-]*:|#|//)", re.IGNORECASE)


class SiteBuilder:
    """Lays out generated documents under the output root."""

    def __init__(
        self,
        config: ResolvedDocsConfig,
        *,
        renderer: TemplateRenderer | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer(templates_dir=config.theme.templates_dir)
        self.logger = logger or get_logger("builder")

    def build(self, docs: Sequence[DocNode]) -> List[Path]:
        """Clear the output root and write every page plus assets; returns written paths."""
        out_dir = self.config.out_dir
        self.logger.info("Building site into %s", out_dir)
        self._empty_output(out_dir)

        written: List[Path] = []
        for doc in docs:
            target = out_dir / output_path(doc.path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(self.render_page(doc), encoding="utf-8")
            written.append(target)
            self.logger.debug("Wrote %s", target)

        if self.config.search.enabled:
            index_path = out_dir / SEARCH_INDEX_FILENAME
            write_search_index(docs, index_path, logger=self.logger)
            written.append(index_path)

        written.extend(self.write_assets())
        self.logger.info("Site built: %d pages", len(docs))
        return written

    def render_page(self, doc: DocNode) -> str:
        page_link = "/" + output_path(doc.path)
        title = doc.title or humanize(Path(doc.path).stem)
        return self.renderer.render(
            "page.html.j2",
            config=self.config,
            doc=doc,
            title=title,
            page_title=f"{title} - {self.config.title}",
            sidebar=self.sidebar_for(page_link),
            edit_url=self.edit_url(doc),
            href=self.href,
            is_active=self._active_matcher(page_link),
        )

    def write_assets(self) -> List[Path]:
        assets = self.config.out_dir / "assets"
        assets.mkdir(parents=True, exist_ok=True)
        stylesheet = assets / "style.css"
        stylesheet.write_text(
            self.renderer.render_stylesheet(self.config.theme.primary_color), encoding="utf-8"
        )
        script = assets / "main.js"
        script.write_text(
            self.renderer.render_script(search_enabled=self.config.search.enabled), encoding="utf-8"
        )
        return [stylesheet, script]

    def sidebar_for(self, page_link: str) -> List[SidebarItem]:
        """The flat sidebar, or the group whose path prefix is the longest match."""
        sidebar = self.config.sidebar
        if isinstance(sidebar, list):
            return sidebar
        matches = [prefix for prefix in sidebar if page_link.startswith("/" + prefix.lstrip("/"))]
        if not matches:
            return []
        return sidebar[max(matches, key=len)]

    def edit_url(self, doc: DocNode) -> Optional[str]:
        edit_link = self.config.theme.edit_link
        if edit_link is None:
            return None
        return edit_link.pattern.replace(":path", doc.source or doc.path)

    def href(self, link: Optional[str]) -> str:
        if not link:
            return "#"
        if _EXTERNAL_LINK.match(link):
            return link
        return self.config.base + link.lstrip("/")

    def _active_matcher(self, page_link: str) -> Callable[[NavItem | SidebarItem], bool]:
        current = self.href(page_link)

        def is_active(item: NavItem | SidebarItem) -> bool:
            pattern = getattr(item, "active_match", None)
            if pattern:
                return re.search(pattern, page_link) is not None
            if not item.link:
                return False
            target = self.href(item.link)
            return target == current or target + ".html" == current

        return is_active

    def _empty_output(self, out_dir: Path) -> None:
        for protected in (self.config.root, self.config.docs_dir):
            if protected == out_dir or protected.is_relative_to(out_dir):
                raise ConfigurationError(f"Refusing to clear {out_dir}: it contains {protected}")
        if out_dir.exists():
            for child in out_dir.iterdir():
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink()
        out_dir.mkdir(parents=True, exist_ok=True)


async def build_site(
    config: ResolvedDocsConfig,
    docs: Sequence[DocNode],
    *,
    renderer: TemplateRenderer | None = None,
    logger: logging.Logger | None = None,
) -> List[Path]:
    return SiteBuilder(config, renderer=renderer, logger=logger).build(docs)


async def run_build(
    config: ResolvedDocsConfig,
    docs: Sequence[DocNode],
    plugin_manager: PluginManager,
    *,
    renderer: TemplateRenderer | None = None,
    logger: logging.Logger | None = None,
) -> List[Path]:
    """``build_site`` bracketed by the ``before_build``/``after_build`` hooks."""
    await plugin_manager.before_build(config)
    written = await build_site(config, docs, renderer=renderer, logger=logger)
    await plugin_manager.after_build(config)
    return written


__all__ = ["SEARCH_INDEX_FILENAME", "SiteBuilder", "build_site", "run_build"]
