"""Configuration loading for docsite (docs.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import yaml

from .errors import ConfigurationError

CONFIG_FILENAMES = ("docs.yml", "docs.yaml", ".docsite.yml")

DEFAULT_PRIMARY_COLOR = "#1890ff"


@dataclass
class EditLink:
    pattern: str
    text: str = "Edit this page"


@dataclass
class Footer:
    message: Optional[str] = None
    copyright: Optional[str] = None


@dataclass
class SocialLink:
    icon: str
    link: str


@dataclass
class ThemeConfig:
    """Theme fields consumed by the site builder."""

    primary_color: str = DEFAULT_PRIMARY_COLOR
    logo: Optional[str] = None
    repo: Optional[str] = None
    edit_link: Optional[EditLink] = None
    footer: Optional[Footer] = None
    social_links: List[SocialLink] = field(default_factory=list)
    templates_dir: Optional[Path] = None


@dataclass
class NavItem:
    text: str
    link: Optional[str] = None
    items: List["NavItem"] = field(default_factory=list)
    active_match: Optional[str] = None


@dataclass
class SidebarItem:
    text: str
    link: Optional[str] = None
    items: List["SidebarItem"] = field(default_factory=list)
    collapsed: bool = False


SidebarConfig = Union[List[SidebarItem], Dict[str, List[SidebarItem]]]


@dataclass
class MarkdownConfig:
    """Prose-processing toggles."""

    line_numbers: bool = True
    containers: bool = True
    emoji: bool = True
    anchor: bool = True
    theme_light: str = "github-light"
    theme_dark: str = "github-dark"


@dataclass
class SearchConfig:
    enabled: bool = True
    max_results: int = 10


@dataclass
class DocsConfig:
    """User-facing configuration; paths may be relative to ``root``."""

    root: Path
    title: str = "Documentation"
    description: str = "Documentation site"
    docs_dir: Path = Path("docs")
    src_dir: Path = Path("src")
    components_dir: Path = Path("src/components")
    out_dir: Path = Path("dist")
    base: str = "/"
    theme: ThemeConfig = field(default_factory=ThemeConfig)
    nav: List[NavItem] = field(default_factory=list)
    sidebar: SidebarConfig = field(default_factory=list)
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    plugins: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class ResolvedDocsConfig:
    """Configuration with every path made absolute; fixed for the whole run."""

    root: Path
    title: str
    description: str
    docs_dir: Path
    src_dir: Path
    components_dir: Path
    out_dir: Path
    base: str
    theme: ThemeConfig
    nav: List[NavItem]
    sidebar: SidebarConfig
    markdown: MarkdownConfig
    search: SearchConfig
    plugins: List[Any]


def load_config(root: Path, config_file: Path | None = None) -> DocsConfig:
    """Load configuration from disk, falling back to defaults when no file exists."""
    root = Path(root).expanduser().resolve()
    path = _find_config_file(root, config_file)
    if path is None:
        return DocsConfig(root=root)
    data = _read_config(path)
    return config_from_mapping(root, data)


def config_from_mapping(root: Path, data: Mapping[str, Any]) -> DocsConfig:
    """Build a :class:`DocsConfig` from an already-parsed mapping."""
    if not isinstance(data, Mapping):
        raise ConfigurationError("docsite configuration must contain a mapping at the root")

    config = DocsConfig(root=Path(root))
    for key in ("title", "description", "base"):
        value = _as_str(data.get(key))
        if value is not None:
            setattr(config, key, value)
    for key, attr in (
        ("docs_dir", "docs_dir"),
        ("src_dir", "src_dir"),
        ("components_dir", "components_dir"),
        ("out_dir", "out_dir"),
    ):
        value = _as_str(data.get(key))
        if value:
            setattr(config, attr, Path(value))

    config.theme = _parse_theme(_as_dict(data.get("theme")))
    config.nav = [_parse_nav(item) for item in _as_list(data.get("nav")) if isinstance(item, Mapping)]
    config.sidebar = _parse_sidebar(data.get("sidebar"))
    config.markdown = _parse_markdown(_as_dict(data.get("markdown")))
    config.search = _parse_search(_as_dict(data.get("search")))
    config.plugins = list(_as_list(data.get("plugins")))
    return config


def resolve_config(config: DocsConfig) -> ResolvedDocsConfig:
    """Make paths absolute and check the ones downstream stages depend on."""
    root = Path(config.root).resolve()
    if not root.is_dir():
        raise ConfigurationError(f"Project root does not exist: {root}")
    docs_dir = _absolute(root, config.docs_dir)
    if not docs_dir.is_dir():
        raise ConfigurationError(f"Documents root does not exist: {docs_dir}")
    base = config.base or "/"
    if not base.endswith("/"):
        base += "/"
    return ResolvedDocsConfig(
        root=root,
        title=config.title,
        description=config.description,
        docs_dir=docs_dir,
        src_dir=_absolute(root, config.src_dir),
        components_dir=_absolute(root, config.components_dir),
        out_dir=_absolute(root, config.out_dir),
        base=base,
        theme=_resolve_theme(root, config.theme),
        nav=list(config.nav),
        sidebar=config.sidebar,
        markdown=config.markdown,
        search=config.search,
        plugins=list(config.plugins),
    )


def _resolve_theme(root: Path, theme: ThemeConfig) -> ThemeConfig:
    if theme.templates_dir is None:
        return theme
    templates_dir = _absolute(root, theme.templates_dir)
    if not templates_dir.is_dir():
        raise ConfigurationError(f"Templates directory does not exist: {templates_dir}")
    return replace(theme, templates_dir=templates_dir)


def _absolute(root: Path, value: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root / path
    return path.resolve()


def _find_config_file(root: Path, config_file: Path | None) -> Path | None:
    if config_file is not None:
        candidate = Path(config_file).expanduser()
        if not candidate.is_absolute():
            candidate = root / candidate
        if not candidate.is_file():
            raise ConfigurationError(f"Configuration file not found: {candidate}")
        return candidate
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"{path.name} must contain a mapping at the root")
    return loaded


def _parse_theme(data: Dict[str, Any]) -> ThemeConfig:
    theme = ThemeConfig()
    if not data:
        return theme
    theme.primary_color = _as_str(data.get("primary_color")) or DEFAULT_PRIMARY_COLOR
    theme.logo = _as_str(data.get("logo"))
    theme.repo = _as_str(data.get("repo"))
    edit = _as_dict(data.get("edit_link"))
    if edit.get("pattern"):
        theme.edit_link = EditLink(
            pattern=str(edit["pattern"]),
            text=_as_str(edit.get("text")) or "Edit this page",
        )
    footer = _as_dict(data.get("footer"))
    if footer:
        theme.footer = Footer(
            message=_as_str(footer.get("message")),
            copyright=_as_str(footer.get("copyright")),
        )
    for item in _as_list(data.get("social_links")):
        entry = _as_dict(item)
        if entry.get("icon") and entry.get("link"):
            theme.social_links.append(SocialLink(icon=str(entry["icon"]), link=str(entry["link"])))
    templates_dir = _as_str(data.get("templates_dir"))
    if templates_dir:
        theme.templates_dir = Path(templates_dir)
    return theme


def _parse_nav(data: Mapping[str, Any]) -> NavItem:
    return NavItem(
        text=_as_str(data.get("text")) or "",
        link=_as_str(data.get("link")),
        items=[_parse_nav(child) for child in _as_list(data.get("items")) if isinstance(child, Mapping)],
        active_match=_as_str(data.get("active_match")),
    )


def _parse_sidebar_item(data: Mapping[str, Any]) -> SidebarItem:
    return SidebarItem(
        text=_as_str(data.get("text")) or "",
        link=_as_str(data.get("link")),
        items=[
            _parse_sidebar_item(child)
            for child in _as_list(data.get("items"))
            if isinstance(child, Mapping)
        ],
        collapsed=_as_bool(data.get("collapsed")) or False,
    )


def _parse_sidebar(value: Any) -> SidebarConfig:
    if isinstance(value, Mapping):
        return {
            str(prefix): [_parse_sidebar_item(item) for item in _as_list(items) if isinstance(item, Mapping)]
            for prefix, items in value.items()
        }
    return [_parse_sidebar_item(item) for item in _as_list(value) if isinstance(item, Mapping)]


def _parse_markdown(data: Dict[str, Any]) -> MarkdownConfig:
    markdown = MarkdownConfig()
    for key in ("line_numbers", "containers", "emoji", "anchor"):
        value = _as_bool(data.get(key))
        if value is not None:
            setattr(markdown, key, value)
    theme = _as_dict(data.get("theme"))
    markdown.theme_light = _as_str(theme.get("light")) or markdown.theme_light
    markdown.theme_dark = _as_str(theme.get("dark")) or markdown.theme_dark
    return markdown


def _parse_search(data: Dict[str, Any]) -> SearchConfig:
    search = SearchConfig()
    enabled = _as_bool(data.get("enabled"))
    if enabled is not None:
        search.enabled = enabled
    max_results = _as_int(data.get("max_results"))
    if max_results is not None:
        search.max_results = max_results
    return search


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return [value]
    return list(value)


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "CONFIG_FILENAMES",
    "DocsConfig",
    "EditLink",
    "Footer",
    "MarkdownConfig",
    "NavItem",
    "ResolvedDocsConfig",
    "SearchConfig",
    "SidebarConfig",
    "SidebarItem",
    "SocialLink",
    "ThemeConfig",
    "config_from_mapping",
    "load_config",
    "resolve_config",
]
