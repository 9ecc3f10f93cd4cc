"""Plugin pipeline: ordered, sequential hook execution."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from importlib import import_module, metadata
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence, Union

from .config import DocsConfig, ResolvedDocsConfig, resolve_config
from .errors import ConfigurationError
from .logging import get_logger
from .models import DocNode

_ENTRY_POINT_GROUP = "docsite.plugins"

HOOK_NAMES = (
    "config",
    "config_resolved",
    "transform_markdown",
    "before_generate",
    "after_generate",
    "before_build",
    "after_build",
)

MaybeAwaitable = Union[Any, Awaitable[Any]]


@dataclass
class GenerateContext:
    """State handed to the generate hooks."""

    config: ResolvedDocsConfig
    files: List[str] = field(default_factory=list)
    docs: List[DocNode] = field(default_factory=list)


@dataclass
class Plugin:
    """A named bundle of optional hooks; every hook may be sync or async."""

    name: str
    config: Optional[Callable[[DocsConfig], MaybeAwaitable]] = None
    config_resolved: Optional[Callable[[ResolvedDocsConfig], MaybeAwaitable]] = None
    transform_markdown: Optional[Callable[[str, str], MaybeAwaitable]] = None
    before_generate: Optional[Callable[[GenerateContext], MaybeAwaitable]] = None
    after_generate: Optional[Callable[[GenerateContext], MaybeAwaitable]] = None
    before_build: Optional[Callable[[ResolvedDocsConfig], MaybeAwaitable]] = None
    after_build: Optional[Callable[[ResolvedDocsConfig], MaybeAwaitable]] = None


def define_plugin(name: str, **hooks: Callable[..., MaybeAwaitable]) -> Plugin:
    """Build a :class:`Plugin`, rejecting unknown hook names."""
    unknown = sorted(set(hooks) - set(HOOK_NAMES))
    if unknown:
        raise ConfigurationError(f"Unknown plugin hooks for '{name}': {', '.join(unknown)}")
    return Plugin(name=name, **hooks)


class PluginManager:
    """Runs plugin hooks in registration order, one at a time."""

    def __init__(
        self, plugins: Iterable[Any] = (), *, logger: logging.Logger | None = None
    ) -> None:
        self.logger = logger or get_logger("plugins")
        self._plugins: List[Any] = []
        self.register_all(plugins)

    @property
    def plugins(self) -> List[Any]:
        return list(self._plugins)

    def register(self, plugin: Any) -> None:
        name = getattr(plugin, "name", None)
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"Plugin {plugin!r} must define a non-empty 'name'")
        self.logger.debug("Registering plugin %s", name)
        self._plugins.append(plugin)

    def register_all(self, plugins: Iterable[Any]) -> None:
        for plugin in plugins:
            self.register(plugin)

    async def config(self, config: DocsConfig) -> DocsConfig:
        result = config
        for plugin, hook in self._hooks("config"):
            self.logger.debug("Running config hook of %s", plugin.name)
            replacement = await _invoke(hook, result)
            if replacement is not None:
                result = replacement
        return result

    async def config_resolved(self, config: ResolvedDocsConfig) -> None:
        await self._observe("config_resolved", config)

    async def transform_markdown(self, content: str, file_path: str) -> str:
        result = content
        for plugin, hook in self._hooks("transform_markdown"):
            self.logger.debug("Running transform_markdown hook of %s", plugin.name)
            transformed = await _invoke(hook, result, file_path)
            if transformed is not None:
                result = transformed
        return result

    async def before_generate(self, context: GenerateContext) -> None:
        await self._observe("before_generate", context)

    async def after_generate(self, context: GenerateContext) -> None:
        await self._observe("after_generate", context)

    async def before_build(self, config: ResolvedDocsConfig) -> None:
        await self._observe("before_build", config)

    async def after_build(self, config: ResolvedDocsConfig) -> None:
        await self._observe("after_build", config)

    async def _observe(self, hook_name: str, argument: Any) -> None:
        for plugin, hook in self._hooks(hook_name):
            self.logger.debug("Running %s hook of %s", hook_name, plugin.name)
            await _invoke(hook, argument)

    def _hooks(self, hook_name: str) -> Iterable[tuple[Any, Callable[..., Any]]]:
        for plugin in self._plugins:
            hook = getattr(plugin, hook_name, None)
            if hook is None:
                continue
            if not callable(hook):
                raise ConfigurationError(f"Plugin '{plugin.name}' hook '{hook_name}' is not callable")
            yield plugin, hook


async def run_config_hooks(config: DocsConfig, manager: PluginManager) -> ResolvedDocsConfig:
    """Chain the ``config`` hooks, resolve the final value and announce it."""
    final = await manager.config(config)
    resolved = resolve_config(final)
    await manager.config_resolved(resolved)
    return resolved


async def _invoke(hook: Callable[..., Any], *args: Any) -> Any:
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def load_plugins(specs: Sequence[Any], *, include_entry_points: bool = True) -> List[Any]:
    """Resolve configured plugins (objects or ``module:attr`` strings) in order."""
    plugins: List[Any] = []
    for spec in specs:
        if isinstance(spec, str):
            plugins.append(_coerce_plugin(_import_object(spec), spec))
        else:
            plugins.append(_coerce_plugin(spec, repr(spec)))

    if include_entry_points:
        for entry in _iter_entry_points():
            try:
                loaded = entry.load()
            except Exception as exc:
                raise ConfigurationError(f"Failed to load plugin entry point '{entry.name}': {exc}") from exc
            plugins.append(_coerce_plugin(loaded, entry.name))
    return plugins


def _import_object(spec: str) -> Any:
    module_name, _, attr = spec.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(f"Plugin reference '{spec}' must look like 'package.module:attribute'")
    try:
        module = import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Failed to import plugin module '{module_name}': {exc}") from exc
    target: Any = module
    for part in attr.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise ConfigurationError(f"Plugin '{spec}' not found: {exc}") from exc
    return target


def _coerce_plugin(obj: Any, label: str) -> Any:
    if not inspect.isclass(obj) and isinstance(getattr(obj, "name", None), str):
        return obj
    if callable(obj):
        instance = obj()
        if isinstance(getattr(instance, "name", None), str):
            return instance
    raise ConfigurationError(f"Plugin '{label}' must be a plugin object or a factory returning one")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "GenerateContext",
    "HOOK_NAMES",
    "Plugin",
    "PluginManager",
    "define_plugin",
    "load_plugins",
    "run_config_hooks",
]
