"""Jinja2 template rendering for pages, API/component bodies and static assets."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Sequence

from jinja2 import Environment, FileSystemLoader

from .markdown.extensions import slugify
from .models import AnnotationNode, ComponentDescription

DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")


def create_environment(templates_dir: Path | None = None) -> Environment:
    """Environment searching ``templates_dir`` first, then the bundled templates."""
    searchpath = [str(DEFAULT_TEMPLATES_DIR)]
    if templates_dir is not None:
        searchpath.insert(0, str(templates_dir))
    env = Environment(
        loader=FileSystemLoader(searchpath),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.globals["slugify"] = slugify
    return env


class TemplateRenderer:
    """Thin wrapper that keeps one environment per run."""

    def __init__(self, env: Environment | None = None, *, templates_dir: Path | None = None) -> None:
        self.env = env or create_environment(templates_dir)

    def render(self, template_name: str, **context: Any) -> str:
        return self.env.get_template(template_name).render(**context)

    def render_api(self, nodes: Sequence[AnnotationNode]) -> str:
        return self.render("api.html.j2", nodes=list(nodes))

    def render_component(self, component: ComponentDescription) -> str:
        return self.render("component.html.j2", component=component)

    def render_stylesheet(self, primary_color: str) -> str:
        return self.render("style.css.j2", primary_color=primary_color)

    def render_script(self, *, search_enabled: bool) -> str:
        return self.render("main.js.j2", search_enabled=search_enabled)


def humanize(stem: str) -> str:
    """``getting-started`` becomes ``Getting Started``."""
    words: Iterable[str] = (word for word in stem.replace("_", "-").split("-") if word)
    return " ".join(word[:1].upper() + word[1:] for word in words)


__all__ = ["DEFAULT_TEMPLATES_DIR", "TemplateRenderer", "create_environment", "humanize"]
