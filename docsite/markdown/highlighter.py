"""Pygments-backed code highlighting for fenced blocks."""

from __future__ import annotations

import html
from typing import Callable

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.styles import get_all_styles
from pygments.util import ClassNotFound

Highlighter = Callable[[str, str], str]

# Editor theme names that have no Pygments style of the same name.
_STYLE_ALIASES = {
    "github-light": "default",
    "light-plus": "vs",
    "dark-plus": "monokai",
}


def style_for_theme(theme: str) -> str:
    """Map a highlight theme name onto an installed Pygments style."""
    if theme in set(get_all_styles()):
        return theme
    return _STYLE_ALIASES.get(theme, "default")


def escape_code(code: str, lang: str = "") -> str:
    css = f' class="language-{html.escape(lang, quote=True)}"' if lang else ""
    return f"<pre><code{css}>{html.escape(code)}</code></pre>"


def create_highlighter(theme: str = "github-light") -> Highlighter:
    """Return ``(code, lang) -> html`` rendering a complete ``<pre>`` block.

    Styles are inlined so pages do not need a separate Pygments stylesheet.
    Blocks without a language, or with one Pygments does not know, come back
    escaped but otherwise untouched.
    """
    formatter = HtmlFormatter(style=style_for_theme(theme), noclasses=True, nowrap=True)

    def _highlight(code: str, lang: str) -> str:
        if not lang:
            return escape_code(code)
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            return escape_code(code, lang)
        body = highlight(code, lexer, formatter)
        return f'<pre class="highlight"><code class="language-{html.escape(lang, quote=True)}">{body}</code></pre>'

    return _highlight


__all__ = ["Highlighter", "create_highlighter", "escape_code", "style_for_theme"]
