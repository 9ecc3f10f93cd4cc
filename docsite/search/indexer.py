"""Lightweight full-text search index over generated documents."""

from __future__ import annotations

import html
import json
import logging
import re
from pathlib import Path
from typing import Iterable, List

from ..logging import get_logger
from ..models import DocNode, SearchIndexItem

CONTENT_LIMIT = 500

_SCRIPT_OR_STYLE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")
_HEADING = re.compile(r"<h([1-6])\b[^>]*>(.*?)</h\1\s*>", re.IGNORECASE | re.DOTALL)


def strip_html(markup: str) -> str:
    text = _SCRIPT_OR_STYLE.sub(" ", markup)
    text = _TAG.sub(" ", text)
    text = html.unescape(text)
    return _WHITESPACE.sub(" ", text).strip()


def extract_headers(markup: str) -> List[str]:
    headers: List[str] = []
    for match in _HEADING.finditer(markup):
        text = strip_html(match.group(2))
        if text:
            headers.append(text)
    return headers


def build_search_index(docs: Iterable[DocNode]) -> List[SearchIndexItem]:
    """One item per document, in input order."""
    return [
        SearchIndexItem(
            id=doc.path,
            title=doc.title,
            content=strip_html(doc.content)[:CONTENT_LIMIT],
            path=doc.path,
            headers=extract_headers(doc.content),
        )
        for doc in docs
    ]


def write_search_index(
    docs: Iterable[DocNode], output_path: Path, *, logger: logging.Logger | None = None
) -> List[SearchIndexItem]:
    log = logger or get_logger("search")
    items = build_search_index(docs)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [item.to_dict() for item in items]
    output_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    log.info("Search index written to %s (%d entries)", output_path, len(items))
    return items


__all__ = ["CONTENT_LIMIT", "build_search_index", "extract_headers", "strip_html", "write_search_index"]
