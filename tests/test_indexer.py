"""Tests for the search index builder."""

from __future__ import annotations

import json
from pathlib import Path

from docsite.models import DocNode
from docsite.search import build_search_index, write_search_index
from docsite.search.indexer import CONTENT_LIMIT, extract_headers, strip_html


def _doc(path: str, content: str, title: str = "Page") -> DocNode:
    return DocNode(path=path, title=title, content=content, kind="prose")


def test_strip_html_removes_tags_scripts_and_entities() -> None:
    markup = "<p>Fish &amp; chips</p><script>var x = '<p>';</script><style>p { color: red; }</style><p>done</p>"

    assert strip_html(markup) == "Fish & chips done"


def test_extract_headers_in_document_order() -> None:
    markup = '<h1 id="a"><a class="header-anchor" href="#a">Intro</a></h1><p>x</p><h3>Deep <code>dive</code></h3>'

    assert extract_headers(markup) == ["Intro", "Deep dive"]


def test_one_item_per_document_in_input_order() -> None:
    docs = [_doc("b.html", "<h2>Beta</h2><p>second</p>", "B"), _doc("a.html", "<p>first</p>", "A")]

    items = build_search_index(docs)

    assert [item.id for item in items] == ["b.html", "a.html"]
    assert items[0].path == "b.html"
    assert items[0].title == "B"
    assert items[0].content == "Beta second"
    assert items[0].headers == ["Beta"]
    assert items[1].headers == []


def test_content_is_truncated() -> None:
    items = build_search_index([_doc("long.html", "<p>" + "word " * 400 + "</p>")])

    assert len(items[0].content) == CONTENT_LIMIT


def test_write_search_index_emits_json(tmp_path: Path) -> None:
    output = tmp_path / "nested" / "search-index.json"

    items = write_search_index([_doc("index.html", "<h1>Start</h1><p>Grüße</p>", "Home")], output)

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload == [
        {"id": "index.html", "title": "Home", "content": "Start Grüße", "path": "index.html", "headers": ["Start"]}
    ]
    assert len(items) == 1
    assert "Grüße" in output.read_text(encoding="utf-8")
