"""Tree-sitter front end shared by the annotation and component extractors."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from ..errors import ExtractionError
from ..models import SourceLocation, TagValue

_LANGUAGES: Dict[str, Language] = {
    "typescript": Language(tree_sitter_typescript.language_typescript()),
    "tsx": Language(tree_sitter_typescript.language_tsx()),
}
_PARSERS: Dict[str, Parser] = {}

_DOC_LINE_PREFIX = re.compile(r"^\s*\*? ?")
_TAG_LINE = re.compile(r"^@(\w+)\s*(.*)$")
_PARAM_TAG = re.compile(r"^(?:\{[^}]*\}\s*)?\[?([\w$.]+)(?:=[^\]]*)?\]?\s*(?:-\s*)?(.*)$", re.DOTALL)


@dataclass
class ParsedSource:
    """A parsed file together with the bytes its nodes index into."""

    path: str
    tree: Tree
    source: bytes

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def location(self, node: Node) -> SourceLocation:
        row, column = node.start_point
        line_prefix = self.source[node.start_byte - column : node.start_byte]
        return SourceLocation(
            file=self.path,
            line=row + 1,
            column=len(line_prefix.decode("utf-8", errors="replace")) + 1,
        )


@dataclass
class DocComment:
    """A parsed ``/** ... */`` block."""

    description: Optional[str] = None
    examples: List[str] = field(default_factory=list)
    tags: Dict[str, TagValue] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)


def dialect_for(path: str) -> str:
    return "tsx" if path.lower().endswith((".tsx", ".jsx")) else "typescript"


def get_parser(dialect: str) -> Parser:
    parser = _PARSERS.get(dialect)
    if parser is None:
        parser = Parser(_LANGUAGES[dialect])
        _PARSERS[dialect] = parser
    return parser


def parse_source(text: str, path: str, dialect: Optional[str] = None) -> ParsedSource:
    """Parse ``text``; a tree containing syntax errors raises :class:`ExtractionError`."""
    source = text.encode("utf-8")
    tree = get_parser(dialect or dialect_for(path)).parse(source)
    parsed = ParsedSource(path=path, tree=tree, source=source)
    if tree.root_node.has_error:
        bad = _first_error(tree.root_node)
        where = f" at line {bad.start_point[0] + 1}" if bad is not None else ""
        raise ExtractionError(path, f"syntax error{where}")
    return parsed


def _first_error(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal over named nodes."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.named_children))


def type_text(parsed: ParsedSource, annotation: Optional[Node]) -> Optional[str]:
    """Literal text of a ``type_annotation`` without its leading colon."""
    if annotation is None:
        return None
    if annotation.type == "type_annotation" and annotation.named_children:
        return parsed.text(annotation.named_children[0]).strip()
    return parsed.text(annotation).lstrip(":").strip()


def doc_comment_before(parsed: ParsedSource, node: Node) -> Optional[DocComment]:
    """Return the ``/**`` comment directly preceding ``node``, if any."""
    previous = node.prev_sibling
    if previous is None or previous.type != "comment":
        return None
    raw = parsed.text(previous)
    if not raw.startswith("/**"):
        return None
    return parse_doc_comment(raw)


def parse_doc_comment(raw: str) -> DocComment:
    body = raw.strip()
    if body.startswith("/**"):
        body = body[3:]
    if body.endswith("*/"):
        body = body[:-2]
    lines = [_DOC_LINE_PREFIX.sub("", line, count=1).rstrip() for line in body.splitlines()]

    comment = DocComment()
    free_text: List[str] = []
    blocks: List[tuple[str, List[str]]] = []
    for line in lines:
        match = _TAG_LINE.match(line.strip())
        if match:
            blocks.append((match.group(1), [match.group(2)]))
        elif blocks:
            blocks[-1][1].append(line)
        else:
            free_text.append(line.strip())

    comment.description = next((line for line in free_text if line), None)

    for name, chunk in blocks:
        if name == "example":
            example = "\n".join(chunk).strip("\n")
            comment.examples.append(_dedent(example))
            continue
        value = " ".join(part.strip() for part in chunk if part.strip())
        _add_tag(comment.tags, name, value)
        if name == "param":
            param = _PARAM_TAG.match(value)
            if param:
                comment.params[param.group(1)] = param.group(2).strip()
    return comment


def _add_tag(tags: Dict[str, TagValue], name: str, value: str) -> None:
    existing = tags.get(name)
    if existing is None:
        tags[name] = value
    elif isinstance(existing, list):
        existing.append(value)
    else:
        tags[name] = [existing, value]


def _dedent(text: str) -> str:
    lines = text.splitlines()
    indents = [len(line) - len(line.lstrip()) for line in lines if line.strip()]
    if not indents:
        return text.strip()
    margin = min(indents)
    return "\n".join(line[margin:] for line in lines).strip()


__all__ = [
    "DocComment",
    "ParsedSource",
    "dialect_for",
    "doc_comment_before",
    "get_parser",
    "parse_doc_comment",
    "parse_source",
    "type_text",
    "walk",
]
