"""Annotation extractor for TypeScript declarations and their doc comments."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

from tree_sitter import Node

from ..errors import ExtractionError
from ..logging import get_logger
from ..models import AnnotationNode, ParameterDoc, TypeDoc
from .syntax import DocComment, ParsedSource, doc_comment_before, parse_source, type_text

_FUNCTION_TYPES = {"function_declaration", "generator_function_declaration", "function_signature"}
_CLASS_TYPES = {"class_declaration", "abstract_class_declaration"}
_VARIABLE_TYPES = {"lexical_declaration", "variable_declaration"}
_FUNCTION_VALUE_TYPES = {"arrow_function", "function_expression", "function", "generator_function"}
_PARAMETER_TYPES = {"required_parameter", "optional_parameter"}
_METHOD_MEMBER_TYPES = {"method_definition", "method_signature", "abstract_method_signature"}
_FIELD_MEMBER_TYPES = {"public_field_definition", "property_signature"}

_ANY = "any"
_VOID = "void"


@dataclass
class _Statement:
    """A top-level declaration plus the statement that carries its comment."""

    declaration: Node
    outer: Node
    exported: bool


class TypeScriptExtractor:
    """Turns one TypeScript file into top-level :class:`AnnotationNode` objects."""

    suffixes = (".ts", ".tsx")

    def __init__(self, *, exported_only: bool = False, logger: logging.Logger | None = None) -> None:
        self.exported_only = exported_only
        self.logger = logger or get_logger("extractors.typescript")
        self._handlers: Dict[str, Callable[[ParsedSource, _Statement], List[AnnotationNode]]] = {}
        for node_type in _FUNCTION_TYPES:
            self._handlers[node_type] = self._function
        for node_type in _CLASS_TYPES:
            self._handlers[node_type] = self._class
        for node_type in _VARIABLE_TYPES:
            self._handlers[node_type] = self._variables
        self._handlers["interface_declaration"] = self._interface
        self._handlers["type_alias_declaration"] = self._type_alias
        self._handlers["enum_declaration"] = self._enum

    def supports(self, path: Path) -> bool:
        name = path.name.lower()
        return name.endswith(self.suffixes) and not name.endswith(".d.ts")

    def extract_file(self, path: Path, *, display_path: str | None = None) -> List[AnnotationNode]:
        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise ExtractionError(str(path), f"unreadable source: {exc}") from exc
        return self.extract_source(text, display_path or str(path))

    def extract_source(self, text: str, path: str) -> List[AnnotationNode]:
        """Return top-level declarations of ``text`` in source order."""
        parsed = parse_source(text, path)
        statements = list(self._statements(parsed.root))
        exported_names = self._export_clause_names(parsed) if self.exported_only else set()

        nodes: List[AnnotationNode] = []
        for statement in statements:
            handler = self._handlers.get(statement.declaration.type)
            if handler is None:
                continue
            for node in handler(parsed, statement):
                if self.exported_only and not (statement.exported or node.name in exported_names):
                    continue
                nodes.append(node)
        self.logger.debug("Extracted %d declarations from %s", len(nodes), path)
        return nodes

    # ------------------------------------------------------------------
    # Statement discovery

    def _statements(self, root: Node) -> List[_Statement]:
        statements: List[_Statement] = []
        for child in root.named_children:
            if child.type == "export_statement":
                declaration = child.child_by_field_name("declaration")
                if declaration is not None:
                    statements.append(_Statement(_unwrap_ambient(declaration), child, True))
            elif child.type == "ambient_declaration":
                statements.append(_Statement(_unwrap_ambient(child), child, False))
            else:
                statements.append(_Statement(child, child, False))
        return statements

    @staticmethod
    def _export_clause_names(parsed: ParsedSource) -> Set[str]:
        names: Set[str] = set()
        for child in parsed.root.named_children:
            if child.type != "export_statement" or child.child_by_field_name("declaration") is not None:
                continue
            for clause in child.named_children:
                if clause.type != "export_clause":
                    continue
                for specifier in clause.named_children:
                    name = specifier.child_by_field_name("name")
                    if name is not None:
                        names.add(parsed.text(name))
        return names

    # ------------------------------------------------------------------
    # Declaration handlers

    def _function(self, parsed: ParsedSource, statement: _Statement) -> List[AnnotationNode]:
        node = statement.declaration
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return []
        doc = doc_comment_before(parsed, statement.outer)
        return [
            self._callable(
                parsed,
                node,
                name=parsed.text(name_node),
                kind="function",
                doc=doc,
                location_node=statement.outer,
            )
        ]

    def _class(self, parsed: ParsedSource, statement: _Statement) -> List[AnnotationNode]:
        node = statement.declaration
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return []
        doc = doc_comment_before(parsed, statement.outer)
        body = node.child_by_field_name("body")
        annotation = self._annotation(
            parsed,
            name=parsed.text(name_node),
            kind="class",
            doc=doc,
            location_node=statement.outer,
            signature=_header(parsed, node, body, start_tokens=("abstract", "class")),
        )
        if body is not None:
            annotation.children = self._members(parsed, body)
        return [annotation]

    def _interface(self, parsed: ParsedSource, statement: _Statement) -> List[AnnotationNode]:
        node = statement.declaration
        name_node = node.child_by_field_name("name")
        doc = doc_comment_before(parsed, statement.outer)
        body = node.child_by_field_name("body")
        annotation = self._annotation(
            parsed,
            name=parsed.text(name_node),
            kind="interface",
            doc=doc,
            location_node=statement.outer,
            signature=_header(parsed, node, body),
        )
        if body is not None:
            annotation.children = self._members(parsed, body)
        return [annotation]

    def _type_alias(self, parsed: ParsedSource, statement: _Statement) -> List[AnnotationNode]:
        node = statement.declaration
        doc = doc_comment_before(parsed, statement.outer)
        value = node.child_by_field_name("value")
        annotation = self._annotation(
            parsed,
            name=parsed.text(node.child_by_field_name("name")),
            kind="type",
            doc=doc,
            location_node=statement.outer,
            signature=parsed.text(node).strip().rstrip(";"),
        )
        annotation.returns = TypeDoc.from_text(parsed.text(value) or _ANY)
        return [annotation]

    def _variables(self, parsed: ParsedSource, statement: _Statement) -> List[AnnotationNode]:
        node = statement.declaration
        doc = doc_comment_before(parsed, statement.outer)
        keyword = parsed.text(node.children[0]) if node.children else "const"
        declarators = [child for child in node.named_children if child.type == "variable_declarator"]

        annotations: List[AnnotationNode] = []
        for index, declarator in enumerate(declarators):
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            value = declarator.child_by_field_name("value")
            if value is not None and value.type in _FUNCTION_VALUE_TYPES:
                end = _arrow_token(value) or value.child_by_field_name("body")
                declared = _header(parsed, declarator, end)
            else:
                declared = parsed.text(declarator).strip()
            annotation = self._annotation(
                parsed,
                name=parsed.text(name_node),
                kind="variable",
                doc=doc,
                location_node=statement.outer if index == 0 else declarator,
                signature=f"{keyword} {declared}",
            )
            annotation.returns = TypeDoc.from_text(
                type_text(parsed, declarator.child_by_field_name("type")) or _ANY
            )
            if value is not None and value.type in _FUNCTION_VALUE_TYPES:
                annotation.parameters = self._parameters(parsed, value, doc)
            annotations.append(annotation)
        return annotations

    def _enum(self, parsed: ParsedSource, statement: _Statement) -> List[AnnotationNode]:
        node = statement.declaration
        doc = doc_comment_before(parsed, statement.outer)
        body = node.child_by_field_name("body")
        annotation = self._annotation(
            parsed,
            name=parsed.text(node.child_by_field_name("name")),
            kind="enum",
            doc=doc,
            location_node=statement.outer,
            signature=_header(parsed, node, body),
        )
        members: List[str] = []
        for member in body.named_children if body is not None else []:
            if member.type == "enum_assignment":
                members.append(parsed.text(member.child_by_field_name("name")))
            elif member.type in {"property_identifier", "string"}:
                members.append(parsed.text(member))
        if members:
            annotation.tags.setdefault("members", members)
        return [annotation]

    # ------------------------------------------------------------------
    # Members and shared builders

    def _members(self, parsed: ParsedSource, body: Node) -> List[AnnotationNode]:
        children: List[AnnotationNode] = []
        for member in body.named_children:
            name_node = member.child_by_field_name("name")
            if name_node is None:
                continue
            doc = doc_comment_before(parsed, member)
            if member.type in _METHOD_MEMBER_TYPES:
                children.append(
                    self._callable(
                        parsed,
                        member,
                        name=parsed.text(name_node),
                        kind="function",
                        doc=doc,
                        location_node=member,
                    )
                )
            elif member.type in _FIELD_MEMBER_TYPES:
                child = self._annotation(
                    parsed,
                    name=parsed.text(name_node),
                    kind="variable",
                    doc=doc,
                    location_node=member,
                    signature=parsed.text(member).strip().rstrip(";,"),
                )
                child.returns = TypeDoc.from_text(
                    type_text(parsed, member.child_by_field_name("type")) or _ANY
                )
                children.append(child)
        return children

    def _callable(
        self,
        parsed: ParsedSource,
        node: Node,
        *,
        name: str,
        kind: str,
        doc: Optional[DocComment],
        location_node: Node,
    ) -> AnnotationNode:
        body = node.child_by_field_name("body")
        annotation = self._annotation(
            parsed,
            name=name,
            kind=kind,
            doc=doc,
            location_node=location_node,
            signature=_header(parsed, node, body).rstrip(";"),
        )
        annotation.parameters = self._parameters(parsed, node, doc)
        annotation.returns = TypeDoc.from_text(
            type_text(parsed, node.child_by_field_name("return_type")) or _VOID
        )
        return annotation

    @staticmethod
    def _annotation(
        parsed: ParsedSource,
        *,
        name: str,
        kind: str,
        doc: Optional[DocComment],
        location_node: Node,
        signature: str,
    ) -> AnnotationNode:
        return AnnotationNode(
            name=name,
            kind=kind,  # type: ignore[arg-type]
            source=parsed.location(location_node),
            description=doc.description if doc else None,
            signature=signature,
            examples=list(doc.examples) if doc else [],
            tags=dict(doc.tags) if doc else {},
        )

    @staticmethod
    def _parameters(parsed: ParsedSource, node: Node, doc: Optional[DocComment]) -> List[ParameterDoc]:
        container = node.child_by_field_name("parameters")
        if container is None:
            # Single bare parameter arrow functions: `x => x * 2`.
            single = node.child_by_field_name("parameter")
            if single is None:
                return []
            name = parsed.text(single)
            return [
                ParameterDoc(
                    name=name,
                    type=TypeDoc.from_text(_ANY),
                    description=doc.params.get(name) if doc else None,
                )
            ]
        params: List[ParameterDoc] = []
        for param in container.named_children:
            if param.type not in _PARAMETER_TYPES:
                continue
            name = parsed.text(param.child_by_field_name("pattern"))
            value = param.child_by_field_name("value")
            params.append(
                ParameterDoc(
                    name=name,
                    type=TypeDoc.from_text(type_text(parsed, param.child_by_field_name("type")) or _ANY),
                    description=doc.params.get(name.lstrip(".")) if doc else None,
                    optional=param.type == "optional_parameter" or value is not None,
                    default_value=parsed.text(value) if value is not None else None,
                )
            )
        return params


def _unwrap_ambient(node: Node) -> Node:
    if node.type == "ambient_declaration":
        for child in node.named_children:
            return child
    return node


def _arrow_token(node: Node) -> Optional[Node]:
    for child in node.children:
        if child.type == "=>":
            return child
    return None


def _header(
    parsed: ParsedSource,
    node: Node,
    body: Optional[Node],
    *,
    start_tokens: tuple[str, ...] = (),
) -> str:
    """Declaration text up to (excluding) its body, skipping leading decorators."""
    start = node.start_byte
    if start_tokens:
        for child in node.children:
            if child.type in start_tokens:
                start = child.start_byte
                break
    end = body.start_byte if body is not None else node.end_byte
    text = parsed.source[start:end].decode("utf-8", errors="replace")
    return " ".join(text.split())


__all__ = ["TypeScriptExtractor"]
