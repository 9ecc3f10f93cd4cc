"""Helpers that turn TypeScript type shapes into component prop descriptions."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Union

from tree_sitter import Node

from ..models import PropDoc, TypeDoc
from .syntax import ParsedSource, doc_comment_before, type_text

PROPS_SUFFIX = "Props"

_OBJECT_TYPES = {"object_type", "interface_body"}


def string_value(parsed: ParsedSource, node: Optional[Node]) -> Optional[str]:
    """Return the contents of a string literal node, or ``None`` for anything else."""
    if node is None:
        return None
    if node.type == "string":
        return parsed.text(node)[1:-1]
    if node.type == "literal_type" and node.named_children:
        return string_value(parsed, node.named_children[0])
    if node.type == "template_string" and not any(
        child.type == "template_substitution" for child in node.named_children
    ):
        return parsed.text(node)[1:-1]
    return None


def union_members(parsed: ParsedSource, node: Node) -> List[str]:
    if node.type != "union_type":
        return [parsed.text(node).strip()]
    members: List[str] = []
    for child in node.named_children:
        members.extend(union_members(parsed, child))
    return members


def prop_type(parsed: ParsedSource, node: Optional[Node]) -> Union[str, List[str]]:
    """Literal type text; unions become the list of their member texts."""
    if node is None:
        return "any"
    if node.type == "type_annotation":
        if not node.named_children:
            return "any"
        node = node.named_children[0]
    if node.type == "union_type":
        return union_members(parsed, node)
    return parsed.text(node).strip()


def is_optional_member(node: Node) -> bool:
    return any(child.type == "?" for child in node.children)


def props_from_object_type(parsed: ParsedSource, node: Optional[Node]) -> List[PropDoc]:
    """One prop per property signature of an object type or interface body."""
    if node is None or node.type not in _OBJECT_TYPES:
        return []
    props: List[PropDoc] = []
    for member in node.named_children:
        if member.type != "property_signature":
            continue
        name = member.child_by_field_name("name")
        if name is None:
            continue
        doc = doc_comment_before(parsed, member)
        props.append(
            PropDoc(
                name=string_value(parsed, name) or parsed.text(name),
                type=prop_type(parsed, member.child_by_field_name("type")),
                required=not is_optional_member(member),
                description=doc.description if doc else None,
            )
        )
    return props


def top_level_declarations(parsed: ParsedSource) -> Iterator[Node]:
    for child in parsed.root.named_children:
        if child.type == "export_statement":
            declaration = child.child_by_field_name("declaration")
            if declaration is not None:
                yield declaration
        else:
            yield child


def props_declarations(parsed: ParsedSource) -> Dict[str, Node]:
    """Object shapes of same-file interfaces and type aliases, keyed by name."""
    shapes: Dict[str, Node] = {}
    for node in top_level_declarations(parsed):
        if node.type == "interface_declaration":
            body = node.child_by_field_name("body")
        elif node.type == "type_alias_declaration":
            body = node.child_by_field_name("value")
        else:
            continue
        name = node.child_by_field_name("name")
        if name is not None and body is not None:
            shapes.setdefault(parsed.text(name), body)
    return shapes


def props_from_type_reference(
    parsed: ParsedSource, node: Optional[Node], shapes: Dict[str, Node]
) -> List[PropDoc]:
    """Props for an inline object type or a reference to a same-file shape."""
    if node is None:
        return []
    if node.type == "type_annotation" and node.named_children:
        node = node.named_children[0]
    if node.type in _OBJECT_TYPES:
        return props_from_object_type(parsed, node)
    if node.type in {"type_identifier", "generic_type"}:
        name_node = node.child_by_field_name("name") if node.type == "generic_type" else node
        shape = shapes.get(parsed.text(name_node))
        return props_from_object_type(parsed, shape)
    return []


def tuple_payload(parsed: ParsedSource, node: Optional[Node]) -> Optional[TypeDoc]:
    """Payload text for a ``[value: string]`` tuple; ``None`` when it is empty."""
    if node is None:
        return None
    if node.type == "type_annotation" and node.named_children:
        node = node.named_children[0]
    if node.type != "tuple_type":
        text = type_text(parsed, node)
        return TypeDoc.from_text(text) if text else None
    elements = [parsed.text(child).strip() for child in node.named_children]
    if not elements:
        return None
    return TypeDoc.from_text(", ".join(elements))


__all__ = [
    "PROPS_SUFFIX",
    "is_optional_member",
    "prop_type",
    "props_declarations",
    "props_from_object_type",
    "props_from_type_reference",
    "string_value",
    "top_level_declarations",
    "tuple_payload",
    "union_members",
]
