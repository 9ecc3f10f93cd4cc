"""Function/class + JSX component extractor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from tree_sitter import Node

from ..errors import ExtractionError
from ..logging import get_logger
from ..models import ComponentDescription, PropDoc
from .props import PROPS_SUFFIX, props_declarations, props_from_object_type, props_from_type_reference
from .syntax import DocComment, ParsedSource, doc_comment_before, parse_source

KNOWN_BASE_CLASSES = {"Component", "PureComponent", "React.Component", "React.PureComponent"}
_FUNCTION_VALUES = {"arrow_function", "function_expression", "function"}
_WRAPPERS = {"memo", "forwardRef", "React.memo", "React.forwardRef"}


@dataclass
class _Candidate:
    name: str
    outer: Node
    function: Optional[Node] = None
    props_type: Optional[Node] = None


class ReactComponentExtractor:
    """Extracts props from ``.jsx``/``.tsx`` function and class components."""

    suffixes = (".jsx", ".tsx")

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("extractors.react")

    def supports(self, path: Path) -> bool:
        name = path.name.lower()
        if ".test." in name or ".spec." in name:
            return False
        return name.endswith(self.suffixes)

    def extract_file(self, path: Path, *, display_path: str | None = None) -> ComponentDescription:
        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise ExtractionError(str(path), f"unreadable source: {exc}") from exc
        return self.extract_source(text, display_path or str(path))

    def extract_source(self, text: str, path: str) -> ComponentDescription:
        parsed = parse_source(text, path, "tsx")
        stem = Path(path).stem
        candidates = self._candidates(parsed)
        chosen = next((c for c in candidates if c.name == stem), candidates[0] if candidates else None)

        props: List[PropDoc] = []
        description: Optional[str] = None
        location = parsed.location(parsed.root)
        shapes = props_declarations(parsed)
        if chosen is not None:
            doc: Optional[DocComment] = doc_comment_before(parsed, chosen.outer)
            description = doc.description if doc else None
            location = parsed.location(chosen.outer)
            props.extend(props_from_type_reference(parsed, chosen.props_type, shapes))
            if chosen.function is not None:
                props.extend(props_from_type_reference(parsed, _first_parameter_type(chosen.function), shapes))
        for shape_name, shape in shapes.items():
            if shape_name.endswith(PROPS_SUFFIX):
                props.extend(props_from_object_type(parsed, shape))

        if chosen is not None and chosen.function is not None:
            defaults = _destructured_defaults(parsed, chosen.function)
            for prop in props:
                if prop.default is None and prop.name in defaults:
                    prop.default = defaults[prop.name]

        component = ComponentDescription(
            name=chosen.name if chosen is not None else stem,
            source=location,
            description=description,
            props=props,
        )
        self.logger.debug("Extracted component %s (%d props)", component.name, len(component.props))
        return component

    def _candidates(self, parsed: ParsedSource) -> List[_Candidate]:
        candidates: List[_Candidate] = []
        for outer in parsed.root.named_children:
            node = outer
            if outer.type == "export_statement":
                node = outer.child_by_field_name("declaration") or outer
            if node.type == "function_declaration":
                name = parsed.text(node.child_by_field_name("name"))
                if _is_component_name(name):
                    candidates.append(_Candidate(name=name, outer=outer, function=node))
            elif node.type in {"class_declaration", "abstract_class_declaration"}:
                candidate = self._class_candidate(parsed, node, outer)
                if candidate is not None:
                    candidates.append(candidate)
            elif node.type in {"lexical_declaration", "variable_declaration"}:
                for declarator in node.named_children:
                    if declarator.type != "variable_declarator":
                        continue
                    candidate = self._variable_candidate(parsed, declarator, outer)
                    if candidate is not None:
                        candidates.append(candidate)
        return candidates

    @staticmethod
    def _class_candidate(parsed: ParsedSource, node: Node, outer: Node) -> Optional[_Candidate]:
        name_node = node.child_by_field_name("name")
        if name_node is None or not _is_component_name(parsed.text(name_node)):
            return None
        for heritage in node.named_children:
            if heritage.type != "class_heritage":
                continue
            for clause in heritage.named_children:
                if clause.type != "extends_clause":
                    continue
                base = clause.child_by_field_name("value")
                if base is None or parsed.text(base).split("<", 1)[0].strip() not in KNOWN_BASE_CLASSES:
                    continue
                # Some grammar versions fold `Base<Props>` into an instantiation expression.
                type_arguments = clause.child_by_field_name("type_arguments") or _child_of_type(
                    base, "type_arguments"
                )
                props_type = (
                    type_arguments.named_children[0]
                    if type_arguments is not None and type_arguments.named_children
                    else None
                )
                return _Candidate(name=parsed.text(name_node), outer=outer, props_type=props_type)
        return None

    @staticmethod
    def _variable_candidate(parsed: ParsedSource, declarator: Node, outer: Node) -> Optional[_Candidate]:
        name_node = declarator.child_by_field_name("name")
        value = declarator.child_by_field_name("value")
        if name_node is None or value is None or name_node.type != "identifier":
            return None
        name = parsed.text(name_node)
        if not _is_component_name(name):
            return None
        function = _unwrap_component_value(parsed, value)
        if function is None:
            return None
        # `const Button: FC<ButtonProps> = ...` declares props on the variable type.
        props_type = None
        annotation = declarator.child_by_field_name("type")
        if annotation is not None and annotation.named_children:
            declared = annotation.named_children[0]
            if declared.type == "generic_type":
                type_arguments = declared.child_by_field_name("type_arguments")
                if type_arguments is not None and type_arguments.named_children:
                    props_type = type_arguments.named_children[0]
        return _Candidate(name=name, outer=outer, function=function, props_type=props_type)


def _is_component_name(name: str) -> bool:
    return bool(name) and name[0].isupper()


def _child_of_type(node: Node, node_type: str) -> Optional[Node]:
    for child in node.named_children:
        if child.type == node_type:
            return child
    return None


def _unwrap_component_value(parsed: ParsedSource, value: Node) -> Optional[Node]:
    if value.type in _FUNCTION_VALUES:
        return value
    if value.type == "call_expression":
        function = value.child_by_field_name("function")
        if function is None or parsed.text(function) not in _WRAPPERS:
            return None
        arguments = value.child_by_field_name("arguments")
        for argument in arguments.named_children if arguments is not None else []:
            unwrapped = _unwrap_component_value(parsed, argument)
            if unwrapped is not None:
                return unwrapped
    return None


def _first_parameter(function: Node) -> Optional[Node]:
    parameters = function.child_by_field_name("parameters")
    if parameters is None:
        return None
    for child in parameters.named_children:
        if child.type in {"required_parameter", "optional_parameter"}:
            return child
    return None


def _first_parameter_type(function: Node) -> Optional[Node]:
    parameter = _first_parameter(function)
    return parameter.child_by_field_name("type") if parameter is not None else None


def _destructured_defaults(parsed: ParsedSource, function: Node) -> Dict[str, str]:
    parameter = _first_parameter(function)
    pattern = parameter.child_by_field_name("pattern") if parameter is not None else None
    defaults: Dict[str, str] = {}
    if pattern is None or pattern.type != "object_pattern":
        return defaults
    for entry in pattern.named_children:
        if entry.type == "object_assignment_pattern":
            left = entry.child_by_field_name("left")
            right = entry.child_by_field_name("right")
            if left is not None and right is not None:
                defaults[parsed.text(left)] = parsed.text(right).strip()
        elif entry.type == "pair_pattern":
            key = entry.child_by_field_name("key")
            value = entry.child_by_field_name("value")
            if key is not None and value is not None and value.type == "assignment_pattern":
                right = value.child_by_field_name("right")
                if right is not None:
                    defaults[parsed.text(key)] = parsed.text(right).strip()
    return defaults


__all__ = ["KNOWN_BASE_CLASSES", "ReactComponentExtractor"]
