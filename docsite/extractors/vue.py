"""Composition-style (template + script) component extractor."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from tree_sitter import Node

from ..errors import ExtractionError
from ..logging import get_logger
from ..models import ComponentDescription, EventDoc, PropDoc, SlotDoc, SourceLocation, TypeDoc
from .props import (
    prop_type,
    props_declarations,
    props_from_type_reference,
    string_value,
    tuple_payload,
)
from .syntax import ParsedSource, parse_doc_comment, parse_source, walk

_BLOCK_OPEN = re.compile(r"<(template|script|style)\b([^>]*)>", re.IGNORECASE)
_TEMPLATE_TAG = re.compile(r"<(/?)template\b[^>]*?(/?)>", re.IGNORECASE)
_HTML_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_LANG_ATTR = re.compile(r"""\blang\s*=\s*["']([\w-]+)["']""")
_SLOT_TAG = re.compile(r"<slot(?=[\s/>])((?:[^>\"']|\"[^\"]*\"|'[^']*')*)>", re.IGNORECASE)
_ATTRIBUTE = re.compile(r"""([^\s=/]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+)))?""")
_TEMPLATE_EMIT = re.compile(r"""\$emit\(\s*['"]([\w:.-]+)['"]""")

_EMIT_FUNCTIONS = {"emit", "$emit"}


@dataclass
class SfcBlock:
    kind: str
    attrs: str
    content: str


@dataclass
class SfcSections:
    template: Optional[SfcBlock] = None
    scripts: List[SfcBlock] = field(default_factory=list)
    styles: List[SfcBlock] = field(default_factory=list)


def split_sections(text: str, path: str) -> SfcSections:
    """Split a single-file component into its top-level blocks."""
    masked = _HTML_COMMENT.sub(lambda match: " " * len(match.group(0)), text)
    sections = SfcSections()
    position = 0
    found = False
    while True:
        match = _BLOCK_OPEN.search(masked, position)
        if match is None:
            break
        kind = match.group(1).lower()
        attrs = match.group(2)
        if attrs.rstrip().endswith("/"):
            position = match.end()
            continue
        start = match.end()
        if kind == "template":
            end, close_end = _matching_template_close(masked, start, path)
        else:
            close = re.compile(rf"</{kind}\s*>", re.IGNORECASE).search(masked, start)
            if close is None:
                raise ExtractionError(path, f"unterminated <{kind}> block")
            end, close_end = close.start(), close.end()
        block = SfcBlock(kind=kind, attrs=attrs, content=text[start:end])
        if kind == "template":
            if sections.template is None:
                sections.template = block
        elif kind == "script":
            sections.scripts.append(block)
        else:
            sections.styles.append(block)
        found = True
        position = close_end
    if not found:
        raise ExtractionError(path, "no <template>, <script> or <style> block found")
    return sections


def _matching_template_close(text: str, start: int, path: str) -> tuple[int, int]:
    depth = 1
    for tag in _TEMPLATE_TAG.finditer(text, start):
        closing, self_closing = tag.group(1), tag.group(2)
        if self_closing:
            continue
        depth += -1 if closing else 1
        if depth == 0:
            return tag.start(), tag.end()
    raise ExtractionError(path, "unterminated <template> block")


class VueComponentExtractor:
    """Extracts props, events and slots from ``.vue`` single-file components."""

    suffixes = (".vue",)

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("extractors.vue")

    def supports(self, path: Path) -> bool:
        return path.name.lower().endswith(self.suffixes)

    def extract_file(self, path: Path, *, display_path: str | None = None) -> ComponentDescription:
        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise ExtractionError(str(path), f"unreadable source: {exc}") from exc
        return self.extract_source(text, display_path or str(path))

    def extract_source(self, text: str, path: str) -> ComponentDescription:
        sections = split_sections(text, path)
        scripts = [self._parse_script(block, path) for block in sections.scripts]

        props: List[PropDoc] = []
        events: List[EventDoc] = []
        defaults: Dict[str, str] = {}
        name: Optional[str] = None
        description: Optional[str] = None

        for parsed in scripts:
            shapes = props_declarations(parsed)
            options = _component_options(parsed)
            name = name or _options_name(parsed, options)
            description = description or _first_doc_description(parsed)
            props.extend(self._typed_props(parsed, shapes))
            props.extend(self._runtime_props(parsed, options))
            events.extend(self._declared_events(parsed, options))
            defaults.update(_with_defaults(parsed))

        for parsed in scripts:
            events.extend(EventDoc(name=event) for event in _emit_call_sites(parsed))
        if sections.template is not None:
            events.extend(
                EventDoc(name=event) for event in _TEMPLATE_EMIT.findall(sections.template.content)
            )

        for prop in props:
            if prop.default is None and prop.name in defaults:
                prop.default = defaults[prop.name]

        slots = _slots(sections.template.content) if sections.template is not None else []
        component = ComponentDescription(
            name=name or Path(path).stem,
            source=SourceLocation(file=path, line=1, column=1),
            description=description,
            props=props,
            events=events,
            slots=slots,
        )
        self.logger.debug(
            "Extracted component %s (%d props, %d events, %d slots)",
            component.name,
            len(component.props),
            len(component.events),
            len(component.slots),
        )
        return component

    @staticmethod
    def _parse_script(block: SfcBlock, path: str) -> ParsedSource:
        lang_match = _LANG_ATTR.search(block.attrs)
        lang = lang_match.group(1).lower() if lang_match else "js"
        dialect = "tsx" if lang in {"tsx", "jsx"} else "typescript"
        return parse_source(block.content, path, dialect)

    # ------------------------------------------------------------------
    # Props

    @staticmethod
    def _typed_props(parsed: ParsedSource, shapes: Dict[str, Node]) -> List[PropDoc]:
        props: List[PropDoc] = []
        for call in _calls(parsed, "defineProps"):
            type_arguments = call.child_by_field_name("type_arguments")
            if type_arguments is None or not type_arguments.named_children:
                continue
            props.extend(props_from_type_reference(parsed, type_arguments.named_children[0], shapes))
        return props

    def _runtime_props(self, parsed: ParsedSource, options: List[Node]) -> List[PropDoc]:
        props: List[PropDoc] = []
        for call in _calls(parsed, "defineProps"):
            argument = _first_argument(call)
            if argument is not None:
                props.extend(self._props_from_value(parsed, argument))
        for value in _option_values(parsed, options, "props"):
            props.extend(self._props_from_value(parsed, value))
        return props

    @staticmethod
    def _props_from_value(parsed: ParsedSource, value: Node) -> List[PropDoc]:
        if value.type == "array":
            names = [string_value(parsed, item) for item in value.named_children]
            return [PropDoc(name=name, type="any") for name in names if name]
        if value.type != "object":
            return []
        props: List[PropDoc] = []
        for pair in value.named_children:
            if pair.type != "pair":
                continue
            name = _key_name(parsed, pair.child_by_field_name("key"))
            definition = pair.child_by_field_name("value")
            if not name or definition is None:
                continue
            if definition.type == "object":
                fields = _object_fields(parsed, definition)
                type_node = fields.get("type")
                required = fields.get("required")
                default = fields.get("default")
                props.append(
                    PropDoc(
                        name=name,
                        type=_constructor_type(parsed, type_node) if type_node is not None else "any",
                        required=required is not None and parsed.text(required) == "true",
                        default=parsed.text(default).strip() if default is not None else None,
                    )
                )
            else:
                props.append(PropDoc(name=name, type=_constructor_type(parsed, definition)))
        return props

    # ------------------------------------------------------------------
    # Events

    def _declared_events(self, parsed: ParsedSource, options: List[Node]) -> List[EventDoc]:
        events: List[EventDoc] = []
        for call in _calls(parsed, "defineEmits"):
            type_arguments = call.child_by_field_name("type_arguments")
            if type_arguments is not None and type_arguments.named_children:
                events.extend(self._typed_events(parsed, type_arguments.named_children[0]))
            argument = _first_argument(call)
            if argument is not None:
                events.extend(_events_from_value(parsed, argument))
        for value in _option_values(parsed, options, "emits"):
            events.extend(_events_from_value(parsed, value))
        return events

    @staticmethod
    def _typed_events(parsed: ParsedSource, node: Node) -> List[EventDoc]:
        if node.type != "object_type":
            return []
        events: List[EventDoc] = []
        for member in node.named_children:
            if member.type == "property_signature":
                name_node = member.child_by_field_name("name")
                if name_node is None:
                    continue
                events.append(
                    EventDoc(
                        name=string_value(parsed, name_node) or parsed.text(name_node),
                        payload=tuple_payload(parsed, member.child_by_field_name("type")),
                    )
                )
            elif member.type == "call_signature":
                parameters = member.child_by_field_name("parameters")
                params = [p for p in parameters.named_children] if parameters is not None else []
                if not params:
                    continue
                first_type = params[0].child_by_field_name("type")
                event_name = string_value(
                    parsed, first_type.named_children[0] if first_type and first_type.named_children else None
                )
                if not event_name:
                    continue
                rest = ", ".join(parsed.text(param).strip() for param in params[1:])
                events.append(EventDoc(name=event_name, payload=TypeDoc.from_text(rest) if rest else None))
        return events


def _events_from_value(parsed: ParsedSource, value: Node) -> List[EventDoc]:
    if value.type == "array":
        names = [string_value(parsed, item) for item in value.named_children]
        return [EventDoc(name=name) for name in names if name]
    if value.type == "object":
        events = []
        for pair in value.named_children:
            if pair.type in {"pair", "method_definition"}:
                key = pair.child_by_field_name("key") or pair.child_by_field_name("name")
                name = _key_name(parsed, key)
                if name:
                    events.append(EventDoc(name=name))
        return events
    return []


def _emit_call_sites(parsed: ParsedSource) -> List[str]:
    names: List[str] = []
    for node in walk(parsed.root):
        if node.type != "call_expression":
            continue
        function = node.child_by_field_name("function")
        if function is None:
            continue
        if function.type == "identifier":
            callee = parsed.text(function)
        elif function.type == "member_expression":
            callee = parsed.text(function.child_by_field_name("property"))
        else:
            continue
        if callee not in _EMIT_FUNCTIONS:
            continue
        name = string_value(parsed, _first_argument(node))
        if name:
            names.append(name)
    return names


# ----------------------------------------------------------------------
# Script helpers


def _calls(parsed: ParsedSource, function_name: str) -> List[Node]:
    calls = []
    for node in walk(parsed.root):
        if node.type != "call_expression":
            continue
        function = node.child_by_field_name("function")
        if function is not None and parsed.text(function) == function_name:
            calls.append(node)
    return calls


def _first_argument(call: Node) -> Optional[Node]:
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return None
    for child in arguments.named_children:
        if child.type != "comment":
            return child
    return None


def _component_options(parsed: ParsedSource) -> List[Node]:
    """Options objects: ``export default {...}`` and ``defineComponent({...})``."""
    options: List[Node] = []
    for child in parsed.root.named_children:
        if child.type == "export_statement":
            value = child.child_by_field_name("value")
            if value is not None and value.type == "object":
                options.append(value)
    for name in ("defineComponent", "defineOptions"):
        for call in _calls(parsed, name):
            argument = _first_argument(call)
            if argument is not None and argument.type == "object":
                options.append(argument)
    return options


def _option_values(parsed: ParsedSource, options: List[Node], key: str) -> List[Node]:
    values = []
    for obj in options:
        value = _object_fields(parsed, obj).get(key)
        if value is not None:
            values.append(value)
    return values


def _options_name(parsed: ParsedSource, options: List[Node]) -> Optional[str]:
    for value in _option_values(parsed, options, "name"):
        name = string_value(parsed, value)
        if name:
            return name
    return None


def _with_defaults(parsed: ParsedSource) -> Dict[str, str]:
    defaults: Dict[str, str] = {}
    for call in _calls(parsed, "withDefaults"):
        arguments = call.child_by_field_name("arguments")
        values = [child for child in arguments.named_children if child.type != "comment"] if arguments else []
        if len(values) < 2 or values[1].type != "object":
            continue
        for name, value in _object_fields(parsed, values[1]).items():
            defaults.setdefault(name, parsed.text(value).strip())
    return defaults


def _object_fields(parsed: ParsedSource, obj: Node) -> Dict[str, Node]:
    fields: Dict[str, Node] = {}
    for pair in obj.named_children:
        if pair.type != "pair":
            continue
        name = _key_name(parsed, pair.child_by_field_name("key"))
        value = pair.child_by_field_name("value")
        if name and value is not None:
            fields.setdefault(name, value)
    return fields


def _key_name(parsed: ParsedSource, key: Optional[Node]) -> Optional[str]:
    if key is None:
        return None
    return string_value(parsed, key) or parsed.text(key)


def _constructor_type(parsed: ParsedSource, node: Node) -> "str | List[str]":
    """``String`` stays a name; ``[String, Number]`` becomes a list of names."""
    if node.type == "array":
        return [parsed.text(item).strip() for item in node.named_children]
    if node.type == "as_expression":
        # `type: Object as PropType<Foo>` documents the asserted type.
        asserted = node.named_children[-1] if node.named_children else None
        if asserted is not None and asserted.type == "generic_type":
            arguments = asserted.child_by_field_name("type_arguments")
            if arguments is not None and arguments.named_children:
                return prop_type(parsed, arguments.named_children[0])
    return parsed.text(node).strip()


def _first_doc_description(parsed: ParsedSource) -> Optional[str]:
    for node in walk(parsed.root):
        if node.type == "comment":
            raw = parsed.text(node)
            if raw.startswith("/**"):
                return parse_doc_comment(raw).description
    return None


# ----------------------------------------------------------------------
# Template helpers


def _slots(template: str) -> List[SlotDoc]:
    slots: List[SlotDoc] = []
    for match in _SLOT_TAG.finditer(_HTML_COMMENT.sub("", template)):
        name = "default"
        scoped = False
        for attribute in _ATTRIBUTE.finditer(match.group(1).rstrip("/")):
            key = attribute.group(1)
            value = next((group for group in attribute.group(2, 3, 4) if group is not None), None)
            if key == "name" and value is not None:
                name = value
            elif key.startswith(":") or key.startswith("v-bind"):
                scoped = True
        slots.append(SlotDoc(name=name, scoped=scoped))
    return slots


__all__ = ["SfcBlock", "SfcSections", "VueComponentExtractor", "split_sections"]
