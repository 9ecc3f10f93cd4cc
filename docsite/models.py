"""Core data models shared across docsite components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

DocKind = Literal["prose", "api", "component"]
AnnotationKind = Literal["function", "class", "interface", "type", "variable", "enum"]

TagValue = Union[str, List[str]]


@dataclass
class SourceLocation:
    """1-based position of the first token of a declaration."""

    file: str
    line: int
    column: int = 1


@dataclass
class TypeDoc:
    """Literal source text of a type expression."""

    name: str
    type: str
    is_generic: bool = False

    @classmethod
    def from_text(cls, text: str) -> "TypeDoc":
        text = text.strip()
        return cls(name=text, type=text, is_generic="<" in text)


@dataclass
class ParameterDoc:
    """One parameter of a documented function or method."""

    name: str
    type: TypeDoc
    description: Optional[str] = None
    optional: bool = False
    default_value: Optional[str] = None


@dataclass
class AnnotationNode:
    """Documentation extracted for one program declaration."""

    name: str
    kind: AnnotationKind
    source: SourceLocation
    description: Optional[str] = None
    signature: Optional[str] = None
    parameters: List[ParameterDoc] = field(default_factory=list)
    returns: Optional[TypeDoc] = None
    examples: List[str] = field(default_factory=list)
    tags: Dict[str, TagValue] = field(default_factory=dict)
    children: List["AnnotationNode"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PropDoc:
    name: str
    type: Union[str, List[str]]
    required: bool = False
    default: Optional[str] = None
    description: Optional[str] = None

    @property
    def type_text(self) -> str:
        if isinstance(self.type, list):
            return " | ".join(self.type)
        return self.type


@dataclass
class EventDoc:
    name: str
    payload: Optional[TypeDoc] = None
    description: Optional[str] = None


@dataclass
class SlotDoc:
    name: str
    scoped: bool = False
    description: Optional[str] = None


@dataclass
class ComponentDescription:
    """Normalized props/events/slots summary shared by both component styles."""

    name: str
    source: SourceLocation
    description: Optional[str] = None
    props: List[PropDoc] = field(default_factory=list)
    events: List[EventDoc] = field(default_factory=list)
    slots: List[SlotDoc] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.props = dedupe_by_name(self.props)
        self.events = dedupe_by_name(self.events)
        self.slots = dedupe_by_name(self.slots)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DocNode:
    """Canonical output unit; ``path`` is unique within a build."""

    path: str
    title: str
    content: str
    kind: DocKind
    metadata: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Heading:
    level: int
    text: str
    slug: str


@dataclass
class SearchIndexItem:
    id: str
    title: str
    content: str
    path: str
    headers: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def dedupe_by_name(items: List[Any]) -> List[Any]:
    """Drop later entries whose ``name`` was already seen."""
    seen: set[str] = set()
    result = []
    for item in items:
        if item.name in seen:
            continue
        seen.add(item.name)
        result.append(item)
    return result


__all__ = [
    "AnnotationKind",
    "AnnotationNode",
    "ComponentDescription",
    "DocKind",
    "DocNode",
    "EventDoc",
    "Heading",
    "ParameterDoc",
    "PropDoc",
    "SearchIndexItem",
    "SlotDoc",
    "SourceLocation",
    "TagValue",
    "TypeDoc",
    "dedupe_by_name",
]
