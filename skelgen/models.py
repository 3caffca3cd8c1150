"""Core data models shared across skelgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class ScopeKind(str, Enum):
    """Kinds of scopes that can appear on an ancestor chain."""

    COMPILATION_UNIT = "compilation_unit"
    NAMESPACE = "namespace"
    CLASS = "class"
    STRUCT = "struct"
    INTERFACE = "interface"
    ENUM = "enum"


@dataclass(frozen=True)
class Marker:
    """An attribute attached to a declaration or scope."""

    name: str
    arguments: str = ""
    target: Optional[str] = None
    recognized: bool = False


@dataclass(frozen=True)
class TypeParameter:
    """Generic parameter name, with its variance annotation when declared."""

    name: str
    variance: Optional[str] = None

    def render(self) -> str:
        return f"{self.variance} {self.name}" if self.variance else self.name


@dataclass(frozen=True)
class ImportStatement:
    """A using directive or extern alias, compared by its text."""

    text: str
    line: int = field(default=0, compare=False)


@dataclass
class Declaration:
    """A leaf member. Only its markers matter to the transform."""

    name: str
    markers: List[Marker] = field(default_factory=list)
    line: int = 0

    @property
    def is_trigger(self) -> bool:
        return any(marker.recognized for marker in self.markers)


@dataclass
class Scope:
    """A namespace, type declaration or the document root."""

    kind: ScopeKind
    name: str
    keyword: str = ""
    modifiers: List[str] = field(default_factory=list)
    type_parameters: List[TypeParameter] = field(default_factory=list)
    markers: List[Marker] = field(default_factory=list)
    imports: List[ImportStatement] = field(default_factory=list)
    members: List[Union["Scope", Declaration]] = field(default_factory=list)
    line: int = 0

    @property
    def is_trigger(self) -> bool:
        return any(marker.recognized for marker in self.markers)

    @property
    def children(self) -> List["Scope"]:
        return [member for member in self.members if isinstance(member, Scope)]

    @property
    def declarations(self) -> List[Declaration]:
        return [member for member in self.members if isinstance(member, Declaration)]

    @property
    def display_name(self) -> str:
        if not self.type_parameters:
            return self.name
        params = ", ".join(param.name for param in self.type_parameters)
        return f"{self.name}<{params}>"


Node = Union[Scope, Declaration]


@dataclass(frozen=True)
class DirectiveSpan:
    """Line range governed by a conditional branch or a fold region.

    ``start`` and ``end`` are the 1-based lines of the directives that open
    and close the span. Fold spans are always active.
    """

    kind: str
    start: int
    end: int
    active: bool
    condition: str = ""


@dataclass
class SourceDocument:
    """Parsed view of one source text. Built once per transform."""

    text: str
    active_text: str
    spans: List[DirectiveSpan]
    root: Scope

    @property
    def imports(self) -> List[ImportStatement]:
        return list(self.root.imports)

    @property
    def conditional_spans(self) -> List[DirectiveSpan]:
        return [span for span in self.spans if span.kind == "conditional"]

    @property
    def fold_spans(self) -> List[DirectiveSpan]:
        return [span for span in self.spans if span.kind == "region"]


@dataclass(eq=False)
class Trigger:
    """A marked node together with its ancestor scopes, outermost first.

    Triggers compare and hash by identity.
    """

    node: Node
    chain: Tuple[Scope, ...]

    @property
    def markers(self) -> List[Marker]:
        return [marker for marker in self.node.markers if marker.recognized]

    @property
    def ancestry(self) -> List[Tuple[str, str]]:
        return [(scope.kind.value, scope.display_name) for scope in self.chain]

    @property
    def qualified_name(self) -> str:
        parts = [scope.display_name for scope in self.chain]
        node_name = self.node.display_name if isinstance(self.node, Scope) else self.node.name
        parts.append(node_name)
        return ".".join(part for part in parts if part)

    def to_dict(self) -> Dict[str, Any]:
        node_kind = self.node.kind.value if isinstance(self.node, Scope) else "member"
        return {
            "name": self.qualified_name,
            "kind": node_kind,
            "line": self.node.line,
            "ancestors": [{"kind": kind, "name": name} for kind, name in self.ancestry],
            "markers": [
                {"name": marker.name, "arguments": marker.arguments}
                for marker in self.markers
            ],
        }
