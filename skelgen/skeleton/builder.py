"""Ancestor skeleton reconstruction for located triggers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from ..models import ImportStatement, Scope, ScopeKind, Trigger


@dataclass
class StubNode:
    """A member-less copy of one scope header."""

    kind: ScopeKind
    keyword: str
    name: str
    modifiers: List[str] = field(default_factory=list)
    type_parameters: List[str] = field(default_factory=list)
    imports: List[ImportStatement] = field(default_factory=list)
    children: List["StubNode"] = field(default_factory=list)

    @property
    def header(self) -> str:
        name = self.name
        if self.type_parameters:
            name = f"{name}<{', '.join(self.type_parameters)}>"
        return " ".join([*self.modifiers, self.keyword, name])

    @classmethod
    def from_scope(cls, scope: Scope) -> "StubNode":
        return cls(
            kind=scope.kind,
            keyword=scope.keyword,
            name=scope.name,
            modifiers=list(scope.modifiers),
            type_parameters=[param.render() for param in scope.type_parameters],
            imports=list(scope.imports) if scope.kind is ScopeKind.NAMESPACE else [],
        )


class SkeletonBuilder:
    """Builds one stub forest, sharing stubs between triggers with common ancestors."""

    def build(self, triggers: Iterable[Trigger]) -> List[StubNode]:
        forest: List[StubNode] = []
        stubs: Dict[int, StubNode] = {}
        for trigger in triggers:
            path = list(trigger.chain)
            if isinstance(trigger.node, Scope):
                path.append(trigger.node)
            siblings = forest
            for scope in path:
                stub = stubs.get(id(scope))
                if stub is None:
                    stub = StubNode.from_scope(scope)
                    stubs[id(scope)] = stub
                    siblings.append(stub)
                siblings = stub.children
        return forest


def build_skeleton(triggers: Iterable[Trigger]) -> List[StubNode]:
    """Return the merged stub forest for ``triggers``."""
    return SkeletonBuilder().build(triggers)


__all__ = ["SkeletonBuilder", "StubNode", "build_skeleton"]
