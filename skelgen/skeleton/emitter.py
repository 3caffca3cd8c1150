"""Serialization of imports and stub forests to source text."""

from __future__ import annotations

from typing import List, Sequence

from ..models import ImportStatement
from .builder import StubNode

DEFAULT_INDENT = 4


class SkeletonEmitter:
    """Renders stubs with braces on their own lines."""

    def __init__(self, indent: int = DEFAULT_INDENT) -> None:
        if indent < 0:
            raise ValueError("indent must not be negative")
        self.indent = indent

    def emit(self, imports: Sequence[ImportStatement], forest: Sequence[StubNode]) -> str:
        lines = [statement.text for statement in imports]
        if forest:
            if lines:
                lines.append("")
            lines.extend(self._render_forest(forest, 0))
        return "\n".join(lines)

    def _render_forest(self, stubs: Sequence[StubNode], depth: int) -> List[str]:
        lines: List[str] = []
        for position, stub in enumerate(stubs):
            if position:
                lines.append("")
            lines.extend(self._render_stub(stub, depth))
        return lines

    def _render_stub(self, stub: StubNode, depth: int) -> List[str]:
        pad = " " * (self.indent * depth)
        inner = " " * (self.indent * (depth + 1))
        lines = [f"{pad}{stub.header}", f"{pad}{{"]
        lines.extend(f"{inner}{statement.text}" for statement in stub.imports)
        if stub.imports and stub.children:
            lines.append("")
        lines.extend(self._render_forest(stub.children, depth + 1))
        lines.append(f"{pad}}}")
        return lines


def emit(
    imports: Sequence[ImportStatement],
    forest: Sequence[StubNode],
    *,
    indent: int = DEFAULT_INDENT,
) -> str:
    """Return the output document for ``imports`` followed by ``forest``."""
    return SkeletonEmitter(indent).emit(imports, forest)


__all__ = ["DEFAULT_INDENT", "SkeletonEmitter", "emit"]
