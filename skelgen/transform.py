"""End-to-end document transform: source text in, skeleton text out."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional

from .logging import get_logger
from .models import SourceDocument, Trigger
from .skeleton import DEFAULT_INDENT, SkeletonEmitter, build_skeleton, locate_triggers, merge_imports
from .syntax import DirectiveResolver, parse_source

logger = get_logger("transform")


@dataclass(frozen=True)
class TransformOptions:
    """Marker names, conditional symbols and output indentation."""

    markers: FrozenSet[str] = frozenset()
    symbols: FrozenSet[str] = frozenset()
    indent: int = DEFAULT_INDENT

    @classmethod
    def create(
        cls,
        markers: Iterable[str] = (),
        symbols: Iterable[str] = (),
        indent: int = DEFAULT_INDENT,
    ) -> "TransformOptions":
        return cls(markers=frozenset(markers), symbols=frozenset(symbols), indent=indent)


@dataclass
class TransformResult:
    """Output text plus the triggers a provider stage fills in."""

    text: str
    triggers: List[Trigger] = field(default_factory=list)
    document: Optional[SourceDocument] = None


def parse_document(text: str, options: TransformOptions) -> SourceDocument:
    """Resolve directives and parse the active part of ``text``."""
    resolved = DirectiveResolver(options.symbols).resolve(text)
    root = parse_source(resolved.text, options.markers)
    return SourceDocument(
        text=text,
        active_text=resolved.text,
        spans=resolved.spans,
        root=root,
    )


class DocumentTransformer:
    """Applies one option set to any number of documents."""

    def __init__(self, options: TransformOptions | None = None) -> None:
        self.options = options or TransformOptions()
        self._emitter = SkeletonEmitter(self.options.indent)

    def transform(self, text: str) -> TransformResult:
        document = parse_document(text, self.options)
        triggers = locate_triggers(document.root)
        forest = build_skeleton(triggers)
        imports = merge_imports(document.root)
        logger.debug(
            "Found %d trigger(s), %d top-level stub(s), %d import(s)",
            len(triggers),
            len(forest),
            len(imports),
        )
        return TransformResult(
            text=self._emitter.emit(imports, forest),
            triggers=triggers,
            document=document,
        )


def transform(text: str, options: TransformOptions | None = None) -> TransformResult:
    """Transform ``text`` into its import-plus-skeleton form."""
    return DocumentTransformer(options).transform(text)


__all__ = [
    "DocumentTransformer",
    "TransformOptions",
    "TransformResult",
    "parse_document",
    "transform",
]
