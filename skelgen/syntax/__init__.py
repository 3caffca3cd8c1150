"""Directive resolution and tree-sitter structural parsing."""

from .directives import ConditionEvaluator, DirectiveResolver, ResolvedText, resolve_directives
from .parser import DeclarationParser, MarkerMatcher, normalize_marker_name, parse_source

__all__ = [
    "ConditionEvaluator",
    "DeclarationParser",
    "DirectiveResolver",
    "MarkerMatcher",
    "ResolvedText",
    "normalize_marker_name",
    "parse_source",
    "resolve_directives",
]
