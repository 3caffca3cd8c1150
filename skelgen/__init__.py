"""Skeleton generation for augmenting partial declarations."""

from .errors import ParseError, SkelgenError, UnterminatedDirectiveError
from .transform import DocumentTransformer, TransformOptions, TransformResult, parse_document, transform

__all__ = [
    "DocumentTransformer",
    "ParseError",
    "SkelgenError",
    "TransformOptions",
    "TransformResult",
    "UnterminatedDirectiveError",
    "parse_document",
    "transform",
]
