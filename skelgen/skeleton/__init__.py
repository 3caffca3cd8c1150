"""Trigger location, skeleton reconstruction and emission."""

from .builder import SkeletonBuilder, StubNode, build_skeleton
from .emitter import DEFAULT_INDENT, SkeletonEmitter, emit
from .imports import merge_imports
from .locator import locate_triggers

__all__ = [
    "DEFAULT_INDENT",
    "SkeletonBuilder",
    "SkeletonEmitter",
    "StubNode",
    "build_skeleton",
    "emit",
    "locate_triggers",
    "merge_imports",
]
