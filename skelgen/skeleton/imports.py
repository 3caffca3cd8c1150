"""Top-level import carry-over."""

from __future__ import annotations

from typing import List

from ..models import ImportStatement, Scope


def merge_imports(root: Scope) -> List[ImportStatement]:
    """Return the document's top-level imports in source order.

    Duplicates are kept; inactive branches and comments never reach the
    parsed tree, so nothing else needs filtering here.
    """
    return list(root.imports)


__all__ = ["merge_imports"]
