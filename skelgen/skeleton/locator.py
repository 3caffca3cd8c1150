"""Trigger discovery over the parsed scope tree."""

from __future__ import annotations

from typing import List, Tuple

from ..models import Declaration, Scope, Trigger


def locate_triggers(root: Scope) -> List[Trigger]:
    """Return every marked scope or declaration in document order."""
    triggers: List[Trigger] = []
    _walk(root, (), triggers)
    return triggers


def _walk(scope: Scope, chain: Tuple[Scope, ...], triggers: List[Trigger]) -> None:
    for member in scope.members:
        if isinstance(member, Scope):
            if member.is_trigger:
                triggers.append(Trigger(node=member, chain=chain))
            _walk(member, chain + (member,), triggers)
        elif isinstance(member, Declaration):
            if member.is_trigger:
                triggers.append(Trigger(node=member, chain=chain))
        else:  # pragma: no cover - closed set of node types
            raise TypeError(f"Unexpected node in scope tree: {member!r}")


__all__ = ["locate_triggers"]
