"""Exceptions raised while transforming a document."""

from __future__ import annotations

from typing import Any


class SkelgenError(RuntimeError):
    """Base class for unrecoverable transform failures."""


class ParseError(SkelgenError):
    """Raised when the document's structural syntax is malformed."""

    def __init__(self, message: str, line: int = 0, column: int = 0) -> None:
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"{message} (line {line}, column {column})")

    @classmethod
    def at(cls, message: str, position: Any) -> "ParseError":
        """Build an error at anything carrying 1-based ``line``/``column``."""
        if position is None:
            return cls(message)
        return cls(message, position.line, position.column)


class UnterminatedDirectiveError(ParseError):
    """Raised when an #if or #region block is never closed."""


__all__ = ["SkelgenError", "ParseError", "UnterminatedDirectiveError"]
