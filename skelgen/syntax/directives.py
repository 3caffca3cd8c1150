"""Preprocessor directive resolution over raw source lines.

Conditional branches (``#if``/``#elif``/``#else``/``#endif``) are evaluated
against a symbol environment. Directive lines and the lines of unsatisfied
branches are blanked in place: every character except the line break becomes
a space, so offsets, line numbers and columns in the active text match the
input. Disabled text is never tokenized. Fold regions
(``#region``/``#endregion``) are recorded but never change activity.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Set

from ..errors import ParseError, UnterminatedDirectiveError
from ..logging import get_logger
from ..models import DirectiveSpan

logger = get_logger("directives")

_DIRECTIVE_LINE = re.compile(r"^([ \t\ufeff]*)#\s*([A-Za-z]*)(.*?)\r?$", re.DOTALL)
_EXPRESSION_TOKEN = re.compile(r"\s*(\|\||&&|==|!=|!|\(|\)|[A-Za-z_][A-Za-z0-9_]*)")


class ExpressionError(ValueError):
    """Raised for a conditional expression that cannot be parsed."""


class ConditionEvaluator:
    """Evaluates ``#if`` expressions. Undefined symbols are false."""

    def __init__(self, symbols: Iterable[str]) -> None:
        self.symbols: Set[str] = set(symbols)

    def evaluate(self, expression: str) -> bool:
        self._tokens = self._split(expression)
        self._index = 0
        value = self._or()
        if self._index != len(self._tokens):
            raise ExpressionError(f"Unexpected '{self._tokens[self._index]}' in '{expression}'")
        return value

    @staticmethod
    def _split(expression: str) -> List[str]:
        tokens: List[str] = []
        position = 0
        stripped = expression.rstrip()
        while position < len(stripped):
            match = _EXPRESSION_TOKEN.match(stripped, position)
            if match is None:
                raise ExpressionError(f"Invalid character in '{expression}'")
            tokens.append(match.group(1))
            position = match.end()
        if not tokens:
            raise ExpressionError("Empty conditional expression")
        return tokens

    def _peek(self) -> Optional[str]:
        return self._tokens[self._index] if self._index < len(self._tokens) else None

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            raise ExpressionError("Unexpected end of conditional expression")
        self._index += 1
        return token

    def _or(self) -> bool:
        value = self._and()
        while self._peek() == "||":
            self._take()
            right = self._and()
            value = value or right
        return value

    def _and(self) -> bool:
        value = self._equality()
        while self._peek() == "&&":
            self._take()
            right = self._equality()
            value = value and right
        return value

    def _equality(self) -> bool:
        value = self._unary()
        while self._peek() in ("==", "!="):
            operator = self._take()
            right = self._unary()
            value = (value == right) if operator == "==" else (value != right)
        return value

    def _unary(self) -> bool:
        if self._peek() == "!":
            self._take()
            return not self._unary()
        return self._primary()

    def _primary(self) -> bool:
        token = self._take()
        if token == "(":
            value = self._or()
            if self._take() != ")":
                raise ExpressionError("Expected ')'")
            return value
        if token == "true":
            return True
        if token == "false":
            return False
        if token in {"||", "&&", "==", "!=", "!", ")"}:
            raise ExpressionError(f"Unexpected '{token}'")
        return token in self.symbols


@dataclass(frozen=True)
class DirectiveLine:
    """A line whose first non-blank character is ``#``."""

    keyword: str
    argument: str
    line: int
    column: int


@dataclass
class _Branch:
    directive: DirectiveLine
    parent_active: bool
    active: bool
    taken: bool
    condition: str
    branch_start: int
    seen_else: bool = False


@dataclass
class ResolvedText:
    """Active view of a document after directive resolution."""

    text: str
    spans: List[DirectiveSpan] = field(default_factory=list)
    symbols: FrozenSet[str] = frozenset()


def split_directive(line: str, number: int = 0) -> Optional[DirectiveLine]:
    """Parse ``line`` as a directive, or return ``None`` for ordinary text."""
    match = _DIRECTIVE_LINE.match(line)
    if match is None:
        return None
    indent, keyword, argument = match.groups()
    comment = argument.find("//")
    if comment != -1:
        argument = argument[:comment]
    return DirectiveLine(keyword, argument.strip(), number, len(indent) + 1)


def _blank(line: str) -> str:
    stripped = line.rstrip("\r")
    return " " * len(stripped) + line[len(stripped) :]


class DirectiveResolver:
    """Produces the active text of a document for a symbol environment."""

    def __init__(self, symbols: Iterable[str] = ()) -> None:
        self.symbols = frozenset(symbols)

    def resolve(self, text: str) -> ResolvedText:
        evaluator = ConditionEvaluator(self.symbols)
        branches: List[_Branch] = []
        regions: List[DirectiveLine] = []
        spans: List[DirectiveSpan] = []
        output: List[str] = []

        def is_active() -> bool:
            return branches[-1].active if branches else True

        for number, line in enumerate(text.split("\n"), start=1):
            directive = split_directive(line, number)
            if directive is None:
                output.append(line if is_active() else _blank(line))
                continue
            output.append(_blank(line))

            keyword, argument = directive.keyword, directive.argument
            if keyword == "if":
                parent = is_active()
                taken = parent and self._evaluate(evaluator, argument, directive)
                branches.append(_Branch(directive, parent, taken, taken, argument, number))
            elif keyword in ("elif", "else"):
                branch = self._current_branch(branches, directive)
                spans.append(
                    DirectiveSpan("conditional", branch.branch_start, number, branch.active, branch.condition)
                )
                if keyword == "elif":
                    satisfied = (
                        branch.parent_active
                        and not branch.taken
                        and self._evaluate(evaluator, argument, directive)
                    )
                    branch.condition = argument
                else:
                    satisfied = branch.parent_active and not branch.taken
                    branch.condition = "else"
                    branch.seen_else = True
                branch.active = satisfied
                branch.taken = branch.taken or satisfied
                branch.branch_start = number
            elif keyword == "endif":
                if not branches:
                    raise ParseError.at("#endif without matching #if", directive)
                branch = branches.pop()
                spans.append(
                    DirectiveSpan("conditional", branch.branch_start, number, branch.active, branch.condition)
                )
            elif not is_active():
                continue
            elif keyword == "region":
                regions.append(directive)
            elif keyword == "endregion":
                if not regions:
                    raise ParseError.at("#endregion without matching #region", directive)
                opening = regions.pop()
                spans.append(DirectiveSpan("region", opening.line, number, True, opening.argument))
            elif keyword == "define" and argument:
                evaluator.symbols.add(argument.split()[0])
            elif keyword == "undef" and argument:
                evaluator.symbols.discard(argument.split()[0])
            else:
                logger.debug("Dropping #%s directive at line %d", keyword, number)

        if branches:
            raise UnterminatedDirectiveError.at("Unterminated #if directive", branches[0].directive)
        if regions:
            raise UnterminatedDirectiveError.at("Unterminated #region directive", regions[0])

        spans.sort(key=lambda span: (span.start, span.end))
        return ResolvedText(text="\n".join(output), spans=spans, symbols=frozenset(evaluator.symbols))

    @staticmethod
    def _current_branch(branches: List[_Branch], directive: DirectiveLine) -> _Branch:
        if not branches:
            raise ParseError.at(f"#{directive.keyword} without matching #if", directive)
        branch = branches[-1]
        if branch.seen_else:
            raise ParseError.at(f"#{directive.keyword} after #else", directive)
        return branch

    @staticmethod
    def _evaluate(evaluator: ConditionEvaluator, expression: str, directive: DirectiveLine) -> bool:
        try:
            return evaluator.evaluate(expression)
        except ExpressionError as exc:
            logger.warning(
                "Treating unparsable condition at line %d as false: %s", directive.line, exc
            )
            return False


def resolve_directives(text: str, symbols: Iterable[str] = ()) -> ResolvedText:
    """Resolve directives in ``text`` against ``symbols``."""
    return DirectiveResolver(symbols).resolve(text)


__all__ = [
    "ConditionEvaluator",
    "DirectiveLine",
    "DirectiveResolver",
    "ExpressionError",
    "ResolvedText",
    "resolve_directives",
    "split_directive",
]
