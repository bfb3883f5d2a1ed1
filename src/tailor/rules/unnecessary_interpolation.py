"""Unnecessary string interpolation.

Flags double-quoted strings whose only content is interpolation, such as
``"#{name}"``, where ``name`` (or ``name.to_s``) says the same thing.
Tokens are collected across ignored newlines so a statement spanning
lines is checked once it ends.

Only ``"..."`` and ``%Q``/``%()`` strings are checked. Symbols, regexes,
command strings, word lists and heredocs are exempt.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tailor.dispatch import EventKind
from tailor.problem import Level
from tailor.rules import register_rule
from tailor.rules.base import Rule
from tailor.tokens import TokenKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from tailor.dispatch import Event
    from tailor.tokens import Token

_STRING_KINDS = frozenset(
    {
        TokenKind.STRING_BEGIN,
        TokenKind.STRING_CONTENT,
        TokenKind.STRING_END,
        TokenKind.EMBEXPR_BEGIN,
        TokenKind.EMBEXPR_END,
    }
)


@dataclass(slots=True)
class _StringSummary:
    begin: Token
    has_content: bool = False
    has_interpolation: bool = False


def _is_checked_literal(begin: Token) -> bool:
    text = begin.text
    if text == '"':
        return True
    if text.startswith("%Q"):
        return True
    return len(text) == 2 and text[0] == "%" and not text[1].isalpha()


def _strings(tokens: Iterable[Token]) -> Iterator[_StringSummary]:
    """Yield a summary of each string literal as it closes."""
    stack: list[_StringSummary | None] = []  # None marks an open interpolation
    for token in tokens:
        kind = token.kind
        if kind is TokenKind.STRING_BEGIN:
            stack.append(_StringSummary(token))
        elif kind is TokenKind.STRING_CONTENT:
            if stack and stack[-1] is not None:
                stack[-1].has_content = True
        elif kind is TokenKind.EMBEXPR_BEGIN:
            if stack and stack[-1] is not None:
                stack[-1].has_interpolation = True
            stack.append(None)
        elif kind is TokenKind.EMBEXPR_END:
            if stack and stack[-1] is None:
                stack.pop()
        elif kind is TokenKind.STRING_END:
            if stack and stack[-1] is not None:
                yield stack.pop()


@register_rule("allow_unnecessary_interpolation")
class AllowUnnecessaryInterpolationRule(Rule):
    """Flags ``"#{x}"`` when the rule's value is false."""

    events = (EventKind.IGNORED_NEWLINE, EventKind.NEWLINE)

    def __init__(
        self,
        value: bool,
        *,
        level: Level | str = Level.WARNING,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(value, level=level, options=options)
        self._tokens: list[Token] = []

    def on_ignored_newline(self, event: Event) -> None:
        self._collect(event.line.tokens)

    def on_newline(self, event: Event) -> None:
        self._collect(event.line.tokens)
        if not self.value:
            for string in _strings(self._tokens):
                self.measure(string)
        self._tokens = []

    def measure(self, string: _StringSummary) -> None:
        if not _is_checked_literal(string.begin):
            return
        if string.has_interpolation and not string.has_content:
            self.add_problem(
                "unnecessary_string_interpolation",
                string.begin.line,
                string.begin.column,
                "Variable interpolated unnecessarily",
            )

    def _collect(self, tokens: Iterable[Token]) -> None:
        self._tokens.extend(token for token in tokens if token.kind in _STRING_KINDS)
