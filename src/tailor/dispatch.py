"""Event dispatch from the token stream to rules.

The Dispatcher walks the token stream once, groups tokens into line
batches, and fires named events at the handlers registered for them:

- token events (``on_keyword``, ``on_left_paren``, ...) fire as the token
  arrives, with a LineView of the batch so far;
- boundary events (``on_newline``, ``on_ignored_newline``) fire with the
  finished batch, after which a new batch starts.

Handlers for the same event run in registration order. Rules own disjoint
state, so the order never changes what a rule sees.

Example:
    >>> from tailor.lexer import tokenize
    >>> dispatcher = Dispatcher()
    >>> seen = []
    >>> dispatcher.register("on_keyword", lambda event: seen.append(event.token.text))
    >>> dispatcher.run(tokenize("def foo\\nend\\n"))
    >>> seen
    ['def', 'end']

Thread Safety:
A Dispatcher serves one file. Create one per token stream.

"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from tailor.line import LineView
from tailor.tokens import LINE_BOUNDARY_KINDS, Token, TokenKind

if TYPE_CHECKING:
    from tailor.problem import Problem

__all__ = [
    "EventKind",
    "Event",
    "Handler",
    "RuleObserver",
    "Dispatcher",
    "EVENT_FOR_TOKEN",
]


class EventKind(Enum):
    """Named lexical events. The value is the handler name rules implement."""

    KEYWORD = "on_keyword"
    LEFT_PAREN = "on_left_paren"
    RIGHT_PAREN = "on_right_paren"
    LEFT_BRACKET = "on_left_bracket"
    RIGHT_BRACKET = "on_right_bracket"
    LEFT_BRACE = "on_left_brace"
    RIGHT_BRACE = "on_right_brace"
    EMBEDDED_EXPR_BEGIN = "on_embedded_expr_begin"
    EMBEDDED_EXPR_END = "on_embedded_expr_end"
    NEWLINE = "on_newline"
    IGNORED_NEWLINE = "on_ignored_newline"
    STRING_BEGIN = "on_string_begin"
    STRING_END = "on_string_end"
    COMMA = "on_comma"
    PERIOD = "on_period"
    OPERATOR = "on_operator"
    COMMENT = "on_comment"


EVENT_FOR_TOKEN: dict[TokenKind, EventKind] = {
    TokenKind.KEYWORD: EventKind.KEYWORD,
    TokenKind.LPAREN: EventKind.LEFT_PAREN,
    TokenKind.RPAREN: EventKind.RIGHT_PAREN,
    TokenKind.LBRACKET: EventKind.LEFT_BRACKET,
    TokenKind.RBRACKET: EventKind.RIGHT_BRACKET,
    TokenKind.LBRACE: EventKind.LEFT_BRACE,
    TokenKind.RBRACE: EventKind.RIGHT_BRACE,
    TokenKind.EMBEXPR_BEGIN: EventKind.EMBEDDED_EXPR_BEGIN,
    TokenKind.EMBEXPR_END: EventKind.EMBEDDED_EXPR_END,
    TokenKind.NEWLINE: EventKind.NEWLINE,
    TokenKind.IGNORED_NEWLINE: EventKind.IGNORED_NEWLINE,
    TokenKind.STRING_BEGIN: EventKind.STRING_BEGIN,
    TokenKind.STRING_END: EventKind.STRING_END,
    TokenKind.COMMA: EventKind.COMMA,
    TokenKind.PERIOD: EventKind.PERIOD,
    TokenKind.OPERATOR: EventKind.OPERATOR,
    TokenKind.COMMENT: EventKind.COMMENT,
}


@dataclass(frozen=True, slots=True)
class Event:
    """One dispatched event.

    Attributes:
        kind: Which event fired
        token: The token that triggered it
        line: The batch so far (token events) or the finished batch
            (boundary events)

    """

    kind: EventKind
    token: Token
    line: LineView

    @property
    def lineno(self) -> int:
        return self.token.line

    @property
    def column(self) -> int:
        return self.token.column


Handler = Callable[[Event], None]


@runtime_checkable
class RuleObserver(Protocol):
    """Contract for rules fed by the Dispatcher.

    A rule subscribes handlers for the events it cares about and
    accumulates Problems. Rules never read each other's state.

    """

    @property
    def name(self) -> str:
        """Rule identifier, e.g. ``"indentation_spaces"``."""
        ...

    @property
    def problems(self) -> list[Problem]:
        """Problems recorded so far, in discovery order."""
        ...

    def subscribe(self, dispatcher: Dispatcher) -> None:
        """Register this rule's handlers with ``dispatcher``."""
        ...


class Dispatcher:
    """Slices a token stream into line batches and fires events.

    Usage:
        >>> dispatcher = Dispatcher()
        >>> rule.subscribe(dispatcher)
        >>> dispatcher.run(tokens)

    """

    __slots__ = ("_handlers", "_batch")

    def __init__(self) -> None:
        self._handlers: dict[EventKind, list[Handler]] = {kind: [] for kind in EventKind}
        self._batch: list[Token] = []

    def register(self, kind: EventKind | str, handler: Handler) -> None:
        """Subscribe ``handler`` to an event.

        Args:
            kind: The event, as an EventKind or its name (``"on_keyword"``)
            handler: Called with each Event of that kind

        Raises:
            ValueError: If ``kind`` names no event
        """
        self._handlers[EventKind(kind)].append(handler)

    def handlers(self, kind: EventKind) -> tuple[Handler, ...]:
        """Handlers registered for ``kind``, in registration order."""
        return tuple(self._handlers[kind])

    def advance(self, token: Token) -> None:
        """Feed the next token in stream order."""
        self._batch.append(token)
        kind = EVENT_FOR_TOKEN.get(token.kind)
        if kind is None or not self._handlers[kind]:
            if token.kind in LINE_BOUNDARY_KINDS:
                self._batch = []
            return

        view = LineView(tuple(self._batch))
        if token.kind in LINE_BOUNDARY_KINDS:
            self._batch = []
        self._fire(Event(kind, token, view))

    def finish(self) -> None:
        """Flush a final line that has no trailing newline.

        The line is closed with a synthetic empty NEWLINE token so rules see
        the same boundary event as for every other line.
        """
        if not self._batch:
            return
        last = self._batch[-1]
        if "\n" in last.text:
            column = len(last.text) - last.text.rfind("\n") - 1
        else:
            column = last.column + len(last.text)
        self.advance(
            Token(line=last.end_line, column=column, kind=TokenKind.NEWLINE, text="")
        )

    def run(self, tokens: Iterable[Token]) -> None:
        """Dispatch a whole token stream, then flush the final line."""
        for token in tokens:
            self.advance(token)
        self.finish()

    def _fire(self, event: Event) -> None:
        for handler in self._handlers[event.kind]:
            handler(event)
