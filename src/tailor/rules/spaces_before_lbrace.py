"""Spacing before ``{``.

Counts the spaces between a ``{`` and the token before it. The check is
skipped when the brace starts its line, follows ``#{``, ``(`` or ``[``,
or is preceded only by indentation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tailor.dispatch import EventKind
from tailor.rules import register_rule
from tailor.rules.base import Rule
from tailor.tokens import TokenKind

if TYPE_CHECKING:
    from tailor.dispatch import Event
    from tailor.line import LineView
    from tailor.tokens import Token

_SKIP_AFTER = frozenset({TokenKind.EMBEXPR_BEGIN, TokenKind.LPAREN, TokenKind.LBRACKET})


@register_rule("spaces_before_lbrace")
class SpacesBeforeLBraceRule(Rule):
    """Requires exactly ``value`` spaces before each ``{``."""

    events = (EventKind.LEFT_BRACE,)

    def on_left_brace(self, event: Event) -> None:
        count = self.count_spaces(event.line, event.token)
        if count is None or count == self.value:
            return
        self.add_problem(
            "spaces_before_lbrace",
            event.lineno,
            event.column,
            f"Line has {count} space(s) before a {{, but should have {self.value}.",
            actual_spaces=count,
            should_have=self.value,
        )

    @staticmethod
    def count_spaces(view: LineView, brace: Token) -> int | None:
        """Count the spaces before ``brace``.

        Returns:
            The count, or None when the brace is exempt.
        """
        previous = view.token_before(brace)
        if brace.column == 0 or previous is None or previous.kind in _SKIP_AFTER:
            return None
        if previous.kind is not TokenKind.WHITESPACE:
            return 0
        if view.token_before(previous) is None:
            return None
        return len(previous.text)
