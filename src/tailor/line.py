"""Per-line view over the token stream.

The dispatcher slices the token stream at line boundaries and hands each
slice to the rules as a LineView. A view is rebuilt for every batch, never
mutated.

A batch normally covers one physical line. It covers several when a token
spans lines (multi-line string content, heredoc bodies, embedded
documents); ``lineno`` is then the first of them and ``last_lineno`` the
line of the closing boundary.

Thread Safety:
LineView is frozen and holds an immutable tuple of tokens.

"""

from __future__ import annotations

from dataclasses import dataclass

from tailor.indentation.keywords import KEYWORDS_TO_INDENT
from tailor.tokens import (
    CLOSING_KINDS,
    LINE_BOUNDARY_KINDS,
    Token,
    TokenKind,
)

# Operators that do not leave an expression open when they end a line
_NON_CONTINUING_OPERATORS = frozenset({"::"})

_STRING_TAIL_KINDS = frozenset({TokenKind.STRING_CONTENT, TokenKind.STRING_END})


@dataclass(frozen=True, slots=True)
class LineView:
    """Tokens of one dispatcher batch, with the queries rules need.

    Attributes:
        tokens: The batch's tokens in source order, including its trailing
            line boundary once the line is finished

    """

    tokens: tuple[Token, ...]

    @property
    def lineno(self) -> int:
        """Line number of the batch's first token."""
        return self.tokens[0].line if self.tokens else 0

    @property
    def last_lineno(self) -> int:
        """Line number on which the batch ends."""
        if not self.tokens:
            return 0
        last = self.tokens[-1]
        if last.kind in LINE_BOUNDARY_KINDS:
            return last.line
        return last.end_line

    @property
    def first_non_space(self) -> Token | None:
        """First token that is neither whitespace nor a line boundary."""
        for token in self.tokens:
            if token.kind is not TokenKind.WHITESPACE and token.kind not in LINE_BOUNDARY_KINDS:
                return token
        return None

    @property
    def indentation(self) -> int:
        """Column of the first non-whitespace token (0 for a blank line)."""
        first = self.first_non_space
        return first.column if first is not None else 0

    @property
    def significant(self) -> tuple[Token, ...]:
        """Tokens that carry code: no whitespace, comments or newlines."""
        return tuple(token for token in self.tokens if token.is_significant)

    @property
    def text(self) -> str:
        """Source text of the batch."""
        return "".join(token.text for token in self.tokens)

    # =========================================================================
    # Predicates
    # =========================================================================

    def only_spaces(self) -> bool:
        """True if the line holds nothing but whitespace."""
        return self.first_non_space is None

    def comment_only(self) -> bool:
        """True if the line holds a comment and no code."""
        first = self.first_non_space
        return first is not None and first.kind is TokenKind.COMMENT and not self.significant

    def is_embedded_document(self) -> bool:
        """True if the line is a ``=begin`` ... ``=end`` block."""
        first = self.first_non_space
        return (
            first is not None
            and first.kind is TokenKind.COMMENT
            and first.text.startswith("=begin")
        )

    def is_string_tail(self) -> bool:
        """True if the batch opens inside a string begun on an earlier line.

        Heredoc bodies and the last line of a multi-line literal start with
        string content or the terminator rather than code.
        """
        first = self.first_non_space
        return first is not None and first.kind in _STRING_TAIL_KINDS

    def ends_with_op(self) -> bool:
        """True if the last code token is a binary operator.

        Block parameter pipes (``do |x|``, ``{ |a, b|``) do not count; both
        halves of a ternary (``?`` and ``:``) do.
        """
        significant = self.significant
        if not significant:
            return False
        last = significant[-1]
        if last.kind is not TokenKind.OPERATOR or last.text in _NON_CONTINUING_OPERATORS:
            return False
        if last.text == "|":
            return not self._closes_block_parameters(significant)
        return True

    def ends_with_comma(self) -> bool:
        significant = self.significant
        return bool(significant) and significant[-1].kind is TokenKind.COMMA

    def ends_with_period(self) -> bool:
        significant = self.significant
        return bool(significant) and significant[-1].kind is TokenKind.PERIOD

    def starts_with_period(self) -> bool:
        first = self.first_non_space
        return first is not None and first.kind is TokenKind.PERIOD

    def contains_keyword_to_indent(self) -> bool:
        """True if any keyword on the line belongs to the indent set."""
        return any(
            token.kind is TokenKind.KEYWORD and token.text in KEYWORDS_TO_INDENT
            for token in self.tokens
        )

    # =========================================================================
    # Navigation
    # =========================================================================

    def token_before(self, token: Token) -> Token | None:
        """Return the token immediately preceding ``token`` in this batch.

        Returns:
            The previous token, or None if ``token`` is first or absent.
        """
        for index, candidate in enumerate(self.tokens):
            if candidate is token:
                return self.tokens[index - 1] if index else None
        return None

    def leads_line(self, token: Token) -> bool:
        """True if only closing tokens precede ``token`` among code tokens.

        ``end``, ``)``, ``]`` and ``}`` at the start of a line, possibly
        stacked (``end)`` or ``})``), lead their line.
        """
        for candidate in self.significant:
            if candidate is token:
                return True
            if candidate.kind not in CLOSING_KINDS and not candidate.is_keyword("end"):
                return False
        return False

    @staticmethod
    def _closes_block_parameters(significant: tuple[Token, ...]) -> bool:
        """Check whether the trailing ``|`` closes ``do |...|`` or ``{ |...|``."""
        pipes = 0
        for token in reversed(significant):
            if token.kind is TokenKind.OPERATOR and token.text in ("|", "||"):
                pipes += 1 if token.text == "|" else 2
                continue
            if pipes % 2 == 0 and (token.is_keyword("do") or token.kind is TokenKind.LBRACE):
                return True
        return False
