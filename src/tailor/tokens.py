"""Token and TokenKind definitions for the Tailor lexer.

The lexer produces a flat stream of Token objects that the dispatcher
groups into lines. Each Token has a kind, its raw text, and the position
of its first character.

Thread Safety:
Token is frozen (immutable) and safe to share across threads.
TokenKind is an enum (inherently immutable).

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenKind(Enum):
    """Token kinds produced by the lexer.

    The set is closed. Anything that is not structurally interesting to the
    rules (numbers, symbols, variables, labels, ``;``) is an IDENTIFIER.

    """

    KEYWORD = auto()
    IDENTIFIER = auto()  # identifiers, constants, numbers, symbols, ...
    WHITESPACE = auto()
    NEWLINE = auto()
    IGNORED_NEWLINE = auto()  # newline inside an unterminated expression

    # Strings
    STRING_BEGIN = auto()
    STRING_CONTENT = auto()
    STRING_END = auto()
    EMBEXPR_BEGIN = auto()  # #{
    EMBEXPR_END = auto()  # } closing an interpolation

    # Groups
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()

    # Punctuation
    COMMA = auto()
    PERIOD = auto()  # . and &.
    OPERATOR = auto()
    COMMENT = auto()


# Kinds that end a physical line
LINE_BOUNDARY_KINDS = frozenset({TokenKind.NEWLINE, TokenKind.IGNORED_NEWLINE})

# Kinds that never carry code
INSIGNIFICANT_KINDS = frozenset(
    {
        TokenKind.WHITESPACE,
        TokenKind.NEWLINE,
        TokenKind.IGNORED_NEWLINE,
        TokenKind.COMMENT,
    }
)

OPENING_KINDS = frozenset({TokenKind.LPAREN, TokenKind.LBRACKET, TokenKind.LBRACE})
CLOSING_KINDS = frozenset({TokenKind.RPAREN, TokenKind.RBRACKET, TokenKind.RBRACE})


@dataclass(frozen=True, slots=True)
class Token:
    """A token produced by the lexer.

    Attributes:
        line: Start line number (1-indexed)
        column: Start column (0-indexed)
        kind: The token kind (from TokenKind)
        text: The raw source text; may span several lines for string
            content and embedded documents

    """

    line: int
    column: int
    kind: TokenKind
    text: str

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        val = self.text
        if len(val) > 20:
            val = val[:17] + "..."
        return f"Token({self.kind.name}, {val!r}, {self.line}:{self.column})"

    @property
    def is_significant(self) -> bool:
        """True for tokens that carry code (not spacing, comments or newlines)."""
        return self.kind not in INSIGNIFICANT_KINDS

    @property
    def end_line(self) -> int:
        """Line on which the token's last character sits."""
        return self.line + self.text.count("\n")

    def is_keyword(self, *words: str) -> bool:
        """Check whether this is a keyword token, optionally one of ``words``."""
        if self.kind is not TokenKind.KEYWORD:
            return False
        return not words or self.text in words
