"""Keyword classification for the indentation state machine.

Decides, from the tokens of a single line, how a keyword affects
indentation: block opener, continuation of an open block, trailing
statement modifier, or the optional ``do`` of a loop. No parse is
involved; the decision is made from the code tokens that precede the
keyword in its statement.
"""

from __future__ import annotations

from collections.abc import Sequence

from tailor.lexer.keywords import VALUE_KEYWORDS
from tailor.tokens import CLOSING_KINDS, Token, TokenKind

# Keywords that open (or continue) an indented body
KEYWORDS_TO_INDENT = frozenset(
    {
        "begin",
        "case",
        "class",
        "def",
        "do",
        "else",
        "elsif",
        "ensure",
        "for",
        "if",
        "module",
        "rescue",
        "unless",
        "until",
        "when",
        "while",
    }
)

# Realign with their opener instead of nesting deeper
CONTINUATION_KEYWORDS = frozenset({"elsif", "else", "ensure", "rescue", "when"})

# May trail a statement as a one-line suffix
MODIFIER_KEYWORDS = frozenset({"if", "unless", "while", "until", "rescue"})

# Loops whose body may be introduced by an optional ``do``
LOOP_KEYWORDS = frozenset({"while", "until", "for"})

# Keywords that complete an expression, so a keyword after them is a suffix
_EXPRESSION_ENDING_KEYWORDS = VALUE_KEYWORDS | {
    "break",
    "next",
    "return",
    "super",
    "yield",
}


def _statement_before(line_tokens: Sequence[Token], keyword: Token) -> list[Token]:
    """Code tokens preceding ``keyword`` in its own statement."""
    preceding: list[Token] = []
    for token in line_tokens:
        if token is keyword:
            return preceding
        if not token.is_significant:
            continue
        if token.kind is TokenKind.IDENTIFIER and token.text == ";":
            preceding = []
        else:
            preceding.append(token)
    return preceding


def _completes_expression(token: Token) -> bool:
    if token.kind is TokenKind.IDENTIFIER:
        return True
    if token.kind in CLOSING_KINDS or token.kind is TokenKind.STRING_END:
        return True
    return token.kind is TokenKind.KEYWORD and token.text in _EXPRESSION_ENDING_KEYWORDS


def is_trailing_modifier(line_tokens: Sequence[Token], keyword: Token) -> bool:
    """Check whether ``keyword`` is used as a statement modifier.

    ``return if done`` and ``retry_count += 1 while busy?`` are modifiers:
    a complete expression precedes the keyword in its statement. A keyword
    at the start of a statement, or after an operator (``x = if y``), opens
    a block.

    Args:
        line_tokens: Tokens of the keyword's line, up to at least ``keyword``
        keyword: The keyword token to classify

    Returns:
        True if the keyword trails a statement and needs no ``end``.
    """
    if keyword.text not in MODIFIER_KEYWORDS:
        return False
    preceding = _statement_before(line_tokens, keyword)
    return bool(preceding) and _completes_expression(preceding[-1])


def is_loop_do(line_tokens: Sequence[Token], keyword: Token) -> bool:
    """Check whether a ``do`` belongs to a ``while``/``until``/``for`` header.

    ``while running do`` opens one block, not two.
    """
    if not keyword.is_keyword("do"):
        return False
    preceding = _statement_before(line_tokens, keyword)
    return bool(preceding) and preceding[0].is_keyword(*LOOP_KEYWORDS)


def is_continuation_keyword(keyword: Token) -> bool:
    return keyword.kind is TokenKind.KEYWORD and keyword.text in CONTINUATION_KEYWORDS


def _statement_after(line_tokens: Sequence[Token], keyword: Token) -> list[Token]:
    """Code tokens following ``keyword`` up to the end of its statement."""
    following: list[Token] = []
    seen = False
    for token in line_tokens:
        if token is keyword:
            seen = True
            continue
        if not seen or not token.is_significant:
            continue
        if token.kind is TokenKind.IDENTIFIER and token.text == ";":
            break
        following.append(token)
    return following


def is_endless_def(line_tokens: Sequence[Token], keyword: Token) -> bool:
    """Check whether a ``def`` is an endless method (``def area = w * h``).

    The method name, with an optional receiver (``self.``) and an optional
    parenthesized parameter list, is followed by ``=``. A setter name
    (``def name=(value)``) carries its ``=`` without a space and still
    opens a body. Parameter lists continued onto the next line are not
    recognized.

    Args:
        line_tokens: All tokens of the finished line
        keyword: The ``def`` token

    Returns:
        True if the definition has no body and needs no ``end``.
    """
    if not keyword.is_keyword("def"):
        return False
    rest = _statement_after(line_tokens, keyword)
    if not rest:
        return False

    index = 1
    while index + 1 < len(rest) and rest[index].kind is TokenKind.PERIOD:
        index += 2
    name = rest[index - 1]
    if index < len(rest) and _is_assignment(rest[index]) and rest[index].line == name.line and (
        rest[index].column == name.column + len(name.text)
    ):
        index += 1

    if index < len(rest) and rest[index].kind is TokenKind.LPAREN:
        depth = 0
        while index < len(rest):
            kind = rest[index].kind
            index += 1
            if kind is TokenKind.LPAREN:
                depth += 1
            elif kind is TokenKind.RPAREN:
                depth -= 1
                if depth == 0:
                    break
        else:
            return False

    return index < len(rest) and _is_assignment(rest[index])


def _is_assignment(token: Token) -> bool:
    return token.kind is TokenKind.OPERATOR and token.text == "="
