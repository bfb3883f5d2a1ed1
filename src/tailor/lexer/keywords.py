"""Vocabulary tables for the lexer.

Keyword sets, operator spellings and percent-literal delimiters.
"""

from __future__ import annotations

KEYWORDS = frozenset(
    {
        "__ENCODING__",
        "__FILE__",
        "__LINE__",
        "BEGIN",
        "END",
        "alias",
        "and",
        "begin",
        "break",
        "case",
        "class",
        "def",
        "defined?",
        "do",
        "else",
        "elsif",
        "end",
        "ensure",
        "false",
        "for",
        "if",
        "in",
        "module",
        "next",
        "nil",
        "not",
        "or",
        "redo",
        "rescue",
        "retry",
        "return",
        "self",
        "super",
        "then",
        "true",
        "undef",
        "unless",
        "until",
        "when",
        "while",
        "yield",
    }
)

# Keywords that are complete expressions on their own; an operator-looking
# character after one of these is a binary operator, not a literal.
VALUE_KEYWORDS = frozenset(
    {
        "__ENCODING__",
        "__FILE__",
        "__LINE__",
        "end",
        "false",
        "nil",
        "redo",
        "retry",
        "self",
        "true",
    }
)

# Longest spellings first so prefix matching picks the longest operator.
OPERATORS = (
    "**=",
    "<=>",
    "===",
    "<<=",
    ">>=",
    "&&=",
    "||=",
    "**",
    "==",
    "!=",
    ">=",
    "<=",
    "&&",
    "||",
    "<<",
    ">>",
    "=~",
    "!~",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "|=",
    "&=",
    "^=",
    "=>",
    "->",
    "+",
    "-",
    "*",
    "/",
    "%",
    "=",
    "<",
    ">",
    "!",
    "&",
    "|",
    "^",
    "~",
    "?",
    ":",
)

OPERATOR_CHARS = frozenset("".join(OPERATORS))

# Method names that may follow ``:`` to form an operator symbol (``:+``, ``:[]=``)
SYMBOL_OPERATORS = (
    "[]=",
    "<=>",
    "===",
    "[]",
    "**",
    "==",
    "!=",
    ">=",
    "<=",
    "<<",
    ">>",
    "=~",
    "!~",
    "+@",
    "-@",
    "+",
    "-",
    "*",
    "/",
    "%",
    "<",
    ">",
    "!",
    "&",
    "|",
    "^",
    "~",
)

# %q(...) style literals: type letter -> interpolates?
PERCENT_LITERAL_TYPES = {
    "": True,
    "Q": True,
    "q": False,
    "W": True,
    "w": False,
    "I": True,
    "i": False,
    "r": True,
    "s": False,
    "x": True,
}

CLOSING_DELIMITERS = {"(": ")", "[": "]", "{": "}", "<": ">"}

REGEX_FLAGS = frozenset("imxounse")
