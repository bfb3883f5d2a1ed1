"""Ruby tokenizer for Tailor.

Produces the flat, position-tagged token stream the dispatcher consumes.

Architecture:
lexer/
├── __init__.py          # Re-exports Lexer, tokenize
├── core.py              # Lexer class (mixin composition + main loop)
├── keywords.py          # Keyword, operator and delimiter tables
└── scanners/            # Literal scanners
    ├── strings.py       # Quoted strings, symbols, % literals, regexes
    └── heredoc.py       # Heredoc openers and bodies

Usage:
    >>> from tailor.lexer import tokenize
    >>> for token in tokenize("foo(1)\\n"):
    ...     print(token)
Token(IDENTIFIER, 'foo', 1:0)
Token(LPAREN, '(', 1:3)
Token(IDENTIFIER, '1', 1:4)
Token(RPAREN, ')', 1:5)
Token(NEWLINE, '\\n', 1:6)

"""

from tailor.lexer.core import Lexer, tokenize

__all__ = ["Lexer", "tokenize"]
