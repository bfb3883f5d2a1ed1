"""Literal scanners for the Tailor lexer.

Each scanner is a mixin that consumes one family of literals and emits
its tokens through the Lexer's ``_emit`` primitive.
"""

from tailor.lexer.scanners.heredoc import HeredocScannerMixin, PendingHeredoc
from tailor.lexer.scanners.strings import StringScannerMixin

__all__ = [
    "HeredocScannerMixin",
    "PendingHeredoc",
    "StringScannerMixin",
]
