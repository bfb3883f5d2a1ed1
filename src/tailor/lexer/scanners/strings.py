"""String literal scanner mixin.

Handles quoted strings, quoted symbols, ``%`` literals and regular
expressions. Every literal is emitted as STRING_BEGIN, zero or more
STRING_CONTENT / interpolation runs, and STRING_END.
"""

from __future__ import annotations

from tailor.errors import LexError
from tailor.lexer.keywords import (
    CLOSING_DELIMITERS,
    PERCENT_LITERAL_TYPES,
    REGEX_FLAGS,
)
from tailor.tokens import TokenKind


class StringScannerMixin:
    """Mixin providing string, percent-literal and regex scanning."""

    _source: str
    _source_len: int
    _pos: int
    _lineno: int
    _col: int
    _source_file: str | None
    _interp_depths: list[int]

    def _emit(self, kind: TokenKind, end: int) -> None:
        """Emit source[pos:end] as a token. Implemented by Lexer."""
        raise NotImplementedError

    def _scan_code(self, in_interpolation: bool = False) -> None:
        """Scan code tokens. Implemented by Lexer."""
        raise NotImplementedError

    def _value_expected(self) -> bool:
        """Implemented by Lexer."""
        raise NotImplementedError

    def _spaced_argument(self) -> bool:
        """Implemented by Lexer."""
        raise NotImplementedError

    # =========================================================================
    # Detection
    # =========================================================================

    def _percent_literal_ahead(self) -> bool:
        """Check whether the ``%`` at the cursor opens a percent literal."""
        if not (self._value_expected() or self._spaced_argument()):
            return False

        source = self._source
        nxt = source[self._pos + 1 : self._pos + 2]
        if not nxt or nxt == "=":
            return False
        if nxt.isalpha():
            if nxt not in PERCENT_LITERAL_TYPES:
                return False
            delim = source[self._pos + 2 : self._pos + 3]
            return bool(delim) and not delim.isalnum() and not delim.isspace()
        return not nxt.isalnum() and not nxt.isspace()

    def _regex_allowed(self) -> bool:
        """Check whether the ``/`` at the cursor starts a regular expression."""
        return self._value_expected() or self._spaced_argument()

    # =========================================================================
    # Scanning
    # =========================================================================

    def _scan_quoted(self, quote: str) -> None:
        """Scan a '...', "..." or `...` literal."""
        self._scan_string_body(self._pos + 1, quote, interpolate=quote != "'")

    def _scan_quoted_symbol(self) -> None:
        """Scan :"..." or :'...'."""
        quote = self._source[self._pos + 1]
        self._scan_string_body(self._pos + 2, quote, interpolate=quote == '"')

    def _scan_percent_literal(self) -> None:
        """Scan %w[...], %Q{...}, %(...) and friends."""
        source = self._source
        literal_type = source[self._pos + 1]
        if literal_type.isalpha():
            open_delim = source[self._pos + 2]
            begin_end = self._pos + 3
        else:
            literal_type = ""
            open_delim = source[self._pos + 1]
            begin_end = self._pos + 2

        close_delim = CLOSING_DELIMITERS.get(open_delim, open_delim)
        self._scan_string_body(
            begin_end,
            close_delim,
            nest=open_delim if close_delim != open_delim else None,
            interpolate=PERCENT_LITERAL_TYPES[literal_type],
            regex=literal_type == "r",
        )

    def _scan_regex(self) -> None:
        """Scan /.../flags."""
        self._scan_string_body(self._pos + 1, "/", interpolate=True, regex=True)

    def _scan_string_body(
        self,
        begin_end: int,
        close: str,
        *,
        nest: str | None = None,
        interpolate: bool,
        regex: bool = False,
    ) -> None:
        """Emit STRING_BEGIN, the body, and STRING_END.

        Args:
            begin_end: End position of the opening delimiter text
            close: Closing delimiter character
            nest: Opening delimiter for bracket-style literals that nest
            interpolate: Whether ``#{...}`` starts an embedded expression
            regex: Whether trailing regex flags belong to STRING_END

        Raises:
            LexError: If the literal is not terminated before EOF
        """
        start_line, start_col = self._lineno, self._col
        self._emit(TokenKind.STRING_BEGIN, begin_end)

        source = self._source
        depth = 0
        i = self._pos
        while True:
            if i >= self._source_len:
                raise LexError(
                    "Unterminated string literal",
                    start_line,
                    start_col,
                    self._source_file,
                )

            char = source[i]
            if char == "\\":
                i += 2
                continue
            if nest is not None and char == nest:
                depth += 1
                i += 1
                continue
            if char == close:
                if depth:
                    depth -= 1
                    i += 1
                    continue
                if i > self._pos:
                    self._emit(TokenKind.STRING_CONTENT, i)
                end = i + 1
                if regex:
                    while end < self._source_len and source[end] in REGEX_FLAGS:
                        end += 1
                self._emit(TokenKind.STRING_END, end)
                return
            if interpolate and char == "#" and source[i + 1 : i + 2] == "{":
                if i > self._pos:
                    self._emit(TokenKind.STRING_CONTENT, i)
                self._emit(TokenKind.EMBEXPR_BEGIN, i + 2)
                self._interp_depths.append(0)
                self._scan_code(in_interpolation=True)
                i = self._pos
                continue
            i += 1
