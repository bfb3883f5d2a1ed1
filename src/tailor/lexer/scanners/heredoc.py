"""Heredoc scanner mixin.

A heredoc opener (``<<~EOS``) is emitted as STRING_BEGIN where it appears.
Its body starts on the line after the opener's newline, so the bodies of all
openers on a line are scanned right after that newline is emitted: one
STRING_CONTENT token per body, STRING_END for the terminator, and finally a
line boundary for the terminator's newline.

Bodies are not re-tokenized; interpolation inside a heredoc body stays part
of the content token.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from tailor.errors import LexError
from tailor.tokens import Token, TokenKind

# <<ID, <<-ID, <<~ID, optionally with a quoted identifier
_HEREDOC_OPENER = re.compile(r"<<([~-]?)([\"'`]?)([A-Za-z_]\w*)\2")


@dataclass(frozen=True, slots=True)
class PendingHeredoc:
    """A heredoc whose opener was seen but whose body is not yet scanned.

    Attributes:
        identifier: Terminator word
        indented: Terminator may be indented (``<<-`` and ``<<~``)
        line: Line of the opener
        column: Column of the opener
    """

    identifier: str
    indented: bool
    line: int
    column: int


class HeredocScannerMixin:
    """Mixin providing heredoc scanning."""

    _source: str
    _source_len: int
    _pos: int
    _lineno: int
    _col: int
    _source_file: str | None
    _tokens: list[Token]
    _pending_heredocs: list[PendingHeredoc]
    _last_code: Token | None

    def _emit(self, kind: TokenKind, end: int) -> None:
        """Emit source[pos:end] as a token. Implemented by Lexer."""
        raise NotImplementedError

    def _value_expected(self) -> bool:
        """Implemented by Lexer."""
        raise NotImplementedError

    def _spaced_argument(self) -> bool:
        """Implemented by Lexer."""
        raise NotImplementedError

    def _heredoc_ahead(self) -> re.Match[str] | None:
        """Match a heredoc opener at the cursor.

        ``a <<b`` is a shift when ``a`` is a variable; as an argument
        (``foo <<EOS``) only conventional terminators are accepted: quoted,
        ``-``/``~`` prefixed or starting with an uppercase letter.

        Returns:
            The opener match, or None.
        """
        match = _HEREDOC_OPENER.match(self._source, self._pos)
        if match is None:
            return None
        last = self._last_code
        if last is not None and last.is_keyword("class"):
            # class <<self
            return None
        if self._value_expected():
            return match
        if self._spaced_argument():
            prefix, quote, identifier = match.groups()
            if prefix or quote or identifier[0].isupper():
                return match
        return None

    def _scan_heredoc_opener(self, match: re.Match[str]) -> None:
        """Emit the opener and queue its body."""
        prefix, _quote, identifier = match.groups()
        self._pending_heredocs.append(
            PendingHeredoc(
                identifier=identifier,
                indented=bool(prefix),
                line=self._lineno,
                column=self._col,
            )
        )
        self._emit(TokenKind.STRING_BEGIN, match.end())

    def _scan_heredoc_bodies(self) -> None:
        """Scan the bodies of every heredoc opened on the line just ended.

        Called with the cursor at the start of the line after the opener's
        newline.

        Raises:
            LexError: If a terminator is never found
        """
        boundary_kind = self._tokens[-1].kind
        pending = self._pending_heredocs
        self._pending_heredocs = []

        for index, heredoc in enumerate(pending):
            is_last = index == len(pending) - 1
            self._scan_one_heredoc(heredoc, boundary_kind if is_last else None)

    def _scan_one_heredoc(
        self, heredoc: PendingHeredoc, boundary_kind: TokenKind | None
    ) -> None:
        source = self._source
        cursor = self._pos
        while True:
            if cursor >= self._source_len:
                raise LexError(
                    f"Unterminated heredoc {heredoc.identifier}",
                    heredoc.line,
                    heredoc.column,
                    self._source_file,
                )

            line_end = source.find("\n", cursor)
            if line_end == -1:
                line_end = self._source_len
            line_text = source[cursor:line_end]
            candidate = line_text.strip() if heredoc.indented else line_text

            if candidate == heredoc.identifier:
                break
            cursor = line_end + 1

        if cursor > self._pos:
            self._emit(TokenKind.STRING_CONTENT, cursor)

        stripped = line_text.lstrip()
        word_start = cursor + len(line_text) - len(stripped)
        word_end = word_start + len(heredoc.identifier)
        if word_start > self._pos:
            self._emit(TokenKind.WHITESPACE, word_start)
        self._emit(TokenKind.STRING_END, word_end)
        if line_end > word_end:
            self._emit(TokenKind.WHITESPACE, line_end)

        if line_end < self._source_len:
            if boundary_kind is None:
                # Only the last body on the line ends it
                self._emit(TokenKind.WHITESPACE, line_end + 1)
            else:
                self._emit(boundary_kind, line_end + 1)
