"""Hand-written lexer for Ruby source.

Produces the position-tagged token stream the dispatcher and rules consume.
It is not a grammar-accurate Ruby lexer: it distinguishes exactly what the
rules need (keywords, groups, commas, periods, operators, string boundaries,
newline vs ignored newline) and resolves the classic ambiguities (``/``,
``%``, ``<<``, ``?``, ``:``) from the previous token, the way Ruby itself
does for the common cases.

Thread Safety:
Lexer instances are single-use. Create one per source string.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from tailor.errors import LexError
from tailor.lexer.keywords import (
    KEYWORDS,
    OPERATOR_CHARS,
    OPERATORS,
    SYMBOL_OPERATORS,
    VALUE_KEYWORDS,
)
from tailor.lexer.scanners import (
    HeredocScannerMixin,
    PendingHeredoc,
    StringScannerMixin,
)
from tailor.tokens import LINE_BOUNDARY_KINDS, Token, TokenKind

_GROUP_KINDS = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
}

# After one of these a value (literal, operand) is expected
_VALUE_EXPECTING_KINDS = frozenset(
    {
        TokenKind.NEWLINE,
        TokenKind.IGNORED_NEWLINE,
        TokenKind.OPERATOR,
        TokenKind.COMMA,
        TokenKind.LPAREN,
        TokenKind.LBRACKET,
        TokenKind.LBRACE,
        TokenKind.EMBEXPR_BEGIN,
    }
)

# Tokens that leave an expression open across a newline
_CONTINUING_KINDS = _VALUE_EXPECTING_KINDS | {TokenKind.PERIOD}


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


class Lexer(StringScannerMixin, HeredocScannerMixin):
    """Single-pass lexer for Ruby source.

    Usage:
        >>> tokens = Lexer("def foo\\nend\\n").tokenize()
        >>> [t.kind.name for t in tokens]
        ['KEYWORD', 'WHITESPACE', 'IDENTIFIER', 'NEWLINE', 'KEYWORD', 'NEWLINE']

    Thread Safety:
        Lexer instances are single-use. Create one per source string.

    """

    __slots__ = (
        "_source",
        "_source_len",
        "_pos",
        "_lineno",
        "_col",
        "_source_file",
        "_tokens",
        "_last_code",  # Last token that is not whitespace or a comment
        "_interp_depths",  # Open-brace count per open string interpolation
        "_group_depth",  # Open ( and [ count
        "_pending_heredocs",
    )

    def __init__(self, source: str, source_file: str | None = None) -> None:
        """Initialize lexer with source text.

        Args:
            source: Ruby source text
            source_file: Optional source file path for error messages
        """
        self._source = source.replace("\r\n", "\n")
        self._source_len = len(self._source)
        self._pos = 0
        self._lineno = 1
        self._col = 0
        self._source_file = source_file
        self._tokens: list[Token] = []
        self._last_code: Token | None = None
        self._interp_depths: list[int] = []
        self._group_depth = 0
        self._pending_heredocs: list[PendingHeredoc] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the whole source.

        Returns:
            Tokens in source order.

        Raises:
            LexError: If the source cannot be tokenized.
        """
        self._scan_code()
        if self._pending_heredocs:
            heredoc = self._pending_heredocs[0]
            raise LexError(
                f"Unterminated heredoc {heredoc.identifier}",
                heredoc.line,
                heredoc.column,
                self._source_file,
            )
        return self._tokens

    # =========================================================================
    # Main loop
    # =========================================================================

    def _scan_code(self, in_interpolation: bool = False) -> None:
        """Scan code until EOF, or until the ``}`` closing an interpolation.

        Args:
            in_interpolation: Stop at the brace closing the innermost ``#{``.

        Raises:
            LexError: On unexpected characters or unterminated constructs.
        """
        source = self._source
        while self._pos < self._source_len:
            char = source[self._pos]
            nxt = source[self._pos + 1 : self._pos + 2]

            if char in " \t\f\v\r":
                self._scan_whitespace()
            elif char == "\\" and nxt == "\n":
                # Escaped newline: the statement continues on the next line
                self._emit(TokenKind.WHITESPACE, self._pos + 2)
            elif char == "\n":
                self._scan_newline()
            elif char == "#":
                end = source.find("\n", self._pos)
                self._emit(TokenKind.COMMENT, end if end != -1 else self._source_len)
            elif self._col == 0 and self._at_line_marker("=begin"):
                self._scan_embedded_document()
            elif self._col == 0 and self._at_line_marker("__END__"):
                self._advance_to(self._source_len)
            elif char.isdigit():
                self._scan_number()
            elif _is_word_char(char) or ord(char) > 127:
                self._scan_word()
            elif char == "@" or char == "$":
                self._scan_variable()
            elif char in "\"'`":
                self._scan_quoted(char)
            elif char == ":":
                self._scan_colon()
            elif char == "?":
                self._scan_question_mark()
            elif char == "%" and self._percent_literal_ahead():
                self._scan_percent_literal()
            elif char == "/" and self._regex_allowed():
                self._scan_regex()
            elif char == "<" and (match := self._heredoc_ahead()) is not None:
                self._scan_heredoc_opener(match)
            elif char in "([{":
                self._scan_opening(char, in_interpolation)
            elif char in ")]}":
                if self._scan_closing(char, in_interpolation):
                    return
            elif char == ",":
                self._emit(TokenKind.COMMA, self._pos + 1)
            elif char == ";":
                self._emit(TokenKind.IDENTIFIER, self._pos + 1)
            elif char == "." or (char == "&" and nxt == "."):
                self._scan_period()
            elif char in OPERATOR_CHARS:
                self._scan_operator()
            else:
                raise LexError(
                    f"Unexpected character {char!r}",
                    self._lineno,
                    self._col,
                    self._source_file,
                )

        if in_interpolation:
            raise LexError(
                "Unterminated string interpolation",
                self._lineno,
                self._col,
                self._source_file,
            )

    # =========================================================================
    # Token scanners
    # =========================================================================

    def _scan_whitespace(self) -> None:
        end = self._pos
        while end < self._source_len and self._source[end] in " \t\f\v\r":
            end += 1
        self._emit(TokenKind.WHITESPACE, end)

    def _scan_newline(self) -> None:
        """Emit NEWLINE or IGNORED_NEWLINE, then any pending heredoc bodies."""
        if self._continues_expression():
            kind = TokenKind.IGNORED_NEWLINE
        else:
            kind = TokenKind.NEWLINE
        self._emit(kind, self._pos + 1)

        if self._pending_heredocs:
            self._scan_heredoc_bodies()

    def _scan_embedded_document(self) -> None:
        """Emit a ``=begin`` ... ``=end`` block as one COMMENT token."""
        start_line = self._lineno
        cursor = self._source.find("\n", self._pos)
        while cursor != -1:
            line_start = cursor + 1
            if self._is_marker_at(line_start, "=end"):
                line_end = self._source.find("\n", line_start)
                if line_end == -1:
                    line_end = self._source_len
                self._emit(TokenKind.COMMENT, line_end)
                return
            cursor = self._source.find("\n", line_start)

        raise LexError(
            "Unterminated embedded document",
            start_line,
            0,
            self._source_file,
        )

    def _scan_number(self) -> None:
        source = self._source
        end = self._pos
        while end < self._source_len:
            char = source[end]
            if char in "eE" and source[end + 1 : end + 2] in ("+", "-"):
                end += 2
            elif _is_word_char(char):
                end += 1
            elif char == "." and source[end + 1 : end + 2].isdigit():
                end += 1
            else:
                break
        self._emit(TokenKind.IDENTIFIER, end)

    def _scan_word(self) -> None:
        """Scan an identifier, constant, keyword or label."""
        source = self._source
        end = self._pos
        while end < self._source_len and (
            _is_word_char(source[end]) or ord(source[end]) > 127
        ):
            end += 1

        # Predicate/bang suffix, but not the start of != or ?=
        if source[end : end + 1] in ("?", "!") and (
            source[end + 1 : end + 2] != "=" or source[end + 1 : end + 3] == "=="
        ):
            end += 1

        word = source[self._pos : end]
        last = self._last_code

        # Label: `if: 1`, `foo(key: 1)`
        if (
            source[end : end + 1] == ":"
            and source[end + 1 : end + 2] != ":"
            and not (last is not None and last.kind is TokenKind.OPERATOR and last.text == "?")
        ):
            self._emit(TokenKind.IDENTIFIER, end + 1)
            return

        if word in KEYWORDS and not self._after_method_reference():
            self._emit(TokenKind.KEYWORD, end)
        else:
            self._emit(TokenKind.IDENTIFIER, end)

    def _scan_variable(self) -> None:
        """Scan @ivar, @@cvar, $global, $1, $!, $-w."""
        source = self._source
        end = self._pos + 1
        if source[self._pos] == "@":
            if source[end : end + 1] == "@":
                end += 1
        elif source[end : end + 1] == "-":
            end += 2
        elif end < self._source_len and not _is_word_char(source[end]):
            end += 1

        while end < self._source_len and _is_word_char(source[end]):
            end += 1
        self._emit(TokenKind.IDENTIFIER, min(end, self._source_len))

    def _scan_colon(self) -> None:
        """Scan ``::``, symbols, quoted symbols and the ternary colon."""
        source = self._source
        nxt = source[self._pos + 1 : self._pos + 2]
        symbol_position = self._value_expected() or self._after_whitespace()

        if nxt == ":":
            self._emit(TokenKind.OPERATOR, self._pos + 2)
        elif nxt in ('"', "'") and nxt and symbol_position:
            self._scan_quoted_symbol()
        elif nxt and (_is_word_char(nxt) or nxt in "@$") and symbol_position:
            end = self._pos + 1
            while end < self._source_len and (
                _is_word_char(source[end]) or source[end] in "@$"
            ):
                end += 1
            if source[end : end + 1] in ("?", "!", "=") and source[end + 1 : end + 2] not in (
                "=",
                ">",
                "~",
            ):
                end += 1
            self._emit(TokenKind.IDENTIFIER, end)
        elif nxt and symbol_position:
            for name in SYMBOL_OPERATORS:
                if source.startswith(name, self._pos + 1):
                    self._emit(TokenKind.IDENTIFIER, self._pos + 1 + len(name))
                    return
            self._emit(TokenKind.OPERATOR, self._pos + 1)
        else:
            self._emit(TokenKind.OPERATOR, self._pos + 1)

    def _scan_question_mark(self) -> None:
        """Scan a ``?c`` character literal or the ternary operator."""
        source = self._source
        nxt = source[self._pos + 1 : self._pos + 2]
        after = source[self._pos + 2 : self._pos + 3]

        if (
            nxt
            and not nxt.isspace()
            and (self._value_expected() or self._after_whitespace())
        ):
            if nxt == "\\":
                self._emit(TokenKind.IDENTIFIER, min(self._pos + 3, self._source_len))
                return
            if not (after and _is_word_char(after)):
                self._emit(TokenKind.IDENTIFIER, self._pos + 2)
                return
        self._emit(TokenKind.OPERATOR, self._pos + 1)

    def _scan_opening(self, char: str, in_interpolation: bool) -> None:
        if char == "{":
            if in_interpolation:
                self._interp_depths[-1] += 1
        else:
            self._group_depth += 1
        self._emit(_GROUP_KINDS[char], self._pos + 1)

    def _scan_closing(self, char: str, in_interpolation: bool) -> bool:
        """Emit a closing group token.

        Returns:
            True when the brace closed the interpolation being scanned.
        """
        if char == "}":
            if in_interpolation:
                if self._interp_depths[-1] == 0:
                    self._interp_depths.pop()
                    self._emit(TokenKind.EMBEXPR_END, self._pos + 1)
                    return True
                self._interp_depths[-1] -= 1
        elif self._group_depth:
            self._group_depth -= 1
        self._emit(_GROUP_KINDS[char], self._pos + 1)
        return False

    def _scan_period(self) -> None:
        """Scan ``.``, ``&.``, ``..`` and ``...``."""
        source = self._source
        if source.startswith("...", self._pos):
            self._emit(TokenKind.OPERATOR, self._pos + 3)
        elif source.startswith("..", self._pos):
            self._emit(TokenKind.OPERATOR, self._pos + 2)
        elif source[self._pos] == "&":
            self._emit(TokenKind.PERIOD, self._pos + 2)
        else:
            self._emit(TokenKind.PERIOD, self._pos + 1)

    def _scan_operator(self) -> None:
        for operator in OPERATORS:
            if self._source.startswith(operator, self._pos):
                self._emit(TokenKind.OPERATOR, self._pos + len(operator))
                return

    # =========================================================================
    # Context predicates
    # =========================================================================

    def _value_expected(self) -> bool:
        """Check whether the previous code token leaves a value expected.

        True at the start of a statement, after operators, commas, opening
        groups and keywords other than value keywords (``end``, ``self``...).
        """
        last = self._last_code
        if last is None or last.kind in _VALUE_EXPECTING_KINDS:
            return True
        if last.kind is TokenKind.KEYWORD:
            return last.text not in VALUE_KEYWORDS
        return last.kind is TokenKind.IDENTIFIER and last.text == ";"

    def _spaced_argument(self) -> bool:
        """Check for a command-style argument: ``puts /x/``, ``foo %w[a]``.

        The previous code token is an identifier, whitespace separates it
        from the cursor, and no whitespace follows the current character.
        """
        last = self._last_code
        if last is None or last.kind is not TokenKind.IDENTIFIER:
            return False
        nxt = self._source[self._pos + 1 : self._pos + 2]
        return self._after_whitespace() and bool(nxt) and not nxt.isspace() and nxt != "="

    def _after_whitespace(self) -> bool:
        return bool(self._tokens) and self._tokens[-1].kind is TokenKind.WHITESPACE

    def _after_method_reference(self) -> bool:
        """True when a keyword-looking word is really a method name.

        ``foo.class``, ``Foo::end``, ``def end``.
        """
        last = self._last_code
        if last is None:
            return False
        if last.kind is TokenKind.PERIOD:
            return True
        if last.kind is TokenKind.OPERATOR and last.text == "::":
            return True
        return last.kind is TokenKind.KEYWORD and last.text == "def"

    def _continues_expression(self) -> bool:
        """Decide whether the newline at the cursor is an ignored newline.

        It is when the line has no code, when an open paren or bracket spans
        it, or when the line's last code token expects more to follow.
        """
        last = self._last_code
        if last is None or last.kind in LINE_BOUNDARY_KINDS:
            return True
        if self._group_depth:
            return True
        if last.kind in _CONTINUING_KINDS:
            return True
        if last.kind is TokenKind.IDENTIFIER:
            return last.text == ";"
        return last.kind is TokenKind.KEYWORD and last.text not in VALUE_KEYWORDS

    def _at_line_marker(self, marker: str) -> bool:
        return self._is_marker_at(self._pos, marker)

    def _is_marker_at(self, pos: int, marker: str) -> bool:
        """Check for ``marker`` at ``pos`` followed by whitespace or EOF."""
        if not self._source.startswith(marker, pos):
            return False
        follow = self._source[pos + len(marker) : pos + len(marker) + 1]
        return not follow or follow.isspace()

    # =========================================================================
    # Position tracking
    # =========================================================================

    def _emit(self, kind: TokenKind, end: int) -> None:
        """Emit source[pos:end] as a token and move the cursor to ``end``."""
        text = self._source[self._pos : end]
        token = Token(line=self._lineno, column=self._col, kind=kind, text=text)
        self._tokens.append(token)
        if kind is not TokenKind.WHITESPACE and kind is not TokenKind.COMMENT:
            self._last_code = token
        self._advance_to(end)

    def _advance_to(self, end: int) -> None:
        """Move the cursor to ``end``, updating line and column."""
        segment = self._source[self._pos : end]
        newline_count = segment.count("\n")
        if newline_count:
            self._lineno += newline_count
            self._col = len(segment) - segment.rfind("\n") - 1
        else:
            self._col += len(segment)
        self._pos = end


def tokenize(source: str, source_file: str | None = None) -> list[Token]:
    """Tokenize Ruby source.

    Args:
        source: Ruby source text
        source_file: Optional path used in error messages

    Returns:
        Tokens in source order.

    Raises:
        LexError: If the source cannot be tokenized.

    Example:
        >>> [t.text for t in tokenize("foo(1)")]
        ['foo', '(', '1', ')']
    """
    return Lexer(source, source_file=source_file).tokenize()
