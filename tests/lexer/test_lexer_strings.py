"""String literal tests: quotes, interpolation, % literals, regexes, heredocs."""

import pytest

from tailor.lexer import tokenize
from tailor.tokens import Token, TokenKind


def string_tokens(source: str) -> list[tuple[TokenKind, str]]:
    string_kinds = {
        TokenKind.STRING_BEGIN,
        TokenKind.STRING_CONTENT,
        TokenKind.STRING_END,
        TokenKind.EMBEXPR_BEGIN,
        TokenKind.EMBEXPR_END,
    }
    return [(t.kind, t.text) for t in tokenize(source) if t.kind in string_kinds]


class TestQuotedStrings:
    """Double-, single- and back-quoted literals."""

    def test_plain_double_quoted(self) -> None:
        assert string_tokens('x = "abc"\n') == [
            (TokenKind.STRING_BEGIN, '"'),
            (TokenKind.STRING_CONTENT, "abc"),
            (TokenKind.STRING_END, '"'),
        ]

    def test_empty_string_has_no_content(self) -> None:
        assert string_tokens('x = ""\n') == [
            (TokenKind.STRING_BEGIN, '"'),
            (TokenKind.STRING_END, '"'),
        ]

    def test_escaped_quote(self) -> None:
        assert string_tokens('"a\\"b"')[1] == (TokenKind.STRING_CONTENT, 'a\\"b')

    def test_interpolation(self) -> None:
        assert string_tokens('"a#{b}c"') == [
            (TokenKind.STRING_BEGIN, '"'),
            (TokenKind.STRING_CONTENT, "a"),
            (TokenKind.EMBEXPR_BEGIN, "#{"),
            (TokenKind.EMBEXPR_END, "}"),
            (TokenKind.STRING_CONTENT, "c"),
            (TokenKind.STRING_END, '"'),
        ]

    def test_interpolated_code_is_tokenized(self) -> None:
        tokens = tokenize('"#{foo(1)}"')
        assert Token(1, 3, TokenKind.IDENTIFIER, "foo") in tokens
        assert Token(1, 6, TokenKind.LPAREN, "(") in tokens

    def test_braces_inside_interpolation(self) -> None:
        kinds = [t.kind for t in tokenize('"#{h.map { |x| x }}"')]
        assert kinds.count(TokenKind.LBRACE) == 1
        assert kinds.count(TokenKind.RBRACE) == 1
        assert kinds.count(TokenKind.EMBEXPR_END) == 1

    def test_nested_string_in_interpolation(self) -> None:
        kinds = [t.kind for t in tokenize('"#{"#{a}"}"')]
        assert kinds.count(TokenKind.STRING_BEGIN) == 2
        assert kinds.count(TokenKind.EMBEXPR_BEGIN) == 2
        assert kinds.count(TokenKind.STRING_END) == 2

    def test_single_quoted_does_not_interpolate(self) -> None:
        assert string_tokens("'a#{b}'") == [
            (TokenKind.STRING_BEGIN, "'"),
            (TokenKind.STRING_CONTENT, "a#{b}"),
            (TokenKind.STRING_END, "'"),
        ]

    def test_multiline_string_content(self) -> None:
        tokens = tokenize('x = "a\nb"\ny\n')
        content = next(t for t in tokens if t.kind is TokenKind.STRING_CONTENT)
        assert content.text == "a\nb"
        assert content.end_line == 2
        assert tokens[-2] == Token(3, 0, TokenKind.IDENTIFIER, "y")

    def test_quoted_symbol(self) -> None:
        assert string_tokens('x = :"a#{b}"')[0] == (TokenKind.STRING_BEGIN, ':"')


class TestPercentLiterals:
    """``%w[]``, ``%q()``, ``%()`` and friends."""

    def test_word_list(self) -> None:
        assert string_tokens("%w[a b]") == [
            (TokenKind.STRING_BEGIN, "%w["),
            (TokenKind.STRING_CONTENT, "a b"),
            (TokenKind.STRING_END, "]"),
        ]

    def test_nested_delimiters(self) -> None:
        assert string_tokens("%q(a (b) c)")[1] == (TokenKind.STRING_CONTENT, "a (b) c")

    def test_bare_percent_interpolates(self) -> None:
        assert (TokenKind.EMBEXPR_BEGIN, "#{") in string_tokens("x = %(#{a})")

    def test_lowercase_literal_does_not_interpolate(self) -> None:
        assert (TokenKind.EMBEXPR_BEGIN, "#{") not in string_tokens("x = %w(#{a})")

    def test_modulo_is_operator(self) -> None:
        assert (TokenKind.OPERATOR, "%") in [(t.kind, t.text) for t in tokenize("a % b\n")]


class TestRegexes:
    """``/`` is a regex where a value is expected and division elsewhere."""

    def test_regex_after_operator(self) -> None:
        assert string_tokens("x =~ /ab+/i") == [
            (TokenKind.STRING_BEGIN, "/"),
            (TokenKind.STRING_CONTENT, "ab+"),
            (TokenKind.STRING_END, "/i"),
        ]

    def test_division(self) -> None:
        tokens = tokenize("a / b\n")
        assert (TokenKind.OPERATOR, "/") in [(t.kind, t.text) for t in tokens]
        assert not any(t.kind is TokenKind.STRING_BEGIN for t in tokens)

    def test_regex_as_command_argument(self) -> None:
        assert string_tokens("puts /x/\n")[0] == (TokenKind.STRING_BEGIN, "/")

    def test_percent_r(self) -> None:
        assert string_tokens("x = %r{a/b}m")[-1] == (TokenKind.STRING_END, "}m")


class TestHeredocs:
    """Heredoc openers, bodies and terminators."""

    def test_squiggly_heredoc(self) -> None:
        tokens = tokenize("x = <<~EOS\n  hello\nEOS\ny\n")
        assert [t.kind for t in tokens] == [
            TokenKind.IDENTIFIER,
            TokenKind.WHITESPACE,
            TokenKind.OPERATOR,
            TokenKind.WHITESPACE,
            TokenKind.STRING_BEGIN,
            TokenKind.NEWLINE,
            TokenKind.STRING_CONTENT,
            TokenKind.STRING_END,
            TokenKind.NEWLINE,
            TokenKind.IDENTIFIER,
            TokenKind.NEWLINE,
        ]
        assert tokens[6] == Token(2, 0, TokenKind.STRING_CONTENT, "  hello\n")
        assert tokens[7] == Token(3, 0, TokenKind.STRING_END, "EOS")
        assert tokens[9] == Token(4, 0, TokenKind.IDENTIFIER, "y")

    def test_indented_terminator(self) -> None:
        tokens = tokenize("  x = <<-EOS\n    body\n  EOS\n")
        assert Token(3, 0, TokenKind.WHITESPACE, "  ") in tokens
        assert Token(3, 2, TokenKind.STRING_END, "EOS") in tokens

    def test_code_after_opener_stays_on_its_line(self) -> None:
        tokens = tokenize("foo(<<~A, 1)\nbody\nA\n")
        rparen = next(t for t in tokens if t.kind is TokenKind.RPAREN)
        assert (rparen.line, rparen.column) == (1, 11)

    def test_two_heredocs_on_one_line(self) -> None:
        tokens = tokenize("foo(<<~A, <<~B)\na\nA\nb\nB\nz\n")
        ends = [t for t in tokens if t.kind is TokenKind.STRING_END]
        assert [(t.text, t.line) for t in ends] == [("A", 3), ("B", 5)]
        assert tokens[-2] == Token(6, 0, TokenKind.IDENTIFIER, "z")
        assert "".join(t.text for t in tokens) == "foo(<<~A, <<~B)\na\nA\nb\nB\nz\n"

    def test_quoted_identifier(self) -> None:
        assert string_tokens("x = <<~'EOS'\n#{a}\nEOS\n") == [
            (TokenKind.STRING_BEGIN, "<<~'EOS'"),
            (TokenKind.STRING_CONTENT, "#{a}\n"),
            (TokenKind.STRING_END, "EOS"),
        ]

    def test_shift_operator(self) -> None:
        tokens = tokenize("a << b\n")
        assert (TokenKind.OPERATOR, "<<") in [(t.kind, t.text) for t in tokens]

    def test_singleton_class(self) -> None:
        tokens = tokenize("class <<self\nend\n")
        assert not any(t.kind is TokenKind.STRING_BEGIN for t in tokens)

    @pytest.mark.parametrize("terminator", ["EOS", "EOS\n"])
    def test_terminator_at_end_of_source(self, terminator: str) -> None:
        tokens = tokenize(f"x = <<~EOS\nbody\n{terminator}")
        assert tokens[-1].kind in (TokenKind.STRING_END, TokenKind.NEWLINE)
