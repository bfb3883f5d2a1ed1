"""Keyword classification: modifiers, loop ``do``, continuations and endless methods."""

import pytest

from tailor.indentation import is_endless_def, is_loop_do, is_trailing_modifier
from tailor.indentation.keywords import KEYWORDS_TO_INDENT, is_continuation_keyword
from tailor.lexer import tokenize
from tailor.tokens import Token, TokenKind


def keyword(source: str, word: str) -> tuple[list[Token], Token]:
    tokens = tokenize(source)
    return tokens, next(t for t in tokens if t.kind is TokenKind.KEYWORD and t.text == word)


class TestTrailingModifier:
    """``if``/``unless``/``while``/``until``/``rescue`` after a complete expression."""

    @pytest.mark.parametrize(
        ("source", "word"),
        [
            ("return if done\n", "if"),
            ("foo unless bar\n", "unless"),
            ("foo(bar) while baz\n", "while"),
            ("x += 1 until done?\n", "until"),
            ("value = compute rescue nil\n", "rescue"),
            ('puts "hi" if loud\n', "if"),
            ("end while x\n", "while"),
            ("[1, 2] if y\n", "if"),
        ],
    )
    def test_modifier(self, source: str, word: str) -> None:
        assert is_trailing_modifier(*keyword(source, word))

    @pytest.mark.parametrize(
        ("source", "word"),
        [
            ("if x\n", "if"),
            ("x = if y\n", "if"),
            ("a; if b\n", "if"),
            ("foo(unless x\n", "unless"),
            ("rescue StandardError => e\n", "rescue"),
            ("  while running\n", "while"),
        ],
    )
    def test_block_opener(self, source: str, word: str) -> None:
        assert not is_trailing_modifier(*keyword(source, word))

    def test_non_modifier_keyword(self) -> None:
        assert not is_trailing_modifier(*keyword("foo do\n", "do"))


class TestLoopDo:
    """The optional ``do`` of a loop header does not open a second block."""

    @pytest.mark.parametrize(
        "source",
        ["while x do\n", "until done do\n", "for i in list do\n", "a; while x do\n"],
    )
    def test_loop_do(self, source: str) -> None:
        assert is_loop_do(*keyword(source, "do"))

    @pytest.mark.parametrize("source", ["foo.each do |x|\n", "loop do\n", "x = foo while y; bar do\n"])
    def test_block_do(self, source: str) -> None:
        assert not is_loop_do(*keyword(source, "do"))


class TestContinuation:
    """Continuation keywords realign with their opener."""

    @pytest.mark.parametrize("word", ["elsif", "else", "ensure", "rescue", "when"])
    def test_continuation(self, word: str) -> None:
        token = Token(1, 0, TokenKind.KEYWORD, word)
        assert is_continuation_keyword(token)
        assert word in KEYWORDS_TO_INDENT

    @pytest.mark.parametrize("word", ["if", "def", "do", "end", "then"])
    def test_not_continuation(self, word: str) -> None:
        assert not is_continuation_keyword(Token(1, 0, TokenKind.KEYWORD, word))

    def test_identifier_is_not_continuation(self) -> None:
        assert not is_continuation_keyword(Token(1, 0, TokenKind.IDENTIFIER, "else"))


class TestEndlessDef:
    """``def name = expression`` has no body."""

    @pytest.mark.parametrize(
        "source",
        [
            "def area = width * height\n",
            "def area() = width * height\n",
            "def scale(by) = size * by\n",
            "def self.default = new\n",
            "def ==(other) = id == other.id\n",
            "def value =\n",
        ],
    )
    def test_endless(self, source: str) -> None:
        assert is_endless_def(*keyword(source, "def"))

    @pytest.mark.parametrize(
        "source",
        [
            "def area\n",
            "def area(width, height)\n",
            "def name=(value)\n",
            "def self.name=(value)\n",
            "def ==(other)\n",
            "def []=(key, value)\n",
            "def a; x = 1\n",
            "def scale(by,\n",
        ],
    )
    def test_with_body(self, source: str) -> None:
        assert not is_endless_def(*keyword(source, "def"))

    def test_other_keywords(self) -> None:
        assert not is_endless_def(*keyword("if x = 1\n", "if"))
