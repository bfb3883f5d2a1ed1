"""Property-based tests for lexer invariants using Hypothesis.

These tests verify that certain properties always hold regardless
of the input, helping catch edge cases that example-based tests miss.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from tailor.errors import LexError
from tailor.lexer import tokenize
from tailor.tokens import LINE_BOUNDARY_KINDS

# Fragments that never form strings, regexes, symbols or heredocs
CODE_SNIPPETS = [
    "foo",
    "bar",
    " ",
    "  ",
    "\n",
    "(",
    ")",
    "[",
    "]",
    "{",
    "}",
    "1",
    "+",
    "-",
    "*",
    ",",
    ".",
    "=",
    ";",
    "&&",
    "|",
    "# c",
    "if",
    "end",
    "do",
    "def",
]

code = st.lists(st.sampled_from(CODE_SNIPPETS), max_size=60).map("".join)


class TestTextPreservation:
    """Tokens cover the source exactly."""

    @given(code)
    @settings(max_examples=200)
    def test_token_texts_reassemble_source(self, source: str) -> None:
        """Concatenating token texts gives back the source."""
        tokens = tokenize(source)
        assert "".join(token.text for token in tokens) == source

    @given(code)
    @settings(max_examples=200)
    def test_no_empty_tokens(self, source: str) -> None:
        assert all(token.text for token in tokenize(source))


class TestPositions:
    """Token positions match their offsets in the source."""

    @given(code)
    @settings(max_examples=200)
    def test_positions_follow_text(self, source: str) -> None:
        line, column = 1, 0
        for token in tokenize(source):
            assert (token.line, token.column) == (line, column)
            newlines = token.text.count("\n")
            if newlines:
                line += newlines
                column = len(token.text) - token.text.rfind("\n") - 1
            else:
                column += len(token.text)

    @given(code)
    @settings(max_examples=200)
    def test_every_newline_is_a_boundary(self, source: str) -> None:
        """Outside literals, each newline character is its own boundary token."""
        tokens = tokenize(source)
        boundaries = [token for token in tokens if token.kind in LINE_BOUNDARY_KINDS]
        assert len(boundaries) == source.count("\n") - sum(
            token.text.count("\n") for token in tokens if token.kind not in LINE_BOUNDARY_KINDS
        )
        assert all(token.text == "\n" for token in boundaries)


class TestRobustness:
    """Arbitrary input either tokenizes or raises LexError."""

    @given(st.text(max_size=200))
    @settings(max_examples=300)
    def test_only_lex_errors(self, source: str) -> None:
        try:
            tokens = tokenize(source)
        except LexError:
            return
        assert isinstance(tokens, list)

    @given(st.text(alphabet="abc =+-*/%<>?:'\"#{}()[],.\n\\", max_size=80))
    @settings(max_examples=300)
    def test_ruby_punctuation_only_lex_errors(self, source: str) -> None:
        try:
            tokenize(source)
        except LexError:
            pass
