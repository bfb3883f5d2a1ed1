"""Argument alignment.

Each case is checked three ways: with the option unset, explicitly off,
and enabled. Continuation lines of a parenthesized argument list pass
either at the generic indent (alignment off) or at the column after the
opening paren (alignment on), never both.
"""

import pytest

from tailor import Critic, Level, StyleConfig

ARG_INDENT = {
    "def_no_arguments": "def foo\n  true\nend",
    "def_arguments_fit_on_one_line": "def foo(foo, bar, baz)\n  true\nend",
    "def_arguments_aligned": (
        "def something(waka, baka, bing\n"
        "              bla, goop, foop)\n"
        "  stuff\n"
        "end\n"
    ),
    "def_arguments_indented": (
        "def something(waka, baka, bing\n"
        "  bla, goop, foop)\n"
        "  stuff\n"
        "end\n"
    ),
    "call_no_arguments": "bla = method()",
    "call_arguments_fit_on_one_line": "bla = method(foo, bar, baz, bing, ding)",
    "call_arguments_aligned": (
        "bla = Something::SomethingElse::SomeClass.method(foo, bar, baz,\n"
        "                                                 bing, ding)\n"
    ),
    "call_arguments_aligned_no_parens": (
        "bla = Something::SomethingElse::SomeClass.method foo, bar, baz,\n"
        "                                                 bing, ding\n"
    ),
    "call_arguments_aligned_multiple_lines": (
        "bla = Something::SomethingElse::SomeClass.method(foo, bar, baz,\n"
        "                                                 bing, ding,\n"
        "                                                 ginb, gind)\n"
    ),
    "call_arguments_indented": (
        "bla = Something::SomethingElse::SomeClass.method(foo, bar, baz,\n"
        "  bing, ding)\n"
    ),
    "call_arguments_indented_separate_line": (
        "bla = Something::SomethingElse::SomeClass.method(\n"
        "  foo, bar, baz,\n"
        "  bing, ding\n"
        ")"
    ),
}

# (line, column, expected column) per misindented line
GENERIC_PROBLEMS = {
    "def_arguments_aligned": [(2, 14, 2)],
    "call_arguments_aligned": [(2, 49, 2)],
    "call_arguments_aligned_no_parens": [(2, 49, 2)],
    "call_arguments_aligned_multiple_lines": [(2, 49, 2), (3, 49, 2)],
}

ALIGNED_PROBLEMS = {
    "def_arguments_indented": [(2, 2, 14)],
    "call_arguments_indented": [(2, 2, 49)],
    # Calls without parentheses are not aligned
    "call_arguments_aligned_no_parens": [(2, 49, 2)],
}


def check(case: str, style: StyleConfig) -> list[tuple[int, int, int]]:
    problems = Critic(style).check_source(ARG_INDENT[case], file_name=case)
    for problem in problems:
        assert problem.type == "indentation"
        assert problem.level is Level.ERROR
        assert problem.message == (
            f"Line is indented to column {problem.column}, "
            f"but should be at {problem.detail['should_be_at']}."
        )
    return [(p.line, p.column, p.detail["should_be_at"]) for p in problems]


class TestArgumentAlignment:
    """Original argument-alignment cases."""

    @pytest.mark.parametrize("case", sorted(ARG_INDENT))
    def test_not_specified(self, case: str) -> None:
        style = StyleConfig.from_dict({"indentation_spaces": {"value": 2}})
        assert check(case, style) == GENERIC_PROBLEMS.get(case, [])

    @pytest.mark.parametrize("case", sorted(ARG_INDENT))
    def test_disabled(self, case: str) -> None:
        style = StyleConfig().with_rule(
            "indentation_spaces", 2, level="error", argument_alignment="off"
        )
        assert check(case, style) == GENERIC_PROBLEMS.get(case, [])

    @pytest.mark.parametrize("case", sorted(ARG_INDENT))
    def test_enabled(self, case: str) -> None:
        style = StyleConfig().with_rule(
            "indentation_spaces", 2, level="error", argument_alignment=True
        )
        assert check(case, style) == ALIGNED_PROBLEMS.get(case, [])

    def test_message(self) -> None:
        style = StyleConfig().with_rule("indentation_spaces", 2, argument_alignment=True)
        (problem,) = Critic(style).check_source(ARG_INDENT["call_arguments_indented"])
        assert problem.message == "Line is indented to column 2, but should be at 49."
        assert problem.detail == {"actual_indentation": 2, "should_be_at": 49}
