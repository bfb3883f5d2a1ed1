"""Property-based tests for the indentation state machine using Hypothesis."""

from hypothesis import given, settings
from hypothesis import strategies as st

from tailor import Critic
from tailor.dispatch import Dispatcher
from tailor.indentation import IndentationStateMachine
from tailor.lexer import tokenize

CLOSERS = {"(": ")", "[": "]", "{": "}"}

atoms = st.sampled_from(["a", "1", "foo", "bar(1)"])


def _wrap(inner: st.SearchStrategy[str]) -> st.SearchStrategy[str]:
    return st.tuples(st.sampled_from(sorted(CLOSERS)), inner, st.sampled_from(["", "\n"])).map(
        lambda parts: parts[0] + parts[2] + parts[1] + parts[2] + CLOSERS[parts[0]]
    )


def _pair(inner: st.SearchStrategy[str]) -> st.SearchStrategy[str]:
    return st.tuples(inner, inner).map(lambda parts: f"{parts[0]}, {parts[1]}")


# Balanced bracket expressions, possibly spread over several lines
expressions = st.recursive(atoms, lambda inner: st.one_of(_wrap(inner), _pair(inner)), max_leaves=12)

BLOCK_FORMS = {
    "elsif": ["if a", "  b", "elsif c", "  d", "end"],
    "else": ["if a", "  b", "else", "  d", "end"],
    "when": ["case x", "when 1", "  a", "when 2", "  b", "end"],
    "rescue": ["begin", "  a", "rescue", "  b", "end"],
    "ensure": ["begin", "  a", "ensure", "  b", "end"],
}


def run(source: str) -> IndentationStateMachine:
    machine = IndentationStateMachine()
    dispatcher = Dispatcher()
    machine.subscribe(dispatcher)
    dispatcher.run(tokenize(source))
    return machine


def nest(lines: list[str], depth: int) -> str:
    """Wrap ``lines`` in ``depth`` correctly indented method definitions."""
    body = list(lines)
    for level in range(depth):
        body = [f"def m{level}"] + [f"  {line}" for line in body] + ["end"]
    return "\n".join(body) + "\n"


class TestBalance:
    """Balanced input leaves no state behind."""

    @given(st.lists(expressions, min_size=1, max_size=4))
    @settings(max_examples=150)
    def test_groups_and_frames_released(self, statements: list[str]) -> None:
        machine = run("\n".join(f"x = {statement}" for statement in statements) + "\n")
        state = machine.state
        assert state.paren_lines == []
        assert state.bracket_lines == []
        assert state.brace_lines == []
        assert state.open_frames == []
        assert state.expected_next_line == 0

    @given(st.integers(min_value=0, max_value=5))
    @settings(max_examples=20)
    def test_nested_definitions(self, depth: int) -> None:
        machine = run(nest(["x"], depth))
        assert machine.measurements == []
        assert machine.state.keyword_lines == []


class TestContinuationKeywords:
    """Continuation keywords sit at their opener's column at any depth."""

    @given(st.sampled_from(sorted(BLOCK_FORMS)), st.integers(min_value=0, max_value=4))
    @settings(max_examples=50)
    def test_well_indented(self, form: str, depth: int) -> None:
        assert run(nest(BLOCK_FORMS[form], depth)).measurements == []

    @given(st.sampled_from(sorted(BLOCK_FORMS)), st.integers(min_value=0, max_value=4))
    @settings(max_examples=50)
    def test_expectation_never_negative(self, form: str, depth: int) -> None:
        lines = [line.strip() for line in BLOCK_FORMS[form]]
        machine = run(nest(lines, depth))
        assert all(m.expected >= 0 for m in machine.measurements)
        assert machine.state.expected_this_line >= 0


class TestDeterminism:
    """Checking is a pure function of source and style."""

    SNIPPETS = [
        "foo", " ", "  ", "\n", "(", ")", "[", "]", "{", "}",
        "1", "+", ",", ".bar", "# c\n", "if ", "end", "x = 1", "do",
    ]  # fmt: skip

    @given(st.lists(st.sampled_from(SNIPPETS), max_size=40).map("".join))
    @settings(max_examples=150)
    def test_repeatable(self, source: str) -> None:
        critic = Critic()
        first = critic.check_source(source)
        assert critic.check_source(source) == first
        assert Critic().check_source(source) == first

    @given(st.lists(st.sampled_from(SNIPPETS), max_size=40).map("".join))
    @settings(max_examples=150)
    def test_problems_sorted_by_line(self, source: str) -> None:
        lines = [problem.line for problem in Critic().check_source(source)]
        assert lines == sorted(lines)
