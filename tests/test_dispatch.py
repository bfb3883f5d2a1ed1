"""Dispatcher tests: batching, event order and the final flush."""

import pytest

from tailor.dispatch import EVENT_FOR_TOKEN, Dispatcher, Event, EventKind, RuleObserver
from tailor.lexer import tokenize
from tailor.rules import get_rule
from tailor.tokens import Token, TokenKind


def record(dispatcher: Dispatcher, *kinds: EventKind) -> list[Event]:
    events: list[Event] = []
    for kind in kinds:
        dispatcher.register(kind, events.append)
    return events


class TestRegistration:
    """Handlers and event names."""

    def test_register_by_name(self) -> None:
        dispatcher = Dispatcher()
        dispatcher.register("on_keyword", print)
        assert dispatcher.handlers(EventKind.KEYWORD) == (print,)

    def test_unknown_name(self) -> None:
        with pytest.raises(ValueError):
            Dispatcher().register("on_tuesday", print)

    def test_handlers_run_in_registration_order(self) -> None:
        dispatcher = Dispatcher()
        calls: list[str] = []
        dispatcher.register(EventKind.KEYWORD, lambda event: calls.append("first"))
        dispatcher.register(EventKind.KEYWORD, lambda event: calls.append("second"))
        dispatcher.run(tokenize("if x\nend\n"))
        assert calls == ["first", "second", "first", "second"]

    def test_every_event_has_a_token_kind(self) -> None:
        assert set(EVENT_FOR_TOKEN.values()) == set(EventKind)

    def test_rules_are_observers(self) -> None:
        assert isinstance(get_rule("spaces_before_lbrace", 1), RuleObserver)


class TestBatching:
    """Line views handed to handlers."""

    def test_token_event_sees_line_so_far(self) -> None:
        dispatcher = Dispatcher()
        events = record(dispatcher, EventKind.LEFT_PAREN)
        dispatcher.run(tokenize("x = foo(1)\n"))
        (event,) = events
        assert [t.text for t in event.line.tokens] == ["x", " ", "=", " ", "foo", "("]
        assert (event.lineno, event.column) == (1, 7)

    def test_boundary_event_sees_whole_line(self) -> None:
        dispatcher = Dispatcher()
        events = record(dispatcher, EventKind.NEWLINE, EventKind.IGNORED_NEWLINE)
        dispatcher.run(tokenize("a +\n  b\n"))
        assert [e.kind for e in events] == [EventKind.IGNORED_NEWLINE, EventKind.NEWLINE]
        assert events[0].line.text == "a +\n"
        assert events[1].line.text == "  b\n"

    def test_batches_reset_without_boundary_handlers(self) -> None:
        dispatcher = Dispatcher()
        events = record(dispatcher, EventKind.KEYWORD)
        dispatcher.run(tokenize("x = 1\nif y\nend\n"))
        assert [e.line.text for e in events] == ["if", "end"]

    def test_heredoc_body_joins_one_batch(self) -> None:
        dispatcher = Dispatcher()
        events = record(dispatcher, EventKind.NEWLINE)
        dispatcher.run(tokenize("x = <<~EOS\n  a\n  b\nEOS\ny\n"))
        assert [(e.line.lineno, e.line.last_lineno) for e in events] == [
            (1, 1),
            (2, 4),
            (5, 5),
        ]


class TestFinish:
    """The last line is flushed with a synthetic newline."""

    def test_missing_trailing_newline(self) -> None:
        dispatcher = Dispatcher()
        events = record(dispatcher, EventKind.NEWLINE)
        dispatcher.run(tokenize("foo\nbar"))
        assert len(events) == 2
        assert events[-1].token == Token(2, 3, TokenKind.NEWLINE, "")
        assert events[-1].line.text == "bar"

    def test_nothing_to_flush(self) -> None:
        dispatcher = Dispatcher()
        events = record(dispatcher, EventKind.NEWLINE)
        dispatcher.run(tokenize("foo\n"))
        assert len(events) == 1

    def test_flush_after_multiline_token(self) -> None:
        dispatcher = Dispatcher()
        events = record(dispatcher, EventKind.NEWLINE)
        dispatcher.run(tokenize('x = "a\nbc"'))
        assert events[-1].token == Token(2, 3, TokenKind.NEWLINE, "")
