"""Indentation rule.

Wraps an IndentationStateMachine and turns its measurements into
``indentation`` problems. The rule's value is the indent width; the
``argument_alignment`` option switches argument-list alignment on.

Checking can be suspended for a region of a file:

    # tailor:off
    ...
    # tailor:on

The machine keeps tracking state inside the region so lines after it are
measured correctly.

"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from tailor.config import normalize_argument_alignment
from tailor.dispatch import EventKind
from tailor.indentation import IndentationStateMachine
from tailor.problem import Level
from tailor.rules import register_rule
from tailor.rules.base import Rule

if TYPE_CHECKING:
    from tailor.dispatch import Dispatcher, Event

_DIRECTIVE = re.compile(r"#\s*tailor:(on|off)\b")

_MACHINE_EVENTS = (
    EventKind.KEYWORD,
    EventKind.LEFT_PAREN,
    EventKind.RIGHT_PAREN,
    EventKind.LEFT_BRACKET,
    EventKind.RIGHT_BRACKET,
    EventKind.LEFT_BRACE,
    EventKind.RIGHT_BRACE,
    EventKind.EMBEDDED_EXPR_BEGIN,
    EventKind.EMBEDDED_EXPR_END,
    EventKind.STRING_BEGIN,
    EventKind.STRING_END,
)


@register_rule("indentation_spaces")
class IndentationSpacesRule(Rule):
    """Checks each line's indentation against the expected column."""

    events = (
        *_MACHINE_EVENTS,
        EventKind.COMMENT,
        EventKind.NEWLINE,
        EventKind.IGNORED_NEWLINE,
    )

    def __init__(
        self,
        value: int,
        *,
        level: Level | str = Level.ERROR,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(value, level=level, options=options)
        self.machine = IndentationStateMachine(
            spaces=value,
            argument_alignment=normalize_argument_alignment(
                self.options.get("argument_alignment")
            ),
            strict=bool(self.options.get("strict", False)),
        )

    def subscribe(self, dispatcher: Dispatcher) -> None:
        for kind in _MACHINE_EVENTS:
            dispatcher.register(kind, getattr(self.machine, kind.value))
        dispatcher.register(EventKind.COMMENT, self.on_comment)
        dispatcher.register(EventKind.NEWLINE, self.on_newline)
        dispatcher.register(EventKind.IGNORED_NEWLINE, self.on_ignored_newline)

    def on_comment(self, event: Event) -> None:
        match = _DIRECTIVE.match(event.token.text)
        if match is None:
            return
        if match.group(1) == "off":
            self.machine.stop()
        else:
            self.machine.start()

    def on_newline(self, event: Event) -> None:
        self._check(event)

    def on_ignored_newline(self, event: Event) -> None:
        self._check(event)

    def _check(self, event: Event) -> None:
        measurement = self.machine.end_of_line(event.line)
        if measurement is None:
            return
        self.add_problem(
            "indentation",
            measurement.line,
            measurement.actual,
            f"Line is indented to column {measurement.actual}, "
            f"but should be at {measurement.expected}.",
            actual_indentation=measurement.actual,
            should_be_at=measurement.expected,
        )
