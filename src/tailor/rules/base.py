"""Base class for rules.

A rule is a RuleObserver: it subscribes handlers named after the events
it listens to and records Problems. Subclasses set ``name`` and
``events`` and implement one ``on_<event>`` method per event.

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from tailor.dispatch import EventKind
from tailor.problem import Level, Problem
from tailor.utils.logger import get_logger

if TYPE_CHECKING:
    from tailor.dispatch import Dispatcher

logger = get_logger(__name__)


class Rule:
    """Common state and plumbing for rules.

    Args:
        value: The rule's configured value (width, count, flag)
        level: Severity of the rule's problems; ``Level.OFF`` runs the rule
            but discards its problems
        options: Extra rule options

    Thread Safety:
        One instance per file; rules are never shared between threads.

    """

    name: ClassVar[str] = ""
    events: ClassVar[tuple[EventKind, ...]] = ()

    def __init__(
        self,
        value: Any,
        *,
        level: Level | str = Level.ERROR,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        self.value = value
        self.level = Level.parse(level)
        self.options = dict(options or {})
        self._problems: list[Problem] = []

    @property
    def problems(self) -> list[Problem]:
        """Problems recorded so far, in discovery order."""
        return self._problems

    def subscribe(self, dispatcher: Dispatcher) -> None:
        """Register ``on_<event>`` for each of this rule's events."""
        for kind in self.events:
            dispatcher.register(kind, getattr(self, kind.value))

    def add_problem(
        self,
        problem_type: str,
        line: int,
        column: int,
        message: str,
        **detail: Any,
    ) -> None:
        """Record a problem at this rule's level, unless the rule is off."""
        if self.level is Level.OFF:
            logger.debug("%s is off; dropping problem at %d:%d", self.name, line, column)
            return
        self._problems.append(Problem(problem_type, line, column, message, self.level, detail))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(value={self.value!r}, level={self.level.value!r})"
