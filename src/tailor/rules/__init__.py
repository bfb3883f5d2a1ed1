"""Style rules for Tailor.

Rules observe the dispatcher's event stream and record Problems:
- indentation_spaces: indentation per the IndentationStateMachine
- spaces_before_lbrace: spacing before ``{``
- allow_unnecessary_interpolation: ``"#{x}"`` where ``x`` alone would do

Usage:
    >>> from tailor.rules import get_rule
    >>> rule = get_rule("spaces_before_lbrace", 1, level="warning")
    >>> rule.subscribe(dispatcher)

Custom rules:
    >>> @register_rule("no_tabs")
    ... class NoTabsRule(Rule):
    ...     events = (EventKind.NEWLINE,)
    ...     def on_newline(self, event):
    ...         ...

Thread Safety:
Rule classes are registered at import time. Rule instances are per file.

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from tailor.problem import Level
from tailor.rules.base import Rule

__all__ = [
    "Rule",
    "BUILTIN_RULES",
    "register_rule",
    "get_rule",
]


# Registry of rule classes by configuration name
BUILTIN_RULES: dict[str, type[Rule]] = {}


def register_rule(name: str) -> Callable[[type[Rule]], type[Rule]]:
    """Decorator to register a rule.

    Args:
        name: Rule name as used in configuration

    Returns:
        Decorator function that registers and returns the class

    Usage:
        @register_rule("spaces_before_lbrace")
        class SpacesBeforeLBraceRule(Rule):
                ...

    """

    def decorator(cls: type[Rule]) -> type[Rule]:
        cls.name = name
        BUILTIN_RULES[name] = cls
        return cls

    return decorator


def get_rule(
    name: str,
    value: Any,
    level: Level | str = Level.ERROR,
    options: Mapping[str, Any] | None = None,
) -> Rule:
    """Get a rule instance by name.

    Args:
        name: Rule name (e.g., "indentation_spaces")
        value: The rule's configured value
        level: Severity of its problems
        options: Extra rule options

    Returns:
        Rule instance

    Raises:
        KeyError: If rule name is not recognized

    """
    if name not in BUILTIN_RULES:
        available = ", ".join(sorted(BUILTIN_RULES.keys()))
        raise KeyError(f"Unknown rule: {name!r}. Available: {available}")
    return BUILTIN_RULES[name](value, level=level, options=options)


# Import built-in rules to register them
# These imports trigger the @register_rule decorators
from tailor.rules.indentation_spaces import IndentationSpacesRule  # noqa: E402
from tailor.rules.spaces_before_lbrace import SpacesBeforeLBraceRule  # noqa: E402
from tailor.rules.unnecessary_interpolation import (  # noqa: E402
    AllowUnnecessaryInterpolationRule,
)

__all__ += [
    "AllowUnnecessaryInterpolationRule",
    "IndentationSpacesRule",
    "SpacesBeforeLBraceRule",
]
