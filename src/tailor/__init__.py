"""
Tailor: style checker for Ruby source.

Checks indentation (keyword blocks, brackets, operator/comma/period
continuations, optional argument alignment), spacing before braces and
unnecessary string interpolation, from a line-grouped token stream.
Zero runtime dependencies.

Quick Start:
    >>> from tailor import Critic
    >>> critic = Critic()
    >>> [p.message for p in critic.check_source("def foo\\n    true\\nend\\n")]
    ['Line is indented to column 4, but should be at 2.']

Configuration:
    >>> from tailor import StyleConfig
    >>> style = StyleConfig().with_rule(
    ...     "indentation_spaces", 2, level="error", argument_alignment=True
    ... )
    >>> critic = Critic(style)

Extending:
    Rules are observers of the dispatcher's event stream. Register new ones
    with ``tailor.rules.register_rule``.
"""

from tailor.config import RuleConfig, StyleConfig
from tailor.critic import Critic, check_file, check_style, find_files
from tailor.dispatch import Dispatcher, Event, EventKind, RuleObserver
from tailor.errors import ConfigError, LexError, StateInvariantViolation, TailorError
from tailor.indentation import IndentationState, IndentationStateMachine, Measurement
from tailor.lexer import Lexer, tokenize
from tailor.line import LineView
from tailor.problem import Level, Problem
from tailor.rules import BUILTIN_RULES, Rule, get_rule, register_rule
from tailor.tokens import Token, TokenKind

__version__ = "1.5.0"


def check_source(source: str, style: StyleConfig | None = None) -> list[Problem]:
    """Check Ruby source text with the given (or default) style.

    Args:
        source: Ruby source
        style: Style to check against

    Returns:
        Problems ordered by line.
    """
    return Critic(style).check_source(source)


__all__ = [  # noqa: RUF022 - grouped by category
    # Version
    "__version__",
    # Core API
    "check_source",
    "check_file",
    "check_style",
    "find_files",
    "Critic",
    # Configuration
    "RuleConfig",
    "StyleConfig",
    # Results
    "Level",
    "Problem",
    # Tokens
    "Lexer",
    "Token",
    "TokenKind",
    "tokenize",
    # Dispatch
    "Dispatcher",
    "Event",
    "EventKind",
    "LineView",
    "RuleObserver",
    # Indentation
    "IndentationState",
    "IndentationStateMachine",
    "Measurement",
    # Rules
    "BUILTIN_RULES",
    "Rule",
    "get_rule",
    "register_rule",
    # Errors
    "ConfigError",
    "LexError",
    "StateInvariantViolation",
    "TailorError",
]
