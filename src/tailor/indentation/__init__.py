"""Indentation-expectation state machine.

Provides:
- IndentationStateMachine: consumes dispatcher events, measures each line
- IndentationState: the per-file bookkeeping it mutates
- Measurement: a misindented line
- keywords: modifier / continuation / loop-``do`` / endless ``def`` classification
"""

from tailor.indentation.keywords import (
    CONTINUATION_KEYWORDS,
    KEYWORDS_TO_INDENT,
    MODIFIER_KEYWORDS,
    is_endless_def,
    is_loop_do,
    is_trailing_modifier,
)
from tailor.indentation.machine import IndentationStateMachine, Measurement
from tailor.indentation.state import Group, IndentationState, IndentFrame, Opener

__all__ = [
    "CONTINUATION_KEYWORDS",
    "KEYWORDS_TO_INDENT",
    "MODIFIER_KEYWORDS",
    "Group",
    "IndentFrame",
    "IndentationState",
    "IndentationStateMachine",
    "Measurement",
    "Opener",
    "is_endless_def",
    "is_loop_do",
    "is_trailing_modifier",
]
