"""Problem records emitted by rules.

A Problem is one detected style violation. Rules create them, the driver
collects them per file, and report renderers read them.

Thread Safety:
Problem is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class Level(Enum):
    """Severity of a rule's problems.

    ``OFF`` is a configuration-level suppression: the rule still runs so
    its state stays consistent, but its problems are discarded.

    """

    ERROR = "error"
    WARNING = "warning"
    OFF = "off"

    @classmethod
    def parse(cls, value: Level | str) -> Level:
        """Coerce a level name (``"error"``, ``"warning"``, ``"off"``) to a Level.

        Raises:
            ValueError: If the name is not a level
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


@dataclass(frozen=True, slots=True)
class Problem:
    """One style violation.

    Attributes:
        type: Problem kind, e.g. ``"indentation"``
        line: Line number (1-indexed)
        column: Column (0-indexed)
        message: Human-readable description
        level: Severity inherited from the rule's configuration
        detail: Structured values behind the message, e.g.
            ``{"actual_indentation": 14, "should_be_at": 2}``; stored as a
            read-only copy

    """

    type: str
    line: int
    column: int
    message: str
    level: Level = Level.ERROR
    detail: Mapping[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "detail", MappingProxyType(dict(self.detail)))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the plain mapping consumed by report renderers.

        Example:
            >>> Problem("indentation", 2, 14, "msg").to_dict()
            {'type': 'indentation', 'line': 2, 'column': 14, 'message': 'msg', 'level': 'error'}
        """
        return {
            "type": self.type,
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "level": self.level.value,
        }
