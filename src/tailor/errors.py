"""Exception classes for Tailor.

Provides standardized exceptions for error handling throughout Tailor.
"""

from __future__ import annotations


class TailorError(Exception):
    """Base exception for all Tailor errors.

    Subclass this for specific error categories.
    """

    pass


class LexError(TailorError):
    """Error during tokenization.

    Raised when the lexer cannot produce a token stream for the source,
    e.g. an unterminated string or heredoc. The driver turns it into a
    single problem for the file (or skips the file), never a crash.
    """

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        column: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize lex error with optional location.

        Args:
            message: Error description
            lineno: Line number where error occurred (1-indexed)
            column: Column where error occurred (0-indexed)
            source_file: Path to source file (optional)
        """
        self.message = message
        self.lineno = lineno
        self.column = column
        self.source_file = source_file

        # Build formatted message
        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
            if column is not None:
                location += f"{column}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message}")


class ConfigError(TailorError):
    """Invalid rule configuration.

    Raised before any file is checked: a bad config would silently change
    every file's results.
    """

    def __init__(self, message: str, rule: str | None = None) -> None:
        """Initialize config error.

        Args:
            message: Description of the problem
            rule: Name of the offending rule (optional)
        """
        self.rule = rule
        prefix = f"Rule '{rule}': " if rule else ""
        super().__init__(f"{prefix}{message}")


class StateInvariantViolation(TailorError):
    """Internal bookkeeping went out of balance.

    E.g. a closing bracket with no matching opener on the nesting stack.
    Only raised by state machines built with ``strict=True``; otherwise the
    violation is logged and ignored. The Critic catches it per file, so one
    file cannot abort a run.
    """

    pass
