"""The driver: runs every configured rule over files.

For each file the Critic tokenizes the source, builds fresh rule
instances (and with them a fresh IndentationStateMachine), replays the
token stream through a Dispatcher and collects the rules' Problems.

Usage:
    >>> critic = Critic(StyleConfig.from_dict({"indentation_spaces": 4}))
    >>> problems = critic.check_file("lib/foo.rb")
    >>> results = critic.check_style("lib/")  # {path: [Problem, ...]}
    >>> critic.problem_count
    3

Thread Safety:
A Critic may check files from several worker threads. Every file gets its
own rules and state; only the result map is shared, and it is written
under a lock.

"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from tailor.config import StyleConfig
from tailor.dispatch import Dispatcher
from tailor.errors import LexError, StateInvariantViolation
from tailor.lexer import tokenize
from tailor.problem import Level, Problem
from tailor.rules import BUILTIN_RULES, Rule, get_rule
from tailor.utils.logger import get_logger

__all__ = ["Critic", "find_files", "check_file", "check_style", "RUBY_FILE_PATTERNS"]

logger = get_logger(__name__)

# Files picked up when a directory is checked
RUBY_FILE_PATTERNS = ("*.rb", "*.rake", "*.gemspec", "Rakefile", "Gemfile")

_INVALID_RUBY_MESSAGE = (
    "File contains invalid Ruby; run `ruby -c {file}` for more details."
)


def find_files(path: str | Path) -> list[Path]:
    """Resolve a file or directory to the Ruby files to check.

    Args:
        path: A file (returned as is) or a directory (searched recursively)

    Returns:
        Sorted list of files.

    Raises:
        FileNotFoundError: If ``path`` does not exist
    """
    root = Path(path)
    if root.is_file():
        return [root]
    if not root.is_dir():
        raise FileNotFoundError(f"No such file or directory: {str(root)!r}")
    found = {file for pattern in RUBY_FILE_PATTERNS for file in root.rglob(pattern) if file.is_file()}
    return sorted(found)


class Critic:
    """Checks Ruby source against a StyleConfig.

    Args:
        style: A StyleConfig, a plain mapping accepted by
            ``StyleConfig.from_dict``, or None for the defaults
        max_workers: Files checked concurrently by ``check_style``

    Raises:
        ConfigError: If ``style`` is invalid; raised here, before any file
            is checked

    """

    def __init__(
        self,
        style: StyleConfig | Mapping[str, Any] | None = None,
        max_workers: int = 1,
    ) -> None:
        if style is None:
            style = StyleConfig.default()
        elif not isinstance(style, StyleConfig):
            style = StyleConfig.from_dict(style)
        self.style = style
        self.max_workers = max(1, max_workers)
        self._problems: dict[str, list[Problem]] = {}
        self._lock = threading.Lock()

    # =========================================================================
    # Checking
    # =========================================================================

    def build_rules(self) -> list[Rule]:
        """Fresh instances of every configured rule."""
        return [
            get_rule(name, config.value, config.level, config.options)
            for name, config in self.style.rules.items()
            if name in BUILTIN_RULES
        ]

    def check_source(self, source: str, file_name: str = "<string>") -> list[Problem]:
        """Check source text.

        Args:
            source: Ruby source
            file_name: Name used in messages

        Returns:
            Problems from every rule, ordered by line. If a strict rule
            finds unbalanced input, checking stops there and the problems
            found up to that point are returned.
        """
        try:
            tokens = tokenize(source, source_file=file_name)
        except LexError as exc:
            return self._invalid_source(exc, file_name)

        dispatcher = Dispatcher()
        rules = self.build_rules()
        for rule in rules:
            rule.subscribe(dispatcher)
        try:
            dispatcher.run(tokens)
        except StateInvariantViolation as exc:
            logger.warning("Stopped checking %s: %s", file_name, exc)

        problems = [problem for rule in rules for problem in rule.problems]
        problems.sort(key=lambda problem: problem.line)
        return problems

    def check_file(self, path: str | Path) -> list[Problem]:
        """Check one file and record its problems.

        Args:
            path: File to check

        Returns:
            The file's problems, ordered by line.
        """
        file_name = str(path)
        logger.debug("Checking %s", file_name)
        source = Path(path).read_text(encoding="utf-8", errors="replace")
        problems = self.check_source(source, file_name)
        with self._lock:
            self._problems[file_name] = problems
        return problems

    def check_style(self, path: str | Path) -> dict[str, list[Problem]]:
        """Check a file, or every Ruby file under a directory.

        Args:
            path: File or directory

        Returns:
            Mapping of file name to that file's problems.
        """
        files = find_files(path)
        logger.info("Checking %d file(s) under %s", len(files), path)
        if self.max_workers > 1 and len(files) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(self.check_file, files))
        else:
            results = [self.check_file(file) for file in files]
        return {str(file): problems for file, problems in zip(files, results)}

    # =========================================================================
    # Results
    # =========================================================================

    @property
    def problems(self) -> dict[str, list[Problem]]:
        """Problems of every file checked so far, by file name."""
        with self._lock:
            return {name: list(problems) for name, problems in self._problems.items()}

    @property
    def problem_count(self) -> int:
        """Total problems across all checked files."""
        with self._lock:
            return sum(len(problems) for problems in self._problems.values())

    def problem_count_at(self, level: Level | str) -> int:
        """Problems at one level across all checked files."""
        wanted = Level.parse(level)
        with self._lock:
            return sum(
                1
                for problems in self._problems.values()
                for problem in problems
                if problem.level is wanted
            )

    def iter_problems(self) -> Iterator[tuple[str, Problem]]:
        """Yield ``(file name, problem)`` pairs in file order."""
        for name, problems in sorted(self.problems.items()):
            for problem in problems:
                yield name, problem

    def _invalid_source(self, exc: LexError, file_name: str) -> list[Problem]:
        setting = self.style.get("allow_invalid_ruby")
        if setting is not None and setting.value:
            logger.info("Skipping %s: %s", file_name, exc)
            return []

        level = setting.level if setting is not None else Level.WARNING
        if level is Level.OFF:
            return []
        logger.warning("Could not tokenize %s: %s", file_name, exc)
        return [
            Problem(
                "allow_invalid_ruby",
                exc.lineno or 1,
                exc.column or 0,
                _INVALID_RUBY_MESSAGE.format(file=file_name),
                level,
                {"error": exc.message},
            )
        ]


def check_file(path: str | Path, style: StyleConfig | Mapping[str, Any] | None = None) -> list[Problem]:
    """Check one file with a fresh Critic."""
    return Critic(style).check_file(path)


def check_style(
    path: str | Path,
    style: StyleConfig | Mapping[str, Any] | None = None,
    max_workers: int = 1,
) -> dict[str, list[Problem]]:
    """Check a file or directory with a fresh Critic."""
    return Critic(style, max_workers=max_workers).check_style(path)
