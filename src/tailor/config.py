"""Style configuration for Tailor.

A StyleConfig maps rule names to RuleConfig entries: the rule's value
(indent width, space count, on/off switch), its severity level and any
extra options (``argument_alignment``). Loading configuration files and
merging them is left to callers; this module validates the resolved
mapping so a bad setting fails the run before any file is checked.

Usage:
    >>> style = StyleConfig.from_dict({
    ...     "indentation_spaces": {"spaces": 4, "argument_alignment": True},
    ...     "spaces_before_lbrace": {"value": 1, "level": "warning"},
    ... })
    >>> style["indentation_spaces"].value
    4

Thread Safety:
StyleConfig and RuleConfig are frozen and read-only during a run, so one
instance is shared by every worker.

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from tailor.errors import ConfigError
from tailor.problem import Level

__all__ = ["RuleConfig", "StyleConfig", "DEFAULT_RULES"]


@dataclass(frozen=True, slots=True)
class RuleConfig:
    """Settings for one rule.

    Attributes:
        value: The rule's main parameter (indent width, space count, flag)
        level: Severity of the rule's problems
        options: Extra named parameters, e.g. ``argument_alignment``

    """

    value: Any
    level: Level = Level.ERROR
    options: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def option(self, name: str, default: Any = None) -> Any:
        """Look up an extra option."""
        return self.options.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "level": self.level.value, **self.options}


DEFAULT_RULES: dict[str, RuleConfig] = {
    "indentation_spaces": RuleConfig(
        2, Level.ERROR, {"argument_alignment": False}
    ),
    "spaces_before_lbrace": RuleConfig(1, Level.ERROR),
    "allow_unnecessary_interpolation": RuleConfig(False, Level.WARNING),
    "allow_invalid_ruby": RuleConfig(False, Level.WARNING),
}


# =============================================================================
# Validation
# =============================================================================


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"expected a positive integer, got {value!r}", rule=name)
    return value


def _non_negative_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"expected a non-negative integer, got {value!r}", rule=name)
    return value


def _flag(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"expected true or false, got {value!r}", rule=name)
    return value


_VALUE_VALIDATORS: dict[str, Callable[[str, Any], Any]] = {
    "indentation_spaces": _positive_int,
    "spaces_before_lbrace": _non_negative_int,
    "allow_unnecessary_interpolation": _flag,
    "allow_invalid_ruby": _flag,
}


def normalize_argument_alignment(value: Any) -> bool:
    """Coerce an ``argument_alignment`` setting to a bool.

    ``True`` enables alignment; ``False``, ``None`` and ``"off"`` disable it.

    Raises:
        ConfigError: For any other value
    """
    if value is True:
        return True
    if value is None or value is False or value == "off":
        return False
    raise ConfigError(
        f"argument_alignment must be true, false or 'off', got {value!r}",
        rule="indentation_spaces",
    )


def _normalize_options(name: str, options: Mapping[str, Any]) -> dict[str, Any]:
    normalized = dict(options)
    if name == "indentation_spaces" and "argument_alignment" in normalized:
        normalized["argument_alignment"] = normalize_argument_alignment(
            normalized["argument_alignment"]
        )
    return normalized


def _known_rule(name: str) -> bool:
    from tailor.rules import BUILTIN_RULES

    return name in _VALUE_VALIDATORS or name in BUILTIN_RULES


def _build_rule(name: str, value: Any, level: Any, options: Mapping[str, Any]) -> RuleConfig:
    if not _known_rule(name):
        raise ConfigError("unknown rule", rule=name)

    validator = _VALUE_VALIDATORS.get(name)
    if validator is not None:
        value = validator(name, value)

    try:
        parsed_level = Level.parse(level)
    except ValueError:
        raise ConfigError(
            f"level must be one of error, warning, off; got {level!r}", rule=name
        ) from None

    return RuleConfig(value, parsed_level, _normalize_options(name, options))


# =============================================================================
# StyleConfig
# =============================================================================


@dataclass(frozen=True, slots=True)
class StyleConfig:
    """Validated rule settings for a run.

    Attributes:
        rules: Rule name to RuleConfig

    """

    rules: Mapping[str, RuleConfig] = field(
        default_factory=lambda: dict(DEFAULT_RULES), hash=False
    )

    @classmethod
    def default(cls) -> StyleConfig:
        """The built-in defaults."""
        return cls()

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> StyleConfig:
        """Create a StyleConfig from a plain mapping, layered over the defaults.

        Each entry is either a bare value (``{"indentation_spaces": 4}``) or
        a mapping with ``value`` (``spaces`` is accepted as an alias),
        ``level`` and extra options. Omitted parts keep their defaults.

        Args:
            config_dict: Rule name to value or settings mapping

        Returns:
            New validated StyleConfig.

        Raises:
            ConfigError: On unknown rules, invalid values or invalid levels

        Example:
            >>> style = StyleConfig.from_dict({"allow_invalid_ruby": True})
            >>> style["allow_invalid_ruby"].value
            True
        """
        rules = dict(DEFAULT_RULES)
        for name, setting in config_dict.items():
            base = rules.get(name)
            if isinstance(setting, Mapping):
                settings = dict(setting)
                if "value" in settings:
                    value = settings.pop("value")
                elif "spaces" in settings:
                    value = settings.pop("spaces")
                elif base is not None:
                    value = base.value
                else:
                    raise ConfigError("no value given", rule=name)
                level = settings.pop("level", base.level if base else Level.ERROR)
                options = {**(base.options if base else {}), **settings}
            else:
                value = setting
                level = base.level if base else Level.ERROR
                options = dict(base.options) if base else {}
            rules[name] = _build_rule(name, value, level, options)
        return cls(rules)

    def with_rule(
        self,
        name: str,
        value: Any,
        level: Level | str | None = None,
        **options: Any,
    ) -> StyleConfig:
        """Return a copy with one rule's settings replaced.

        Options not given keep their current values.

        Raises:
            ConfigError: If the new settings are invalid

        Example:
            >>> style = StyleConfig().with_rule(
            ...     "indentation_spaces", 2, level="error", argument_alignment=True
            ... )
            >>> style["indentation_spaces"].option("argument_alignment")
            True
        """
        base = self.rules.get(name)
        if level is None:
            level = base.level if base else Level.ERROR
        merged = {**(base.options if base else {}), **options}
        rules = dict(self.rules)
        rules[name] = _build_rule(name, value, level, merged)
        return replace(self, rules=rules)

    def __getitem__(self, name: str) -> RuleConfig:
        return self.rules[name]

    def __contains__(self, name: object) -> bool:
        return name in self.rules

    def get(self, name: str, default: RuleConfig | None = None) -> RuleConfig | None:
        return self.rules.get(name, default)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Plain-mapping form, accepted back by ``from_dict``."""
        return {name: rule.to_dict() for name, rule in self.rules.items()}
