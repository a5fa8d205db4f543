"""Pattern registry: the fixed table of (category, matcher, validator).

Patterns are compiled with the ``regex`` package rather than ``re``: we
need Unicode property classes (``\\p{Lu}`` for uppercase in any script)
and the per-call ``timeout=`` argument the analyzer relies on.
"""

from __future__ import annotations
import logging
import re
from typing import Any

import regex

from .errors import ConfigurationError
from .types import Rule, Validator
from .validators import is_abbreviation, is_date, is_ipv4

logger = logging.getLogger(__name__)

# Each entry: (category, pattern source, validator)
DEFAULT_RULES: list[tuple[str, str, Validator]] = [
    # .NET, C#, VB++, JSON, HTML5; the #/+ branch goes first so VB++ is not cut
    # to VB. Roman numerals are weeded out later
    ("abbreviation",
     r"(?i:\.NET)\b"
     r"|\b\p{Lu}{1,2}[#+]+(?![\p{L}\p{N}])"
     r"|\b\p{Lu}{2,}\d*\b",
     is_abbreviation),

    # IPv4, admits up to 999 per octet, range is checked by the validator
    ("ip-address",
     r"\b[0-9]{1,3}(?:\.[0-9]{1,3}){3}\b",
     is_ipv4),

    # 1.2.2023, 01/02/2023, 2023-12-31
    ("date",
     r"\b(?:[0-9]{1,2}[./][0-9]{1,2}[./][0-9]{4}|[0-9]{4}-[0-9]{2}-[0-9]{2})\b",
     is_date),
]


class PatternRegistry:
    """Ordered, write-once set of rules.

    Rules are added with :meth:`register` at startup.  Once frozen (an
    Analyzer freezes the registry it is handed) the registry is read-only,
    so it can be shared between threads without locking.
    """

    __slots__ = ("_rules", "_frozen")

    def __init__(self, rules: list[tuple] | None = None) -> None:
        """``rules`` holds (category, pattern, validator[, flags]) tuples."""
        self._rules: dict[str, Rule] = {}
        self._frozen = False
        for category, pattern, validator, *rest in rules or ():
            self.register(category, pattern, validator, flags=rest[0] if rest else 0)

    def register(
        self,
        category: str,
        pattern: Any,
        validator: Validator,
        *,
        flags: int = 0,
    ) -> Rule:
        """Add a rule.

        ``pattern`` is a source string, a compiled ``regex`` or ``re``
        pattern (``re`` ones are recompiled with ``regex``), or any matcher
        whose ``finditer(text, timeout=...)`` yields match objects.
        ``flags`` are ``regex`` flags, applied to string and ``re`` patterns.

        Raises ConfigurationError on a bad rule; nothing is compiled lazily.
        """
        if self._frozen:
            raise ConfigurationError(
                f"registry is frozen; cannot register {category!r}"
            )
        if not isinstance(category, str) or not category:
            raise ConfigurationError(f"invalid category name: {category!r}")
        if category in self._rules:
            raise ConfigurationError(f"duplicate category: {category!r}")
        if not callable(validator):
            raise ConfigurationError(f"validator for {category!r} is not callable")

        if isinstance(pattern, re.Pattern):
            # re has no timeout=; recompile the same source with regex
            flags |= pattern.flags
            pattern = pattern.pattern

        if isinstance(pattern, (str, bytes)):
            try:
                compiled = regex.compile(pattern, flags)
            except (regex.error, TypeError, ValueError) as exc:
                raise ConfigurationError(
                    f"invalid pattern for {category!r}: {exc}"
                ) from exc
        elif isinstance(pattern, regex.Pattern):
            if flags:
                raise ConfigurationError(
                    f"flags for {category!r} must be set when compiling the pattern"
                )
            compiled = pattern
        elif callable(getattr(pattern, "finditer", None)):
            compiled = pattern
        else:
            raise ConfigurationError(
                f"pattern for {category!r} must be a string or compiled pattern"
            )

        rule = Rule(category=category, pattern=compiled, validator=validator)
        self._rules[category] = rule
        logger.debug("registered category %s", category)
        return rule

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def categories(self) -> tuple[str, ...]:
        """Category names in registration order."""
        return tuple(self._rules)

    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules.values())

    def get(self, category: str) -> Rule | None:
        return self._rules.get(category)

    def __contains__(self, category: object) -> bool:
        return category in self._rules

    def __len__(self) -> int:
        return len(self._rules)


def default_registry() -> PatternRegistry:
    """Registry with the built-in abbreviation, ip-address and date rules."""
    return PatternRegistry(DEFAULT_RULES)
