"""Errors raised by the registry and the analysis engine."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Bad rule set or analyzer settings.  Raised at startup only."""


class MatchTimeout(Exception):
    """A category's pattern scan ran past its matching-time budget."""

    def __init__(self, category: str, budget: float) -> None:
        super().__init__(f"matching for {category!r} exceeded {budget:g}s")
        self.category = category
        self.budget = budget
