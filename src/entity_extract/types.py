"""Core types."""

from __future__ import annotations
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Callable, Union

UNIQUE = "unique"   # result entry: list of distinct accepted strings
COUNT = "count"     # result entry: accepted string → occurrences
MODES = (UNIQUE, COUNT)

Validator = Callable[[str], bool]
ResultEntry = Union[list[str], dict[str, int]]


@dataclass(frozen=True, slots=True)
class Rule:
    """A category bound to its compiled matcher and validator."""
    category: str          # e.g. "abbreviation", "ip-address", "date"
    pattern: Any           # compiled regex.Pattern (anything with finditer)
    validator: Validator


@dataclass(frozen=True, slots=True)
class Candidate:
    """A raw match, before or after validation."""
    category: str
    start: int
    end: int
    text: str


@dataclass(slots=True)
class Report:
    """Result of analyzing one text.

    Reads like an ordered mapping of category → result entry.  Categories
    whose scan ran out of time are listed in ``timed_out``, those whose
    matcher raised in ``failed``; both carry an empty entry.
    """
    mode: str = UNIQUE
    results: dict[str, ResultEntry] = field(default_factory=dict)
    timed_out: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def __getitem__(self, category: str) -> ResultEntry:
        return self.results[category]

    def __contains__(self, category: object) -> bool:
        return category in self.results

    def __iter__(self) -> Iterator[str]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def items(self):
        return self.results.items()

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "results": {k: (dict(v) if isinstance(v, dict) else list(v))
                        for k, v in self.results.items()},
            "timed_out": list(self.timed_out),
            "failed": list(self.failed),
        }
