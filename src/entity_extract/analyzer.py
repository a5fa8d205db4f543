"""Analyzer: the main API.  Candidate discovery first, then validation.

Usage:
    from entity_extract import Analyzer, AnalyzerConfig

    analyzer = Analyzer()        # built-in rules, reusable, thread-safe
    report = analyzer.analyze("Use C# or C++ on 10.0.0.1 since 2023-12-31")
    print(report["abbreviation"])   # ['C#', 'C++']
    print(report["ip-address"])     # ['10.0.0.1']

    counting = Analyzer(config=AnalyzerConfig(mode="count"))
    print(counting.analyze("C# C# HTML5")["abbreviation"])  # {'C#': 2, 'HTML5': 1}
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field

from .errors import ConfigurationError, MatchTimeout
from .patterns import PatternRegistry, default_registry
from .types import COUNT, MODES, UNIQUE, Candidate, Report, ResultEntry, Rule

logger = logging.getLogger(__name__)


@dataclass
class AnalyzerConfig:
    """Configuration for the Analyzer."""
    mode: str = UNIQUE                # "unique" | "count"
    timeout: float = 1.0              # matching-time budget per category, seconds
    # Categories to leave out of the report entirely
    skip_categories: set[str] = field(default_factory=set)
    # Values that are never reported, even when valid
    ignore_values: set[str] = field(default_factory=set)


class Analyzer:
    """Runs every registered rule over a text and builds a Report.

    Only construction can fail (ConfigurationError).  Timeouts, matcher
    errors and validator errors during analysis are contained per category
    / per candidate and show up as missing data, never as exceptions.
    """

    def __init__(
        self,
        registry: PatternRegistry | None = None,
        config: AnalyzerConfig | None = None,
    ) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.config = config or AnalyzerConfig()
        if self.config.mode not in MODES:
            raise ConfigurationError(
                f"mode must be one of {', '.join(MODES)}; got {self.config.mode!r}"
            )
        if not self.config.timeout or self.config.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive; got {self.config.timeout!r}")
        self.registry.freeze()

    def analyze(self, text: str) -> Report:
        """Extract and validate every category.

        Empty or whitespace-only text gives an empty report without
        running any rule.
        """
        report = Report(mode=self.config.mode)
        if not text or text.isspace():
            return report

        for rule in self._active_rules():
            try:
                candidates = self._extract(rule, text)
            except MatchTimeout as exc:
                logger.warning("%s; reporting it empty", exc)
                report.timed_out.append(rule.category)
            except Exception:
                logger.warning(
                    "matcher for %s failed; reporting it empty", rule.category,
                    exc_info=True,
                )
                report.failed.append(rule.category)
            else:
                report.results[rule.category] = self._aggregate(rule, candidates)
                continue
            report.results[rule.category] = {} if self.config.mode == COUNT else []

        return report

    def scan(self, text: str) -> list[Candidate]:
        """Every accepted occurrence across all categories, by position.

        Timed-out or failing categories contribute nothing.
        """
        if not text or text.isspace():
            return []
        accepted: list[Candidate] = []
        for rule in self._active_rules():
            try:
                candidates = self._extract(rule, text)
            except MatchTimeout as exc:
                logger.warning("%s; skipping it", exc)
                continue
            except Exception:
                logger.warning("matcher for %s failed; skipping it", rule.category,
                               exc_info=True)
                continue
            verdicts: dict[str, bool] = {}
            for c in candidates:
                if c.text in self.config.ignore_values:
                    continue
                if c.text not in verdicts:
                    verdicts[c.text] = self._accepts(rule, c.text)
                if verdicts[c.text]:
                    accepted.append(c)
        return sorted(accepted, key=lambda c: (c.start, -(c.end - c.start)))

    # --- internals ---

    def _active_rules(self) -> list[Rule]:
        skip = self.config.skip_categories
        return [r for r in self.registry.rules() if r.category not in skip]

    def _extract(self, rule: Rule, text: str) -> list[Candidate]:
        """Collect non-overlapping matches, left to right, within budget."""
        budget = self.config.timeout
        deadline = time.monotonic() + budget
        candidates: list[Candidate] = []
        try:
            for m in rule.pattern.finditer(text, timeout=budget):
                if time.monotonic() > deadline:
                    raise MatchTimeout(rule.category, budget)
                candidates.append(Candidate(
                    category=rule.category,
                    start=m.start(),
                    end=m.end(),
                    text=m.group(),
                ))
        except TimeoutError as exc:
            raise MatchTimeout(rule.category, budget) from exc
        return candidates

    def _aggregate(self, rule: Rule, candidates: list[Candidate]) -> ResultEntry:
        ignore = self.config.ignore_values

        if self.config.mode == COUNT:
            counts: dict[str, int] = {}
            for c in candidates:
                if c.text in ignore:
                    continue
                if self._accepts(rule, c.text):
                    counts[c.text] = counts.get(c.text, 0) + 1
            return counts

        # dict keeps first-occurrence order
        distinct = dict.fromkeys(c.text for c in candidates if c.text not in ignore)
        return [value for value in distinct if self._accepts(rule, value)]

    def _accepts(self, rule: Rule, value: str) -> bool:
        """Run the validator; a failing validator rejects the candidate."""
        try:
            return bool(rule.validator(value))
        except Exception:
            logger.debug(
                "validator for %s failed on %r; rejecting", rule.category, value,
                exc_info=True,
            )
            return False
