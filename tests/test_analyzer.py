"""Tests for entity extraction: validators, registry and analyzer."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import logging
import re
import time
from datetime import date, datetime

import pytest
import regex

from entity_extract import (
    Analyzer, AnalyzerConfig, ConfigurationError, PatternRegistry, default_registry,
)
from entity_extract.validators import (
    DATE_FORMATS, is_abbreviation, is_date, is_ipv4, is_roman_numeral, parse_date,
)

SAMPLE = (
    "Сучасні веб-технології включають HTML, CSS та JavaScript. "
    "Для бекенду часто використовують C# (.NET Core) або Java. "
    "Обмін даними відбувається у форматі JSON або XML. "
    "Також існують старі формати, як MP3. "
    "А ось звичайне слово Hello не має бути знайдено, як і займенник Я."
)


class _TimingOutPattern:
    """Stands in for a pattern whose scan blows the library timeout."""
    def finditer(self, text, timeout=None):
        raise TimeoutError("regex timed out")


class _BrokenPattern:
    """A matcher that blows up with something other than a timeout."""
    def finditer(self, text, timeout=None):
        raise RuntimeError("matcher exploded")


class _SlowPattern:
    """Real matches, but each one takes `delay` seconds to produce."""
    def __init__(self, source, delay):
        self._pattern = regex.compile(source)
        self._delay = delay

    def finditer(self, text, timeout=None):
        for m in self._pattern.finditer(text):
            time.sleep(self._delay)
            yield m


# ── Validators ───────────────────────────────────────────────────────

def test_roman_numerals():
    for value in ("XIV", "XXI", "XX", "MMXXIV", "CD", "IX"):
        assert is_roman_numeral(value), value
    for value in ("IIII", "VV", "HTML", "xiv", "C#", "MP3", "X+"):
        assert not is_roman_numeral(value), value


def test_empty_string_is_roman_zero():
    assert is_roman_numeral("")


def test_abbreviation_accepts():
    for value in (".NET", ".net", "C#", "C++", "F#", "HTML5", "JSON", "MP3", "США"):
        assert is_abbreviation(value), value


def test_abbreviation_rejects():
    for value in ("XIV", "XXI", "XX", "Hello", "I", "ABC#", "json", "C#x"):
        assert not is_abbreviation(value), value


def test_ipv4_octet_range():
    assert is_ipv4("192.168.0.1")
    assert is_ipv4("0.0.0.0")
    assert is_ipv4("255.255.255.255")
    assert not is_ipv4("256.0.0.1")
    assert not is_ipv4("999.999.999.999")
    assert not is_ipv4("1.2.3")
    assert not is_ipv4("1.2.3.4.5")
    assert not is_ipv4(" 1.2.3.4")


def test_parse_date_formats():
    assert parse_date("2023-12-31") == (date(2023, 12, 31), "yyyy-MM-dd")
    assert parse_date("1.2.2023") == (date(2023, 2, 1), "d.M.yyyy")
    assert parse_date("05/06/2024") == (date(2024, 6, 5), "d/M/yyyy")
    assert parse_date("29.02.2024")[0] == date(2024, 2, 29)


def test_date_rejects_calendar_invalid():
    assert not is_date("32.01.2023")
    assert not is_date("30.02.2023")
    assert not is_date("29.02.2023")
    assert not is_date("2023-13-01")


def test_date_rejects_extra_characters():
    assert not is_date(" 1.2.2023")
    assert not is_date("1.2.2023x")
    assert not is_date("2023-1-5")
    assert not is_date("1.2/2023")
    with pytest.raises(ValueError):
        parse_date("12.12.12")


def test_parsed_dates_round_trip():
    samples = ["7.3.2024", "07.03.2024", "7/3/2024", "07/03/2024", "2024-03-07"]
    for value, (name, _, fmt) in zip(samples, DATE_FORMATS):
        parsed, _ = parse_date(value)
        assert parsed == date(2024, 3, 7), name
        assert datetime.strptime(value, fmt).date() == parsed, name
        assert datetime.strptime(parsed.strftime(fmt), fmt).date() == parsed, name


# ── Registry ─────────────────────────────────────────────────────────

def test_default_categories_in_order():
    assert default_registry().categories() == ("abbreviation", "ip-address", "date")


def test_duplicate_category_rejected():
    registry = PatternRegistry()
    registry.register("word", r"\w+", bool)
    with pytest.raises(ConfigurationError):
        registry.register("word", r"\d+", bool)


def test_invalid_pattern_fails_at_registration():
    registry = PatternRegistry()
    with pytest.raises(ConfigurationError):
        registry.register("broken", r"([", bool)
    assert "broken" not in registry


def test_non_callable_validator_rejected():
    with pytest.raises(ConfigurationError):
        PatternRegistry([("word", r"\w+", "not callable")])


def test_registry_frozen_by_analyzer():
    registry = PatternRegistry([("word", r"\w+", bool)])
    Analyzer(registry)
    assert registry.frozen
    with pytest.raises(ConfigurationError):
        registry.register("digits", r"\d+", bool)


def test_categories_stable_across_calls():
    registry = PatternRegistry([("b", r"b", bool), ("a", r"a", bool)])
    assert registry.categories() == registry.categories() == ("b", "a")


def test_stdlib_pattern_recompiled():
    registry = PatternRegistry([
        ("word", re.compile(r"\w+"), bool),
        ("abc", re.compile(r"abc", re.IGNORECASE), bool),
    ])
    assert isinstance(registry.get("word").pattern, regex.Pattern)
    report = Analyzer(registry).analyze("hello ABC world abc")
    assert report["word"] == ["hello", "ABC", "world", "abc"]
    assert report["abc"] == ["ABC", "abc"]
    assert report.failed == []


def test_register_with_flags():
    registry = PatternRegistry()
    registry.register("greeting", r"\bhello\b", bool, flags=regex.IGNORECASE)
    assert Analyzer(registry).analyze("Hello HELLO")["greeting"] == ["Hello", "HELLO"]


def test_non_pattern_rejected():
    with pytest.raises(ConfigurationError):
        PatternRegistry([("number", 42, bool)])


# ── Analyzer ─────────────────────────────────────────────────────────

def test_abbreviations_from_sample_text():
    report = Analyzer().analyze(SAMPLE)
    assert report["abbreviation"] == ["HTML", "CSS", "C#", ".NET", "JSON", "XML", "MP3"]


def test_roman_numerals_filtered_from_mixed_text():
    text = "Chapter XIV of the XXI century, XX pages on .NET, C#, C++, HTML5 and JSON."
    found = Analyzer().analyze(text)["abbreviation"]
    assert found == [".NET", "C#", "C++", "HTML5", "JSON"]
    for value in found:
        assert value == ".NET" or not is_roman_numeral(value)


def test_ip_addresses_range_checked():
    text = "hosts 192.168.1.1, 999.999.999.999 and 10.0.0.256, again 192.168.1.1"
    report = Analyzer().analyze(text)
    assert report["ip-address"] == ["192.168.1.1"]
    for ip in report["ip-address"]:
        assert all(0 <= int(part) <= 255 for part in ip.split("."))


def test_dates_validated():
    text = "Due 32.01.2023, 30.02.2023, 2023-12-31, 1.2.2023 and 05/06/2024."
    assert Analyzer().analyze(text)["date"] == ["2023-12-31", "1.2.2023", "05/06/2024"]


def test_report_order_follows_registration():
    report = Analyzer().analyze("nothing interesting here")
    assert list(report) == ["abbreviation", "ip-address", "date"]
    assert all(entry == [] for _, entry in report.items())


def test_unique_mode():
    text = "C# is great. I like C# and C#, also HTML5."
    assert Analyzer().analyze(text)["abbreviation"] == ["C#", "HTML5"]


def test_count_mode():
    text = "C# is great. I like C# and C#, also HTML5."
    report = Analyzer(config=AnalyzerConfig(mode="count")).analyze(text)
    assert report.mode == "count"
    assert report["abbreviation"] == {"C#": 3, "HTML5": 1}


def test_count_mode_ignores_rejected_occurrences():
    text = "10.0.0.1 10.0.0.1 300.0.0.1"
    report = Analyzer(config=AnalyzerConfig(mode="count")).analyze(text)
    assert report["ip-address"] == {"10.0.0.1": 2}


def test_empty_and_whitespace_input():
    calls = []

    def record(value):
        calls.append(value)
        return True

    analyzer = Analyzer(PatternRegistry([("anything", r"\s+|.", record)]))
    for text in ("", "   ", "\n\t  \n"):
        report = analyzer.analyze(text)
        assert len(report) == 0
        assert report.timed_out == []
    assert calls == []


def test_analyze_is_idempotent():
    analyzer = Analyzer(config=AnalyzerConfig(mode="count"))
    assert analyzer.analyze(SAMPLE) == analyzer.analyze(SAMPLE)


def test_validator_failure_rejects_candidate(caplog):
    def picky(value):
        if value == "BAD":
            raise ValueError("cannot judge")
        return True

    caplog.set_level(logging.DEBUG, logger="entity_extract.analyzer")
    analyzer = Analyzer(PatternRegistry([("word", r"\b[A-Z]+\b", picky)]))
    report = analyzer.analyze("GOOD BAD FINE")
    assert report["word"] == ["GOOD", "FINE"]
    assert "failed on 'BAD'" in caplog.text


def test_two_letter_hash_plus_abbreviations():
    text = "We used VB++ and F# and XX# here"
    assert Analyzer().analyze(text)["abbreviation"] == ["VB++", "F#", "XX#"]


def test_matcher_error_isolated_to_category():
    registry = PatternRegistry([
        ("broken", _BrokenPattern(), bool),
        ("ip-address", r"\b[0-9]{1,3}(?:\.[0-9]{1,3}){3}\b", is_ipv4),
    ])
    analyzer = Analyzer(registry)
    report = analyzer.analyze("ping 8.8.8.8")
    assert report.failed == ["broken"]
    assert report.timed_out == []
    assert report["broken"] == []
    assert report["ip-address"] == ["8.8.8.8"]
    assert [c.text for c in analyzer.scan("ping 8.8.8.8")] == ["8.8.8.8"]


def test_timeout_isolated_to_category():
    registry = PatternRegistry([
        ("slow", _TimingOutPattern(), bool),
        ("ip-address", r"\b[0-9]{1,3}(?:\.[0-9]{1,3}){3}\b", is_ipv4),
    ])
    report = Analyzer(registry).analyze("ping 8.8.8.8")
    assert report.timed_out == ["slow"]
    assert report["slow"] == []
    assert report["ip-address"] == ["8.8.8.8"]


def test_timeout_entry_is_empty_mapping_in_count_mode():
    registry = PatternRegistry([("slow", _TimingOutPattern(), bool)])
    report = Analyzer(registry, AnalyzerConfig(mode="count")).analyze("text")
    assert report["slow"] == {}
    assert report.timed_out == ["slow"]


def test_deadline_bounds_slow_matching():
    budget = 0.05
    registry = PatternRegistry([
        ("slow-a", _SlowPattern(r"\w+", 0.03), bool),
        ("slow-b", _SlowPattern(r"\w+", 0.03), bool),
        ("word", r"\w+", bool),
    ])
    analyzer = Analyzer(registry, AnalyzerConfig(timeout=budget))
    text = " ".join(["word"] * 20)

    started = time.monotonic()
    report = analyzer.analyze(text)
    elapsed = time.monotonic() - started

    assert report.timed_out == ["slow-a", "slow-b"]
    assert report["word"] == ["word"]
    assert elapsed < 3 * budget + 1.0


def test_skip_categories_and_ignore_values():
    config = AnalyzerConfig(skip_categories={"date"}, ignore_values={"JSON"})
    report = Analyzer(config=config).analyze("JSON and XML since 2023-12-31")
    assert list(report) == ["abbreviation", "ip-address"]
    assert report["abbreviation"] == ["XML"]


def test_invalid_analyzer_config():
    with pytest.raises(ConfigurationError):
        Analyzer(config=AnalyzerConfig(mode="sets"))
    with pytest.raises(ConfigurationError):
        Analyzer(config=AnalyzerConfig(timeout=0))


def test_scan_returns_positions_in_order():
    text = "Use C# on 10.0.0.1 since 2023-12-31, C# again"
    found = Analyzer().scan(text)
    assert [(c.category, c.text) for c in found] == [
        ("abbreviation", "C#"),
        ("ip-address", "10.0.0.1"),
        ("date", "2023-12-31"),
        ("abbreviation", "C#"),
    ]
    for c in found:
        assert text[c.start:c.end] == c.text


def test_report_to_dict():
    report = Analyzer().analyze("HTML5 at 127.0.0.1")
    assert report.to_dict() == {
        "mode": "unique",
        "results": {
            "abbreviation": ["HTML5"],
            "ip-address": ["127.0.0.1"],
            "date": [],
        },
        "timed_out": [],
        "failed": [],
    }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
