"""Second-stage validators.

Patterns are deliberately coarse; these functions decide whether a
candidate really is what its category claims.  Each takes the candidate
string and returns a bool.
"""

from __future__ import annotations
import importlib
from datetime import date, datetime

import regex

from .errors import ConfigurationError
from .types import Validator

_ROMAN = regex.compile(r"M{0,4}(CM|CD|D?C{0,3})(XC|XL|L?X{0,3})(IX|IV|V?I{0,3})")

# 2+ uppercase letters then optional digits (HTML5), or 1-2 uppercase
# letters then #/+ (C#, C++, F#)
_ABBREVIATION = regex.compile(r"\p{Lu}{2,}\d*|\p{Lu}{1,2}[#+]+")

_IPV4 = regex.compile(r"([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})")

# (name, shape, strptime format), tried in order
DATE_FORMATS: list[tuple[str, regex.Pattern, str]] = [
    ("d.M.yyyy", regex.compile(r"[0-9]{1,2}\.[0-9]{1,2}\.[0-9]{4}"), "%d.%m.%Y"),
    ("dd.MM.yyyy", regex.compile(r"[0-9]{2}\.[0-9]{2}\.[0-9]{4}"), "%d.%m.%Y"),
    ("d/M/yyyy", regex.compile(r"[0-9]{1,2}/[0-9]{1,2}/[0-9]{4}"), "%d/%m/%Y"),
    ("dd/MM/yyyy", regex.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4}"), "%d/%m/%Y"),
    ("yyyy-MM-dd", regex.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}"), "%Y-%m-%d"),
]


def is_roman_numeral(value: str) -> bool:
    """True if value is a canonical Roman numeral.

    The empty string matches the grammar (zero) and is reported as Roman.
    """
    if any(ch.isdigit() or ch in "#+" for ch in value):
        return False
    return _ROMAN.fullmatch(value) is not None


def is_abbreviation(value: str) -> bool:
    if value.casefold() == ".net":
        return True
    if _ABBREVIATION.fullmatch(value) is None:
        return False
    return not is_roman_numeral(value)


def is_ipv4(value: str) -> bool:
    m = _IPV4.fullmatch(value)
    if m is None:
        return False
    return all(int(octet) <= 255 for octet in m.groups())


def parse_date(value: str) -> tuple[date, str]:
    """Parse value against DATE_FORMATS.

    Returns the date and the name of the first format that accepted it.
    Raises ValueError if no format parses the whole string.
    """
    for name, shape, fmt in DATE_FORMATS:
        if shape.fullmatch(value) is None:
            continue
        try:
            return datetime.strptime(value, fmt).date(), name
        except ValueError:
            # calendar-invalid (32.01, 30.02, ...)
            continue
    raise ValueError(f"not a date: {value!r}")


def is_date(value: str) -> bool:
    try:
        parse_date(value)
    except ValueError:
        return False
    return True


VALIDATORS: dict[str, Validator] = {
    "abbreviation": is_abbreviation,
    "roman-numeral": is_roman_numeral,
    "ip-address": is_ipv4,
    "date": is_date,
}


def resolve_validator(ref: str | Validator) -> Validator:
    """Turn a config reference into a callable.

    Accepts a callable, a name from VALIDATORS, or "package.module:function".
    """
    if callable(ref):
        return ref
    if not isinstance(ref, str) or not ref:
        raise ConfigurationError(f"invalid validator reference: {ref!r}")
    if ref in VALIDATORS:
        return VALIDATORS[ref]
    module_name, sep, attr = ref.partition(":")
    if not sep or not attr:
        raise ConfigurationError(f"unknown validator: {ref!r}")
    try:
        func = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(f"cannot load validator {ref!r}: {exc}") from exc
    if not callable(func):
        raise ConfigurationError(f"validator {ref!r} is not callable")
    return func
