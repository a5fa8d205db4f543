"""YAML/dict config loader for entity-extract.

Supports loading from a YAML file or a plain dict (for embedding in a
larger application config).

Example YAML:

    entity_extract:
      mode: count               # "unique" or "count"
      timeout: 1.5              # seconds per category
      skip_categories:
        - date
      ignore_values:
        - OK
      categories:               # omit to use the built-in rules
        - name: abbreviation
          pattern: '\\b\\p{Lu}{2,}\\d*\\b'
          validator: abbreviation
        - name: ticket
          pattern: '\\b[A-Z]+-[0-9]+\\b'
          validator: mypackage.checks:is_ticket
          flags: [IGNORECASE]
"""

from __future__ import annotations
from pathlib import Path
from typing import Any

import regex

from .analyzer import Analyzer, AnalyzerConfig
from .errors import ConfigurationError
from .patterns import PatternRegistry, default_registry
from .types import MODES, UNIQUE
from .validators import resolve_validator

_FLAG_NAMES = (
    "ASCII", "DOTALL", "FULLCASE", "IGNORECASE", "MULTILINE",
    "POSIX", "UNICODE", "VERBOSE", "WORD",
)


def load_config(data: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    data = data or {}
    # Support nested under "entity_extract" key or flat
    if "entity_extract" in data:
        data = data["entity_extract"] or {}
    if not isinstance(data, dict):
        raise ConfigurationError("config must be a mapping")

    mode = data.get("mode", UNIQUE)
    if mode not in MODES:
        raise ConfigurationError(f"unknown mode {mode!r}")

    categories = data.get("categories")
    if categories is not None:
        categories = [_load_category(i, entry) for i, entry in enumerate(categories)]

    return {
        "mode": mode,
        "timeout": _to_seconds(data.get("timeout", 1.0)),
        "skip_categories": set(data.get("skip_categories") or []),
        "ignore_values": set(data.get("ignore_values") or []),
        "categories": categories,
    }


def _to_seconds(value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"timeout must be a number; got {value!r}") from exc
    if seconds <= 0:
        raise ConfigurationError(f"timeout must be positive; got {seconds}")
    return seconds


def _load_category(index: int, entry: Any) -> dict[str, Any]:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"categories[{index}] must be a mapping")
    missing = [k for k in ("name", "pattern", "validator") if not entry.get(k)]
    if missing:
        raise ConfigurationError(
            f"categories[{index}] is missing {', '.join(missing)}"
        )
    return {
        "name": entry["name"],
        "pattern": entry["pattern"],
        "validator": resolve_validator(entry["validator"]),
        "flags": _load_flags(index, entry.get("flags")),
    }


def _load_flags(index: int, value: Any) -> int:
    """Flag names (IGNORECASE, MULTILINE, ...) or an int, OR-ed together."""
    if value is None:
        return 0
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    names = [value] if isinstance(value, str) else value
    if not isinstance(names, (list, tuple)):
        raise ConfigurationError(f"categories[{index}] flags must be a list of names")
    flags = 0
    for name in names:
        if not isinstance(name, str) or name.upper() not in _FLAG_NAMES:
            raise ConfigurationError(f"categories[{index}] has unknown flag {name!r}")
        flags |= getattr(regex, name.upper())
    return flags


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    import yaml
    with open(path, encoding="utf-8") as f:
        return load_config(yaml.safe_load(f))


def build_registry(config: dict[str, Any]) -> PatternRegistry:
    if config.get("categories") is None:
        return default_registry()
    return PatternRegistry([
        (c["name"], c["pattern"], c["validator"], c.get("flags", 0))
        for c in config["categories"]
    ])


def create_analyzer(config: dict[str, Any] | None = None) -> Analyzer:
    """Create a fully configured analyzer from a config dict."""
    cfg = load_config(config)
    analyzer_config = AnalyzerConfig(
        mode=cfg["mode"],
        timeout=cfg["timeout"],
        skip_categories=cfg["skip_categories"],
        ignore_values=cfg["ignore_values"],
    )
    return Analyzer(build_registry(cfg), analyzer_config)
