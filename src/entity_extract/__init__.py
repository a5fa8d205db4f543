"""Entity Extract: pattern-then-validate extraction of abbreviations, IPs and dates."""

from .analyzer import Analyzer, AnalyzerConfig
from .patterns import PatternRegistry, default_registry
from .config import create_analyzer, load_config, load_from_yaml
from .errors import ConfigurationError, MatchTimeout
from .types import Candidate, Report, Rule, COUNT, UNIQUE
from .validators import is_abbreviation, is_date, is_ipv4, is_roman_numeral, parse_date

__all__ = [
    "Analyzer", "AnalyzerConfig",
    "PatternRegistry", "default_registry",
    "create_analyzer", "load_config", "load_from_yaml",
    "ConfigurationError", "MatchTimeout",
    "Candidate", "Report", "Rule", "COUNT", "UNIQUE",
    "is_abbreviation", "is_date", "is_ipv4", "is_roman_numeral", "parse_date",
]
__version__ = "0.1.0"
