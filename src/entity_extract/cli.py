"""CLI interface for entity-extract.

Usage:
    # Report as JSON (stdin or a file)
    echo 'C# and C++ on 192.168.0.1' | python -m entity_extract.cli analyze

    # Occurrence counts instead of distinct values
    python -m entity_extract.cli --mode count analyze notes.txt

    # Show the text with accepted entities highlighted
    python -m entity_extract.cli highlight notes.txt

    # List the categories in use
    python -m entity_extract.cli --config rules.yaml categories
"""

from __future__ import annotations
import argparse
import json
import logging
import sys

from .analyzer import Analyzer
from .config import create_analyzer, load_config, load_from_yaml
from .errors import ConfigurationError
from .types import MODES, Candidate

_COLOR = "\033[36m"   # cyan
_RESET = "\033[0m"


def _build_analyzer(args: argparse.Namespace) -> Analyzer:
    cfg = load_from_yaml(args.config) if args.config else load_config({})
    if args.mode:
        cfg["mode"] = args.mode
    if args.timeout is not None:
        cfg["timeout"] = args.timeout
    if args.skip:
        cfg["skip_categories"] |= set(args.skip.split(","))
    return create_analyzer(cfg)


def _read_text(args: argparse.Namespace) -> str:
    if args.file:
        with open(args.file, encoding="utf-8") as f:
            return f.read()
    return sys.stdin.read()


def _non_overlapping(candidates: list[Candidate]) -> list[Candidate]:
    """Drop spans overlapping an earlier (or same-start, longer) one."""
    taken: list[Candidate] = []
    end = 0
    for c in candidates:
        if c.start >= end:
            taken.append(c)
            end = c.end
    return taken


def highlight(text: str, candidates: list[Candidate], *, color: bool = True) -> str:
    """Render text with the given spans marked."""
    out: list[str] = []
    last = 0
    for c in _non_overlapping(candidates):
        out.append(text[last:c.start])
        if color:
            out.append(f"{_COLOR}{c.text}{_RESET}")
        else:
            out.append(f"[{c.text}]")
        last = c.end
    out.append(text[last:])
    return "".join(out)


def cmd_analyze(args: argparse.Namespace) -> None:
    """Print the report for the input text as JSON."""
    analyzer = _build_analyzer(args)
    report = analyzer.analyze(_read_text(args))
    json.dump(report.to_dict(), sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_highlight(args: argparse.Namespace) -> None:
    """Print the input text with accepted entities highlighted."""
    analyzer = _build_analyzer(args)
    text = _read_text(args)
    sys.stdout.write(highlight(text, analyzer.scan(text), color=not args.no_color))
    if not text.endswith("\n"):
        sys.stdout.write("\n")


def cmd_categories(args: argparse.Namespace) -> None:
    analyzer = _build_analyzer(args)
    for category in analyzer.registry.categories():
        sys.stdout.write(f"{category}\n")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="entity_extract",
        description="Extract abbreviations, IPv4 addresses and dates from text",
    )
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--mode", choices=MODES, help="Result mode (default: unique)")
    parser.add_argument("--timeout", type=float, help="Matching budget per category, seconds")
    parser.add_argument("--skip", default="", help="Comma-separated categories to skip")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)
    p = sub.add_parser("analyze", help="Print the report as JSON")
    p.add_argument("file", nargs="?", help="Input file (default: stdin)")
    p = sub.add_parser("highlight", help="Print text with entities highlighted")
    p.add_argument("file", nargs="?", help="Input file (default: stdin)")
    p.add_argument("--no-color", action="store_true", help="Mark entities with [brackets]")
    sub.add_parser("categories", help="List registered categories")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    cmds = {
        "analyze": cmd_analyze,
        "highlight": cmd_highlight,
        "categories": cmd_categories,
    }
    try:
        cmds[args.command](args)
    except ConfigurationError as exc:
        sys.stderr.write(f"configuration error: {exc}\n")
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        sys.stderr.write(f"cannot read input: {exc}\n")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
