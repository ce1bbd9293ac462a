"""CLI entrypoint for charuz — subcommand dispatcher."""

import argparse
import json
import logging
import sys
from pathlib import Path

from charuz.vocalize import DICTA_URL


def _add_vocalize_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments controlling vocalization lookups."""
    parser.add_argument("--no-vocalize", action="store_true", default=False,
                        help="Treat input as already vocalized; skip the lookup service")
    parser.add_argument("--dicta-url", default=DICTA_URL,
                        help="Base URL of the vocalization service")
    parser.add_argument("--no-cache", action="store_true", default=False,
                        help="Disable the on-disk vocalization cache")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments with subcommands."""
    parser = argparse.ArgumentParser(
        prog="charuz",
        description="Hebrew syllabification and rhyme analysis",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=False,
                        help="Show debug logging and HTTP client messages")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    syl_parser = subparsers.add_parser(
        "syllabify",
        help="Split words into syllables",
        description="Vocalize and syllabify words, printing vowel details",
    )
    syl_parser.add_argument("words", nargs="+", help="Hebrew words")
    _add_vocalize_args(syl_parser)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Find rhyme groups in text",
        description="Cluster the words of a text into rhyme groups (JSON output)",
    )
    analyze_parser.add_argument("input_file", nargs="?", default=None,
                                help="Text file to analyze (default: stdin)")
    analyze_parser.add_argument("--full", action="store_true", default=False,
                                help="Include per-line word analysis in the output")
    _add_vocalize_args(analyze_parser)

    shades_parser = subparsers.add_parser(
        "shades",
        help="Print per-syllable shades of a scheme color",
    )
    shades_parser.add_argument("color", help="Base color, e.g. '#3357FF'")
    shades_parser.add_argument("count", type=int, help="Number of syllables")

    stats_parser = subparsers.add_parser(
        "stats",
        help="Print scheme statistics for a saved verse",
        description="Read a verse JSON document and report per-scheme stats",
    )
    stats_parser.add_argument("verse_file", type=Path, help="Verse JSON file")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    return args


def _make_lookup(args: argparse.Namespace):
    """Build (provider, cache) from vocalization arguments."""
    from charuz.vocalize import DictaVocalizer, FileVocalizationCache, MemoryVocalizationCache

    if args.no_vocalize:
        return None, None
    provider = DictaVocalizer(base_url=args.dicta_url)
    cache = MemoryVocalizationCache() if args.no_cache else FileVocalizationCache()
    return provider, cache


def _run_syllabify(args: argparse.Namespace) -> None:
    from charuz.vocalize import vocalize_and_syllabify

    provider, cache = _make_lookup(args)
    words = vocalize_and_syllabify(" ".join(args.words), provider, cache)
    for word in words:
        parts = " | ".join(f"{s.text}({s.vowel.value or '-'})" for s in word.syllables)
        print(f"{word.text}\t{word.vocalized_text}\t{parts}\t{word.vowel_signature}")


def _run_analyze(args: argparse.Namespace) -> None:
    from charuz.engine import analyze_text

    if args.input_file is None:
        text = sys.stdin.read()
    else:
        path = Path(args.input_file)
        if not path.exists():
            print(f"Error: file not found: {path}", file=sys.stderr)
            sys.exit(1)
        text = path.read_text(encoding="utf-8")

    provider, cache = _make_lookup(args)
    result = analyze_text(text, provider=provider, cache=cache)
    if args.full:
        payload = result.to_dict()
    else:
        payload = {"rhyme_groups": [g.to_dict() for g in result.rhyme_groups]}
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _run_shades(args: argparse.Namespace) -> None:
    from charuz.colors import get_scheme_shades

    try:
        shades = get_scheme_shades(args.color, args.count)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    for shade in shades:
        print(shade)


def _run_stats(args: argparse.Namespace) -> None:
    from charuz.stats import compute_scheme_stats
    from charuz.types import Verse

    if not args.verse_file.exists():
        print(f"Error: file not found: {args.verse_file}", file=sys.stderr)
        sys.exit(1)
    try:
        verse = Verse.from_dict(json.loads(args.verse_file.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
        print(f"Error: invalid verse file {args.verse_file}: {e}", file=sys.stderr)
        sys.exit(1)

    report = []
    for scheme in verse.schemes:
        entry = {"id": scheme.id, "name": scheme.name, "color": scheme.color}
        entry.update(compute_scheme_stats(scheme, verse).to_dict())
        report.append(entry)
    print(json.dumps({"schemes": report}, ensure_ascii=False, indent=2))


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(name)s %(levelname)s: %(message)s")

    if not args.verbose:
        logging.getLogger("urllib3").setLevel(logging.WARNING)

    if args.command == "syllabify":
        _run_syllabify(args)
    elif args.command == "analyze":
        _run_analyze(args)
    elif args.command == "shades":
        _run_shades(args)
    elif args.command == "stats":
        _run_stats(args)


if __name__ == "__main__":
    main()
