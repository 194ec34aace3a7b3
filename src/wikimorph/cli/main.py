#!/usr/bin/env python3
"""
wikimorph - split English words into morphemes from Wiktionary markup.

Usage:
    wikimorph split unhappiness rainbows       # Pretty table per word
    wikimorph split --json --raw unhappiness   # JSON lines, hyphens kept
    wikimorph batch words.txt pieces.jsonl     # Whole word list
    wikimorph snapshot-status                  # Is the local snapshot current?
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import orjson
from rich.console import Console
from rich.table import Table

from wikimorph.config import Settings, load_settings
from wikimorph.decompose import Decomposer
from wikimorph.errors import ConfigError, SnapshotError, StructuralMismatch
from wikimorph.models import Decomposition
from wikimorph.progress import BatchProgress
from wikimorph.snapshot import fetch_latest_dump_date, load_snapshot
from wikimorph.sources import ContentSource, SnapshotSource, open_source


logger = logging.getLogger("wikimorph.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_STALE = 2

ROLE_STYLES = {
    "base_word": "bold",
    "prefix": "green",
    "suffix": "cyan",
    "interfix": "magenta",
    "inflection": "yellow",
}


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def build_source(settings: Settings, snapshot: Optional[Path], offline: bool) -> ContentSource:
    if snapshot is not None:
        return SnapshotSource.from_path(snapshot)
    return open_source(settings, offline=offline)


def render(result: Decomposition, console: Console) -> None:
    """Print one decomposition as a rich table."""
    table = Table(title=result.word, title_justify="left", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Piece")
    table.add_column("Role")
    for i, piece in enumerate(result.pieces, 1):
        style = ROLE_STYLES.get(piece.role.value, "")
        table.add_row(str(i), piece.text, f"[{style}]{piece.role.value}[/{style}]" if style else piece.role.value)
    console.print(table)
    for diagnostic in result.diagnostics:
        console.print(f"  [dim]{diagnostic.kind.value}[/dim] {diagnostic.word}: {diagnostic.message}")


def run_split(args, settings: Settings) -> int:
    source = build_source(settings, args.snapshot, args.offline)
    decomposer = Decomposer(source, args.max_depth or settings.max_depth)
    console = Console()

    status = EXIT_OK
    for word in args.words:
        try:
            result = decomposer.decompose_raw(word) if args.raw else decomposer.decompose(word)
        except StructuralMismatch as e:
            logger.error(f"Cannot analyse '{word}': {e}")
            status = EXIT_FAILURE
            continue

        if args.json:
            sys.stdout.write(orjson.dumps(result.to_dict()).decode("utf-8") + "\n")
        else:
            render(result, console)
    return status


def read_words(path: Path) -> list[str]:
    """One word per line; blank lines and '#' comments are skipped."""
    words = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            word = line.strip()
            if word and not word.startswith("#"):
                words.append(word)
    return words


def run_batch(args, settings: Settings) -> int:
    source = build_source(settings, args.snapshot, args.offline)
    decomposer = Decomposer(source, args.max_depth or settings.max_depth)

    words = read_words(args.input)
    logger.info(f"Decomposing {len(words):,} words from {args.input}")
    args.output.parent.mkdir(parents=True, exist_ok=True)

    failures = 0
    with open(args.output, "wb") as out, BatchProgress(f"Decomposing {args.input.name}", total=len(words)) as progress:
        for word in words:
            try:
                result = decomposer.decompose_raw(word) if args.raw else decomposer.decompose(word)
            except StructuralMismatch as e:
                logger.warning(f"Cannot analyse '{word}': {e}")
                out.write(orjson.dumps({"word": word, "error": str(e)}) + b"\n")
                failures += 1
                progress.advance(failed=True)
                continue
            out.write(orjson.dumps(result.to_dict()) + b"\n")
            progress.advance(pieces=len(result), diagnostics=len(result.diagnostics))

    logger.info(f"Written: {args.output}")
    logger.info(f"  Words: {len(words):,}  Failures: {failures:,}")
    return EXIT_OK


def run_snapshot_status(args, settings: Settings) -> int:
    path = args.snapshot or settings.snapshot_path
    try:
        snapshot = load_snapshot(path)
    except SnapshotError as e:
        logger.error(str(e))
        return EXIT_FAILURE

    logger.info(f"Snapshot: {path}")
    logger.info(f"  Words: {len(snapshot):,}")
    logger.info(f"  Dump date: {snapshot.update_date.isoformat() if snapshot.update_date else 'unknown'}")

    try:
        latest = fetch_latest_dump_date(settings.dump_rss_url, timeout=settings.timeout, user_agent=settings.user_agent)
    except SnapshotError as e:
        logger.error(str(e))
        return EXIT_FAILURE

    logger.info(f"  Latest dump: {latest.isoformat()}")
    if snapshot.is_stale(latest):
        logger.warning("Snapshot is out of date")
        return EXIT_STALE
    logger.info("Snapshot is up to date")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wikimorph",
        description="Split English words into morphemes using Wiktionary markup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pieces of a few words
  wikimorph split unhappiness rainbows

  # Keep boundary hyphens, one JSON object per word
  wikimorph split --raw --json unhappiness

  # Decompose a word list using a local snapshot
  wikimorph batch words.txt pieces.jsonl --snapshot wikitext_en.jsonl
        """,
    )
    parser.add_argument('--config', type=Path, help='YAML settings file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug output')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only show warnings and errors')

    subparsers = parser.add_subparsers(dest='command', required=True)

    def add_source_options(sub):
        sub.add_argument('--max-depth', type=int, help='Maximum recursion depth')
        sub.add_argument('--raw', action='store_true', help='Keep boundary hyphens on affixes')
        sub.add_argument('--snapshot', type=Path, help='Snapshot JSONL file to read markup from')
        sub.add_argument('--offline', action='store_true', help='Never call the Wiktionary API')

    split = subparsers.add_parser('split', help='Decompose words and print their pieces')
    split.add_argument('words', nargs='+', help='Words to decompose')
    split.add_argument('--json', action='store_true', help='Print one JSON object per word')
    add_source_options(split)
    split.set_defaults(handler=run_split)

    batch = subparsers.add_parser('batch', help='Decompose a word list into JSONL')
    batch.add_argument('input', type=Path, help='Word list (one word per line)')
    batch.add_argument('output', type=Path, help='JSONL output file')
    add_source_options(batch)
    batch.set_defaults(handler=run_batch)

    status = subparsers.add_parser('snapshot-status', help='Compare the snapshot with the latest dump')
    status.add_argument('--snapshot', type=Path, help='Snapshot JSONL file (default: cache dir)')
    status.set_defaults(handler=run_snapshot_status)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    if getattr(args, 'max_depth', None) is not None and args.max_depth < 1:
        parser.error("--max-depth must be at least 1")

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        logger.error(str(e))
        return EXIT_FAILURE

    try:
        return args.handler(args, settings)
    except SnapshotError as e:
        logger.error(str(e))
        return EXIT_FAILURE


if __name__ == '__main__':
    sys.exit(main())
