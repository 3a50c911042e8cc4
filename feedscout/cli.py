"""Command-line entry point for feedscout."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, Sequence

from .config import (
    DEFAULT_FLARESOLVERR_URL,
    FETCH_BACKENDS,
    FetchConfig,
    PipelineConfig,
    SourceConfig,
)
from .errors import FeedscoutError
from .pipeline import build_context, fetch_teasers, run_pipeline
from .sources import BUILTIN_SOURCES, generic_source, get_source, load_source_file

logger = logging.getLogger("feedscout.cli")

DEFAULT_SOURCE = "natgeo"


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return ("run",)
    first = argv[0]
    if first in commands or first in ("-h", "--help"):
        return argv
    return ("run", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--source",
        default=None,
        choices=sorted(BUILTIN_SOURCES),
        help="Built-in site definition to scrape (default: natgeo)",
    )
    source.add_argument(
        "--source-file",
        type=Path,
        help="JSON file describing the site to scrape",
    )
    source.add_argument(
        "--base-url",
        help="Scrape a generic card-based news site rooted at this URL",
    )
    parser.add_argument(
        "--listing-url",
        help="Listing page for --base-url (default: the base URL itself)",
    )
    parser.add_argument(
        "--fetcher",
        default="flaresolverr",
        choices=FETCH_BACKENDS,
        help="How pages are downloaded (default: flaresolverr)",
    )
    parser.add_argument(
        "--flaresolverr-url",
        default=None,
        help=f"FlareSolverr endpoint (default: $FLARESOLVERR_URL or {DEFAULT_FLARESOLVERR_URL})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=60.0,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--max-items",
        type=int,
        default=None,
        help="Only consider the first N teasers found on the listing page",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_run_arguments(parser: argparse.ArgumentParser) -> None:
    _add_common_arguments(parser)
    parser.add_argument(
        "--output",
        default="feeds",
        type=Path,
        help="Directory where the feed and seen-set files are written",
    )
    parser.add_argument("--seen-file", type=Path, help="Override the seen-set file path")
    parser.add_argument("--feed-file", type=Path, help="Override the RSS output file path")
    parser.add_argument(
        "--enrich",
        action="store_true",
        help="Fetch every new article and embed its full body in the feed",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=3000,
        help="Pause between article fetches in milliseconds (default: 3000)",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scrape article teasers from a news site and publish them as an RSS feed.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Generate the RSS feed with new articles")
    _add_run_arguments(run_parser)

    extract_parser = subparsers.add_parser(
        "extract", help="Print the teasers found on the listing page as JSON lines"
    )
    _add_common_arguments(extract_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _resolve_source(args: argparse.Namespace) -> SourceConfig:
    if args.source_file:
        return load_source_file(args.source_file)
    if args.base_url:
        return generic_source(args.base_url, args.listing_url)
    return get_source(args.source or DEFAULT_SOURCE)


def _build_config(args: argparse.Namespace) -> PipelineConfig:
    fetch = FetchConfig(backend=args.fetcher, timeout=args.timeout)
    if args.flaresolverr_url:
        fetch.endpoint = args.flaresolverr_url
    config = PipelineConfig(
        source=_resolve_source(args),
        fetch=fetch,
        max_items=args.max_items,
    )
    if args.command == "run":
        config.output_root = Path(args.output).resolve()
        config.seen_file = args.seen_file
        config.feed_file = args.feed_file
        config.enrich = args.enrich
        config.request_delay_ms = args.delay_ms
    return config


def _run_feed(config: PipelineConfig) -> int:
    result = run_pipeline(build_context(config))
    if result.failed:
        logger.error("Feed generation failed: %s", result.error)
        return 1
    logger.info(
        "Finished in %.2fs (%d found, %d new, %d enriched) -> %s",
        result.total_seconds,
        result.found,
        len(result.new_items),
        result.enriched,
        result.feed_path,
    )
    return 0


def _run_extract(config: PipelineConfig) -> int:
    try:
        items = fetch_teasers(build_context(config))
    except FeedscoutError as exc:
        logger.error("%s", exc)
        return 1
    for item in items:
        sys.stdout.write(json.dumps(item.to_dict(), ensure_ascii=False) + "\n")
    sys.stdout.flush()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    try:
        config = _build_config(args)
    except (OSError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2
    if args.command == "extract":
        return _run_extract(config)
    return _run_feed(config)


if __name__ == "__main__":
    sys.exit(main())
