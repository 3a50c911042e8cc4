"""High-level orchestration: listing page in, RSS feed out."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .config import PipelineConfig
from .enrich import ArticleEnricher
from .extract import ExtractionChain
from .feed import write_failure_feed, write_feed
from .fetch import build_fetcher
from .models import RawDocument, TeaserItem
from .seen import SeenSet, SeenStore

logger = logging.getLogger("feedscout")


@dataclass
class PipelineContext:
    """Collaborators for one run, built once and passed to every step."""

    config: PipelineConfig
    fetcher: object
    chain: ExtractionChain
    store: SeenStore
    enricher: ArticleEnricher
    sleep: Callable[[float], None] = time.sleep


@dataclass
class RunResult:
    """Outcome of a pipeline run."""

    feed_path: Path
    found: int = 0
    new_items: List[TeaserItem] = field(default_factory=list)
    enriched: int = 0
    failed: bool = False
    error: Optional[str] = None
    total_seconds: float = 0.0


def build_context(config: PipelineConfig) -> PipelineContext:
    fetcher = build_fetcher(config.fetch)
    return PipelineContext(
        config=config,
        fetcher=fetcher,
        chain=ExtractionChain.for_source(config.source),
        store=SeenStore(config.seen_path),
        enricher=ArticleEnricher(fetcher, config.source),
    )


def fetch_teasers(context: PipelineContext) -> List[TeaserItem]:
    """Fetch the listing page and run the extraction chain over it."""
    url = context.config.source.listing_url
    document = RawDocument.parse(context.fetcher.fetch(url), url)
    items = context.chain.extract(document)
    if context.config.max_items is not None:
        items = items[: context.config.max_items]
    return items


def filter_new(items: List[TeaserItem], seen: SeenSet) -> List[TeaserItem]:
    return [item for item in items if item.link not in seen]


def enrich_items(context: PipelineContext, items: List[TeaserItem], seen: SeenSet) -> int:
    """Enrich items one at a time, checkpointing the seen-set after each."""
    delay = max(context.config.request_delay_ms, 0) / 1000
    enriched = 0
    for index, item in enumerate(items, start=1):
        if delay:
            context.sleep(delay)
        logger.info("[%d/%d] Enriching %s", index, len(items), item.link)
        body = context.enricher.enrich(item.link)
        item.description = body.html
        if not body.placeholder:
            enriched += 1
        seen.add(item.link)
        context.store.save(seen)
    return enriched


def _run(context: PipelineContext, result: RunResult) -> None:
    config = context.config
    seen = context.store.load()
    items = fetch_teasers(context)
    result.found = len(items)
    logger.info("Found %d total teasers", len(items))

    new_items = filter_new(items, seen)
    result.new_items = new_items
    logger.info("%d new article(s) (%d already seen)", len(new_items), len(items) - len(new_items))

    if not new_items:
        if config.feed_path.exists():
            logger.info("No new articles. Feed unchanged.")
        else:
            write_feed(config.feed_path, config.source, [])
        return

    if config.enrich:
        result.enriched = enrich_items(context, new_items, seen)
    else:
        for item in new_items:
            seen.add(item.link)
        context.store.save(seen)

    write_feed(config.feed_path, config.source, new_items)


def run_pipeline(context: PipelineContext) -> RunResult:
    """Run one feed generation; failures produce a placeholder feed instead of raising."""
    config = context.config
    result = RunResult(feed_path=config.feed_path)
    start = time.perf_counter()
    try:
        _run(context, result)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Feed generation for %s failed", config.source.name)
        result.failed = True
        result.error = str(exc)
        write_failure_feed(config.feed_path, config.source, str(exc))
    result.total_seconds = time.perf_counter() - start
    return result
