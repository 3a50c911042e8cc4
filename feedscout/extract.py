"""Ordered extraction strategies for locating teasers in a listing page."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set

from bs4 import Tag

from .config import SourceConfig
from .errors import ParseError
from .models import RawDocument, TeaserItem
from .resolvers import is_tile, resolve_anchor, resolve_card, resolve_tile
from .state import find_state
from .utils import normalize_link

logger = logging.getLogger("feedscout.extract")


def _unique(items: Iterable[Optional[TeaserItem]]) -> List[TeaserItem]:
    """Drop rejected candidates and repeated links, keeping first occurrences."""
    seen_links: Set[str] = set()
    unique: List[TeaserItem] = []
    for item in items:
        if item is None or item.link in seen_links:
            continue
        seen_links.add(item.link)
        unique.append(item)
    return unique


def iter_nodes(root: Any) -> Iterable[Mapping[str, Any]]:
    """Yield every mapping in a JSON tree, depth-first in document order."""
    stack: List[Any] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, list):
            stack.extend(reversed(node))
        elif isinstance(node, dict):
            yield node
            stack.extend(
                value for value in reversed(list(node.values())) if isinstance(value, (list, dict))
            )


class StructuredStateStrategy:
    """Walk the embedded JSON state and collect every recognised tile."""

    name = "structured-state"

    def __init__(self, source: SourceConfig) -> None:
        self.source = source

    def __call__(self, document: RawDocument) -> List[TeaserItem]:
        if not self.source.state_global:
            return []
        state = find_state(document, self.source.state_global, self.source.state_marker)
        if state is None:
            logger.info("No %s state found in %s", self.source.state_global, document.url)
            return []
        return _unique(
            resolve_tile(node, self.source) for node in iter_nodes(state) if is_tile(node, self.source)
        )


class StructuralScrapeStrategy:
    """Scrape card-like containers matched by the source's selector list."""

    name = "structural-scrape"

    def __init__(self, source: SourceConfig) -> None:
        self.source = source

    def _containers(self, document: RawDocument) -> List[Tag]:
        visited: Set[int] = set()
        containers: List[Tag] = []
        for selector in self.source.listing.containers:
            for element in document.soup.select(selector):
                if id(element) in visited:
                    continue
                visited.add(id(element))
                containers.append(element)
        return containers

    def __call__(self, document: RawDocument) -> List[TeaserItem]:
        return _unique(resolve_card(card, self.source) for card in self._containers(document))


class AnchorScanStrategy:
    """Last resort: headline anchors and anchors with article-like paths."""

    name = "anchor-scan"

    def __init__(self, source: SourceConfig) -> None:
        self.source = source

    def _candidates(self, document: RawDocument) -> List[Tag]:
        selected: Set[int] = set()
        if self.source.listing.anchors:
            selected = {id(a) for a in document.soup.select(", ".join(self.source.listing.anchors))}
        candidates: List[Tag] = []
        for anchor in document.soup.find_all("a", href=True):
            if id(anchor) in selected or self._is_article_link(anchor["href"]):
                candidates.append(anchor)
        return candidates

    def _is_article_link(self, href: str) -> bool:
        link = normalize_link(href, self.source.base_url, self.source.domain, self.source.exclusions)
        return bool(link) and any(p.search(link) for p in self.source.article_paths)

    def __call__(self, document: RawDocument) -> List[TeaserItem]:
        return _unique(resolve_anchor(anchor, self.source) for anchor in self._candidates(document))


class ExtractionChain:
    """Try strategies in priority order; the first non-empty result wins."""

    def __init__(self, strategies: Sequence[Any]) -> None:
        self.strategies = list(strategies)

    @classmethod
    def for_source(cls, source: SourceConfig) -> "ExtractionChain":
        return cls(
            [
                StructuredStateStrategy(source),
                StructuralScrapeStrategy(source),
                AnchorScanStrategy(source),
            ]
        )

    def extract(self, document: RawDocument) -> List[TeaserItem]:
        for strategy in self.strategies:
            try:
                items = strategy(document)
            except ParseError as exc:
                logger.warning("%s failed: %s", strategy.name, exc)
                continue
            if items:
                logger.info("%s extracted %d teaser(s)", strategy.name, len(items))
                return items
            logger.debug("%s found nothing; trying next strategy", strategy.name)
        logger.warning("No teasers found in %s", document.url)
        return []
