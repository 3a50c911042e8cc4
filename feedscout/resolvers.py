"""Per-field fallback chains that turn raw nodes into teaser items.

Each field is resolved by an ordered list of small resolver functions; the
first one producing a non-empty string wins. Structured-state resolvers read
nested mappings behind type checks; DOM resolvers read BeautifulSoup tags.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from bs4 import Tag

from .config import SourceConfig
from .models import TeaserItem
from .utils import absolutize, clean_text, normalize_link

logger = logging.getLogger("feedscout.resolvers")

Resolver = Callable[[Any], Optional[str]]

PREFERRED_CROPS = ("16x9", "3x2")


def first_non_empty(resolvers: Sequence[Resolver], node: Any) -> str:
    """Evaluate ``resolvers`` in order and return the first non-empty cleaned value."""
    for resolver in resolvers:
        value = clean_text(resolver(node))
        if value:
            return value
    return ""


# ---------------------------------------------------------------------------
# Structured-state resolvers
# ---------------------------------------------------------------------------


def key(*path: Union[str, int]) -> Resolver:
    """Resolver reading a nested key/index path; missing steps yield None."""

    def resolve(node: Any) -> Optional[str]:
        current = node
        for step in path:
            if isinstance(step, int):
                if not isinstance(current, list) or len(current) <= step:
                    return None
                current = current[step]
            else:
                if not isinstance(current, dict):
                    return None
                current = current.get(step)
        return current if isinstance(current, str) else None

    return resolve


STATE_LINK: List[Resolver] = [key("ctas", 0, "url"), key("url"), key("href")]
STATE_TITLE: List[Resolver] = [key("title"), key("abstract"), key("summary")]
STATE_AUTHOR: List[Resolver] = [
    key("byLine"),
    key("byline"),
    key("author"),
    key("author", "name"),
    key("authors", 0, "name"),
]
STATE_DATE: List[Resolver] = [key("date"), key("pubDate"), key("publishDate"), key("dt")]
STATE_TOPIC: List[Resolver] = [key("kicker"), key("topic"), key("section", "name"), key("tag")]
STATE_SUMMARY: List[Resolver] = [key("description"), key("dek"), key("abstract")]


def pick_image(img: Any) -> str:
    """Choose an image URL from a state ``img`` object, preferring wide crops."""
    if not isinstance(img, dict):
        return ""
    crops = img.get("crps")
    if isinstance(crops, list):
        usable = [c for c in crops if isinstance(c, dict) and isinstance(c.get("url"), str) and c["url"]]
        for name in PREFERRED_CROPS:
            for crop in usable:
                if crop.get("nm") == name:
                    return crop["url"]
        if usable:
            return usable[0]["url"]
    return first_non_empty([key("src"), key("rt")], img)


def is_tile(node: Mapping[str, Any], source: SourceConfig) -> bool:
    kind = node.get(source.tile_type_field)
    if not isinstance(kind, str) or not kind:
        return False
    if kind in source.tile_types:
        return True
    return any(part in kind for part in source.tile_type_substrings)


def resolve_tile(node: Mapping[str, Any], source: SourceConfig) -> Optional[TeaserItem]:
    """Resolve a structured-state tile; None when it fails title/link checks."""
    title = first_non_empty(STATE_TITLE, node)
    link = normalize_link(
        first_non_empty(STATE_LINK, node), source.base_url, source.domain, source.exclusions
    )
    if not title or not link:
        logger.debug("Rejected tile %r (title=%r, link=%r)", node.get(source.tile_type_field), title, link)
        return None
    image = pick_image(node.get("img"))
    summary = first_non_empty(STATE_SUMMARY, node)
    return TeaserItem(
        title=title,
        link=link,
        image=absolutize(image, source.base_url) if image else "",
        author=first_non_empty(STATE_AUTHOR, node),
        date=first_non_empty(STATE_DATE, node),
        topic=first_non_empty(STATE_TOPIC, node),
        summary="" if summary == title else summary,
    )


# ---------------------------------------------------------------------------
# DOM resolvers
# ---------------------------------------------------------------------------


def tag_value(tag: Optional[Tag]) -> str:
    """Readable value of a tag: ``content`` for meta tags, text otherwise."""
    if tag is None:
        return ""
    if tag.name == "meta":
        return clean_text(tag.get("content"))
    return clean_text(tag.get_text(" ", strip=True))


def attr(name: str, selector: Optional[str] = None) -> Resolver:
    """Resolver reading attribute ``name`` of the node or its first ``selector`` match."""

    def resolve(node: Tag) -> Optional[str]:
        target = node if selector is None else node.select_one(selector)
        if target is None:
            return None
        value = target.get(name)
        if isinstance(value, list):
            value = " ".join(value)
        return value

    return resolve


def text(selector: Optional[str] = None) -> Resolver:
    """Resolver reading the visible text of the node or its first ``selector`` match."""

    def resolve(node: Tag) -> Optional[str]:
        target = node if selector is None else node.select_one(selector)
        return tag_value(target)

    return resolve


def selector_chain(selectors: Sequence[str]) -> List[Resolver]:
    return [text(selector) for selector in selectors]


def date_chain(selectors: Sequence[str]) -> List[Resolver]:
    """Prefer machine-readable ``datetime`` attributes over displayed text."""
    resolvers: List[Resolver] = []
    for selector in selectors:
        resolvers.append(attr("datetime", selector))
        resolvers.append(text(selector))
    return resolvers


ANCHOR_TITLE: List[Resolver] = [attr("aria-label"), text(".sr-only"), text()]


def dom_image(node: Tag, base_url: str) -> str:
    """First ``<img>`` source under ``node``: src, then data-src, then srcset."""
    img = node if node.name == "img" else node.find("img")
    if img is None:
        return ""
    for resolver in (attr("src"), attr("data-src")):
        candidate = clean_text(resolver(img))
        if candidate and not candidate.startswith("data:"):
            return absolutize(candidate, base_url)
    srcset = clean_text(img.get("srcset"))
    if srcset:
        return absolutize(srcset.split(",")[0].split(" ")[0], base_url)
    return ""


def _headline(card: Tag, selectors: Sequence[str]) -> Optional[Tag]:
    if card.name == "a" and card.get("href"):
        return card
    for selector in selectors:
        for anchor in card.select(selector):
            if anchor.name == "a" and anchor.get("href"):
                return anchor
    return None


def _article_href(card: Tag, source: SourceConfig) -> Optional[str]:
    for anchor in card.find_all("a", href=True):
        link = normalize_link(anchor["href"], source.base_url, source.domain, source.exclusions)
        if link and any(pattern.search(link) for pattern in source.article_paths):
            return link
    return None


def resolve_card(card: Tag, source: SourceConfig) -> Optional[TeaserItem]:
    """Resolve a listing card element through the source's selector chains."""
    selectors = source.listing
    headline = _headline(card, selectors.headline)
    link = None
    if headline is not None:
        link = normalize_link(headline["href"], source.base_url, source.domain, source.exclusions)
    if link is None:
        link = _article_href(card, source)

    title_chain: List[Resolver] = []
    if headline is not None:
        title_chain += [lambda _node: headline.get("aria-label"), lambda _node: text(".sr-only")(headline)]
    title_chain += selector_chain(selectors.title)
    if headline is not None:
        title_chain.append(lambda _node: tag_value(headline))
    title = first_non_empty(title_chain, card)

    if not title or not link:
        return None
    summary = first_non_empty(selector_chain(selectors.summary), card)
    return TeaserItem(
        title=title,
        link=link,
        image=dom_image(card, source.base_url),
        author=first_non_empty(selector_chain(selectors.author), card),
        date=first_non_empty(date_chain(selectors.date), card),
        topic=first_non_empty(selector_chain(selectors.topic), card),
        summary="" if summary == title else summary,
    )


def resolve_anchor(anchor: Tag, source: SourceConfig) -> Optional[TeaserItem]:
    """Resolve a bare anchor; titles shorter than the source minimum are noise."""
    link = normalize_link(anchor.get("href"), source.base_url, source.domain, source.exclusions)
    if not link:
        return None
    title = first_non_empty(ANCHOR_TITLE, anchor)
    if len(title) < source.min_title_length:
        return None
    return TeaserItem(title=title, link=link)
