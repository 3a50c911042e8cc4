"""RSS serialization of teaser items with feedgen."""

from __future__ import annotations

import datetime as dt
import html
import logging
from pathlib import Path
from posixpath import splitext
from typing import Optional, Sequence
from urllib.parse import urlparse

import filetype
from dateutil import parser as date_parser
from feedgen.feed import FeedGenerator

from .config import SourceConfig
from .models import TeaserItem

logger = logging.getLogger("feedscout.feed")

DEFAULT_ENCLOSURE_TYPE = "image/jpeg"


def infer_image_mime(url: str) -> str:
    """Guess an image MIME type from the URL's file extension."""
    ext = splitext(urlparse(url).path)[1].lstrip(".").lower()
    if ext == "jpeg":
        ext = "jpg"
    kind = filetype.get_type(ext=ext) if ext else None
    if kind and kind.mime.startswith("image/"):
        return kind.mime
    return DEFAULT_ENCLOSURE_TYPE


def parse_item_date(value: str, fallback: dt.datetime) -> dt.datetime:
    """Parse a free-form teaser date into an aware datetime, or use ``fallback``."""
    if not value:
        return fallback
    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError):
        logger.debug("Unparseable date %r; using run timestamp", value)
        return fallback
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def teaser_description(item: TeaserItem) -> str:
    """Markup shown for items that were not enriched."""
    parts = []
    if item.image:
        src = html.escape(item.image, quote=True)
        alt = html.escape(item.title, quote=True)
        parts.append(f'<img src="{src}" alt="{alt}" style="max-width:100%;"/>')
    if item.summary:
        parts.append(f"<p>{html.escape(item.summary)}</p>")
    if item.author:
        parts.append(f"<p><em>By {html.escape(item.author)}</em></p>")
    return "\n".join(parts)


def _new_feed(source: SourceConfig, title: Optional[str] = None, description: Optional[str] = None) -> FeedGenerator:
    fg = FeedGenerator()
    fg.load_extension("dc")
    fg.title(title or source.feed_title)
    fg.link(href=source.base_url, rel="alternate")
    fg.description(description or source.feed_description)
    fg.language(source.language)
    if source.image_url:
        fg.image(url=source.image_url, title=title or source.feed_title, link=source.base_url)
    fg.lastBuildDate(dt.datetime.now(dt.timezone.utc))
    return fg


def _write(fg: FeedGenerator, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fg.rss_file(str(path), pretty=True)


def build_feed(source: SourceConfig, items: Sequence[TeaserItem]) -> FeedGenerator:
    now = dt.datetime.now(dt.timezone.utc)
    fg = _new_feed(source)
    for item in items:
        entry = fg.add_entry()
        entry.title(item.title)
        entry.link(href=item.link)
        entry.guid(item.link)
        entry.description(item.description or teaser_description(item) or item.title)
        entry.published(parse_item_date(item.date, now))
        if item.author:
            entry.dc.dc_creator(item.author)
        if item.image:
            entry.enclosure(item.image, "0", infer_image_mime(item.image))
        if item.topic:
            entry.category(term=item.topic)
    return fg


def write_feed(path: Path, source: SourceConfig, items: Sequence[TeaserItem]) -> None:
    """Write ``items`` as the RSS document at ``path``."""
    _write(build_feed(source, items), path)
    logger.info("Wrote %d item(s) to %s", len(items), path)


def write_failure_feed(path: Path, source: SourceConfig, reason: str = "") -> None:
    """Replace the feed with a single explanatory item after a failed run."""
    fg = _new_feed(
        source,
        title=f"{source.feed_title} (error fallback)",
        description="Feed could not be generated",
    )
    entry = fg.add_entry()
    entry.title("Feed generation failed")
    entry.link(href=source.base_url)
    entry.guid(f"{source.base_url}#feed-error")
    detail = f" ({html.escape(reason)})" if reason else ""
    entry.description(f"An error occurred{detail}. Check the console logs.")
    entry.published(dt.datetime.now(dt.timezone.utc))
    _write(fg, path)
    logger.info("Wrote failure feed to %s", path)
