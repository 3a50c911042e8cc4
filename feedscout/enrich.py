"""Full-article extraction used to enrich feed items with their body."""

from __future__ import annotations

import html
import logging
from typing import Iterable, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag
from readability import Document
from readability.readability import Unparseable

from .config import ArticleSelectors, SourceConfig
from .errors import FetchError
from .models import ArticleBody
from .resolvers import dom_image, tag_value
from .utils import absolutize, clean_text

logger = logging.getLogger("feedscout.enrich")

NOISE_TAGS = ["script", "style", "noscript", "iframe", "form", "button", "svg", "template"]
DEFAULT_KEY_POINTS_TITLE = "Key points"

TOPIC_STYLE = "text-transform:uppercase;font-size:0.8em;letter-spacing:0.05em;color:#666;"
CALLOUT_STYLE = "border-left:4px solid #fc0;padding:0.5em 1em;margin:1em 0;"


def _esc(value: str) -> str:
    return html.escape(value, quote=True)


def _first_tag(soup: BeautifulSoup, selectors: Sequence[str]) -> Optional[Tag]:
    """First selector match carrying a non-empty value."""
    for selector in selectors:
        tag = soup.select_one(selector)
        if tag is not None and tag_value(tag):
            return tag
    return None


def _first_value(soup: BeautifulSoup, selectors: Sequence[str]) -> str:
    return tag_value(_first_tag(soup, selectors))


def _first_date(soup: BeautifulSoup, selectors: Sequence[str]) -> str:
    tag = _first_tag(soup, selectors)
    if tag is None:
        return ""
    return clean_text(tag.get("datetime")) or tag_value(tag)


def _hero_image(soup: BeautifulSoup, selectors: Sequence[str], base_url: str) -> str:
    for selector in selectors:
        tag = soup.select_one(selector)
        if tag is None:
            continue
        if tag.name == "meta":
            src = absolutize(clean_text(tag.get("content")), base_url)
        else:
            src = dom_image(tag, base_url)
        if src:
            return src
    return ""


def _key_points(soup: BeautifulSoup, selectors: ArticleSelectors) -> Optional[str]:
    block = None
    for selector in selectors.key_points:
        block = soup.select_one(selector)
        if block is not None:
            break
    if block is None:
        return None
    items: List[str] = []
    for selector in selectors.key_points_items:
        items = [tag_value(li) for li in block.select(selector) if tag_value(li)]
        if items:
            break
    title = ""
    for selector in selectors.key_points_title:
        title = tag_value(block.select_one(selector))
        if title:
            break
    block.decompose()
    if not items:
        return None
    entries = "".join(f"<li>{_esc(item)}</li>" for item in items)
    heading = _esc(title or DEFAULT_KEY_POINTS_TITLE)
    return f'<div style="{CALLOUT_STYLE}"><strong>{heading}</strong><ul>{entries}</ul></div>'


def _clean_body(body: Tag, selectors: ArticleSelectors, base_url: str) -> str:
    """Remove non-content markup and make references absolute."""
    for tag in body(NOISE_TAGS):
        tag.decompose()
    for selector in selectors.strip:
        for tag in body.select(selector):
            tag.decompose()
    for heading in body.find_all("h1"):
        heading.decompose()
    for tag in body.find_all(True):
        for name in list(tag.attrs):
            if name == "style" or name.startswith("on"):
                del tag.attrs[name]
    for img in body.find_all("img"):
        src = clean_text(img.get("src"))
        lazy = clean_text(img.get("data-src"))
        if lazy and (not src or src.startswith("data:")):
            src = lazy
        if src:
            img["src"] = absolutize(src, base_url)
        for name in ("srcset", "sizes", "data-src"):
            if name in img.attrs:
                del img.attrs[name]
    for anchor in body.find_all("a", href=True):
        anchor["href"] = absolutize(anchor["href"], base_url) or anchor["href"]
    return body.decode_contents().strip()


def _long_paragraphs(region: Tag, min_chars: int) -> List[str]:
    paragraphs = [clean_text(p.get_text(" ", strip=True)) for p in region.find_all("p")]
    return [p for p in paragraphs if len(p) >= min_chars]


def _iter_fallback_regions(page_html: str, selectors: ArticleSelectors) -> Iterable[Tag]:
    """Readability's main-content guess first, then the configured regions."""
    try:
        summary_html = Document(page_html).summary(html_partial=True)
    except Unparseable as exc:
        logger.debug("Readability could not parse page: %s", exc)
    else:
        yield BeautifulSoup(summary_html, "html.parser")
    soup_full = BeautifulSoup(page_html, "html.parser")
    for selector in selectors.fallback_regions:
        region = soup_full.select_one(selector)
        if region is not None:
            yield region


def _fallback_paragraphs(page_html: str, selectors: ArticleSelectors) -> str:
    for region in _iter_fallback_regions(page_html, selectors):
        kept = _long_paragraphs(region, selectors.min_paragraph_chars)
        if kept:
            return "".join(f"<p>{_esc(p)}</p>" for p in kept)
    return ""


def placeholder_body(url: str) -> ArticleBody:
    markup = (
        "<p>The full article could not be retrieved.</p>"
        f'<p><a href="{_esc(url)}">Read it on the original site</a></p>'
    )
    return ArticleBody(url=url, html=markup, placeholder=True)


def build_article_body(page_html: str, url: str, source: SourceConfig) -> ArticleBody:
    """Assemble sanitized article markup from a fetched article page."""
    soup = BeautifulSoup(page_html, "html.parser")
    selectors = source.article
    fragments: List[str] = []

    hero = _hero_image(soup, selectors.hero_image, url)
    title = _first_value(soup, selectors.title)
    if hero:
        fragments.append(f'<img src="{_esc(hero)}" alt="{_esc(title)}" style="max-width:100%;"/>')

    topic = _first_value(soup, selectors.topic)
    if topic:
        fragments.append(f'<p style="{TOPIC_STYLE}"><strong>{_esc(topic)}</strong></p>')

    subtitle = _first_value(soup, selectors.subtitle)
    if title:
        fragments.append(f"<h1>{_esc(title)}</h1>")
    if subtitle and subtitle != title:
        fragments.append(f"<h2>{_esc(subtitle)}</h2>")

    author = _first_value(soup, selectors.author)
    date = _first_date(soup, selectors.date)
    if author or date:
        parts = []
        if author:
            parts.append(f"By {_esc(author)}")
        if date:
            parts.append(_esc(date))
        fragments.append(f"<p><em>{' | '.join(parts)}</em></p>")

    key_points = _key_points(soup, selectors)
    if key_points:
        fragments.append(key_points)

    body_html = ""
    for selector in selectors.body:
        container = soup.select_one(selector)
        if container is None:
            continue
        candidate = BeautifulSoup(str(container), "html.parser").find(True)
        body_html = _clean_body(candidate, selectors, url)
        if BeautifulSoup(body_html, "html.parser").get_text(strip=True):
            logger.debug("Body for %s matched %r", url, selector)
            break
        body_html = ""
    if not body_html:
        logger.debug("No body container matched for %s; using paragraph fallback", url)
        body_html = _fallback_paragraphs(page_html, selectors)
    if body_html:
        fragments.append(body_html)

    fragments.append(
        f'<p><a href="{_esc(url)}">Read the original article on {_esc(source.domain)}</a></p>'
    )
    return ArticleBody(url=url, html="\n".join(fragments))


class ArticleEnricher:
    """Fetch article pages and turn them into feed-ready markup."""

    def __init__(self, fetcher, source: SourceConfig) -> None:
        self.fetcher = fetcher
        self.source = source

    def enrich(self, link: str) -> ArticleBody:
        """Return the article body, or a placeholder if anything goes wrong."""
        try:
            page_html = self.fetcher.fetch(link)
            return build_article_body(page_html, link, self.source)
        except FetchError as exc:
            logger.warning("Could not fetch article: %s", exc)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error while enriching %s", link)
        return placeholder_body(link)
