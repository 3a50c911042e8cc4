"""Built-in site definitions and loading of user-supplied ones."""

from __future__ import annotations

import dataclasses
import json
import re
from dataclasses import MISSING, Field, fields
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from .config import ArticleSelectors, ListingSelectors, SourceConfig
from .utils import site_domain


def natgeo_source() -> SourceConfig:
    """National Geographic home page, rendered from the ``__natgeo__`` state blob."""
    base_url = "https://www.nationalgeographic.com"
    return SourceConfig(
        name="natgeo",
        base_url=base_url,
        listing_url=base_url,
        feed_title="National Geographic – Latest",
        feed_description="Latest articles from National Geographic",
        image_url=f"{base_url}/favicon.ico",
        state_global="__natgeo__",
        state_marker='"hub"',
        tile_types=["ArticleNavTile", "FeaturedContentTile"],
        tile_type_substrings=["Tile"],
        article_path_patterns=[
            r"/article/",
            r"nationalgeographic\.com/(animals|environment|history|science|travel|premium)/",
        ],
        excluded_link_patterns=[
            r"://(shop|subscribe|support|education|blog)\.nationalgeographic\.com",
            r"/(subscribe|newsletters?|tv/shows)(/|$)",
        ],
        listing=ListingSelectors(
            containers=[".PromoTile", ".Card", "article"],
            headline=[".PromoTile__Link", ".Card__Content__AnchorLink", "h2 a", "h3 a", "a[href]"],
            title=[".PromoTile__Title", ".Card__Content__Title", "h2", "h3"],
            image=["img"],
            author=[".Byline__Author", ".Card__Byline"],
            date=["time", ".PromoTile__Date"],
            topic=[".PromoTile__Kicker", ".Card__Kicker", ".Tag"],
            summary=[".PromoTile__Abstract", ".Card__Abstract", "p"],
            anchors=["h2 a", "h3 a", ".PromoTile__Link", ".Card__Content__AnchorLink"],
        ),
        article=ArticleSelectors(
            hero_image=[
                "meta[property='og:image']",
                ".Article__Lead img",
                ".Image__Wrapper img",
                "figure img",
            ],
            topic=[".Breadcrumb__Link", ".Article__Headline__Kicker", "meta[property='article:section']"],
            title=[".Article__Headline__Title", "h1", "meta[property='og:title']"],
            subtitle=[".Article__Headline__Desc", ".Article__Dek", "meta[name='description']"],
            author=[".Byline__Author", "[rel='author']", "meta[name='author']"],
            date=[".Byline__Meta--publishDate", "time", "meta[property='article:published_time']"],
            key_points=[".KeyPoints", ".Article__KeyPoints", "[data-testid='key-points']"],
            body=[".Article__Content", ".PrismArticleBody", "[data-testid='prism-article-body']", "article"],
            strip=[
                "aside",
                ".ad-slot",
                "[class*='AdSlot']",
                "[class*='Newsletter']",
                "[class*='RelatedContent']",
                "[class*='InlinePromo']",
                "[class*='SocialShare']",
                ".ad-wrapper",
            ],
        ),
    )


def generic_source(
    base_url: str,
    listing_url: Optional[str] = None,
    name: Optional[str] = None,
) -> SourceConfig:
    """Card and ``<article>`` based news site without embedded state."""
    domain = site_domain(base_url)
    return SourceConfig(
        name=name or domain or "generic",
        base_url=base_url,
        listing_url=listing_url or base_url,
        feed_title=f"{domain} – Latest",
        feed_description=f"Latest articles from {domain}",
        listing=ListingSelectors(
            containers=["article", "[class*='card']", "[class*='teaser']", "[class*='promo']"],
            headline=["h2 a", "h3 a", "h4 a", "a[href]"],
            title=["h2", "h3", "h4"],
            author=["[rel='author']", "[class*='byline']", "[class*='author']"],
            date=["time", "[class*='date']"],
            topic=["[class*='kicker']", "[class*='category']", "[class*='tag']"],
            summary=["[class*='summary']", "[class*='dek']", "p"],
        ),
    )


BUILTIN_SOURCES: Dict[str, Callable[[], SourceConfig]] = {
    "natgeo": natgeo_source,
}


def get_source(name: str) -> SourceConfig:
    try:
        factory = BUILTIN_SOURCES[name]
    except KeyError:
        raise ValueError(
            f"Unknown source {name!r}; available: {', '.join(sorted(BUILTIN_SOURCES))}"
        ) from None
    return factory()


def _default(f: Field) -> Any:
    if f.default is not MISSING:
        return f.default
    if f.default_factory is not MISSING:
        return f.default_factory()
    return MISSING


def _check_value(name: str, value: Any, default: Any, context: str) -> None:
    """Reject JSON values whose type differs from the field's default."""
    if isinstance(default, list):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValueError(f"{context} key {name!r} must be a list of strings")
    elif isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"{context} key {name!r} must be true or false")
    elif isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{context} key {name!r} must be an integer")
    elif default is MISSING or default is None or isinstance(default, str):
        if value is not None and not isinstance(value, str):
            raise ValueError(f"{context} key {name!r} must be a string")


def _build(cls: type, data: Mapping[str, Any], context: str) -> Any:
    known = {f.name: f for f in fields(cls) if f.init}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ValueError(f"Unknown {context} keys: {', '.join(unknown)}")
    for name, value in data.items():
        default = _default(known[name])
        if dataclasses.is_dataclass(default) or dataclasses.is_dataclass(value):
            continue
        _check_value(name, value, default, context)
    return cls(**data)


def source_from_mapping(data: Mapping[str, Any]) -> SourceConfig:
    """Build a SourceConfig from a JSON-like mapping using the dataclass field names."""
    payload = dict(data)
    for key in ("name", "base_url"):
        if not payload.get(key):
            raise ValueError(f"Source definition is missing {key!r}")
        if not isinstance(payload[key], str):
            raise ValueError(f"source key {key!r} must be a string")
    domain = site_domain(payload["base_url"])
    payload.setdefault("listing_url", payload["base_url"])
    payload.setdefault("feed_title", f"{domain} – Latest")
    payload.setdefault("feed_description", f"Latest articles from {domain}")
    for key in ("listing", "article"):
        if not isinstance(payload.get(key) or {}, dict):
            raise ValueError(f"source key {key!r} must be an object")
    payload["listing"] = _build(ListingSelectors, payload.get("listing") or {}, "listing")
    payload["article"] = _build(ArticleSelectors, payload.get("article") or {}, "article")
    try:
        return _build(SourceConfig, payload, "source")
    except re.error as exc:
        raise ValueError(f"Invalid link pattern in source definition: {exc}") from exc


def load_source_file(path: Path) -> SourceConfig:
    """Read a source definition from a JSON file."""
    with Path(path).open(encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"Source file {path} must contain a JSON object")
    return source_from_mapping(data)
