"""Configuration objects and constants for the scraping pipeline."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Pattern

from .utils import site_domain, slugify

DEFAULT_FLARESOLVERR_URL = "http://localhost:8191"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
FETCH_BACKENDS = ("flaresolverr", "direct", "playwright")


@dataclass
class ListingSelectors:
    """CSS selector chains used when scraping teaser cards from the DOM."""

    containers: List[str] = field(default_factory=list)
    headline: List[str] = field(default_factory=list)
    title: List[str] = field(default_factory=list)
    image: List[str] = field(default_factory=lambda: ["img"])
    author: List[str] = field(default_factory=list)
    date: List[str] = field(default_factory=lambda: ["time"])
    topic: List[str] = field(default_factory=list)
    summary: List[str] = field(default_factory=list)
    anchors: List[str] = field(default_factory=lambda: ["h2 a", "h3 a"])


@dataclass
class ArticleSelectors:
    """CSS selector chains used when extracting a full article page."""

    hero_image: List[str] = field(
        default_factory=lambda: ["meta[property='og:image']", "article figure img", "main img"]
    )
    topic: List[str] = field(default_factory=list)
    title: List[str] = field(default_factory=lambda: ["h1", "meta[property='og:title']"])
    subtitle: List[str] = field(default_factory=lambda: ["meta[name='description']"])
    author: List[str] = field(
        default_factory=lambda: ["[rel='author']", ".byline", "meta[name='author']"]
    )
    date: List[str] = field(
        default_factory=lambda: ["time", "meta[property='article:published_time']"]
    )
    key_points: List[str] = field(default_factory=list)
    key_points_title: List[str] = field(default_factory=lambda: ["h2", "h3", "strong"])
    key_points_items: List[str] = field(default_factory=lambda: ["li"])
    body: List[str] = field(default_factory=lambda: ["article", "main"])
    strip: List[str] = field(
        default_factory=lambda: [
            "aside",
            "[class~='ad']",
            "[class^='ad-']",
            "[class*=' ad-']",
            "[class*='newsletter']",
            "[class*='related']",
            "[class*='promo']",
            "[class*='share']",
            "[class*='social']",
        ]
    )
    fallback_regions: List[str] = field(default_factory=lambda: ["main", "article", "body"])
    min_paragraph_chars: int = 40


@dataclass
class SourceConfig:
    """Everything that distinguishes one scraped site from another."""

    name: str
    base_url: str
    listing_url: str
    feed_title: str
    feed_description: str
    language: str = "en"
    image_url: Optional[str] = None
    state_global: Optional[str] = None
    state_marker: Optional[str] = None
    tile_type_field: str = "cmsType"
    tile_types: List[str] = field(default_factory=list)
    tile_type_substrings: List[str] = field(default_factory=list)
    article_path_patterns: List[str] = field(default_factory=lambda: [r"/article/"])
    excluded_link_patterns: List[str] = field(default_factory=list)
    min_title_length: int = 5
    listing: ListingSelectors = field(default_factory=ListingSelectors)
    article: ArticleSelectors = field(default_factory=ArticleSelectors)
    _article_paths: List[Pattern[str]] = field(init=False, repr=False, compare=False)
    _exclusions: List[Pattern[str]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._article_paths = [re.compile(p) for p in self.article_path_patterns]
        self._exclusions = [re.compile(p) for p in self.excluded_link_patterns]

    @property
    def domain(self) -> str:
        return site_domain(self.base_url)

    @property
    def slug(self) -> str:
        return slugify(self.name)

    @property
    def article_paths(self) -> List[Pattern[str]]:
        return self._article_paths

    @property
    def exclusions(self) -> List[Pattern[str]]:
        return self._exclusions


@dataclass
class FetchConfig:
    """Settings for the backend that downloads pages."""

    backend: str = "flaresolverr"
    endpoint: str = field(
        default_factory=lambda: os.getenv("FLARESOLVERR_URL", DEFAULT_FLARESOLVERR_URL)
    )
    timeout: float = 60.0
    wait_after_load: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if self.backend not in FETCH_BACKENDS:
            raise ValueError(
                f"Unknown fetch backend {self.backend!r}; expected one of {', '.join(FETCH_BACKENDS)}"
            )


@dataclass
class PipelineConfig:
    """Top-level settings that control one feed generation run."""

    source: SourceConfig
    output_root: Path = Path("feeds")
    fetch: FetchConfig = field(default_factory=FetchConfig)
    enrich: bool = False
    request_delay_ms: int = 3000
    max_items: Optional[int] = None
    seen_file: Optional[Path] = None
    feed_file: Optional[Path] = None

    @property
    def seen_path(self) -> Path:
        return self.seen_file or self.output_root / f"{self.source.slug}.seen.json"

    @property
    def feed_path(self) -> Path:
        return self.feed_file or self.output_root / f"{self.source.slug}.xml"
